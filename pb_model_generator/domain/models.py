"""
Core domain models for PocketBase Model Generator.

These models represent the schema snapshot a generation run works on and the
structured descriptors produced from it. They are independent of how the
schema was fetched and of how the generated code is rendered.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from ..exceptions import InvalidEnumValueError


class FieldKind(Enum):
    """Closed set of PocketBase field types."""

    TEXT = "text"
    EMAIL = "email"
    URL = "url"
    FILE = "file"
    PASSWORD = "password"
    NUMBER = "number"
    BOOL = "bool"
    DATE = "date"
    AUTODATE = "autodate"
    GEO_POINT = "geoPoint"
    JSON = "json"
    SELECT = "select"
    RELATION = "relation"
    UNKNOWN = "unknown"

    @classmethod
    def from_type_string(cls, type_string: Optional[str]) -> "FieldKind":
        """Resolve a PocketBase type string; unrecognized strings are UNKNOWN."""
        for kind in cls:
            if kind.value == type_string:
                return kind
        return cls.UNKNOWN


class SemanticType(Enum):
    """Target types a field can map to."""

    STRING = "string"
    INTEGER = "integer"
    DOUBLE = "double"
    JSON_BLOB = "json_blob"
    BOOLEAN = "boolean"
    DATETIME = "datetime"
    GEO_POINT = "geo_point"
    ENUM = "enum"
    RELATION_SINGLE = "relation_single"
    RELATION_MULTI = "relation_multi"
    ANY = "any"


@dataclass(frozen=True)
class SelectExtra:
    """Payload of a select field: its allowed raw values, in order."""

    values: Tuple[str, ...]


@dataclass(frozen=True)
class RelationExtra:
    """Payload of a relation field."""

    max_select: Optional[int] = None
    collection_id: Optional[str] = None

    @property
    def is_single(self) -> bool:
        return self.max_select == 1


FieldExtra = Union[SelectExtra, RelationExtra, None]


@dataclass(frozen=True)
class FieldSchema:
    """
    A single field of a collection.

    ``extra`` is resolved once at ingest: ``SelectExtra`` for select fields,
    ``RelationExtra`` for relation fields and ``None`` otherwise.
    """

    name: str
    kind: FieldKind
    required: bool = False
    extra: FieldExtra = None
    raw_type: Optional[str] = None

    @property
    def select_values(self) -> Tuple[str, ...]:
        if isinstance(self.extra, SelectExtra):
            return self.extra.values
        return ()

    @property
    def is_single_relation(self) -> bool:
        return isinstance(self.extra, RelationExtra) and self.extra.is_single


@dataclass(frozen=True)
class CollectionSchema:
    """A PocketBase collection with its ordered fields."""

    id: str
    name: str
    fields: Tuple[FieldSchema, ...] = ()
    type: str = "base"
    system: bool = False

    def get_field(self, name: str) -> Optional[FieldSchema]:
        """Get a field by name."""
        for schema_field in self.fields:
            if schema_field.name == name:
                return schema_field
        return None


@dataclass(frozen=True)
class ExpansionMapping:
    """Declares that ``source_field`` of a collection expands into records of ``target``."""

    source_collection_name: str
    source_field_name: str
    is_single: bool
    target_collection_name: str


@dataclass(frozen=True)
class MappedType:
    """Result of mapping a field to its target type."""

    semantic: SemanticType
    nullable: bool
    enum_name: Optional[str] = None


@dataclass(frozen=True)
class EnumVariant:
    """One enum member: a language-safe identifier plus the raw wire value."""

    identifier: str
    raw_value: str


@dataclass(frozen=True)
class EnumSpec:
    """Enumerated type synthesized for a select field."""

    name: str
    field_name: str
    variants: Tuple[EnumVariant, ...]

    def from_value(self, raw_value: str) -> EnumVariant:
        """Look up a variant by its raw value."""
        for variant in self.variants:
            if variant.raw_value == raw_value:
                return variant
        raise InvalidEnumValueError(
            f"Invalid value '{raw_value}' for enum {self.name}",
            enum_name=self.name,
            value=raw_value,
        )


@dataclass(frozen=True)
class ExpandField:
    """One optional member of an Expand companion type."""

    identifier: str
    raw_name: str
    target_type: str
    target_module: str
    is_single: bool
    is_self_reference: bool = False


@dataclass(frozen=True)
class ExpandSpec:
    """Expand companion type of a collection."""

    name: str
    collection_name: str
    fields: Tuple[ExpandField, ...]


@dataclass
class GenerationResult:
    """
    Result of generating one file.

    This contains the generated code and metadata about where it went.
    """

    code: str
    file_path: Optional[str] = None
    collection_name: Optional[str] = None
    component_type: str = "model"  # 'model', 'geo_point', 'aggregator'
    code_lines: Optional[int] = None

    def __post_init__(self):
        if self.code_lines is None:
            self.code_lines = len(self.code.splitlines())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'file_path': self.file_path,
            'collection_name': self.collection_name,
            'component_type': self.component_type,
            'code_lines': self.code_lines,
        }


@dataclass
class GenerationReport:
    """Outcome of a whole generation run."""

    results: List[GenerationResult] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    aggregator_path: Optional[str] = None

    @property
    def model_files(self) -> List[str]:
        return [r.file_path for r in self.results if r.component_type == "model"]

    @property
    def file_paths(self) -> List[str]:
        """Every file written by the run, the aggregator last."""
        return [r.file_path for r in self.results]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'results': [r.to_dict() for r in self.results],
            'warnings': list(self.warnings),
            'aggregator_path': self.aggregator_path,
        }
