"""
Field mapping domain logic for PocketBase Model Generator.

This module maps PocketBase fields to semantic target types and those types
to Python annotations for the generated pydantic models.
"""

import logging
from typing import Callable, Dict

from ..constants import INTEGER_NAME_SUFFIXES, OutputFiles
from ..exceptions import FieldMappingError
from .models import FieldKind, FieldSchema, MappedType, SemanticType
from .naming import enum_type_name


logger = logging.getLogger(__name__)


def is_integer_field_name(field_name: str) -> bool:
    """Check whether a number field name ends with one of the integer keywords."""
    return field_name.lower().endswith(INTEGER_NAME_SUFFIXES)


def _number_type(schema_field: FieldSchema) -> SemanticType:
    if is_integer_field_name(schema_field.name):
        return SemanticType.INTEGER
    return SemanticType.DOUBLE


def _relation_type(schema_field: FieldSchema) -> SemanticType:
    if schema_field.is_single_relation:
        return SemanticType.RELATION_SINGLE
    return SemanticType.RELATION_MULTI


def _unknown_type(schema_field: FieldSchema) -> SemanticType:
    logger.debug(
        f"Field '{schema_field.name}' has unrecognized type '{schema_field.raw_type}', mapping to Any"
    )
    return SemanticType.ANY


def _fixed(semantic: SemanticType) -> Callable[[FieldSchema], SemanticType]:
    return lambda schema_field: semantic


# Every FieldKind must have an entry; checked by check_mapping_is_exhaustive().
FIELD_KIND_MAP: Dict[FieldKind, Callable[[FieldSchema], SemanticType]] = {
    FieldKind.TEXT: _fixed(SemanticType.STRING),
    FieldKind.EMAIL: _fixed(SemanticType.STRING),
    FieldKind.URL: _fixed(SemanticType.STRING),
    FieldKind.FILE: _fixed(SemanticType.STRING),
    FieldKind.PASSWORD: _fixed(SemanticType.STRING),
    FieldKind.NUMBER: _number_type,
    FieldKind.BOOL: _fixed(SemanticType.BOOLEAN),
    FieldKind.DATE: _fixed(SemanticType.DATETIME),
    FieldKind.AUTODATE: _fixed(SemanticType.DATETIME),
    FieldKind.GEO_POINT: _fixed(SemanticType.GEO_POINT),
    FieldKind.JSON: _fixed(SemanticType.JSON_BLOB),
    FieldKind.SELECT: _fixed(SemanticType.ENUM),
    FieldKind.RELATION: _relation_type,
    FieldKind.UNKNOWN: _unknown_type,
}

# Semantic types that are nullable no matter what the schema says
ALWAYS_NULLABLE = frozenset({SemanticType.JSON_BLOB})

# Python annotation per semantic type; ENUM is resolved per field
PYTHON_TYPE_MAP: Dict[SemanticType, str] = {
    SemanticType.STRING: "str",
    SemanticType.INTEGER: "int",
    SemanticType.DOUBLE: "float",
    SemanticType.JSON_BLOB: "Dict[str, Any]",
    SemanticType.BOOLEAN: "bool",
    SemanticType.DATETIME: "datetime",
    SemanticType.GEO_POINT: OutputFiles.GEO_POINT_TYPE,
    SemanticType.RELATION_SINGLE: "str",
    SemanticType.RELATION_MULTI: "List[str]",
    SemanticType.ANY: "Any",
}


def check_mapping_is_exhaustive() -> None:
    """Raise if a FieldKind has no mapping entry."""
    missing = [kind.value for kind in FieldKind if kind not in FIELD_KIND_MAP]
    if missing:
        raise FieldMappingError(
            f"No type mapping for field kinds: {', '.join(missing)}",
            field_kind=missing[0],
        )


check_mapping_is_exhaustive()


def map_field_type(schema_field: FieldSchema) -> MappedType:
    """
    Map a schema field to its semantic type and nullability.

    Args:
        schema_field: The field to map

    Returns:
        MappedType with ``nullable = not required`` unless the type forces it
    """
    try:
        resolve = FIELD_KIND_MAP[schema_field.kind]
    except KeyError:
        raise FieldMappingError(
            f"No type mapping for field '{schema_field.name}'",
            field_kind=str(schema_field.kind),
        ) from None

    semantic = resolve(schema_field)
    nullable = not schema_field.required or semantic in ALWAYS_NULLABLE
    enum_name = enum_type_name(schema_field.name) if semantic is SemanticType.ENUM else None

    logger.debug(
        f"Mapped field '{schema_field.name}' ({schema_field.kind.value}) -> "
        f"{semantic.value}{' (nullable)' if nullable else ''}"
    )
    return MappedType(semantic=semantic, nullable=nullable, enum_name=enum_name)


def python_annotation(mapped: MappedType) -> str:
    """
    Render the Python annotation for a mapped type.

    Example:
        >>> python_annotation(MappedType(SemanticType.RELATION_MULTI, nullable=True))
        'Optional[List[str]]'
    """
    if mapped.semantic is SemanticType.ENUM:
        base = mapped.enum_name
    else:
        base = PYTHON_TYPE_MAP[mapped.semantic]

    if mapped.nullable:
        return f"Optional[{base}]"
    return base
