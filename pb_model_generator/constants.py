"""
Centralized constants for PocketBase Model Generator.

This module contains the curated word lists, type tables and default values
used across the code generator. Keeping them here lets contributors extend
naming or typing behavior without touching transformation logic.
"""

import keyword
from typing import Dict, FrozenSet


# =============================================================================
# CORE CONFIGURATION
# =============================================================================

class DefaultConfig:
    """Default configuration values."""

    CONFIG_PATH = "./pocketbase.yaml"
    OUTPUT_DIR = "./models"
    EXPANSION_COLLECTION = "_expansions"
    INTERNAL_PREFIX = "_"
    STRICT_EXPANSIONS = False
    FORMAT_OUTPUT = True
    REQUEST_TIMEOUT = 30
    BLACK_LINE_LENGTH = 120


class PocketBaseEndpoints:
    """REST endpoints used against the PocketBase server."""

    SUPERUSER_AUTH = "/api/collections/_superusers/auth-with-password"
    # Servers older than v0.23 only expose the admins endpoint
    LEGACY_ADMIN_AUTH = "/api/admins/auth-with-password"
    COLLECTIONS = "/api/collections"
    RECORDS = "/api/collections/{collection}/records"

    PAGE_SIZE = 200


# =============================================================================
# GENERATED FILE LAYOUT
# =============================================================================

class OutputFiles:
    """Names and suffixes of generated files."""

    EXTENSION = ".py"
    MODULE_SUFFIX = "_data"
    DATA_TYPE_SUFFIX = "Data"
    EXPAND_TYPE_SUFFIX = "DataExpand"
    ENUM_TYPE_SUFFIX = "Enum"

    GEO_POINT_MODULE = "geo_point_data"
    GEO_POINT_TYPE = "GeoPointData"
    AGGREGATOR = "__init__.py"
    AGGREGATOR_TEMPLATE = "aggregator.py.j2"


class ModelMembers:
    """Fixed member names emitted into every generated data class."""

    COLLECTION_ID = "COLLECTION_ID"
    COLLECTION_NAME = "COLLECTION_NAME"
    EXPAND = "expand"
    FROM_JSON = "from_json"
    TO_JSON = "to_json"
    FROM_VALUE = "from_value"
    BLANK_VALIDATOR = "blank_to_none"


# =============================================================================
# NAMING TABLES
# =============================================================================

# Irregular plural -> singular, matched case-insensitively on the whole word.
# Words mapping to themselves are invariant under singularization.
IRREGULAR_SINGULARS: Dict[str, str] = {
    "men": "man",
    "women": "woman",
    "children": "child",
    "feet": "foot",
    "teeth": "tooth",
    "geese": "goose",
    "mice": "mouse",
    "oxen": "ox",
    "sheep": "sheep",
    "fish": "fish",
}

# Endings removed as "es" rather than "s"
ES_PLURAL_ENDINGS = ("ches", "shes", "ses", "xes", "zes")

# Singular words that end in "s" and must keep it
SINGULAR_S_DENYLIST: FrozenSet[str] = frozenset({"bus", "gas", "lens"})

# Spellings of "date time" that would collide with the built-in temporal type
RESERVED_DATETIME_SPELLINGS: FrozenSet[str] = frozenset({"date_time", "datetime", "dateTime"})
DATETIME_ALTERNATE_TOKEN = "DateTimez"

# Number fields whose name ends with one of these are emitted as int
INTEGER_NAME_SUFFIXES = (
    "count",
    "minutes",
    "seconds",
    "hours",
    "days",
    "weeks",
    "months",
    "years",
    "age",
    "quantity",
    "total",
    "index",
    "position",
    "rank",
    "level",
    "size",
    "length",
    "width",
    "height",
    "number",
    "score",
)

# Names a generated module binds itself; a member or enum variant spelled like
# one of these gets a trailing underscore.
GENERATED_MODULE_NAMES: FrozenSet[str] = frozenset({
    "Any",
    "BaseModel",
    "ClassVar",
    "ConfigDict",
    "Dict",
    "Enum",
    "Field",
    "GeoPointData",
    "List",
    "Optional",
    "bool",
    "datetime",
    "field_validator",
    "float",
    "int",
    "str",
    ModelMembers.COLLECTION_ID,
    ModelMembers.COLLECTION_NAME,
    ModelMembers.FROM_JSON,
    ModelMembers.TO_JSON,
    ModelMembers.FROM_VALUE,
    ModelMembers.BLANK_VALIDATOR,
    "model_config",
    "mro",
})

# Public BaseModel attributes a generated member must not shadow
BASE_MODEL_ATTRIBUTES: FrozenSet[str] = frozenset({
    "construct",
    "copy",
    "dict",
    "from_orm",
    "json",
    "parse_file",
    "parse_obj",
    "parse_raw",
    "schema",
    "schema_json",
    "update_forward_refs",
    "validate",
})

RESERVED_MEMBER_NAMES: FrozenSet[str] = frozenset(keyword.kwlist) | GENERATED_MODULE_NAMES | BASE_MODEL_ATTRIBUTES


# =============================================================================
# POCKETBASE RECORD FIELDS
# =============================================================================

class ExpansionRecordFields:
    """Record fields of the collection holding expansion mappings."""

    SOURCE_COLLECTION = "source_collection"
    SOURCE_FIELD = "source_field"
    IS_SINGLE = "is_single"
    TARGET_COLLECTION = "target_collection"

    REQUIRED = (SOURCE_COLLECTION, SOURCE_FIELD, TARGET_COLLECTION)
