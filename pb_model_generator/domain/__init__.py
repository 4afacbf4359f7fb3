"""
Domain module for PocketBase Model Generator.

This module contains the core transformation logic separated from fetching
and rendering concerns: the schema snapshot models, naming rules, type
mapping, enum synthesis and expansion resolution.
"""

from .models import (
    CollectionSchema,
    EnumSpec,
    EnumVariant,
    ExpandField,
    ExpandSpec,
    ExpansionMapping,
    FieldKind,
    FieldSchema,
    GenerationReport,
    GenerationResult,
    MappedType,
    RelationExtra,
    SelectExtra,
    SemanticType,
)

from .field_mapping import (
    map_field_type,
    python_annotation,
)

from .enums import (
    synthesize_enum,
    synthesize_enums,
)

from .relationships import ExpansionResolver

from .naming import (
    capitalize,
    enum_type_name,
    module_name,
    singularize,
    to_identifier,
    to_member_name,
    to_snake_case,
    to_variant_name,
    type_name,
)

__all__ = [
    # Core models
    'CollectionSchema',
    'EnumSpec',
    'EnumVariant',
    'ExpandField',
    'ExpandSpec',
    'ExpansionMapping',
    'FieldKind',
    'FieldSchema',
    'GenerationReport',
    'GenerationResult',
    'MappedType',
    'RelationExtra',
    'SelectExtra',
    'SemanticType',

    # Field mapping
    'map_field_type',
    'python_annotation',

    # Enums
    'synthesize_enum',
    'synthesize_enums',

    # Expansions
    'ExpansionResolver',

    # Naming
    'capitalize',
    'enum_type_name',
    'module_name',
    'singularize',
    'to_identifier',
    'to_member_name',
    'to_snake_case',
    'to_variant_name',
    'type_name',
]
