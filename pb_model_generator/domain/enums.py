"""
Enum synthesis for select fields.
"""

import logging
from typing import Dict, List

from ..exceptions import DuplicateEnumVariantError
from .models import CollectionSchema, EnumSpec, EnumVariant, FieldKind, FieldSchema
from .naming import enum_type_name, to_variant_name


logger = logging.getLogger(__name__)


def synthesize_enum(schema_field: FieldSchema) -> EnumSpec:
    """
    Build the enumerated type for a select field.

    One variant is produced per raw value, in schema order. Two raw values
    that normalize to the same identifier raise DuplicateEnumVariantError;
    they are never merged.
    """
    name = enum_type_name(schema_field.name)
    seen: Dict[str, str] = {}
    variants: List[EnumVariant] = []

    for raw_value in schema_field.select_values:
        identifier = to_variant_name(raw_value)
        if identifier in seen:
            raise DuplicateEnumVariantError(
                f"Select values '{seen[identifier]}' and '{raw_value}' of field "
                f"'{schema_field.name}' both normalize to '{identifier}'",
                enum_name=name,
                variant=identifier,
                raw_values=[seen[identifier], raw_value],
            )
        seen[identifier] = raw_value
        variants.append(EnumVariant(identifier=identifier, raw_value=raw_value))

    logger.debug(f"Synthesized enum {name} with {len(variants)} variants")
    return EnumSpec(name=name, field_name=schema_field.name, variants=tuple(variants))


def synthesize_enums(collection: CollectionSchema) -> List[EnumSpec]:
    """Build enums for every select field of a collection, in declaration order."""
    return [
        synthesize_enum(schema_field)
        for schema_field in collection.fields
        if schema_field.kind is FieldKind.SELECT
    ]
