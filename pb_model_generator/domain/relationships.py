"""
Expansion analysis domain logic for PocketBase Model Generator.

This module resolves expansion mappings into the "Expand" companion types
that hold related records embedded by PocketBase's ``expand`` query option.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence

from ..constants import OutputFiles
from ..exceptions import RelationshipError, UnresolvedExpansionTargetError
from .models import CollectionSchema, ExpandField, ExpandSpec, ExpansionMapping
from .naming import module_name, to_member_name, type_name


logger = logging.getLogger(__name__)


class ExpansionResolver:
    """
    Builds Expand companion descriptors from expansion mappings.

    Only direct (one level) expansions are resolved. Relation fields keep
    raw identifier strings; the typed related records live in the Expand type.
    """

    def __init__(
        self,
        mappings: Sequence[ExpansionMapping],
        known_collections: Iterable[str] = (),
        emitted_collections: Optional[Iterable[str]] = None,
        strict: bool = False,
    ):
        """
        Initialize expansion resolver.

        Args:
            mappings: All expansion mappings of the run, in input order
            known_collections: Names of every collection of the run
            emitted_collections: Names of collections that get a model file;
                defaults to ``known_collections``
            strict: Raise on unresolved targets instead of warning
        """
        self.mappings = list(mappings)
        self.known_collections = set(known_collections)
        self.emitted_collections = (
            set(emitted_collections) if emitted_collections is not None else set(self.known_collections)
        )
        self.strict = strict
        self.warnings: List[str] = []
        self._by_source: Dict[str, List[ExpansionMapping]] = {}
        for mapping in self.mappings:
            self._by_source.setdefault(mapping.source_collection_name, []).append(mapping)

    def mappings_for(self, collection_name: str) -> List[ExpansionMapping]:
        """Get the mappings whose source is the given collection, in input order."""
        return list(self._by_source.get(collection_name, []))

    def resolve(self, collection: CollectionSchema) -> Optional[ExpandSpec]:
        """
        Resolve the Expand companion type for a collection.

        Returns:
            ExpandSpec, or None when no mapping has this collection as source
        """
        mappings = self.mappings_for(collection.name)
        if not mappings:
            return None

        source_module = module_name(collection.name)
        fields: List[ExpandField] = []
        by_identifier: Dict[str, ExpansionMapping] = {}

        for mapping in mappings:
            identifier = to_member_name(mapping.source_field_name)
            previous = by_identifier.get(identifier)
            if previous == mapping:
                self._warn(
                    f"Duplicate expansion mapping {collection.name}.{mapping.source_field_name} "
                    f"-> {mapping.target_collection_name} ignored"
                )
                continue
            if previous is not None:
                raise RelationshipError(
                    f"Expansion fields '{previous.source_field_name}' and "
                    f"'{mapping.source_field_name}' of collection '{collection.name}' "
                    f"both normalize to '{identifier}'",
                    source_collection=collection.name,
                    source_field=mapping.source_field_name,
                    target_collection=mapping.target_collection_name,
                )
            by_identifier[identifier] = mapping

            if collection.get_field(mapping.source_field_name) is None:
                self._warn(
                    f"Expansion source field '{mapping.source_field_name}' does not exist "
                    f"in collection '{collection.name}'; emitting it anyway"
                )
            self._check_target(mapping)

            target_module = module_name(mapping.target_collection_name)
            fields.append(
                ExpandField(
                    identifier=identifier,
                    raw_name=mapping.source_field_name,
                    target_type=type_name(mapping.target_collection_name, OutputFiles.DATA_TYPE_SUFFIX),
                    target_module=target_module,
                    is_single=mapping.is_single,
                    is_self_reference=target_module == source_module,
                )
            )

        spec = ExpandSpec(
            name=type_name(collection.name, OutputFiles.EXPAND_TYPE_SUFFIX),
            collection_name=collection.name,
            fields=tuple(fields),
        )
        logger.debug(f"Resolved {spec.name} with {len(spec.fields)} expansion fields")
        return spec

    def _check_target(self, mapping: ExpansionMapping) -> None:
        """Apply the unresolved-target policy to one mapping."""
        target = mapping.target_collection_name
        if target in self.emitted_collections:
            return

        if target in self.known_collections:
            reason = "has no generated model"
        else:
            reason = "is not a known collection"
        message = (
            f"Expansion {mapping.source_collection_name}.{mapping.source_field_name} "
            f"targets '{target}', which {reason}"
        )
        if self.strict:
            raise UnresolvedExpansionTargetError(
                message,
                source_collection=mapping.source_collection_name,
                source_field=mapping.source_field_name,
                target_collection=target,
            )
        self._warn(f"{message}; emitting the reference anyway")

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)
