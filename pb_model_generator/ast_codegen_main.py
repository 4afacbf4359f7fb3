"""
PocketBase Model Generation Main Module

This module provides the main entry point for generating the model package:
one module per collection, the shared geo point module and the aggregator
``__init__.py`` that re-exports all of them.
"""

import logging
from pathlib import Path
from typing import Dict, List, Sequence, Tuple, Union

from pb_model_generator.ast_codegen import ModelModule, build_geo_point_module, build_model_module, render_model_module
from pb_model_generator.codegen import render_template, setup_jinja_env, write_file_atomically
from pb_model_generator.colored_logging import log_progress, log_success
from pb_model_generator.constants import DefaultConfig, OutputFiles
from pb_model_generator.domain.models import (
    CollectionSchema,
    ExpansionMapping,
    GenerationReport,
    GenerationResult,
)
from pb_model_generator.domain.naming import module_name
from pb_model_generator.domain.relationships import ExpansionResolver
from pb_model_generator.exceptions import CodeGenerationError, OutputWriteError


logger = logging.getLogger(__name__)


def is_internal_collection(collection: CollectionSchema, internal_prefix: str) -> bool:
    """Internal collections (e.g. '_superusers', '_expansions') get no model file."""
    return bool(internal_prefix) and collection.name.startswith(internal_prefix)


def plan_module_names(collections: Sequence[CollectionSchema]) -> Dict[str, str]:
    """
    Map each collection name to its module name, in input order.

    Raises:
        CodeGenerationError: Two collections, or a collection and a fixed
            module, would be written to the same file
    """
    reserved = {
        OutputFiles.GEO_POINT_MODULE: "the geo point module",
        Path(OutputFiles.AGGREGATOR).stem: "the aggregator",
    }
    planned: Dict[str, str] = {}
    owners: Dict[str, str] = {}

    for collection in collections:
        name = module_name(collection.name)
        if name in reserved:
            raise CodeGenerationError(
                f"Collection '{collection.name}' would overwrite {reserved[name]} ({name}{OutputFiles.EXTENSION})",
                collection=collection.name,
            )
        if name in owners:
            raise CodeGenerationError(
                f"Collections '{owners[name]}' and '{collection.name}' both map to {name}{OutputFiles.EXTENSION}",
                collection=collection.name,
            )
        owners[name] = collection.name
        planned[collection.name] = name

    return planned


PackageExports = List[Tuple[str, List[str]]]


def plan_package_exports(modules: Sequence[ModelModule]) -> Tuple[PackageExports, List[str]]:
    """
    Decide which names the aggregator re-exports from each module.

    A name exported by more than one module (e.g. two collections with a
    ``status`` select field, both producing ``StatusEnum``) is left out of
    the package surface; it stays importable from its own module.

    Returns:
        ([(module_name, names)] in module order, warnings)
    """
    owners: Dict[str, List[str]] = {}
    for module in modules:
        for name in module.exports:
            owners.setdefault(name, []).append(module.module_name)

    warnings: List[str] = []
    for name, module_names in owners.items():
        if len(module_names) > 1:
            message = (
                f"'{name}' is defined in {', '.join(module_names)}; it is not re-exported from the package, "
                f"import it from its module instead"
            )
            logger.warning(message)
            warnings.append(message)

    exports = [
        (module.module_name, [name for name in module.exports if len(owners[name]) == 1])
        for module in modules
    ]
    return exports, warnings


def render_aggregator(exports: PackageExports) -> str:
    """Render the aggregator importing the given names from each module, in order."""
    env = setup_jinja_env()
    return render_template(env, OutputFiles.AGGREGATOR_TEMPLATE, {"exports": exports})


def _remove_stale_aggregator(aggregator_path: Path) -> None:
    try:
        aggregator_path.unlink()
        logger.debug(f"Removed previous aggregator: {aggregator_path}")
    except FileNotFoundError:
        pass
    except OSError as e:
        raise OutputWriteError(
            f"Could not remove previous aggregator: {e}",
            path=str(aggregator_path),
        ) from e


def generate_models(
    collections: Sequence[CollectionSchema],
    mappings: Sequence[ExpansionMapping],
    output_dir: Union[str, Path],
    internal_prefix: str = DefaultConfig.INTERNAL_PREFIX,
    strict_expansions: bool = DefaultConfig.STRICT_EXPANSIONS,
) -> GenerationReport:
    """
    Generate the model package for a schema snapshot.

    Every module is rendered in memory before the first write, so structural
    errors leave the output directory untouched apart from removing the
    previous aggregator. The aggregator is written only after every other
    file succeeded.

    Args:
        collections: Collections in server order
        mappings: Expansion mappings in input order
        output_dir: Existing directory receiving the package
        internal_prefix: Name prefix of collections that get no model file
        strict_expansions: Fail on expansions targeting collections without a model

    Returns:
        GenerationReport with one result per written file and collected warnings

    Raises:
        CodeGenerationError, DuplicateEnumVariantError, RelationshipError: Structural errors
        OutputWriteError: A file could not be written
    """
    output_dir = Path(output_dir)
    emitted = [c for c in collections if not is_internal_collection(c, internal_prefix)]
    skipped = len(collections) - len(emitted)
    logger.info(f"Generating models for {len(emitted)} collections ({skipped} internal skipped)")

    planned = plan_module_names(emitted)
    aggregator_path = output_dir / OutputFiles.AGGREGATOR
    _remove_stale_aggregator(aggregator_path)

    resolver = ExpansionResolver(
        mappings,
        known_collections=[c.name for c in collections],
        emitted_collections=[c.name for c in emitted],
        strict=strict_expansions,
    )

    modules: List[ModelModule] = []
    results: List[GenerationResult] = []
    for collection in emitted:
        module = build_model_module(collection, resolver)
        modules.append(module)
        file_path = output_dir / f"{planned[collection.name]}{OutputFiles.EXTENSION}"
        results.append(
            GenerationResult(code=render_model_module(module), file_path=str(file_path), collection_name=collection.name)
        )

    geo_module = build_geo_point_module()
    modules.append(geo_module)
    geo_path = output_dir / f"{OutputFiles.GEO_POINT_MODULE}{OutputFiles.EXTENSION}"
    results.append(GenerationResult(code=render_model_module(geo_module), file_path=str(geo_path), component_type="geo_point"))

    exports, export_warnings = plan_package_exports(modules)
    aggregator_code = render_aggregator(exports)

    total = len(results)
    for index, result in enumerate(results, start=1):
        write_file_atomically(Path(result.file_path), result.code)
        log_progress(logger, index, total, f"Wrote {Path(result.file_path).name}")

    write_file_atomically(aggregator_path, aggregator_code)
    results.append(GenerationResult(code=aggregator_code, file_path=str(aggregator_path), component_type="aggregator"))
    log_success(logger, f"Generated {len(emitted)} model modules in {output_dir}")

    return GenerationReport(
        results=results,
        warnings=list(resolver.warnings) + export_warnings,
        aggregator_path=str(aggregator_path),
    )
