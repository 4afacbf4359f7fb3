import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pb_model_generator.ast_codegen_main import generate_models
from pb_model_generator.codegen_utils import format_generated_models
from pb_model_generator.colored_logging import (
    setup_colored_logging,
    log_highlight,
    log_section,
    log_success,
)
from pb_model_generator.config_validation import EXAMPLE_CONFIG, load_config
from pb_model_generator.constants import DefaultConfig
from pb_model_generator.exceptions import OutputWriteError, PocketBaseModelGeneratorError
from pb_model_generator.introspection import PocketBaseClient


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pb-model-generator",
        description="Generate typed pydantic models from the collections of a PocketBase server.",
        epilog=f"Expected configuration file (YAML):\n\n{EXAMPLE_CONFIG}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-c",
        "--config",
        default=DefaultConfig.CONFIG_PATH,
        help=f"Path to the YAML configuration file (default: {DefaultConfig.CONFIG_PATH}).",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        help="Directory to generate the models in. Overrides config file setting.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose DEBUG logging for the generator tool.",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output (useful for CI/CD environments).",
    )
    parser.add_argument(
        "--no-format",
        action="store_true",
        help="Skip formatting the generated files with black.",
    )
    return parser


def create_output_directory(path: Path) -> None:
    """Ensures that the models directory exists; creates it if not."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OutputWriteError(f"Could not create output directory: {e}", path=str(path)) from e


def run(args: argparse.Namespace) -> int:
    """Run the generation pipeline; returns the process exit code."""
    try:
        log_section(logger, "Configuration")
        config = load_config(args.config, args)
        settings = config.pocketbase
        logger.debug(f"Effective output directory: {settings.output_directory}")

        log_section(logger, "PocketBase Schema")
        client = PocketBaseClient(settings.hosting.domain, timeout=settings.request_timeout)
        client.authenticate(settings.hosting.email, settings.hosting.password)
        collections = client.fetch_collections()
        mappings = client.fetch_expansion_mappings(settings.expansion_collection)

        log_section(logger, "Model Generation")
        output_dir = Path(settings.output_directory)
        create_output_directory(output_dir)
        report = generate_models(
            collections,
            mappings,
            output_dir,
            internal_prefix=settings.internal_prefix,
            strict_expansions=settings.strict_expansions,
        )

        if settings.format_output:
            changed = format_generated_models(report.file_paths)
            logger.info(f"Formatted {len(changed)} generated files with black")

        log_section(logger, "Completion")
        for file_path in report.model_files:
            log_highlight(logger, Path(file_path).name)
        if report.warnings:
            logger.warning(f"Finished with {len(report.warnings)} warnings; see above")
        log_success(logger, f"Models generated successfully in {output_dir}")
        return 0

    except PocketBaseModelGeneratorError as e:
        logger.error(f"{type(e).__name__}: {e}", exc_info=args.verbose)
        return 1
    except Exception as e:
        # Catch any other unexpected exceptions
        logger.error(f"An unexpected error occurred during generation: {e}", exc_info=True)
        return 1


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    setup_colored_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        use_colors=not args.no_color,
    )
    if args.verbose:
        logger.debug("Verbose mode enabled. DEBUG level logging activated.")

    sys.exit(run(args))


# --- Script Entry Point ---
if __name__ == "__main__":
    main()
