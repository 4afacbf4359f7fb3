from argparse import Namespace
import sys
import logging
from typing import Dict, Any, Optional
from pathlib import Path

import yaml
from pydantic import (
    BaseModel,
    Field,
    ValidationError,
    field_validator,
    ConfigDict,
)

from pb_model_generator.constants import DefaultConfig
from pb_model_generator.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


EXAMPLE_CONFIG = """\
pocketbase:
  hosting:
    domain: 'https://pocketbase.example.com'
    email: 'admin@example.com'
    password: 'your-password'
  output_directory: './models'          # Optional, default './models'
  expansion_collection: '_expansions'   # Optional, collection holding expansion mappings
  internal_prefix: '_'                  # Optional, collections starting with it get no model
  strict_expansions: false              # Optional, fail on expansions to unknown collections
"""


# --- Pydantic Models for Configuration Schema ---
class HostingSettings(BaseModel):
    """Where the PocketBase server lives and which superuser to sign in as."""

    domain: str = Field(..., min_length=1, description="Base URL of the PocketBase server.")
    email: str = Field(..., min_length=1, description="Superuser (admin) email.")
    password: str = Field(..., min_length=1, description="Superuser (admin) password.")

    @field_validator("domain")
    @classmethod
    def validate_domain(cls, v: str) -> str:
        """Ensure the domain is an http(s) URL; a trailing slash is dropped."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Domain must start with http:// or https://, got '{v}'")
        return v.rstrip("/")


class PocketBaseSettings(BaseModel):
    """Schema of the 'pocketbase' section."""

    hosting: HostingSettings = Field(..., description="Server location and credentials.")
    output_directory: str = Field(
        DefaultConfig.OUTPUT_DIR,
        min_length=1,
        description="Directory receiving the generated model package.",
    )
    expansion_collection: str = Field(
        DefaultConfig.EXPANSION_COLLECTION,
        min_length=1,
        description="Collection whose records declare expansion mappings.",
    )
    internal_prefix: str = Field(
        DefaultConfig.INTERNAL_PREFIX,
        description="Collections whose name starts with this prefix get no model file.",
    )
    strict_expansions: bool = Field(
        DefaultConfig.STRICT_EXPANSIONS,
        description="Fail when an expansion targets a collection without a generated model.",
    )
    format_output: bool = Field(
        DefaultConfig.FORMAT_OUTPUT,
        description="Run black over the generated files.",
    )
    request_timeout: float = Field(
        DefaultConfig.REQUEST_TIMEOUT,
        gt=0,
        description="Timeout in seconds for each HTTP request.",
    )

    model_config = ConfigDict(
        extra="ignore",  # Allow and ignore extra fields from input dict
    )


class ToolConfigSchema(BaseModel):
    """Pydantic schema defining the expected structure and types for the configuration."""

    pocketbase: PocketBaseSettings = Field(..., description="PocketBase generator settings.")

    model_config = ConfigDict(
        extra="ignore",
    )


# --- Validation Function ---
def validate_and_parse_config(config_dict: Dict[str, Any], config_file: Optional[str] = None) -> ToolConfigSchema:
    """
    Validates a raw configuration dictionary against the ToolConfigSchema.

    Raises:
        ConfigurationError: Validation failed; details are printed to stderr
    """
    try:
        validated_config = ToolConfigSchema.model_validate(config_dict)
        logger.debug("Configuration dictionary parsed and validated successfully against schema.")
        return validated_config
    except ValidationError as e:
        logger.critical("Configuration validation failed! Please check your config file or arguments.")
        print("\n--- Configuration Errors ---", file=sys.stderr)
        for error in e.errors():
            loc_parts = [str(loc_item) for loc_item in error.get("loc", ())]
            loc_str = " -> ".join(loc_parts) if loc_parts else "Model Level"
            msg = error.get("msg", "Unknown validation error")

            print(f"  - Location: '{loc_str}'", file=sys.stderr)
            print(f"    Error:    {msg}", file=sys.stderr)
            if error.get("type") == "missing":
                print(f"    Hint:     Add '{loc_parts[-1]}' to the configuration file.", file=sys.stderr)

        print("----------------------------", file=sys.stderr)
        raise ConfigurationError(
            f"Invalid configuration ({e.error_count()} errors)",
            config_file=config_file,
        ) from e


def read_config_file(config_path: str) -> Dict[str, Any]:
    """
    Read the YAML configuration file into a dict.

    Raises:
        ConfigurationError: File missing, unreadable or not a YAML mapping
    """
    config_file = Path(config_path)
    if not config_file.is_file():
        raise ConfigurationError(f"Configuration file not found at {config_path}", config_file=config_path)

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Error parsing YAML file: {e}", config_file=config_path) from e
    except OSError as e:
        raise ConfigurationError(f"Error reading config file: {e}", config_file=config_path) from e

    if not isinstance(raw_config, dict):
        raise ConfigurationError("Configuration file must contain a YAML mapping", config_file=config_path)
    if not isinstance(raw_config.get("pocketbase"), dict):
        raise ConfigurationError('Missing "pocketbase" section in configuration.', config_file=config_path)

    logger.debug(f"Loaded configuration from {config_path}")
    return raw_config


def load_config(config_path: str, cli_args: Optional[Namespace] = None) -> ToolConfigSchema:
    """
    Loads configuration from YAML file, merges with CLI arguments,
    validates the result, and returns a validated Pydantic model instance.
    """
    raw_config = read_config_file(config_path)
    pb_section = raw_config["pocketbase"]

    # Override with CLI arguments (only those explicitly provided)
    overridden_keys = set()
    if cli_args is not None:
        output_dir = getattr(cli_args, "output_dir", None)
        if output_dir:
            pb_section["output_directory"] = output_dir
            overridden_keys.add("output_directory")
        if getattr(cli_args, "no_format", False):
            pb_section["format_output"] = False
            overridden_keys.add("format_output")
    if overridden_keys:
        logger.debug(f"Overridden config keys from CLI arguments: {overridden_keys}")

    logger.info("Validating configuration...")
    validated_config = validate_and_parse_config(raw_config, config_file=config_path)

    # Post-validation adjustments
    settings = validated_config.pocketbase
    settings.output_directory = str(Path(settings.output_directory).resolve())

    logger.info("Configuration loaded and validated successfully.")
    return validated_config
