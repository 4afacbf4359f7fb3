import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Any, Dict

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    ext as jinja2_extensions,
)

from pb_model_generator.exceptions import OutputWriteError


logger = logging.getLogger(__name__)

# Define the path to the templates directory relative to this file
TEMPLATE_DIR = Path(__file__).parent / "templates"


def setup_jinja_env() -> Environment:
    """Sets up and returns the Jinja2 environment."""
    env = Environment(
        loader=FileSystemLoader(TEMPLATE_DIR),
        autoescape=False,  # Output is Python source, not markup
        undefined=StrictUndefined,
        trim_blocks=True,  # Remove first newline after a block tag
        lstrip_blocks=True,  # Strip leading whitespace from lines with block tags
        keep_trailing_newline=True,
        extensions=[
            jinja2_extensions.loopcontrols,  # Add loopcontrols extension for {% break, continue, etc. %}
        ],
    )
    # Python string literals inside templates
    env.filters["repr"] = repr
    return env


def render_template(env: Environment, template_name: str, context: Dict[str, Any]) -> str:
    """Renders a Jinja template to a string."""
    template = env.get_template(template_name)
    return template.render(context)


def _target_file_mode(output_path: Path) -> int:
    """Mode of the file being replaced, or what a plain open() would create under the umask."""
    try:
        return stat.S_IMODE(output_path.stat().st_mode)
    except FileNotFoundError:
        pass
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_file_atomically(output_path: Path, content: str) -> None:
    """
    Replace a file wholesale: write a temp file next to it, then os.replace.

    Raises:
        OutputWriteError: The file could not be written
    """
    output_path = Path(output_path)
    tmp_name = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=output_path.parent,
            prefix=f".{output_path.name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(content)
        os.chmod(tmp_name, _target_file_mode(output_path))
        os.replace(tmp_name, output_path)
        logger.debug(f"Generated file: {output_path}")
    except OSError as e:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise OutputWriteError(
            f"Could not write generated file: {e}",
            path=str(output_path),
        ) from e
