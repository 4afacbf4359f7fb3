import logging
from pathlib import Path
from typing import Iterable, List, Union

from black import (
    FileMode,
    format_str as black_format_str,
    NothingChanged as BlackNothingChanged,
)

from pb_model_generator.codegen import write_file_atomically
from pb_model_generator.constants import DefaultConfig


logger = logging.getLogger(__name__)

BLACK_FORMATTER_MODE = FileMode(line_length=DefaultConfig.BLACK_LINE_LENGTH)


def format_python_code_using_black(filepath: Path, code_string: str) -> str:
    """Formats the given Python code using Black."""
    try:
        formatted_code = black_format_str(code_string, mode=BLACK_FORMATTER_MODE)
        logger.debug(f"Formatted code using Black: {filepath}")
        return formatted_code
    except BlackNothingChanged:
        logger.debug(f"Black formatter did not change the code: {filepath}")
        return code_string
    except Exception as e:
        # Black rejects the file; keep what the generator produced
        logger.warning(f"Could not format {filepath} using Black: {e}")
        return code_string


def format_generated_models(file_paths: Iterable[Union[str, Path]]) -> List[Path]:
    """
    Reformat the given generated modules in place.

    Only the files of the current run are passed in, so hand-written modules
    and leftovers of earlier runs in the same directory stay untouched.

    Returns:
        Paths of the files whose content changed
    """
    changed: List[Path] = []
    paths = [Path(file_path) for file_path in file_paths]
    for path in paths:
        original = path.read_text(encoding="utf-8")
        formatted = format_python_code_using_black(path, original)
        if formatted != original:
            write_file_atomically(path, formatted)
            changed.append(path)
    logger.debug(f"Black reformatted {len(changed)} of {len(paths)} generated files")
    return changed
