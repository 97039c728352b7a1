import logging
from pathlib import Path
from typing import Union

from black import (
    FileMode,
    format_str as black_format_str,
    NothingChanged as BlackNothingChanged,
)

from .constants import GenerationOptions

logger = logging.getLogger(__name__)

BLACK_FORMATTER_MODE = FileMode(line_length=GenerationOptions.DEFAULT_LINE_LENGTH)


def format_python_code_using_black(filepath: Union[Path, str], code_string: str) -> str:
    """Formats the given Python code using Black."""
    try:
        formatted_code = black_format_str(code_string, mode=BLACK_FORMATTER_MODE)
        logger.debug(f"Formatted code using Black: {filepath}")
        return formatted_code
    except BlackNothingChanged:
        logger.debug(f"Black formatter did not change the code: {filepath}")
        return code_string
    except Exception as e:
        # Invalid syntax in the rendered module; keep it so it can be inspected
        logger.error(f"Could not format Python code using Black: {e}")
        logger.warning(f"Writing unformatted Python code for {filepath}.")
        return code_string
