import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from .codegen_utils import format_python_code_using_black
from .constants import GenerationOptions
from .domain.models import GenerationResult
from .exceptions import CodeGenerationError

logger = logging.getLogger(__name__)

# Define the path to the templates directory relative to this file
TEMPLATE_DIR = Path(__file__).parent / GenerationOptions.TEMPLATE_DIR


def setup_jinja_env() -> Environment:
    """Sets up and returns the Jinja2 environment."""
    env = Environment(
        loader=FileSystemLoader(TEMPLATE_DIR),
        autoescape=False,  # Output is Python source, not markup
        trim_blocks=True,  # Remove first newline after a block tag
        lstrip_blocks=True,  # Strip leading whitespace from lines with block tags
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )
    return env


def render_template(
    env: Environment,
    template_name: str,
    context: Dict[str, Any],
    output_name: str,
    format_code: bool = True
) -> str:
    """Renders a Jinja template to Python source, optionally formatted with Black."""
    try:
        rendered_content = env.get_template(template_name).render(context)
    except TemplateError as e:
        raise CodeGenerationError(
            f"Error rendering template '{template_name}': {e}",
            file_path=output_name,
        ) from e

    if format_code:
        logger.debug(f"Formatting Python code using Black: {output_name}")
        return format_python_code_using_black(output_name, rendered_content)
    return rendered_content


def write_generated_file(result: GenerationResult) -> None:
    """Writes one rendered module, replacing only that file."""
    output_path = Path(result.file_path)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(result.code)
    except OSError as e:
        raise CodeGenerationError(
            f"Could not write generated file: {e}",
            file_path=str(output_path),
            table=result.table_name,
        ) from e
    logger.debug(f"Generated file: {output_path}")


def write_generated_files(results: Iterable[GenerationResult]) -> List[str]:
    """Writes every rendered module and returns the written paths."""
    written = []
    for result in results:
        write_generated_file(result)
        written.append(os.fspath(result.file_path))
    return written
