"""
Generation run orchestration.

A run is strictly two-phase: the whole catalog is read and every module is
rendered in memory first; files are written only once nothing else can fail.
"""

import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .ast_codegen import build_entity_definitions, render_entity, render_entry_module
from .codegen import setup_jinja_env, write_generated_files
from .colored_logging import log_highlight, log_progress, log_section, log_success
from .config_validation import ToolConfigSchema
from .constants import DefaultConfig
from .domain.models import GenerationContext, GenerationResult, Table
from .domain.relationships import RelationshipAnalyzer
from .exceptions import ConfigurationError
from .introspection_mysql import CatalogSource, MySQLCatalogReader, read_catalog
from .validators import OutputValidator

logger = logging.getLogger(__name__)


def prepare_output_directory(output_dir: str) -> Path:
    """Validate (and create) the output directory before anything is read."""
    result = OutputValidator.validate_output_directory(output_dir)
    for warning in result.warnings:
        logger.debug(warning)
    if not result.is_valid:
        raise ConfigurationError(
            f"Invalid output directory: {'; '.join(result.errors)}",
            context={"output_dir": output_dir},
            suggestions=["Choose a writable directory with -o/--output-dir"],
        )
    return Path(output_dir)


def build_generation_results(
    tables: Sequence[Table],
    output_dir: Path,
    context: GenerationContext
) -> List[GenerationResult]:
    """
    Analyze relations once and render every module in memory.

    Returns one result per table followed by the entry module; nothing is
    written here.
    """
    graph = RelationshipAnalyzer(context).analyze(tables)
    entities = build_entity_definitions(tables, graph, context)

    env = setup_jinja_env()
    results = []
    for entity in entities:
        logger.debug(f"Rendering entity {entity.class_name} for table '{entity.name}'")
        code = render_entity(entity, context.generated_at, format_code=context.format_code, env=env)
        results.append(GenerationResult(
            code=code,
            file_path=str(output_dir / f"{entity.module_name}.py"),
            component_type="entity",
            table_name=entity.name,
        ))

    entry_code = render_entry_module(entities, context.generated_at, format_code=context.format_code, env=env)
    results.append(GenerationResult(
        code=entry_code,
        file_path=str(output_dir / f"{DefaultConfig.ENTRY_MODULE}.py"),
        component_type="entry",
    ))
    return results


def generate_entities(
    catalog: CatalogSource,
    output_dir: str,
    context: Optional[GenerationContext] = None,
    include_tables: Optional[List[str]] = None,
    exclude_tables: Optional[List[str]] = None
) -> List[GenerationResult]:
    """
    Run one generation against ``catalog`` and write the modules.

    Raises:
        ConfigurationError: Output directory unusable (nothing was read)
        SchemaIntrospectionError: A catalog query failed (nothing was written)
        CodeGenerationError: A file could not be written
    """
    context = context or GenerationContext(output_dir=output_dir)
    path = prepare_output_directory(output_dir)

    log_progress(logger, "Reading database catalog...")
    tables = read_catalog(catalog, include_tables, exclude_tables)
    if not tables:
        logger.warning("No tables found; only the entry module will be written.")

    log_progress(logger, f"Rendering {len(tables)} entities...")
    results = build_generation_results(tables, path, context)

    write_generated_files(results)
    total_lines = sum(result.code_lines for result in results)
    log_success(logger, f"Wrote {len(results)} modules ({total_lines} lines) to {path}")

    if context.warnings:
        log_highlight(logger, f"{len(context.warnings)} schema warnings:")
        for warning in context.warnings:
            logger.info(f"  {warning}")
    return results


class EntityGenerator:
    """
    Generates entity modules for the database named in the configuration.

    The catalog reader is opened for the duration of ``run()`` only.
    """

    def __init__(
        self,
        config: ToolConfigSchema,
        context: Optional[GenerationContext] = None,
        reader_factory: Callable[[str], MySQLCatalogReader] = MySQLCatalogReader
    ):
        self.config = config
        self.context = context or GenerationContext(
            output_dir=config.output_dir,
            format_code=config.format_code,
        )
        self.reader_factory = reader_factory

    def run(self) -> List[GenerationResult]:
        log_section(logger, "Entity Generation")
        prepare_output_directory(self.config.output_dir)

        with self.reader_factory(self.config.database_url) as reader:
            return generate_entities(
                reader,
                self.config.output_dir,
                context=self.context,
                include_tables=self.config.include_tables,
                exclude_tables=self.config.exclude_tables,
            )
