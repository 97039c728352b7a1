"""
Entity AST Code Generator Module

This module builds entity definitions from the catalog and renders them as
SQLAlchemy declarative modules.
"""

from .builder import EntityDefinitionBuilder, build_entity_definitions
from .entities import render_entity, render_entry_module


__all__ = [
    'EntityDefinitionBuilder',
    'build_entity_definitions',
    'render_entity',
    'render_entry_module',
]
