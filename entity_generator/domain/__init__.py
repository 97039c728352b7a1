"""
Domain module for the entity generator.

This module contains the core logic (type mapping, naming, relation
inference) and the domain models, separated from database access and code
emission concerns.
"""

from .models import (
    Column,
    ForeignKey,
    Table,
    TypeMapping,
    EnumMember,
    EnumDefinition,
    ForwardRelation,
    InverseRelation,
    ManyToManyRelation,
    RelationGraph,
    RelationshipType,
    EntityColumn,
    EntityRelation,
    EntityDefinition,
    SchemaWarning,
    GenerationContext,
    GenerationResult
)

from .type_mapping import (
    map_column_type,
    parse_enum_values
)

from .relationships import RelationshipAnalyzer

from .naming import (
    MemberNameRegistry,
    to_snake_case,
    to_pascal_case,
    pluralize,
    clean_field_name,
    enum_member_name,
    generate_class_name,
    generate_enum_members
)

__all__ = [
    # Core models
    'Column',
    'ForeignKey',
    'Table',
    'TypeMapping',
    'EnumMember',
    'EnumDefinition',
    'ForwardRelation',
    'InverseRelation',
    'ManyToManyRelation',
    'RelationGraph',
    'RelationshipType',
    'EntityColumn',
    'EntityRelation',
    'EntityDefinition',
    'SchemaWarning',
    'GenerationContext',
    'GenerationResult',

    # Type mapping
    'map_column_type',
    'parse_enum_values',

    # Relationships
    'RelationshipAnalyzer',

    # Naming
    'MemberNameRegistry',
    'to_snake_case',
    'to_pascal_case',
    'pluralize',
    'clean_field_name',
    'enum_member_name',
    'generate_class_name',
    'generate_enum_members'
]
