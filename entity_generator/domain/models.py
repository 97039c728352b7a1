"""
Core domain models for the entity generator.

Catalog records (tables, columns, foreign keys) are read-only snapshots of
the database at generation time. Everything derived from them (type
mappings, relations, entity definitions) is built as immutable values so a
single run can gather everything first and render afterwards.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple

logger = logging.getLogger(__name__)


class RelationshipType(Enum):
    """Kinds of relations emitted on an entity."""

    ONE_TO_ONE = "one_to_one"      # forward, declared by a foreign key
    ONE_TO_MANY = "one_to_many"    # inverse of a forward relation
    MANY_TO_MANY = "many_to_many"  # through a junction table


# --- Catalog snapshots ---

@dataclass(frozen=True)
class Column:
    """A single database column as reported by the catalog."""

    name: str
    physical_type: str
    nullable: bool = True
    default: Optional[str] = None
    is_primary: bool = False
    is_auto_increment: bool = False
    comment: Optional[str] = None
    extra: str = ""


@dataclass(frozen=True)
class ForeignKey:
    """A foreign key column declared from ``table`` to ``referenced_table``."""

    table: str
    column: str
    referenced_table: str
    referenced_column: str
    constraint_name: Optional[str] = None


@dataclass(frozen=True)
class Table:
    """A database table with its ordered columns and outgoing foreign keys."""

    name: str
    columns: Tuple[Column, ...] = ()
    foreign_keys: Tuple[ForeignKey, ...] = ()

    @property
    def has_primary_key(self) -> bool:
        return any(col.is_primary for col in self.columns)

    def get_column(self, name: str) -> Optional[Column]:
        for col in self.columns:
            if col.name == name:
                return col
        return None

    def foreign_key_for(self, column_name: str) -> Optional[ForeignKey]:
        """First foreign key declared on ``column_name``, if any."""
        for fk in self.foreign_keys:
            if fk.column == column_name:
                return fk
        return None


# --- Type mapping ---

@dataclass(frozen=True)
class TypeMapping:
    """
    Result of mapping a physical column type.

    ``storage_kind`` is the physical base keyword (``varchar``, ``enum``...),
    ``column_type`` the SQLAlchemy type used in emitted code and
    ``logical_type`` the Python value type.
    """

    logical_type: str
    storage_kind: str
    column_type: str
    length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    enum_values: Tuple[str, ...] = ()
    transform: Optional[str] = None

    @property
    def is_untyped(self) -> bool:
        return self.logical_type == "untyped"

    @property
    def is_enum(self) -> bool:
        return bool(self.enum_values)


@dataclass(frozen=True)
class EnumMember:
    name: str
    value: str


@dataclass(frozen=True)
class EnumDefinition:
    """Inline enumeration declared by an ``enum(...)`` column."""

    name: str
    members: Tuple[EnumMember, ...]

    @property
    def values(self) -> List[str]:
        return [member.value for member in self.members]


# --- Relation graph ---

@dataclass(frozen=True)
class ForwardRelation:
    """Relation owned by the table declaring the foreign key."""

    table: str
    column: str
    referenced_table: str
    referenced_column: str
    name: str
    alternate_name: Optional[str] = None
    from_junction: bool = False

    relationship_type = RelationshipType.ONE_TO_ONE

    @property
    def is_self_referential(self) -> bool:
        return self.table == self.referenced_table


@dataclass(frozen=True)
class InverseRelation:
    """Relation attached to the referenced table, one per referencing table."""

    table: str
    referencing_table: str
    column: str
    forward_name: str
    name: str
    alternate_name: Optional[str] = None

    relationship_type = RelationshipType.ONE_TO_MANY


@dataclass(frozen=True)
class ManyToManyRelation:
    """
    Association between two tables through a junction table.

    ``left_table`` sorts before ``right_table``; ``left_name`` is the property
    emitted on the left entity (pointing at the right one) and vice versa.
    """

    left_table: str
    right_table: str
    junction_table: str
    left_column: str
    right_column: str
    left_name: str
    right_name: str

    relationship_type = RelationshipType.MANY_TO_MANY

    @property
    def key(self) -> Tuple[str, str]:
        return (self.left_table, self.right_table)

    def participates(self, table: str) -> bool:
        return table in self.key

    def other(self, table: str) -> str:
        return self.right_table if table == self.left_table else self.left_table

    def name_for(self, table: str) -> str:
        return self.left_name if table == self.left_table else self.right_name

    def alternate_name_for(self, table: str) -> str:
        return f"{self.name_for(table)}_via_{self.junction_table}"


@dataclass(frozen=True)
class RelationGraph:
    """Whole-schema relations, built once before any entity is emitted."""

    forward: Dict[str, Tuple[ForwardRelation, ...]] = field(default_factory=dict)
    inverse: Dict[str, Tuple[InverseRelation, ...]] = field(default_factory=dict)
    many_to_many: Tuple[ManyToManyRelation, ...] = ()
    junction_tables: FrozenSet[str] = frozenset()

    def forward_for(self, table: str) -> Tuple[ForwardRelation, ...]:
        return self.forward.get(table, ())

    def inverse_for(self, table: str) -> Tuple[InverseRelation, ...]:
        return self.inverse.get(table, ())

    def many_to_many_for(self, table: str) -> Tuple[ManyToManyRelation, ...]:
        return tuple(rel for rel in self.many_to_many if rel.participates(table))

    def is_junction(self, table: str) -> bool:
        return table in self.junction_tables


# --- Emission units ---

@dataclass(frozen=True)
class EntityColumn:
    """A column resolved for emission."""

    column: Column
    attribute: str
    mapping: TypeMapping
    enum: Optional[EnumDefinition] = None
    foreign_key: Optional[ForeignKey] = None

    @property
    def name(self) -> str:
        return self.column.name


@dataclass(frozen=True)
class EntityRelation:
    """A relation resolved for emission on one entity."""

    name: str
    relationship_type: RelationshipType
    target_table: str
    target_class: str
    target_module: str
    uselist: bool = False
    nullable: bool = False
    foreign_keys: Optional[str] = None
    back_populates: Optional[str] = None
    secondary: Optional[str] = None
    remote_side: Optional[str] = None
    viewonly: bool = False


@dataclass(frozen=True)
class EntityDefinition:
    """
    Everything needed to render one table as an entity module.

    Built once per table after the relation graph is complete; never
    mutated afterwards.
    """

    table: Table
    class_name: str
    module_name: str
    columns: Tuple[EntityColumn, ...] = ()
    enums: Tuple[EnumDefinition, ...] = ()
    forward_relations: Tuple[EntityRelation, ...] = ()
    inverse_relations: Tuple[EntityRelation, ...] = ()
    many_to_many_relations: Tuple[EntityRelation, ...] = ()
    imports: Tuple[Tuple[str, Tuple[str, ...]], ...] = ()
    related_entities: Tuple[Tuple[str, str], ...] = ()

    @property
    def name(self) -> str:
        return self.table.name

    @property
    def relations(self) -> Tuple[EntityRelation, ...]:
        return self.forward_relations + self.inverse_relations + self.many_to_many_relations

    def get_relation(self, name: str) -> Optional[EntityRelation]:
        for rel in self.relations:
            if rel.name == name:
                return rel
        return None


# --- Run bookkeeping ---

@dataclass(frozen=True)
class SchemaWarning:
    """Non-fatal condition found while generating."""

    table: str
    message: str
    code: str

    def __str__(self) -> str:
        return f"[{self.table}] {self.message}"


@dataclass
class GenerationContext:
    """
    Explicit per-run context handed to every component.

    Holds the run timestamp and the warnings accumulated while the run
    progresses; several contexts can coexist (e.g. in tests).
    """

    output_dir: Optional[str] = None
    format_code: bool = True
    generated_at: datetime = field(default_factory=datetime.now)
    warnings: List[SchemaWarning] = field(default_factory=list)

    def warn(self, table: str, message: str, code: str) -> SchemaWarning:
        """Record a warning and log it right away."""
        warning = SchemaWarning(table=table, message=message, code=code)
        self.warnings.append(warning)
        logger.warning(str(warning))
        return warning

    def warnings_for(self, table: str) -> List[SchemaWarning]:
        return [w for w in self.warnings if w.table == table]


@dataclass
class GenerationResult:
    """Rendered module ready to be written."""

    code: str
    file_path: str
    component_type: str = "entity"  # 'entity' or 'entry'
    table_name: Optional[str] = None
    code_lines: Optional[int] = None

    def __post_init__(self):
        if self.code_lines is None:
            self.code_lines = len(self.code.splitlines())
