"""
Builds immutable entity definitions from catalog tables and the relation graph.

Naming happens in two passes: first every entity resolves its member names
(columns, then forward, inverse and many-to-many relations), then relations
are paired with their counterpart, which is only possible once both ends
know whether they survived collision resolution.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from ..constants import FieldNames, GenerationOptions, LogicalTypes, Transformers, WarningCodes
from ..domain.models import (
    EntityColumn,
    EntityDefinition,
    EntityRelation,
    EnumDefinition,
    GenerationContext,
    RelationGraph,
    RelationshipType,
    Table,
)
from ..domain.naming import (
    MemberNameRegistry,
    clean_field_name,
    generate_class_name,
    generate_enum_members,
    generate_enum_name,
    generate_module_name,
)
from ..domain.type_mapping import map_column_type

logger = logging.getLogger(__name__)


@dataclass
class _ResolvedNames:
    """Member names of one entity after collision resolution."""

    class_name: str
    module_name: str
    registry: MemberNameRegistry
    attributes: Dict[str, str] = field(default_factory=dict)
    enums: Dict[str, EnumDefinition] = field(default_factory=dict)
    forward: Dict[str, Optional[str]] = field(default_factory=dict)
    inverse: Dict[str, Optional[str]] = field(default_factory=dict)
    many_to_many: Dict[Tuple[str, str], Optional[str]] = field(default_factory=dict)


class EntityDefinitionBuilder:
    """Turns the whole catalog into one ``EntityDefinition`` per table."""

    def __init__(self, tables: Sequence[Table], graph: RelationGraph, context: GenerationContext):
        self.tables = sorted(tables, key=lambda t: t.name)
        self.table_map = {table.name: table for table in self.tables}
        self.graph = graph
        self.context = context
        self.class_names = {table.name: generate_class_name(table.name) for table in self.tables}
        self._names: Dict[str, _ResolvedNames] = {}

    def build(self) -> List[EntityDefinition]:
        for table in self.tables:
            self._names[table.name] = self._resolve_names(table)
        return [self._build_entity(table) for table in self.tables]

    # --- Pass 1: names ---

    def _resolve_names(self, table: Table) -> _ResolvedNames:
        class_name = self.class_names[table.name]
        names = _ResolvedNames(
            class_name=class_name,
            module_name=generate_module_name(table.name),
            registry=MemberNameRegistry(FieldNames.GENERATED_MODULE_NAMES),
        )

        taken_enum_names = set(FieldNames.GENERATED_MODULE_NAMES) | set(self.class_names.values())
        for column in table.columns:
            mapping = map_column_type(column.physical_type)
            if not mapping.is_enum:
                continue
            enum_name = generate_enum_name(column.name, class_name, taken_enum_names)
            taken_enum_names.add(enum_name)
            names.enums[column.name] = EnumDefinition(
                name=enum_name,
                members=tuple(generate_enum_members(mapping.enum_values)),
            )

        for enum in names.enums.values():
            names.registry.register(enum.name)

        for column in table.columns:
            attribute = clean_field_name(column.name)
            if attribute in names.registry:
                attribute = f"{attribute}_"
            candidate, counter = attribute, 2
            while not names.registry.register(candidate):
                candidate = f"{attribute}{counter}"
                counter += 1
            names.attributes[column.name] = candidate

        for relation in self.graph.forward_for(table.name):
            names.forward[relation.column] = self._claim(
                names, table.name, [relation.name, relation.alternate_name],
                f"forward relation on '{relation.column}'",
            )

        for relation in self.graph.inverse_for(table.name):
            names.inverse[relation.referencing_table] = self._claim(
                names, table.name, [relation.name, relation.alternate_name],
                f"inverse relation from '{relation.referencing_table}'",
            )

        for relation in self.graph.many_to_many_for(table.name):
            names.many_to_many[relation.key] = self._claim(
                names, table.name,
                [relation.name_for(table.name), relation.alternate_name_for(table.name)],
                f"many-to-many relation through '{relation.junction_table}'",
            )

        return names

    def _claim(self, names: _ResolvedNames, table_name: str, candidates: List[Optional[str]], label: str) -> Optional[str]:
        name = names.registry.claim(candidates)
        if name is None:
            tried = ", ".join(c for c in candidates if c)
            self.context.warn(
                table_name,
                f"Skipped {label}: name already used ({tried})",
                WarningCodes.NAME_COLLISION,
            )
        elif name != candidates[0]:
            logger.debug(f"[{table_name}] {label} renamed to '{name}'")
        return name

    # --- Pass 2: definitions ---

    def _build_entity(self, table: Table) -> EntityDefinition:
        names = self._names[table.name]

        if not table.has_primary_key:
            self.context.warn(
                table.name,
                "Table has no primary key; every column is used as the mapper identity",
                WarningCodes.MISSING_PRIMARY_KEY,
            )

        columns = tuple(self._build_columns(table, names))
        forward = tuple(self._build_forward(table, names))
        inverse = tuple(self._build_inverse(table, names))
        many_to_many = tuple(self._build_many_to_many(table, names))
        relations = forward + inverse + many_to_many

        related = sorted({
            (rel.target_module, rel.target_class)
            for rel in relations
            if rel.target_table != table.name
        })

        return EntityDefinition(
            table=table,
            class_name=names.class_name,
            module_name=names.module_name,
            columns=columns,
            enums=tuple(names.enums[col.name] for col in table.columns if col.name in names.enums),
            forward_relations=forward,
            inverse_relations=inverse,
            many_to_many_relations=many_to_many,
            imports=collect_imports(columns, relations, bool(related)),
            related_entities=tuple(related),
        )

    def _build_columns(self, table: Table, names: _ResolvedNames) -> List[EntityColumn]:
        columns = []
        for column in table.columns:
            mapping = map_column_type(column.physical_type)
            if mapping.is_untyped:
                self.context.warn(
                    table.name,
                    f"Column '{column.name}' has unsupported type '{column.physical_type}'; mapped as text",
                    WarningCodes.UNTYPED_COLUMN,
                )

            foreign_key = table.foreign_key_for(column.name)
            if foreign_key is not None and foreign_key.referenced_table not in self.table_map:
                foreign_key = None

            columns.append(EntityColumn(
                column=column,
                attribute=names.attributes[column.name],
                mapping=mapping,
                enum=names.enums.get(column.name),
                foreign_key=foreign_key,
            ))
        return columns

    def _attribute(self, table_name: str, column_name: str) -> str:
        return self._names[table_name].attributes.get(column_name, clean_field_name(column_name))

    def _qualified(self, table_name: str, column_name: str) -> str:
        return f"{self.class_names[table_name]}.{self._attribute(table_name, column_name)}"

    def _build_forward(self, table: Table, names: _ResolvedNames) -> List[EntityRelation]:
        relations = []
        for relation in self.graph.forward_for(table.name):
            name = names.forward.get(relation.column)
            if name is None:
                continue

            back_populates = None
            if not relation.from_junction:
                target = self._names[relation.referenced_table]
                inverse = next(
                    (inv for inv in self.graph.inverse_for(relation.referenced_table)
                     if inv.referencing_table == table.name and inv.column == relation.column),
                    None,
                )
                if inverse is not None:
                    back_populates = target.inverse.get(table.name)

            column = table.get_column(relation.column)
            relations.append(EntityRelation(
                name=name,
                relationship_type=RelationshipType.ONE_TO_ONE,
                target_table=relation.referenced_table,
                target_class=self.class_names[relation.referenced_table],
                target_module=self._names[relation.referenced_table].module_name,
                uselist=False,
                nullable=column.nullable if column is not None else True,
                foreign_keys=self._qualified(table.name, relation.column),
                back_populates=back_populates,
                remote_side=(
                    self._qualified(relation.referenced_table, relation.referenced_column)
                    if relation.is_self_referential else None
                ),
                viewonly=relation.from_junction,
            ))
        return relations

    def _build_inverse(self, table: Table, names: _ResolvedNames) -> List[EntityRelation]:
        relations = []
        for relation in self.graph.inverse_for(table.name):
            name = names.inverse.get(relation.referencing_table)
            if name is None:
                continue

            source = self._names[relation.referencing_table]
            relations.append(EntityRelation(
                name=name,
                relationship_type=RelationshipType.ONE_TO_MANY,
                target_table=relation.referencing_table,
                target_class=source.class_name,
                target_module=source.module_name,
                uselist=True,
                foreign_keys=self._qualified(relation.referencing_table, relation.column),
                back_populates=source.forward.get(relation.column),
            ))
        return relations

    def _build_many_to_many(self, table: Table, names: _ResolvedNames) -> List[EntityRelation]:
        relations = []
        for relation in self.graph.many_to_many_for(table.name):
            name = names.many_to_many.get(relation.key)
            if name is None:
                continue

            other = self._names[relation.other(table.name)]
            relations.append(EntityRelation(
                name=name,
                relationship_type=RelationshipType.MANY_TO_MANY,
                target_table=relation.other(table.name),
                target_class=other.class_name,
                target_module=other.module_name,
                uselist=True,
                back_populates=other.many_to_many.get(relation.key),
                secondary=relation.junction_table,
            ))
        return relations


def collect_imports(
    columns: Sequence[EntityColumn],
    relations: Sequence[EntityRelation],
    has_related: bool
) -> Tuple[Tuple[str, Tuple[str, ...]], ...]:
    """
    Imports needed by one entity module, in emission order.

    An entry with no names is a plain ``import module`` statement.
    """
    typing_names = set()
    modules = set()
    runtime_names = {GenerationOptions.DECLARATIVE_BASE}
    orm_names = {"Mapped", "mapped_column"}

    if has_related:
        typing_names.add("TYPE_CHECKING")

    for col in columns:
        logical = col.mapping.logical_type
        if logical in LogicalTypes.MODULES:
            modules.add(LogicalTypes.MODULES[logical])
        if logical in (LogicalTypes.JSON, LogicalTypes.UNTYPED):
            typing_names.add("Any")
        if col.column.nullable and not col.column.is_primary:
            typing_names.add("Optional")
        if col.mapping.transform in Transformers.ALL:
            runtime_names.add(col.mapping.transform)
        if col.enum is not None:
            modules.add("enum")
            runtime_names.add(GenerationOptions.ENUM_VALUES_CALLABLE)

    for rel in relations:
        orm_names.add("relationship")
        if rel.uselist:
            typing_names.add("List")
        elif rel.nullable:
            typing_names.add("Optional")

    imports: List[Tuple[str, Tuple[str, ...]]] = [(module, ()) for module in sorted(modules)]
    if typing_names:
        imports.append(("typing", tuple(sorted(typing_names))))
    imports.append(("sqlalchemy", ()))
    imports.append(("sqlalchemy.orm", tuple(sorted(orm_names))))
    imports.append((GenerationOptions.RUNTIME_MODULE, tuple(sorted(runtime_names))))
    return tuple(imports)


def build_entity_definitions(
    tables: Sequence[Table],
    graph: RelationGraph,
    context: GenerationContext
) -> List[EntityDefinition]:
    """Build every entity of the run; the graph must cover all ``tables``."""
    return EntityDefinitionBuilder(tables, graph, context).build()
