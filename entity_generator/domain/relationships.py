"""
Relationship analysis domain logic for the entity generator.

This module contains the core logic for inferring relations between tables
from their foreign keys: forward relations on the declaring table, inverse
relations on the referenced table and many-to-many relations through
junction tables. The analysis always runs over the complete set of tables
of a generation run, before any entity is emitted.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from ..constants import WarningCodes
from .models import (
    ForeignKey,
    ForwardRelation,
    GenerationContext,
    InverseRelation,
    ManyToManyRelation,
    RelationGraph,
    Table,
)
from .naming import (
    forward_relation_name,
    inverse_alternate_name,
    inverse_relation_name,
    many_to_many_name,
)

logger = logging.getLogger(__name__)


class RelationshipAnalyzer:
    """
    Analyzes foreign keys across all tables and builds the relation graph.

    This class encapsulates the logic for detecting junction tables and for
    naming every relation it discovers.
    """

    def __init__(self, context: Optional[GenerationContext] = None):
        self.context = context or GenerationContext()

    def analyze(self, tables: Sequence[Table]) -> RelationGraph:
        """
        Analyze relations across all tables.

        Args:
            tables: Every table taking part in the run

        Returns:
            RelationGraph with forward, inverse and many-to-many relations
        """
        ordered = sorted(tables, key=lambda t: t.name)
        table_map = {table.name: table for table in ordered}

        junction_tables = frozenset(
            table.name for table in ordered if self.is_junction_table(table, table_map)
        )

        forward: Dict[str, Tuple[ForwardRelation, ...]] = {}
        for table in ordered:
            relations = self._analyze_foreign_keys(table, table_map, table.name in junction_tables)
            if relations:
                forward[table.name] = tuple(relations)

        inverse = self._analyze_inverse(forward, junction_tables)
        many_to_many = self._analyze_many_to_many(
            [table_map[name] for name in sorted(junction_tables)]
        )

        logger.debug(
            f"Relation graph: {sum(len(r) for r in forward.values())} forward, "
            f"{sum(len(r) for r in inverse.values())} inverse, "
            f"{len(many_to_many)} many-to-many, {len(junction_tables)} junction tables"
        )
        return RelationGraph(
            forward=forward,
            inverse=inverse,
            many_to_many=tuple(many_to_many),
            junction_tables=junction_tables,
        )

    @staticmethod
    def is_junction_table(table: Table, all_tables: Dict[str, Table]) -> bool:
        """
        Determine if a table only associates two other tables.

        A junction has exactly two columns, both part of the primary key, and
        exactly two foreign keys pointing at two distinct tables of the run.
        """
        if len(table.columns) != 2 or not all(col.is_primary for col in table.columns):
            return False
        if len(table.foreign_keys) != 2:
            return False

        referenced = {fk.referenced_table for fk in table.foreign_keys}
        if len(referenced) != 2:
            # Self-referencing associations stay ordinary tables
            return False
        return all(name in all_tables for name in referenced)

    def _analyze_foreign_keys(
        self,
        table: Table,
        all_tables: Dict[str, Table],
        from_junction: bool
    ) -> List[ForwardRelation]:
        """Forward relations declared by ``table``, in catalog order."""
        relations = []
        seen_targets: Dict[str, int] = {}

        for fk in table.foreign_keys:
            if fk.referenced_table not in all_tables:
                self.context.warn(
                    table.name,
                    f"Foreign key '{fk.column}' references unknown table "
                    f"'{fk.referenced_table}'; relation skipped",
                    WarningCodes.UNKNOWN_REFERENCE,
                )
                continue

            occurrence = seen_targets.get(fk.referenced_table, 0)
            seen_targets[fk.referenced_table] = occurrence + 1

            disambiguated = forward_relation_name(fk.referenced_table, fk.column)
            if occurrence == 0:
                name = forward_relation_name(fk.referenced_table)
                alternate = disambiguated
            else:
                name, alternate = disambiguated, None

            relations.append(ForwardRelation(
                table=table.name,
                column=fk.column,
                referenced_table=fk.referenced_table,
                referenced_column=fk.referenced_column,
                name=name,
                alternate_name=alternate,
                from_junction=from_junction,
            ))

        return relations

    def _analyze_inverse(
        self,
        forward: Dict[str, Tuple[ForwardRelation, ...]],
        junction_tables: frozenset
    ) -> Dict[str, Tuple[InverseRelation, ...]]:
        """One inverse relation per (referenced table, referencing table) pair."""
        by_target: Dict[str, Dict[str, ForwardRelation]] = {}

        for table_name in sorted(forward):
            if table_name in junction_tables:
                continue
            for relation in forward[table_name]:
                referencing = by_target.setdefault(relation.referenced_table, {})
                # The first forward relation wins
                referencing.setdefault(table_name, relation)

        inverse = {}
        for target in sorted(by_target):
            relations = []
            for referencing_table, relation in sorted(by_target[target].items()):
                name = inverse_relation_name(referencing_table)
                relations.append(InverseRelation(
                    table=target,
                    referencing_table=referencing_table,
                    column=relation.column,
                    forward_name=relation.name,
                    name=name,
                    alternate_name=inverse_alternate_name(name, relation.column),
                ))
            inverse[target] = tuple(relations)
        return inverse

    def _analyze_many_to_many(self, junctions: Sequence[Table]) -> List[ManyToManyRelation]:
        """One many-to-many relation per sorted table pair."""
        relations: Dict[Tuple[str, str], ManyToManyRelation] = {}

        for junction in junctions:
            first, second = sorted(junction.foreign_keys, key=lambda fk: fk.referenced_table)
            relation = self._create_many_to_many(junction, first, second)

            if relation.key in relations:
                logger.debug(
                    f"Junction '{junction.name}' duplicates "
                    f"'{relations[relation.key].junction_table}' for {relation.key}; ignored"
                )
                continue
            relations[relation.key] = relation

        return [relations[key] for key in sorted(relations)]

    @staticmethod
    def _create_many_to_many(junction: Table, left: ForeignKey, right: ForeignKey) -> ManyToManyRelation:
        return ManyToManyRelation(
            left_table=left.referenced_table,
            right_table=right.referenced_table,
            junction_table=junction.name,
            left_column=left.column,
            right_column=right.column,
            left_name=many_to_many_name(right.referenced_table),
            right_name=many_to_many_name(left.referenced_table),
        )
