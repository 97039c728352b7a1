"""
Entity module emission.

Every statement of a generated module is built as an AST node and unparsed;
the Jinja2 templates only lay the statements out in a fixed order.
"""

import ast
import decimal
import logging
import re
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from jinja2 import Environment

from ..codegen import render_template, setup_jinja_env
from ..constants import (
    CatalogFlags,
    DefaultConfig,
    GenerationOptions,
    LogicalTypes,
)
from ..domain.models import EntityColumn, EntityDefinition, EntityRelation
from .base import (
    create_annotated_assign,
    create_assign,
    create_attribute,
    create_attribute_call,
    create_boolean_constant,
    create_call,
    create_dict,
    create_dotted_name,
    create_import,
    create_keyword,
    create_list_of_names,
    create_list_of_strings,
    create_name,
    create_number_constant,
    create_string_constant,
    create_subscript,
    unparse,
)

logger = logging.getLogger(__name__)

SA = GenerationOptions.SQLALCHEMY_ALIAS
STDLIB_MODULES = {"datetime", "decimal", "enum", "os", "typing"}
TRUE_LITERALS = {"1", "b'1'", "true"}

_FUNCTION_DEFAULT_RE = re.compile(r"^\w+\(.*\)$", re.DOTALL)


# --- Columns ---

def is_expression_default(entity_column: EntityColumn) -> bool:
    """Whether the catalog default is an SQL expression rather than a literal."""
    raw = (entity_column.column.default or "").strip().upper()
    if not raw:
        return False
    if "DEFAULT_GENERATED" in entity_column.column.extra.upper():
        return True
    return (
        raw in CatalogFlags.SQL_EXPRESSION_DEFAULTS
        or raw.startswith("CURRENT_TIMESTAMP")
        or bool(_FUNCTION_DEFAULT_RE.match(raw))
    )


def _server_default(raw: str, expression: bool = False) -> ast.keyword:
    if expression:
        value = create_attribute_call(SA, "text", args=[create_string_constant(raw)])
    else:
        value = create_string_constant(raw)
    return create_keyword("server_default", value)


def create_default_keywords(entity_column: EntityColumn) -> List[ast.keyword]:
    """``default=``/``server_default=`` for a column, if the catalog has one."""
    column = entity_column.column
    raw = column.default
    if raw is None or column.is_auto_increment:
        return []

    if is_expression_default(entity_column):
        return [_server_default(raw, expression=True)]

    if entity_column.enum is not None:
        member = next((m for m in entity_column.enum.members if m.value == raw), None)
        if member is None:
            return [_server_default(raw)]
        return [create_keyword("default", create_attribute(entity_column.enum.name, member.name))]

    logical = entity_column.mapping.logical_type
    if logical == LogicalTypes.BOOL:
        return [create_keyword("default", create_boolean_constant(raw.strip().lower() in TRUE_LITERALS))]

    if logical in LogicalTypes.NUMERIC:
        try:
            if logical == LogicalTypes.INT:
                return [create_keyword("default", create_number_constant(int(raw)))]
            if logical == LogicalTypes.FLOAT:
                return [create_keyword("default", create_number_constant(float(raw)))]
            decimal.Decimal(raw)
        except (ValueError, decimal.InvalidOperation):
            return [_server_default(raw)]
        value = ast.Call(
            func=create_dotted_name(LogicalTypes.DECIMAL),
            args=[create_string_constant(raw)],
            keywords=[],
        )
        return [create_keyword("default", value)]

    if logical == LogicalTypes.STR:
        return [create_keyword("default", create_string_constant(raw))]

    # Temporal, JSON, binary and untyped literals are left to the database
    return [_server_default(raw)]


def create_column_type(entity_column: EntityColumn) -> ast.expr:
    """SQLAlchemy type expression passed to ``mapped_column``."""
    mapping = entity_column.mapping
    if mapping.transform:
        return create_call(mapping.transform)
    if entity_column.enum is not None:
        return create_attribute_call(
            SA, "Enum",
            args=[create_name(entity_column.enum.name)],
            keywords=[create_keyword("values_callable", create_name(GenerationOptions.ENUM_VALUES_CALLABLE))],
        )
    if mapping.length is not None:
        return create_attribute_call(SA, mapping.column_type, args=[create_number_constant(mapping.length)])
    if mapping.precision is not None:
        args = [create_number_constant(mapping.precision)]
        if mapping.scale is not None:
            args.append(create_number_constant(mapping.scale))
        return create_attribute_call(SA, mapping.column_type, args=args)
    return create_attribute(SA, mapping.column_type)


def create_column_annotation(entity_column: EntityColumn) -> ast.Subscript:
    mapping = entity_column.mapping
    if entity_column.enum is not None:
        value_type = create_name(entity_column.enum.name)
    elif mapping.is_untyped or mapping.logical_type == LogicalTypes.JSON:
        value_type = create_name("Any")
    else:
        value_type = create_dotted_name(mapping.logical_type)

    column = entity_column.column
    if column.nullable and not column.is_primary:
        value_type = create_subscript("Optional", value_type)
    return create_subscript("Mapped", value_type)


def create_column_statement(entity_column: EntityColumn) -> ast.AnnAssign:
    """
    ``attribute: Mapped[...] = mapped_column(...)`` for one column.

    The database column name is passed explicitly when it differs from the
    attribute name.
    """
    column = entity_column.column
    args: List[ast.expr] = []
    if entity_column.attribute != column.name:
        args.append(create_string_constant(column.name))
    args.append(create_column_type(entity_column))

    fk = entity_column.foreign_key
    if fk is not None:
        target = f"{fk.referenced_table}.{fk.referenced_column}"
        args.append(create_attribute_call(SA, "ForeignKey", args=[create_string_constant(target)]))

    keywords = []
    if column.is_primary:
        keywords.append(create_keyword("primary_key", create_boolean_constant(True)))
        keywords.append(create_keyword("autoincrement", create_boolean_constant(column.is_auto_increment)))
    elif column.nullable:
        keywords.append(create_keyword("nullable", create_boolean_constant(True)))

    keywords.extend(create_default_keywords(entity_column))

    if column.comment:
        keywords.append(create_keyword("comment", create_string_constant(column.comment)))

    value = create_call("mapped_column", args=args, keywords=keywords)
    return create_annotated_assign(entity_column.attribute, create_column_annotation(entity_column), value)


def create_mapper_args(entity: EntityDefinition) -> Optional[ast.Assign]:
    """Mapper identity for tables without a primary key: all of their columns."""
    if entity.table.has_primary_key or not entity.columns:
        return None
    primary_key = create_list_of_names([col.attribute for col in entity.columns])
    return create_assign("__mapper_args__", create_dict([("primary_key", primary_key)]))


# --- Relations ---

def create_relation_annotation(relation: EntityRelation) -> ast.Subscript:
    target = create_string_constant(relation.target_class)
    if relation.uselist:
        value_type = create_subscript("List", target)
    elif relation.nullable:
        value_type = create_subscript("Optional", target)
    else:
        value_type = target
    return create_subscript("Mapped", value_type)


def create_relation_statement(relation: EntityRelation) -> ast.AnnAssign:
    """``name: Mapped[...] = relationship(...)`` for one relation."""
    keywords = []
    if relation.secondary:
        keywords.append(create_keyword("secondary", create_string_constant(relation.secondary)))
    if relation.foreign_keys:
        keywords.append(create_keyword("foreign_keys", create_string_constant(relation.foreign_keys)))
    if relation.remote_side:
        keywords.append(create_keyword("remote_side", create_string_constant(relation.remote_side)))
    if relation.back_populates:
        keywords.append(create_keyword("back_populates", create_string_constant(relation.back_populates)))
    if relation.viewonly:
        keywords.append(create_keyword("viewonly", create_boolean_constant(True)))

    value = create_call("relationship", args=[create_string_constant(relation.target_class)], keywords=keywords)
    return create_annotated_assign(relation.name, create_relation_annotation(relation), value)


# --- Imports ---

def create_import_line(module: str, names: Sequence[str] = ()) -> str:
    alias = GenerationOptions.IMPORT_ALIASES.get(module)
    if alias and not names:
        return f"import {module} as {alias}"
    return unparse(create_import(module, list(names) or None))


def group_import_lines(imports: Sequence[Sequence[Any]]) -> List[List[str]]:
    """Standard library, third party and runtime imports, in that order."""
    groups: List[List[str]] = [[], [], []]
    for module, names in imports:
        if module in STDLIB_MODULES:
            index = 0
        elif module.startswith(GenerationOptions.RUNTIME_MODULE.split(".")[0]):
            index = 2
        else:
            index = 1
        groups[index].append(create_import_line(module, names))
    return [group for group in groups if group]


def create_header_lines(generated_at: datetime) -> List[str]:
    return [
        GenerationOptions.HEADER_TITLE,
        f"Generated on: {generated_at.strftime(GenerationOptions.TIMESTAMP_FORMAT)}",
        "Do not edit by hand; changes are overwritten on the next run.",
    ]


# --- Template contexts ---

def entity_template_context(entity: EntityDefinition, generated_at: datetime) -> Dict[str, Any]:
    """Everything ``entity.py.j2`` lays out for one entity."""
    columns = []
    for entity_column in entity.columns:
        comment = entity_column.column.comment or ""
        columns.append({
            "comment_lines": [line.strip() for line in comment.splitlines() if line.strip()],
            "statement": unparse(create_column_statement(entity_column)),
        })

    enums = [
        {
            "name": enum.name,
            "members": [
                {"name": member.name, "value": unparse(create_string_constant(member.value))}
                for member in enum.members
            ],
        }
        for enum in entity.enums
    ]

    relation_sections = [
        [unparse(create_relation_statement(rel)) for rel in section]
        for section in (entity.forward_relations, entity.inverse_relations, entity.many_to_many_relations)
        if section
    ]

    type_checking_imports = [
        unparse(create_import(module, [class_name], level=1))
        for module, class_name in entity.related_entities
    ]

    mapper_args = create_mapper_args(entity)
    return {
        "header_lines": create_header_lines(generated_at),
        "import_groups": group_import_lines(entity.imports),
        "type_checking_imports": type_checking_imports,
        "enums": enums,
        "class_name": entity.class_name,
        "base_class": GenerationOptions.DECLARATIVE_BASE,
        "table_name": unparse(create_string_constant(entity.table.name)),
        "columns": columns,
        "mapper_args": unparse(mapper_args) if mapper_args is not None else None,
        "relation_sections": relation_sections,
    }


def entry_template_context(entities: Sequence[EntityDefinition], generated_at: datetime) -> Dict[str, Any]:
    """Everything ``index.py.j2`` lays out for the aggregate entry module."""
    ordered = sorted(entities, key=lambda e: e.module_name)
    class_names = [entity.class_name for entity in ordered]

    data_source = create_call(
        GenerationOptions.DATA_SOURCE,
        args=[
            ast.Call(
                func=create_dotted_name("os.environ.get"),
                args=[create_string_constant(DefaultConfig.ENV_DATABASE_KEY)],
                keywords=[],
            ),
            create_name("entities"),
        ],
    )
    exported = sorted(class_names) + ["data_source", "entities"]

    return {
        "header_lines": create_header_lines(generated_at),
        "import_groups": group_import_lines([
            ("os", ()),
            ("dotenv", ("load_dotenv",)),
            (GenerationOptions.RUNTIME_MODULE, (GenerationOptions.DATA_SOURCE,)),
        ]),
        "entity_imports": [
            unparse(create_import(entity.module_name, [entity.class_name], level=1))
            for entity in ordered
        ],
        "entities_assign": unparse(create_assign("entities", create_list_of_names(class_names))),
        "data_source_assign": unparse(create_assign("data_source", data_source)),
        "all_assign": unparse(create_assign("__all__", create_list_of_strings(exported))),
    }


# --- Rendering ---

def render_entity(
    entity: EntityDefinition,
    generated_at: datetime,
    format_code: bool = True,
    env: Optional[Environment] = None
) -> str:
    """Source of the module describing one entity."""
    env = env or setup_jinja_env()
    return render_template(
        env,
        GenerationOptions.ENTITY_TEMPLATE,
        entity_template_context(entity, generated_at),
        output_name=f"{entity.module_name}.py",
        format_code=format_code,
    )


def render_entry_module(
    entities: Sequence[EntityDefinition],
    generated_at: datetime,
    format_code: bool = True,
    env: Optional[Environment] = None
) -> str:
    """Source of the package entry module importing every entity."""
    env = env or setup_jinja_env()
    return render_template(
        env,
        GenerationOptions.ENTRY_TEMPLATE,
        entry_template_context(entities, generated_at),
        output_name=f"{DefaultConfig.ENTRY_MODULE}.py",
        format_code=format_code,
    )
