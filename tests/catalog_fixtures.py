"""
In-memory catalogs and sample schemas shared by the test modules.
"""

from typing import Dict, List, Optional, Sequence

from entity_generator.domain.models import Column, ForeignKey, Table


def pk(name: str = "id", physical_type: str = "int(11)", auto_increment: bool = True) -> Column:
    return Column(
        name=name,
        physical_type=physical_type,
        nullable=False,
        is_primary=True,
        is_auto_increment=auto_increment,
        extra="auto_increment" if auto_increment else "",
    )


def col(name: str, physical_type: str = "varchar(255)", nullable: bool = False, **kwargs) -> Column:
    return Column(name=name, physical_type=physical_type, nullable=nullable, **kwargs)


def fk(table: str, column: str, referenced_table: str, referenced_column: str = "id") -> ForeignKey:
    return ForeignKey(
        table=table,
        column=column,
        referenced_table=referenced_table,
        referenced_column=referenced_column,
        constraint_name=f"fk_{table}_{column}",
    )


def table(name: str, columns: Sequence[Column], foreign_keys: Sequence[ForeignKey] = ()) -> Table:
    return Table(name=name, columns=tuple(columns), foreign_keys=tuple(foreign_keys))


class InMemoryCatalog:
    """Catalog source answering from a list of ``Table`` snapshots."""

    def __init__(self, tables: Sequence[Table], fail_on: Optional[str] = None):
        self.tables: Dict[str, Table] = {t.name: t for t in tables}
        self.fail_on = fail_on
        self.calls: List[str] = []

    def list_tables(self) -> List[str]:
        self.calls.append("list_tables")
        return sorted(self.tables)

    def describe_columns(self, table_name: str) -> List[Column]:
        self.calls.append(f"describe_columns:{table_name}")
        if table_name == self.fail_on:
            from entity_generator.exceptions import SchemaIntrospectionError
            raise SchemaIntrospectionError("Catalog query failed: boom", table=table_name)
        return list(self.tables[table_name].columns)

    def list_foreign_keys(self, table_name: str) -> List[ForeignKey]:
        self.calls.append(f"list_foreign_keys:{table_name}")
        return list(self.tables[table_name].foreign_keys)


# --- Sample schemas ---

def author_book_tables() -> List[Table]:
    """author(id PK, name varchar) and book(id PK, title varchar, author_id FK -> author.id)."""
    return [
        table("author", [pk(), col("name", "varchar(100)", comment="Display name")]),
        table(
            "book",
            [pk(), col("title", "varchar(200)"), col("author_id", "int(11)")],
            [fk("book", "author_id", "author")],
        ),
    ]


def blog_tables() -> List[Table]:
    """post and tag joined by the post_tag junction table."""
    return [
        table("post", [pk(), col("title")]),
        table("tag", [pk(), col("label", "varchar(50)")]),
        table(
            "post_tag",
            [pk("post_id", auto_increment=False), pk("tag_id", auto_increment=False)],
            [fk("post_tag", "post_id", "post"), fk("post_tag", "tag_id", "tag")],
        ),
    ]


def library_tables() -> List[Table]:
    """
    A schema touching every emission feature at once.

    Two foreign keys from book to author, a junction table, a self
    reference, an enum column, defaults of every kind and a table without
    primary key.
    """
    return [
        table("author", [
            pk(),
            col("name", "varchar(100)", comment="Display name"),
            col("active", "tinyint(1)", default="1"),
        ]),
        table(
            "book",
            [
                pk(),
                col("title", "varchar(200)"),
                col("status", "enum('draft','published','2')", default="draft"),
                col("price", "decimal(10,2)", nullable=True, default="9.99"),
                col("isbn", "bigint(20)", nullable=True),
                col("metadata", "json", nullable=True),
                col("created_at", "timestamp", default="CURRENT_TIMESTAMP", extra="DEFAULT_GENERATED"),
                col("author_id", "int(11)"),
                col("editor_id", "int(11)", nullable=True),
            ],
            [fk("book", "author_id", "author"), fk("book", "editor_id", "author")],
        ),
        table("tag", [pk(), col("label", "varchar(50)")]),
        table(
            "book_tag",
            [pk("book_id", auto_increment=False), pk("tag_id", auto_increment=False)],
            [fk("book_tag", "book_id", "book"), fk("book_tag", "tag_id", "tag")],
        ),
        table(
            "employee",
            [pk(), col("name"), col("manager_id", "int(11)", nullable=True)],
            [fk("employee", "manager_id", "employee")],
        ),
        table("audit_log", [
            col("event", "varchar(64)", nullable=True),
            col("logged_at", "datetime", nullable=True),
        ]),
    ]
