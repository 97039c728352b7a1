# File: tests/test_integration_mysql.py
# Runs the generator against a real MySQL server started with testcontainers.

import ast
from pathlib import Path
from typing import Any, Generator

import pytest
from sqlalchemy import create_engine, text

from entity_generator.constants import WarningCodes
from entity_generator.domain.models import GenerationContext
from entity_generator.exceptions import DatabaseConnectionError
from entity_generator.generator import generate_entities
from entity_generator.introspection_mysql import MySQLCatalogReader

pytestmark = pytest.mark.integration

TEST_SCHEMAS_DIR = Path(__file__).parent / "schemas"


@pytest.fixture(scope="module")
def mysql_url() -> Generator[str, Any, None]:
    """
    Starts a MySQL container, loads the library schema and yields a
    ``mysql://`` connection string for it.
    """
    MySqlContainer = pytest.importorskip("testcontainers.mysql").MySqlContainer

    try:
        container = MySqlContainer("mysql:8.0", username="testuser", password="testpassword", dbname="library")
        container.start()
    except Exception as e:
        pytest.skip(f"MySQL container unavailable: {e}")

    try:
        host = container.get_container_host_ip()
        port = container.get_exposed_port(3306)
        url = f"mysql://testuser:testpassword@{host}:{port}/library"

        engine = create_engine(f"mysql+pymysql://testuser:testpassword@{host}:{port}/library")
        schema = (TEST_SCHEMAS_DIR / "library.sql").read_text(encoding="utf-8")
        with engine.begin() as conn:
            for statement in schema.split(";"):
                if statement.strip():
                    conn.execute(text(statement))
        engine.dispose()

        yield url
    finally:
        container.stop()


def test_reads_catalog(mysql_url):
    with MySQLCatalogReader(mysql_url) as reader:
        tables = {table.name: table for table in reader.read_catalog()}

    assert sorted(tables) == ["audit_log", "author", "book", "book_tag", "tag"]

    book = tables["book"]
    assert [col.name for col in book.columns] == ["id", "title", "status", "price", "created_at", "author_id"]
    assert book.get_column("id").is_primary
    assert book.get_column("id").is_auto_increment
    assert book.get_column("status").physical_type == "enum('draft','published')"
    assert book.get_column("status").default == "draft"
    assert book.get_column("price").nullable
    assert book.get_column("created_at").default == "CURRENT_TIMESTAMP"
    assert [(fk.column, fk.referenced_table, fk.referenced_column) for fk in book.foreign_keys] == [
        ("author_id", "author", "id"),
    ]

    assert tables["author"].get_column("name").comment == "Display name"
    assert tables["author"].get_column("active").physical_type == "tinyint(1)"
    assert not tables["audit_log"].has_primary_key


def test_generates_entities(mysql_url, tmp_path):
    output_dir = tmp_path / "entities"
    context = GenerationContext()

    with MySQLCatalogReader(mysql_url) as reader:
        generate_entities(reader, str(output_dir), context=context)

    assert sorted(p.name for p in output_dir.iterdir()) == [
        "__init__.py", "audit_log.py", "author.py", "book.py", "book_tag.py", "tag.py",
    ]
    for path in output_dir.iterdir():
        ast.parse(path.read_text(encoding="utf-8"))

    book_code = (output_dir / "book.py").read_text(encoding="utf-8")
    assert "default=Status.Draft" in book_code
    assert 'server_default=sa.text("CURRENT_TIMESTAMP")' in book_code
    assert 'secondary="book_tag"' in book_code

    assert [w.code for w in context.warnings] == [WarningCodes.MISSING_PRIMARY_KEY]


def test_wrong_password(mysql_url):
    wrong = mysql_url.replace("testpassword", "nope")
    with pytest.raises(DatabaseConnectionError):
        with MySQLCatalogReader(wrong):
            pass
