# File: tests/conftest.py
# Contains pytest fixtures shared by the unit and integration tests.

from datetime import datetime

import pytest

from catalog_fixtures import InMemoryCatalog, author_book_tables, blog_tables, library_tables
from entity_generator.domain.models import GenerationContext


FIXED_TIMESTAMP = datetime(2022, 1, 1, 12, 0, 0)


@pytest.fixture
def generation_context() -> GenerationContext:
    """Context with a fixed timestamp so rendered output is comparable."""
    return GenerationContext(generated_at=FIXED_TIMESTAMP)


@pytest.fixture
def author_book_catalog() -> InMemoryCatalog:
    return InMemoryCatalog(author_book_tables())


@pytest.fixture
def blog_catalog() -> InMemoryCatalog:
    return InMemoryCatalog(blog_tables())


@pytest.fixture
def library_catalog() -> InMemoryCatalog:
    return InMemoryCatalog(library_tables())
