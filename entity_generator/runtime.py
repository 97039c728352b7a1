"""
Runtime support imported by generated entity modules.

Generated code subclasses ``Base``, wraps special columns in the value
transforms below, and builds a ``DataSource`` in its entry module. Nothing
here connects to a database at import time.
"""

import logging
from enum import Enum
from typing import Any, List, Optional, Sequence, Type

from sqlalchemy import BigInteger, SmallInteger, create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.types import TypeDecorator

from .constants import SupportedDatabases
from .exceptions import EntityGeneratorError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base shared by every generated entity."""


class BooleanTransformer(TypeDecorator):
    """Stores booleans as ``0``/``1`` in a ``tinyint`` column."""

    impl = SmallInteger
    cache_ok = True

    def process_bind_param(self, value: Optional[bool], dialect) -> Optional[int]:
        if value is None:
            return None
        return 1 if value else 0

    def process_result_value(self, value: Optional[int], dialect) -> Optional[bool]:
        if value is None:
            return None
        return bool(int(value))


class BigIntTransformer(TypeDecorator):
    """
    Carries 64-bit integers as strings on the Python side.

    Bound values may be ``int`` or ``str``; loaded values are always ``str``.
    """

    impl = BigInteger
    cache_ok = True

    def process_bind_param(self, value: Optional[Any], dialect) -> Optional[int]:
        if value is None:
            return None
        return int(value)

    def process_result_value(self, value: Optional[Any], dialect) -> Optional[str]:
        if value is None:
            return None
        return str(value)


def enum_values(enum_cls: Type[Enum]) -> List[str]:
    """Persisted values for ``sqlalchemy.Enum(..., values_callable=enum_values)``."""
    return [member.value for member in enum_cls]


class NotConnectedError(EntityGeneratorError):
    """Raised when a session is requested before ``DataSource.connect()``."""

    def __init__(self, message: str = "Data source is not connected", **kwargs):
        super().__init__(
            message,
            context=kwargs.get('context', {}),
            suggestions=kwargs.get('suggestions') or ["Call data_source.connect() first"],
            error_code="NOT_CONNECTED"
        )


def to_driver_url(database_url: str) -> str:
    """Rewrite ``mysql://`` URLs to the driver SQLAlchemy should use."""
    url = make_url(database_url)
    driver = SupportedDatabases.DRIVERS.get(url.drivername)
    if driver:
        url = url.set(drivername=driver)
    return url.render_as_string(hide_password=False)


class DataSource:
    """
    Explicit handle on the database the generated entities map to.

    Construction only records the URL and the entity classes; ``connect()``
    builds the engine and session factory.
    """

    def __init__(self, database_url: Optional[str], entities: Sequence[type] = (), **engine_options: Any):
        self.database_url = database_url
        self.entities = list(entities)
        self.engine_options = engine_options
        self.engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def is_connected(self) -> bool:
        return self.engine is not None

    def connect(self) -> "DataSource":
        if self.is_connected:
            return self
        if not self.database_url:
            raise NotConnectedError(
                "No database URL configured for the data source",
                suggestions=["Set DATABASE_URL in the environment or in a .env file"],
            )
        self.engine = create_engine(to_driver_url(self.database_url), **self.engine_options)
        self._session_factory = sessionmaker(bind=self.engine)
        logger.debug(f"Data source connected with {len(self.entities)} entities")
        return self

    def session(self) -> Session:
        """New ORM session; requires ``connect()``."""
        if self._session_factory is None:
            raise NotConnectedError()
        return self._session_factory()

    def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self._session_factory = None

    def __enter__(self) -> "DataSource":
        return self.connect()

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
