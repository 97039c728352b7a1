import enum
from unittest import TestCase

import pytest
import sqlalchemy as sa
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from entity_generator.runtime import (
    BigIntTransformer,
    BooleanTransformer,
    DataSource,
    NotConnectedError,
    enum_values,
    to_driver_url,
)


class LocalBase(DeclarativeBase):
    pass


class Level(str, enum.Enum):
    Low = "low"
    High = "HIGH"


class Sample(LocalBase):
    __tablename__ = "sample"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True)
    flag: Mapped[bool] = mapped_column(BooleanTransformer())
    big: Mapped[str] = mapped_column(BigIntTransformer())
    level: Mapped[Level] = mapped_column(sa.Enum(Level, values_callable=enum_values))


class TestTransformers(TestCase):

    def test_boolean_transformer(self):
        transformer = BooleanTransformer()
        assert transformer.process_bind_param(True, None) == 1
        assert transformer.process_bind_param(False, None) == 0
        assert transformer.process_bind_param(None, None) is None
        assert transformer.process_result_value(1, None) is True
        assert transformer.process_result_value("0", None) is False
        assert transformer.process_result_value(None, None) is None

    def test_bigint_transformer(self):
        transformer = BigIntTransformer()
        assert transformer.process_bind_param("9007199254740993", None) == 9007199254740993
        assert transformer.process_bind_param(42, None) == 42
        assert transformer.process_result_value(9007199254740993, None) == "9007199254740993"
        assert transformer.process_result_value(None, None) is None

    def test_enum_values(self):
        assert enum_values(Level) == ["low", "HIGH"]


class TestDataSource(TestCase):

    def test_session_requires_connect(self):
        source = DataSource("sqlite://", [Sample])
        assert not source.is_connected
        with pytest.raises(NotConnectedError):
            source.session()

    def test_connect_without_url(self):
        with pytest.raises(NotConnectedError) as exc_info:
            DataSource(None).connect()
        assert exc_info.value.error_code == "NOT_CONNECTED"

    def test_round_trip_through_transforms(self):
        with DataSource("sqlite://", [Sample]) as source:
            assert source.is_connected
            LocalBase.metadata.create_all(source.engine)

            with source.session() as session:
                session.add(Sample(id=1, flag=True, big="9007199254740993", level=Level.High))
                session.commit()

            with source.session() as session:
                sample = session.get(Sample, 1)
                assert sample.flag is True
                assert sample.big == "9007199254740993"
                assert sample.level is Level.High

            with source.engine.connect() as conn:
                stored = conn.execute(sa.text("SELECT flag, level FROM sample")).one()
            assert tuple(stored) == (1, "HIGH")

        assert not source.is_connected

    def test_to_driver_url(self):
        assert to_driver_url("mysql://root:pw@localhost:3306/shop") == "mysql+pymysql://root:pw@localhost:3306/shop"
        assert to_driver_url("sqlite://") == "sqlite://"
