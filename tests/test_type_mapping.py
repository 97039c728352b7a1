from unittest import TestCase

import pytest

from entity_generator.constants import LogicalTypes, Transformers
from entity_generator.domain.naming import generate_enum_members
from entity_generator.domain.type_mapping import UNTYPED, map_column_type, parse_enum_values


class TestMapColumnType(TestCase):

    def test_integer_family(self):
        mapping = map_column_type("int(10) unsigned")
        assert mapping.logical_type == LogicalTypes.INT
        assert mapping.column_type == "Integer"
        assert mapping.storage_kind == "int"
        assert mapping.length is None
        assert mapping.transform is None

    def test_tinyint_is_boolean_with_transform(self):
        mapping = map_column_type("tinyint(1)")
        assert mapping.logical_type == LogicalTypes.BOOL
        assert mapping.transform == Transformers.BOOLEAN

    def test_bigint_is_string_with_transform(self):
        mapping = map_column_type("bigint(20) unsigned")
        assert mapping.logical_type == LogicalTypes.STR
        assert mapping.column_type == "BigInteger"
        assert mapping.transform == Transformers.BIG_INT

    def test_varchar_keeps_declared_length(self):
        assert map_column_type("varchar(64)").length == 64

    def test_varchar_without_length_uses_default(self):
        assert map_column_type("varchar").length == 255

    def test_char_default_length(self):
        assert map_column_type("char").length == 1

    def test_text_has_no_length(self):
        mapping = map_column_type("longtext")
        assert mapping.logical_type == LogicalTypes.STR
        assert mapping.column_type == "Text"
        assert mapping.length is None

    def test_decimal_precision_and_scale(self):
        mapping = map_column_type("decimal(10,2)")
        assert mapping.logical_type == LogicalTypes.DECIMAL
        assert mapping.precision == 10
        assert mapping.scale == 2
        assert mapping.length is None

    def test_temporal_types(self):
        assert map_column_type("datetime").logical_type == LogicalTypes.DATETIME
        assert map_column_type("timestamp").logical_type == LogicalTypes.DATETIME
        assert map_column_type("date").logical_type == LogicalTypes.DATE
        assert map_column_type("time").logical_type == LogicalTypes.TIME

    def test_binary_and_json(self):
        assert map_column_type("varbinary(16)").logical_type == LogicalTypes.BYTES
        assert map_column_type("json").column_type == "JSON"

    def test_case_insensitive(self):
        assert map_column_type("VARCHAR(10)").length == 10

    def test_enum_values_in_declaration_order(self):
        mapping = map_column_type("enum('draft','published','2')")
        assert mapping.is_enum
        assert mapping.storage_kind == "enum"
        assert mapping.logical_type == LogicalTypes.STR
        assert mapping.enum_values == ("draft", "published", "2")

    def test_enum_members_are_valid_identifiers(self):
        mapping = map_column_type("enum('a','b','2')")
        members = generate_enum_members(mapping.enum_values)
        assert [m.name for m in members] == ["A", "B", "Val2"]
        assert [m.value for m in members] == ["a", "b", "2"]
        assert all(m.name.isidentifier() for m in members)

    def test_enum_with_quoted_quote(self):
        assert map_column_type("enum('it''s','x')").enum_values == ("it's", "x")


@pytest.mark.parametrize("physical_type", ["geometry", "point", "", "(10)", "set('a','b')", "enum()"])
def test_unknown_types_fall_back_to_untyped(physical_type):
    mapping = map_column_type(physical_type)
    assert mapping == UNTYPED
    assert mapping.is_untyped
    assert mapping.column_type == "Text"


def test_non_string_type_is_untyped():
    assert map_column_type(None) is UNTYPED


def test_parse_enum_values_ignores_separators():
    assert parse_enum_values("'a', 'b c' ,'d'") == ["a", "b c", "d"]
