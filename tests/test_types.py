"""Tests for type normalization."""

import logging

import pytest

from drawio_sql.parsers.types import DEFAULT_TYPE, TYPE_SYNONYMS, map_data_type


class TestMapDataType:
    """Tests for map_data_type."""

    @pytest.mark.parametrize(
        "token,expected",
        [
            ("INT", "INTEGER"),
            ("int", "INTEGER"),
            ("INT8", "BIGINT"),
            ("bool", "BOOLEAN"),
            ("FLOAT", "DOUBLE PRECISION"),
            ("varchar", "VARCHAR(255)"),
            ("CHAR", "CHAR(1)"),
            ("BLOB", "BYTEA"),
            ("timestamp  with time zone", "TIMESTAMP WITH TIME ZONE"),
            ("ARRAY", "TEXT[]"),
        ],
    )
    def test_synonyms(self, token, expected):
        assert map_data_type(token) == expected

    @pytest.mark.parametrize(
        "token,expected",
        [
            ("VARCHAR(50)", "VARCHAR(50)"),
            ("character varying(20)", "VARCHAR(20)"),
            ("char(10)", "CHAR(10)"),
            ("CHARACTER(3)", "CHAR(3)"),
            ("NUMERIC(10,2)", "NUMERIC(10,2)"),
            ("decimal(12, 4)", "DECIMAL(12,4)"),
            ("NUMERIC(8)", "NUMERIC(8)"),
            ("TIME(3)", "TIME(3)"),
            ("timestamp(6)", "TIMESTAMP(6)"),
        ],
    )
    def test_parameterized(self, token, expected):
        assert map_data_type(token) == expected

    def test_array_of_known_type(self):
        assert map_data_type("int[]") == "INTEGER[]"

    def test_array_of_parameterized_type(self):
        assert map_data_type("VARCHAR(20)[]") == "VARCHAR(20)[]"

    def test_nested_array(self):
        assert map_data_type("INT[][]") == "INTEGER[][]"

    def test_empty_defaults_to_text(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert map_data_type("") == DEFAULT_TYPE
        assert "Empty type" in caplog.text

    def test_custom_identifier_passes_through(self):
        assert map_data_type("order_status") == "order_status"

    def test_malformed_defaults_to_text(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert map_data_type("VARCHAR(abc") == DEFAULT_TYPE
        assert "VARCHAR(abc" in caplog.text

    def test_identifier_starting_with_digit_is_not_custom(self):
        assert map_data_type("9lives") == DEFAULT_TYPE

    @pytest.mark.parametrize("token", ["", " ", "\x00\xff", "((", "[]", "💥", "a b c", None, 42])
    def test_total(self, token):
        result = map_data_type(token)
        assert isinstance(result, str)
        assert result

    def test_every_synonym_maps_to_itself_once_canonical(self):
        for canonical in set(TYPE_SYNONYMS.values()):
            assert map_data_type(canonical) == canonical
