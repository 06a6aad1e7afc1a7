"""Tests for introspection queries and response decoding."""

import json

import pytest

from gql_sdkgen.core.introspection import (
    UNKNOWN_TYPE_NAME,
    connection_names,
    decode_class_kind,
    decode_field_type,
    decode_fields,
    error_messages,
    parse_response,
    request_body,
    type_query,
)
from gql_sdkgen.core.ir import TypeKind

from conftest import list_of, named, non_null


@pytest.fixture
def references():
    return []


class TestTypeQuery:
    """Tests for the per-type query."""

    def test_name_is_quoted(self):
        assert '__type(name: "User")' in type_query("User")

    def test_fragment_unwraps_four_levels(self):
        query = type_query("User")
        assert "fragment typeInfo on __Type" in query
        fragment = query.split("fragment typeInfo on __Type")[1]
        assert fragment.count("ofType") == 4


class TestParseResponse:
    """Tests for parse_response and error_messages."""

    def test_object(self):
        assert parse_response('{"data": {}}') == {"data": {}}

    def test_non_object_rejected(self):
        with pytest.raises(ValueError):
            parse_response("[1, 2]")

    def test_invalid_json_rejected(self):
        with pytest.raises(ValueError):
            parse_response("<html>")

    def test_error_messages_skip_null(self):
        response = {"errors": [{"message": "bad field"}, {"message": None}, {"path": ["x"]}]}
        assert error_messages(response) == ["bad field"]

    def test_no_errors(self):
        assert error_messages({"data": {}}) == []


class TestDecodeFieldType:
    """Tests for decoding wrapped type references."""

    def test_named_scalar(self, references):
        field_type = decode_field_type(named("Int", "SCALAR"), references.append)
        assert field_type.kind is TypeKind.INT
        assert field_type.nullable
        assert references == []

    def test_non_null(self, references):
        field_type = decode_field_type(non_null(named("String", "SCALAR")), references.append)
        assert field_type.kind is TypeKind.STRING
        assert field_type.nullable is False

    def test_list_of_non_null_objects(self, references):
        field_type = decode_field_type(
            non_null(list_of(non_null(named("User")))), references.append
        )
        assert field_type.kind is TypeKind.LIST
        assert field_type.nullable is False
        assert field_type.sub_type.name == "User"
        assert field_type.sub_type.kind is TypeKind.OBJECT
        assert field_type.sub_type.nullable is False
        assert field_type.leaf.name == "User"
        assert references == ["User"]

    def test_custom_scalar_becomes_string(self, references):
        field_type = decode_field_type(named("DateTime", "SCALAR"), references.append)
        assert field_type.kind is TypeKind.STRING
        assert field_type.name == "DateTime"
        assert references == []

    @pytest.mark.parametrize("kind", ["OBJECT", "INTERFACE", "UNION", "ENUM", "INPUT_OBJECT"])
    def test_named_kinds_reported(self, kind, references):
        field_type = decode_field_type(named("Thing", kind), references.append)
        assert field_type.kind is TypeKind[kind]
        assert references == ["Thing"]

    def test_too_deep_is_unknown(self, references):
        # four list wrappers exhaust the ofType levels of the fragment
        deep = list_of(list_of(list_of(list_of(None))))
        field_type = decode_field_type(deep, references.append)
        leaf = field_type.leaf
        assert leaf.name == UNKNOWN_TYPE_NAME
        assert leaf.kind is TypeKind.STRING


class TestDecodeFields:
    """Tests for decode_fields and friends."""

    def test_fields_with_args(self, references):
        type_json = {"fields": [{
            "name": "friends",
            "description": "People",
            "args": [{
                "name": "first",
                "description": None,
                "defaultValue": "10",
                "type": named("Int", "SCALAR"),
            }],
            "type": list_of(named("User")),
        }]}
        fields = decode_fields(type_json, "fields", references.append)

        assert len(fields) == 1
        assert fields[0].description == "People"
        assert fields[0].field_args[0].name == "first"
        assert fields[0].field_args[0].default_value == "10"
        assert references == ["User"]

    def test_missing_key(self, references):
        assert decode_fields({"fields": None}, "fields", references.append) == []

    def test_connection_names(self):
        type_json = {"interfaces": [{"name": "Node"}, {"name": None}]}
        assert connection_names(type_json, "interfaces") == ["Node"]
        assert connection_names(type_json, "possibleTypes") == []

    def test_unknown_class_kind_is_object(self):
        assert decode_class_kind("SCALAR") is TypeKind.OBJECT

    def test_request_body_escapes_quotes(self):
        body = request_body(type_query('We"ird'))
        assert json.loads(body)["query"] == type_query('We"ird')
        assert '__type(name: "We\\"ird")' in type_query('We"ird')
