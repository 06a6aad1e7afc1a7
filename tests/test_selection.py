"""Tests for selection builders and argument rendering."""

from enum import Enum

import pytest

from gql_sdkgen.core.errors import SelectionConsumedError
from gql_sdkgen.core.ir import TypeKind
from gql_sdkgen.core.selection import (
    CompiledSelection,
    SelectionBuilder,
    render_argument,
    render_arguments,
    render_value,
)


class Color(str, Enum):
    RED = "RED"
    DARK_BLUE = "DARK_BLUE"


class TweetSelection(CompiledSelection):
    pass


class TweetSelectionBuilder(SelectionBuilder):
    selection_type = TweetSelection

    def fetch_body(self):
        return self._select("body")

    def fetch_replies(self, selection, first=None):
        return self._select("replies", [("first", first, TypeKind.INT)], selection)


class QuerySelectionBuilder(SelectionBuilder):

    def fetch_search(self, selection, text, first=None):
        return self._select(
            "search",
            [("text", text, TypeKind.STRING), ("first", first, TypeKind.INT)],
            selection,
        )

    def fetch_node_as_tweet(self, selection, id):
        return self._select("node", [("id", id, TypeKind.ID)], selection, "Tweet")


class TestSelectionBuilder:
    """Tests for the wire text accumulated by builders."""

    def test_empty_selection(self):
        assert TweetSelectionBuilder().build().wire_text == "{ __typename }"

    def test_build_returns_typed_selection(self):
        selection = TweetSelectionBuilder().fetch_body().build()
        assert isinstance(selection, TweetSelection)
        assert str(selection) == "{ __typename body }"

    def test_search_argument(self):
        tweets = TweetSelectionBuilder().fetch_body().build()
        wire = QuerySelectionBuilder().fetch_search(tweets, text="Trump").build().wire_text

        assert 'search ( text : "Trump" )' in wire
        assert wire == '{ __typename search ( text : "Trump" ) { __typename body } }'

    def test_arguments_in_schema_order(self):
        tweets = TweetSelectionBuilder().build()
        wire = QuerySelectionBuilder().fetch_search(tweets, first=5, text="x").build().wire_text

        assert 'search ( text : "x" first : 5 )' in wire

    def test_nested_selection_with_arguments(self):
        replies = TweetSelectionBuilder().fetch_body().build()
        wire = TweetSelectionBuilder().fetch_replies(replies, first=10).build().wire_text

        assert wire == "{ __typename replies ( first : 10 ) { __typename body } }"

    def test_inline_fragment(self):
        tweets = TweetSelectionBuilder().fetch_body().build()
        wire = QuerySelectionBuilder().fetch_node_as_tweet(tweets, id="42").build().wire_text

        assert wire == (
            '{ __typename node ( id : "42" ) { ... on Tweet { __typename body } } }'
        )

    def test_repeated_field_appended_twice(self):
        wire = TweetSelectionBuilder().fetch_body().fetch_body().build().wire_text
        assert wire == "{ __typename body body }"

    def test_build_consumes_builder(self):
        builder = TweetSelectionBuilder().fetch_body()
        builder.build()

        with pytest.raises(SelectionConsumedError):
            builder.fetch_body()
        with pytest.raises(SelectionConsumedError):
            builder.build()

    def test_consumed_error_is_runtime_error(self):
        builder = TweetSelectionBuilder()
        builder.build()
        with pytest.raises(RuntimeError):
            _ = builder.wire_text

    def test_selection_is_immutable(self):
        selection = TweetSelectionBuilder().build()
        with pytest.raises(AttributeError):
            selection.wire_text = "{ }"


class TestRenderArgument:
    """Tests for literal rendering."""

    def test_string_quoted_and_escaped(self):
        assert render_argument('say "hi"\n', TypeKind.STRING) == '"say \\"hi\\"\\n"'

    def test_id_always_quoted(self):
        assert render_argument(42, TypeKind.ID) == '"42"'

    def test_enum_bare(self):
        assert render_argument(Color.DARK_BLUE, TypeKind.ENUM) == "DARK_BLUE"
        assert render_argument("RED", TypeKind.ENUM) == "RED"

    def test_booleans(self):
        assert render_argument(True, TypeKind.BOOLEAN) == "true"
        assert render_argument(False, TypeKind.BOOLEAN) == "false"

    def test_numbers(self):
        assert render_argument(3, TypeKind.INT) == "3"
        assert render_argument(1.5, TypeKind.FLOAT) == "1.5"

    def test_list_applies_kind_to_elements(self):
        assert render_argument(["a", "b"], TypeKind.STRING) == '[ "a" "b" ]'
        assert render_argument([Color.RED], TypeKind.ENUM) == "[ RED ]"
        assert render_argument([], TypeKind.INT) == "[ ]"

    def test_none_is_null(self):
        assert render_argument(None, TypeKind.STRING) == "null"

    def test_dict_value(self):
        assert render_value({"a": 1, "b": "x"}) == '{ a : 1 b : "x" }'


class TestRenderArguments:
    """Tests for argument lists."""

    def test_none_values_omitted(self):
        rendered = render_arguments([("a", 1, TypeKind.INT), ("b", None, TypeKind.STRING)])
        assert rendered == " ( a : 1 )"

    def test_all_omitted(self):
        assert render_arguments([("a", None, TypeKind.INT)]) == ""
