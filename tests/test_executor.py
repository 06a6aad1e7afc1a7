"""Tests for the send protocol of compiled root selections."""

import asyncio
import json
from typing import List, Optional

import pytest
from pydantic import Field

from gql_sdkgen.core.errors import RequestError, TransportError
from gql_sdkgen.core.executor import (
    GraphResult,
    execute_selection,
    mutation_keyword,
    request_body,
)
from gql_sdkgen.core.graph_models import GraphModel
from gql_sdkgen.core.selection import CompiledSelection

URL = "https://api.example.com/graphql"


class Tweet(GraphModel):
    body: Optional[str] = Field(default=None, alias="body")
    likes: int = Field(default=0, alias="likeCount")


class Query(GraphModel):
    search: Optional[List[Optional[Tweet]]] = Field(default=None, alias="search")


class CannedTransport:
    """Returns one canned body and records what was sent."""

    def __init__(self, body: str):
        self.body = body
        self.sent = []

    async def post(self, url, body, headers):
        self.sent.append((url, body, dict(headers)))
        return self.body


def send(selection, body, **kwargs):
    transport = CannedTransport(body)
    result = asyncio.run(execute_selection(selection, Query, URL, transport=transport, **kwargs))
    return result, transport


@pytest.fixture
def selection():
    return CompiledSelection('{ __typename search ( text : "Trump" ) { __typename body } }')


class TestRequestBody:
    """Tests for the request encoding."""

    def test_query_body(self, selection):
        body = json.loads(request_body(selection))
        assert body == {"query": selection.wire_text}

    def test_mutation_prefix(self, selection):
        body = json.loads(request_body(selection, mutation_keyword("Mutation")))
        assert body["query"] == " mutation Mutation " + selection.wire_text


class TestExecuteSelection:
    """Tests for execute_selection."""

    def test_round_trip(self, selection):
        data = {
            "__typename": "Query",
            "search": [
                {"__typename": "Tweet", "body": "hello", "likeCount": 3},
                None,
            ],
        }
        result, transport = send(selection, json.dumps({"data": data}))

        assert isinstance(result, GraphResult)
        assert not result.has_errors
        assert result.data.typename == "Query"
        assert result.data.search[0].body == "hello"
        assert result.data.search[0].likes == 3
        assert result.data.search[1] is None
        assert result.data.model_dump(by_alias=True, exclude_unset=True) == data

    def test_sends_wire_text(self, selection):
        _, transport = send(selection, '{"data": {}}', headers={"Authorization": "bearer x"})

        url, body, headers = transport.sent[0]
        assert url == URL
        assert json.loads(body) == {"query": selection.wire_text}
        assert headers == {"Authorization": "bearer x"}

    def test_mutation_operation(self, selection):
        _, transport = send(selection, '{"data": {}}', operation=mutation_keyword("Mutation"))

        query = json.loads(transport.sent[0][1])["query"]
        assert query.startswith(" mutation Mutation { __typename")

    def test_errors_without_data(self, selection):
        with pytest.raises(RequestError) as excinfo:
            send(selection, '{"errors": [{"message": "bad field"}]}')

        assert "bad field" in excinfo.value.error_messages

    def test_errors_with_data_are_not_fatal(self, selection):
        body = json.dumps({
            "data": {"search": None},
            "errors": [{"message": "search is slow"}],
        })
        result, _ = send(selection, body)

        assert result.has_errors
        assert result.errors == ["search is slow"]
        assert result.data.search is None

    def test_unparsable_body(self, selection):
        with pytest.raises(RequestError, match="Failed to parse response"):
            send(selection, "<html>502 Bad Gateway</html>")

    def test_undecodable_data(self, selection):
        body = json.dumps({"data": {"search": [{"likeCount": "many"}]}})
        with pytest.raises(RequestError, match="Failed to decode response data"):
            send(selection, body)

    def test_transport_failure(self, selection):
        class DownTransport:
            async def post(self, url, body, headers):
                raise TransportError("connection refused", url=url)

        with pytest.raises(RequestError, match="connection refused"):
            asyncio.run(execute_selection(selection, Query, URL, transport=DownTransport()))
