"""Shared fixtures: a sample schema, canned root data and a fake transport."""

import asyncio
import json
import re

import pytest

from gql_sdkgen.core.crawler import SchemaCrawler
from gql_sdkgen.core.errors import TransportError
from gql_sdkgen.core.local_schema import LocalSchemaTransport

SCHEMA_SDL = """
schema {
  query: Query
  mutation: Mutation
}

type Query {
  user(id: ID!): User
  node(id: ID!): Node
  search(text: String!, first: Int! = 10, status: Status! = ACTIVE, after: String): [SearchResult]
  version: String!
}

type Mutation {
  addReview(review: ReviewInput!): Review
}

"Anything with a global id"
interface Node {
  id: ID!
}

type User implements Node {
  id: ID!
  name: String
  age: Int!
  status: Status
  friends(first: Int): [User]
}

type Repository implements Node {
  id: ID!
  stars: Int!
}

union SearchResult = User | Repository

enum Status {
  ACTIVE
  INACTIVE
}

input ReviewInput {
  stars: Int!
  commentary: String
}

type Review {
  stars: Int!
  commentary: String
}
"""

ROOT_DATA = {
    "user": {
        "id": "1",
        "name": "Ann",
        "age": 30,
        "status": "ACTIVE",
        "friends": [{"id": "2", "name": "Bob", "age": 31}],
    },
    "node": {"__typename": "User", "id": "1", "name": "Ann", "age": 30},
    "search": [
        {"__typename": "User", "id": "1", "name": "Ann", "age": 30},
        {"__typename": "Repository", "id": "r1", "stars": 3},
    ],
    "version": "1.0",
    "addReview": {"stars": 5, "commentary": "Great"},
}

API_HOST = "https://api.example.com/graphql"

_TYPE_NAME = re.compile(r'__type\(name: "([^"]+)"\)')


def object_type(name, fields=(), interfaces=(), kind="OBJECT", possible_types=()):
    """Build a ``__type`` response object."""
    return {
        "name": name,
        "kind": kind,
        "description": None,
        "interfaces": [{"name": i} for i in interfaces],
        "inputFields": None,
        "fields": list(fields),
        "possibleTypes": [{"name": p} for p in possible_types] or None,
        "enumValues": None,
    }


def field(name, type_ref, args=()):
    return {"name": name, "description": None, "args": list(args), "type": type_ref}


def named(name, kind="OBJECT"):
    return {"name": name, "kind": kind, "ofType": None}


def non_null(type_ref):
    return {"name": None, "kind": "NON_NULL", "ofType": type_ref}


def list_of(type_ref):
    return {"name": None, "kind": "LIST", "ofType": type_ref}


class FakeTransport:
    """Answers introspection requests from canned ``__type`` objects.

    Records every request body and the highest number of requests in
    flight at once.
    """

    def __init__(self, types, query="Query", mutation=None, failing=(), error_types=()):
        self.types = types
        self.query = query
        self.mutation = mutation
        self.failing = set(failing)
        self.error_types = set(error_types)
        self.requests = []
        self.type_requests = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def post(self, url, body, headers):
        self.requests.append(body)
        query = json.loads(body)["query"]
        match = _TYPE_NAME.search(query)
        if match is None:
            return json.dumps({"data": {"__schema": {
                "queryType": {"name": self.query} if self.query else None,
                "mutationType": {"name": self.mutation} if self.mutation else None,
            }}})

        name = match.group(1)
        self.type_requests.append(name)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
        finally:
            self.in_flight -= 1
        if name in self.failing:
            raise TransportError(f"connection reset while fetching {name}")
        if name in self.error_types:
            return json.dumps({"errors": [{"message": f"{name} is forbidden"}]})
        return json.dumps({"data": {"__type": self.types.get(name)}})


@pytest.fixture
def local_transport():
    return LocalSchemaTransport.from_sdl(SCHEMA_SDL, root_value=ROOT_DATA)


@pytest.fixture
def type_graph(local_transport):
    """The sample schema crawled through the local transport."""
    return asyncio.run(SchemaCrawler(API_HOST, local_transport).build_model())
