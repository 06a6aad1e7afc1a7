"""Transport that answers requests from GraphQL SDL files using graphql-core.

Lets the crawler introspect a schema kept on disk (``.graphqls`` files) the
same way it introspects a live server, and lets tests execute generated
selections against a schema with canned root data.
"""

import json
import os
from typing import Any, Mapping

from graphql import GraphQLError, GraphQLSchema, build_schema, graphql_sync

from .errors import TransportError

SCHEMA_EXTENSIONS = (".graphqls", ".graphql")


def collect_schema_files(schema_path: str) -> list[str]:
    """Collect all schema files from a file or directory path."""
    files = []
    if os.path.isfile(schema_path):
        if schema_path.endswith(SCHEMA_EXTENSIONS):
            files.append(schema_path)
    else:
        for root, _, filenames in os.walk(schema_path):
            for filename in filenames:
                if filename.endswith(SCHEMA_EXTENSIONS):
                    files.append(os.path.join(root, filename))
    return sorted(files)


class LocalSchemaTransport:
    """Executes request bodies against an in-process ``GraphQLSchema``.

    Example:
        transport = LocalSchemaTransport.from_path("./schema")
        graph = await SchemaCrawler("local", transport).build_model()
    """

    def __init__(self, schema: GraphQLSchema, root_value: Any = None):
        self.schema = schema
        self.root_value = root_value
        self.requests: list[str] = []

    @classmethod
    def from_sdl(cls, sdl: str, root_value: Any = None) -> "LocalSchemaTransport":
        try:
            schema = build_schema(sdl)
        except GraphQLError as e:
            raise TransportError(f"Invalid schema: {e.message}") from e
        return cls(schema, root_value)

    @classmethod
    def from_path(cls, schema_path: str, root_value: Any = None) -> "LocalSchemaTransport":
        """Build the schema from a file or a directory of schema files."""
        files = collect_schema_files(schema_path)
        if not files:
            raise TransportError(f"No schema files found at {schema_path}")
        parts = []
        for file_path in files:
            with open(file_path, encoding="utf-8") as f:
                parts.append(f.read())
        return cls.from_sdl("\n".join(parts), root_value)

    async def post(self, url: str, body: str, headers: Mapping[str, str]) -> str:
        self.requests.append(body)
        try:
            payload = json.loads(body)
            query = payload["query"]
        except (ValueError, KeyError, TypeError) as e:
            raise TransportError(f"Malformed request body: {e}", url=url) from e

        result = graphql_sync(
            self.schema,
            query,
            root_value=self.root_value,
            variable_values=payload.get("variables"),
        )
        return json.dumps(result.formatted)
