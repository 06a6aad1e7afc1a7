"""Schema crawler that builds a TypeGraph from a live GraphQL endpoint.

Starting at the root Query/Mutation types, every type reachable through
fields, arguments, input fields, interfaces and possible types is
introspected exactly once. Requests are sent in waves of at most
``max_parallel_requests``; each wave is awaited as a whole before the next
one is formed, with an optional delay between waves to stay under a
server's rate limit.
"""

import asyncio
import logging
import threading
from typing import Any

from .errors import SchemaError, TransportError, TypeResolutionError
from .introspection import (
    SCHEMA_QUERY,
    connection_names,
    decode_class_kind,
    decode_enum_values,
    decode_fields,
    error_messages,
    parse_response,
    request_body,
    type_query,
)
from .ir import ClassInfo, TypeGraph
from .transport import HttpTransport, Transport, TransportSettings

logger = logging.getLogger(__name__)


class CrawlFrontier:
    """Membership of type names across the pending, in-flight and resolved sets.

    All changes go through this object under one lock; resolution tasks never
    touch the sets directly. A name is enqueued at most once over the whole
    crawl, which bounds the crawl to one request per distinct name.
    """

    def __init__(self):
        self._lock = threading.Lock()
        # dict keeps discovery order so waves are deterministic
        self._pending: dict[str, None] = {}
        self._in_flight: set[str] = set()
        self._resolved: set[str] = set()

    def enqueue(self, name: str) -> bool:
        """Add ``name`` to pending unless it was seen before.

        Returns:
            True if the name was newly enqueued
        """
        with self._lock:
            if name in self._pending or name in self._in_flight or name in self._resolved:
                return False
            self._pending[name] = None
            return True

    def next_wave(self, size: int) -> list[str]:
        """Move up to ``size`` pending names to in-flight and return them."""
        with self._lock:
            wave = list(self._pending)[:size]
            for name in wave:
                del self._pending[name]
                self._in_flight.add(name)
            return wave

    def mark_resolved(self, name: str):
        with self._lock:
            self._in_flight.discard(name)
            self._resolved.add(name)

    def has_pending(self) -> bool:
        with self._lock:
            return bool(self._pending)

    @property
    def resolved(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._resolved)


class SchemaCrawler:
    """Builds a :class:`TypeGraph` by introspecting a GraphQL endpoint.

    Example:
        crawler = SchemaCrawler(
            "https://api.example.com/graphql",
            settings=TransportSettings(headers=bearer_headers(token), rate_limit=0.5),
        )
        graph = await crawler.build_model()
    """

    def __init__(
        self,
        api_host: str,
        transport: Transport | None = None,
        settings: TransportSettings | None = None,
    ):
        """Initialize the crawler.

        Args:
            api_host: GraphQL endpoint URL
            transport: Transport for requests; an ``HttpTransport`` is created
                       (and closed afterwards) if omitted
            settings: Headers, inter-wave delay and parallelism
        """
        self.api_host = api_host
        self.settings = settings or TransportSettings()
        self._transport = transport
        self._frontier = CrawlFrontier()
        self._classes: dict[str, ClassInfo] = {}
        self._classes_lock = threading.Lock()

    async def build_model(self) -> TypeGraph:
        """Crawl the schema and return the resolved TypeGraph.

        Raises:
            SchemaError: If the root query type cannot be determined
        """
        owns_transport = self._transport is None
        if owns_transport:
            self._transport = HttpTransport()
        try:
            return await self._crawl()
        finally:
            if owns_transport:
                await self._transport.close()

    async def _crawl(self) -> TypeGraph:
        query_name, mutation_name = await self._fetch_root_names()
        logger.info("Query root: %s, mutation root: %s", query_name, mutation_name)

        query_class = self._class_info(query_name)
        self._frontier.enqueue(query_name)
        mutation_class = None
        if mutation_name:
            mutation_class = self._class_info(mutation_name)
            self._frontier.enqueue(mutation_name)

        wave_number = 0
        while self._frontier.has_pending():
            wave = self._frontier.next_wave(self.settings.max_parallel_requests)
            wave_number += 1
            logger.info("Wave %d: resolving %d types", wave_number, len(wave))
            await asyncio.gather(*(self._resolve(name) for name in wave))

            if self.settings.rate_limit > 0 and self._frontier.has_pending():
                logger.info("Throttling for %.3f s", self.settings.rate_limit)
                await asyncio.sleep(self.settings.rate_limit)

        resolved = sorted(self._frontier.resolved)
        class_map = {name: self._classes[name] for name in resolved}
        logger.info("Processing complete: %d types", len(class_map))
        return TypeGraph(
            api_host=self.api_host,
            query_class=query_class,
            mutation_class=mutation_class,
            class_map=class_map,
            name_collision_counts=TypeGraph.count_name_collisions(class_map),
        )

    async def _fetch_root_names(self) -> tuple[str, str | None]:
        """Ask the server for the names of its root types."""
        try:
            body = await self._transport.post(
                self.api_host, request_body(SCHEMA_QUERY), self.settings.headers
            )
        except TransportError as e:
            raise SchemaError(f"Failed to get reply from server: {e}") from e

        try:
            response = parse_response(body)
        except ValueError as e:
            raise SchemaError(f"Failed to parse schema response: {e}") from e

        data = response.get("data") or {}
        schema = data.get("__schema") if isinstance(data, dict) else None
        if not isinstance(schema, dict):
            schema = {}
        query_type = schema.get("queryType")
        query_name = query_type.get("name") if isinstance(query_type, dict) else None
        if not isinstance(query_name, str) or not query_name:
            messages = error_messages(response)
            detail = "; ".join(messages) if messages else body
            raise SchemaError(f"Failed to get query class. {detail}")
        mutation_type = schema.get("mutationType")
        mutation_name = mutation_type.get("name") if isinstance(mutation_type, dict) else None
        return query_name, mutation_name or None

    def _class_info(self, name: str) -> ClassInfo:
        """Return the ClassInfo for ``name``, creating an empty one on first use."""
        with self._classes_lock:
            info = self._classes.get(name)
            if info is None:
                info = self._classes[name] = ClassInfo(name)
            return info

    def _on_reference(self, name: str):
        self._class_info(name)
        self._frontier.enqueue(name)

    async def _resolve(self, type_name: str):
        """Resolve one type; failures are logged and leave its ClassInfo empty."""
        class_info = self._class_info(type_name)
        logger.debug("Processing %s", type_name)
        try:
            type_json = await self._fetch_type(type_name)
            self._apply(class_info, type_json)
        except TypeResolutionError as e:
            logger.warning("%s", e)
        finally:
            self._frontier.mark_resolved(type_name)

    async def _fetch_type(self, type_name: str) -> dict[str, Any]:
        try:
            body = await self._transport.post(
                self.api_host, request_body(type_query(type_name)), self.settings.headers
            )
        except TransportError as e:
            raise TypeResolutionError(type_name, str(e)) from e

        try:
            response = parse_response(body)
        except ValueError as e:
            raise TypeResolutionError(type_name, f"unparsable response: {e}") from e

        if response.get("errors"):
            messages = error_messages(response)
            raise TypeResolutionError(type_name, "; ".join(messages) or "server reported errors")

        data = response.get("data")
        type_json = data.get("__type") if isinstance(data, dict) else None
        if not type_json:
            raise TypeResolutionError(
                type_name,
                "no type data in response; consider a rate limit to throttle requests",
            )
        if not isinstance(type_json, dict):
            kind = type(type_json).__name__
            raise TypeResolutionError(type_name, f"malformed type data: expected an object, got {kind}")
        return type_json

    def _apply(self, class_info: ClassInfo, type_json: dict[str, Any]):
        """Fill ``class_info`` from its ``__type`` response."""
        name = class_info.name
        try:
            kind = decode_class_kind(type_json.get("kind"))
            fields = decode_fields(type_json, "fields", self._on_reference)
            input_fields = decode_fields(type_json, "inputFields", self._on_reference)
            enum_values = decode_enum_values(type_json)
            interfaces = connection_names(type_json, "interfaces")
            possible_types = connection_names(type_json, "possibleTypes")
        except (KeyError, TypeError, AttributeError) as e:
            raise TypeResolutionError(name, f"malformed type data: {e!r}") from e

        class_info.type_kind = kind
        class_info.description = type_json.get("description")
        class_info.fields = fields
        class_info.query_args = input_fields
        class_info.enum_values = enum_values

        for interface in interfaces:
            self._on_reference(interface)
            class_info.add_parent(interface)
            self._class_info(interface).add_child(name)

        for member in possible_types:
            self._on_reference(member)
            class_info.add_child(member)
            self._class_info(member).add_parent(name)


def build_model(
    api_host: str,
    transport: Transport | None = None,
    max_parallel: int = 8,
    inter_wave_delay: float = 0.0,
    headers: dict[str, str] | None = None,
) -> TypeGraph:
    """Crawl ``api_host`` synchronously and return its TypeGraph."""
    settings = TransportSettings(
        headers=dict(headers or {}),
        rate_limit=inter_wave_delay,
        max_parallel_requests=max_parallel,
    )
    return asyncio.run(SchemaCrawler(api_host, transport, settings).build_model())
