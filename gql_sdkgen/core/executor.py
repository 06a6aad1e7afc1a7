"""Send protocol used by the generated Query and Mutation roots.

Handles request encoding, transport errors, server-reported errors and
decoding of the ``data`` object into the root result holder.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Generic, Mapping, TypeVar

from pydantic import ValidationError

from .errors import RequestError, TransportError
from .graph_models import GraphModel
from .introspection import error_messages, parse_response
from .selection import CompiledSelection
from .transport import HttpTransport, Transport

logger = logging.getLogger(__name__)

RootT = TypeVar("RootT", bound=GraphModel)
DataT = TypeVar("DataT")


@dataclass(frozen=True)
class GraphResult(Generic[DataT]):
    """Decoded ``data`` of a response plus any server error messages.

    ``data`` is the root result holder, or a single field of it for the
    direct mutation helpers.

    Errors reported next to usable data are not fatal; they are kept here
    for the caller to inspect.
    """
    data: DataT
    errors: list[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


def mutation_keyword(root_name: str) -> str:
    """Operation prefix sent before a mutation root's selection."""
    return f" mutation {root_name} "


def request_body(selection: CompiledSelection, operation: str = "") -> str:
    """Build ``{"query": "<operation><wire text>"}``.

    JSON encoding escapes quotes and newlines inside the wire text.
    """
    return json.dumps({"query": f"{operation}{selection.wire_text}"})


async def execute_selection(
    selection: CompiledSelection,
    root_model: type[RootT],
    url: str,
    *,
    operation: str = "",
    transport: Transport | None = None,
    headers: Mapping[str, str] | None = None,
) -> GraphResult[RootT]:
    """Send a compiled root selection and decode the response.

    Args:
        selection: Compiled selection of the Query or Mutation root
        root_model: Result holder class of that root
        url: GraphQL endpoint URL
        operation: Operation prefix (empty for queries)
        transport: Transport to use; a temporary ``HttpTransport`` otherwise
        headers: Extra request headers

    Raises:
        RequestError: If the request fails, the response cannot be parsed,
            ``data`` is missing, or ``data`` cannot be decoded
    """
    body = request_body(selection, operation)
    owns_transport = transport is None
    if owns_transport:
        transport = HttpTransport()
    try:
        raw = await transport.post(url, body, dict(headers or {}))
    except TransportError as e:
        raise RequestError(f"Request failed: {e}") from e
    finally:
        if owns_transport:
            await transport.close()

    try:
        response = parse_response(raw)
    except ValueError as e:
        raise RequestError(f"Failed to parse response: {e}") from e

    messages = error_messages(response)
    data = response.get("data")
    if data is None:
        raise RequestError(
            "Failed to get response data, see error_messages for details", messages
        )
    if messages:
        logger.info("Server reported %d error(s) alongside data", len(messages))

    try:
        decoded = root_model.model_validate(data)
    except ValidationError as e:
        raise RequestError(f"Failed to decode response data: {e}", messages) from e
    return GraphResult(decoded, messages)
