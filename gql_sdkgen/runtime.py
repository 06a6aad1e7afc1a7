"""Runtime support imported by generated SDK packages.

Generated modules only ever import from here, so the runtime can be
reorganised without regenerating SDKs.
"""

from .core.errors import RequestError, SelectionConsumedError, TransportError
from .core.executor import GraphResult, execute_selection, mutation_keyword
from .core.graph_models import FamilyRegistry, GraphInput, GraphModel
from .core.ir import TypeKind
from .core.selection import CompiledSelection, SelectionBuilder
from .core.transport import HttpTransport, Transport

__all__ = [
    "CompiledSelection",
    "FamilyRegistry",
    "GraphInput",
    "GraphModel",
    "GraphResult",
    "HttpTransport",
    "RequestError",
    "SelectionBuilder",
    "SelectionConsumedError",
    "Transport",
    "TransportError",
    "TypeKind",
    "execute_selection",
    "mutation_keyword",
]
