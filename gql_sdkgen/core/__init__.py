"""Core modules for GraphQL schema crawling and SDK generation."""

from .config import GeneratorConfig
from .crawler import CrawlFrontier, SchemaCrawler, build_model
from .errors import (
    ConfigError,
    GenerationError,
    RequestError,
    SchemaError,
    SdkGenError,
    SelectionConsumedError,
    TransportError,
    TypeResolutionError,
)
from .executor import GraphResult, execute_selection
from .generator import CodeGenerator, GenerationReport, emit
from .graph_models import FamilyRegistry, GraphInput, GraphModel
from .hooks import AddHeaderHook, HookRunner, PostGenerateHook, PreGenerateHook
from .ir import ClassInfo, EnumValue, FieldInfo, FieldType, TypeGraph, TypeKind
from .local_schema import LocalSchemaTransport
from .protocol_emitter import QueryProtocolEmitter
from .selection import CompiledSelection, SelectionBuilder
from .sink import ArtifactSink, DirectorySink, MemorySink
from .transport import (
    HttpTransport,
    Transport,
    TransportSettings,
    basic_auth_headers,
    bearer_headers,
)

__all__ = [
    # Errors
    "SdkGenError",
    "TransportError",
    "SchemaError",
    "TypeResolutionError",
    "GenerationError",
    "RequestError",
    "SelectionConsumedError",
    "ConfigError",
    # Model
    "TypeKind",
    "FieldType",
    "FieldInfo",
    "EnumValue",
    "ClassInfo",
    "TypeGraph",
    # Transport
    "Transport",
    "TransportSettings",
    "HttpTransport",
    "LocalSchemaTransport",
    "bearer_headers",
    "basic_auth_headers",
    # Crawler
    "CrawlFrontier",
    "SchemaCrawler",
    "build_model",
    # Runtime
    "CompiledSelection",
    "SelectionBuilder",
    "GraphModel",
    "GraphInput",
    "FamilyRegistry",
    "GraphResult",
    "execute_selection",
    # Generation
    "CodeGenerator",
    "GenerationReport",
    "QueryProtocolEmitter",
    "emit",
    "ArtifactSink",
    "DirectorySink",
    "MemorySink",
    # Hooks
    "PreGenerateHook",
    "PostGenerateHook",
    "AddHeaderHook",
    "HookRunner",
    # Config
    "GeneratorConfig",
]
