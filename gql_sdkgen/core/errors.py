"""Exceptions raised while crawling a schema, generating code and running the SDK."""


class SdkGenError(Exception):
    """Base class for all gql-sdkgen errors."""


class TransportError(SdkGenError):
    """Raised by a transport when a request cannot be delivered or answered."""

    def __init__(self, message: str, url: str | None = None):
        self.url = url
        super().__init__(message)


class SchemaError(SdkGenError):
    """Raised when the root query type of a schema cannot be established."""


class TypeResolutionError(SdkGenError):
    """Raised when a single type could not be introspected.

    The crawler logs it and keeps going with an empty ClassInfo for that type.
    """

    def __init__(self, type_name: str, message: str):
        self.type_name = type_name
        super().__init__(f"Failed to resolve type {type_name}: {message}")


class GenerationError(SdkGenError):
    """Raised when an artifact cannot be rendered or written."""

    def __init__(self, artifact: str, message: str):
        self.artifact = artifact
        super().__init__(f"Failed to generate {artifact}: {message}")


class RequestError(SdkGenError):
    """Raised by a generated SDK call that got no usable ``data`` back.

    ``error_messages`` holds every ``message`` the server reported.
    """

    def __init__(self, message: str, error_messages: list[str] | None = None):
        self.error_messages = error_messages or []
        super().__init__(message)


class SelectionConsumedError(SdkGenError, RuntimeError):
    """Raised when a selection builder is used after ``build()``."""


class ConfigError(SdkGenError):
    """Raised for unreadable or invalid generator configuration."""
