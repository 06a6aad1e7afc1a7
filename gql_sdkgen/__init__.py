"""Generate typed Python client SDKs from live GraphQL endpoints."""

__version__ = "0.1.0"
