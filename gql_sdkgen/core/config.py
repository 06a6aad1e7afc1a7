"""Generator configuration, optionally read from a properties file.

The properties file uses ``key=value`` lines::

    OutputLocation=./generated
    PackageName=github
    RateLimit=500
    MaxParallelRequests=4
    Authorization=bearer 0123456789abcdef

``RateLimit`` is in milliseconds. Every key not listed above is sent as an
HTTP header with each request.
"""

import configparser
import logging
from dataclasses import dataclass, field
from typing import Dict

from .errors import ConfigError
from .transport import DEFAULT_MAX_PARALLEL_REQUESTS, TransportSettings

logger = logging.getLogger(__name__)

OUTPUT_LOCATION = "OutputLocation"
PACKAGE_NAME = "PackageName"
RATE_LIMIT = "RateLimit"
MAX_PARALLEL_REQUESTS = "MaxParallelRequests"
KNOWN_KEYS = {OUTPUT_LOCATION, PACKAGE_NAME, RATE_LIMIT, MAX_PARALLEL_REQUESTS}

_SECTION = "properties"


@dataclass
class GeneratorConfig:
    """Everything needed to crawl a schema and generate its SDK."""
    api_host: str
    output_location: str = "."
    package_name: str = "graph"
    headers: Dict[str, str] = field(default_factory=dict)
    rate_limit: float = 0.0  # seconds between crawl waves
    max_parallel_requests: int = DEFAULT_MAX_PARALLEL_REQUESTS

    def __post_init__(self):
        if not self.package_name or not all(
            part.isidentifier() for part in self.package_name.split(".")
        ):
            raise ConfigError(f"Invalid package name: {self.package_name!r}")
        if self.max_parallel_requests < 1:
            raise ConfigError("MaxParallelRequests must be at least 1")
        if self.rate_limit < 0:
            raise ConfigError("RateLimit must not be negative")

    @classmethod
    def from_properties(cls, api_host: str, path: str) -> "GeneratorConfig":
        """Read a properties file.

        Raises:
            ConfigError: If the file cannot be read or holds invalid numbers
        """
        parser = configparser.ConfigParser(
            delimiters=("=", ":"), interpolation=None, comment_prefixes=("#", "!")
        )
        # keys are header names, keep their case
        parser.optionxform = str
        try:
            with open(path, encoding="utf-8") as f:
                parser.read_string(f"[{_SECTION}]\n" + f.read())
        except (OSError, configparser.Error) as e:
            raise ConfigError(f"Failed to read properties file {path}: {e}") from e

        values = dict(parser[_SECTION])
        kwargs = {}
        if OUTPUT_LOCATION in values:
            kwargs["output_location"] = values[OUTPUT_LOCATION]
        if PACKAGE_NAME in values:
            kwargs["package_name"] = values[PACKAGE_NAME]
        if RATE_LIMIT in values:
            kwargs["rate_limit"] = _number(values, RATE_LIMIT) / 1000.0
        if MAX_PARALLEL_REQUESTS in values:
            kwargs["max_parallel_requests"] = _number(values, MAX_PARALLEL_REQUESTS)
        kwargs["headers"] = {k: v for k, v in values.items() if k not in KNOWN_KEYS}
        logger.debug("Loaded %d properties from %s", len(values), path)
        return cls(api_host=api_host, **kwargs)

    def to_settings(self) -> TransportSettings:
        return TransportSettings(
            headers=dict(self.headers),
            rate_limit=self.rate_limit,
            max_parallel_requests=self.max_parallel_requests,
        )


def _number(values: Dict[str, str], key: str) -> int:
    try:
        return int(values[key].strip())
    except ValueError as e:
        raise ConfigError(f"{key} must be a whole number, got {values[key]!r}") from e
