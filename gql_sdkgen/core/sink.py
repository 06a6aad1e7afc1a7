"""Destinations for generated artifacts.

Paths are relative and use ``/`` separators, e.g. ``github/models/user.py``.
Sinks are written to from the generator's worker threads, one artifact per
call, and every artifact has its own path.
"""

import os
import threading
from typing import Protocol, runtime_checkable


@runtime_checkable
class ArtifactSink(Protocol):
    """Protocol for artifact destinations."""

    def write(self, path: str, content: str) -> None:
        """Store ``content`` under ``path``, replacing anything already there."""
        ...


class DirectorySink:
    """Writes artifacts as files below a root directory.

    Example:
        sink = DirectorySink("./generated")
        emit("github", sink, type_graph)
    """

    def __init__(self, root: str):
        self.root = root

    def write(self, path: str, content: str) -> None:
        full_path = os.path.join(self.root, *path.split("/"))
        os.makedirs(os.path.dirname(full_path), exist_ok=True)
        with open(full_path, "w", encoding="utf-8") as f:
            f.write(content)


class MemorySink:
    """Keeps artifacts in a dict; handy for tests and previews."""

    def __init__(self):
        self.artifacts: dict[str, str] = {}
        self._lock = threading.Lock()

    def write(self, path: str, content: str) -> None:
        with self._lock:
            self.artifacts[path] = content

    def __getitem__(self, path: str) -> str:
        return self.artifacts[path]

    def __contains__(self, path: str) -> bool:
        return path in self.artifacts

    @property
    def paths(self) -> list[str]:
        return sorted(self.artifacts)
