"""Extension points around SDK generation.

A pre hook sees the crawled TypeGraph once, before any artifact is
rendered, and returns the graph to generate from. A post hook sees every
rendered artifact by its path inside the package and returns the text that
is validated and handed to the sink.

    from gql_sdkgen.core.hooks import PostGenerateHook, PreGenerateHook

    class PointAtStaging(PreGenerateHook):
        def pre_generate(self, type_graph):
            type_graph.api_host = "https://staging.example.com/graphql"
            return type_graph

    class SkipFamiliesInLint(PostGenerateHook):
        def post_generate(self, path, content):
            if "/families/" in path:
                return "# ruff: noqa\\n" + content
            return content
"""

from typing import Protocol, runtime_checkable

from .ir import TypeGraph


@runtime_checkable
class PreGenerateHook(Protocol):
    """Rewrites the TypeGraph before names are assigned.

    Types added or removed here change the generated module layout, so a
    hook that drops a type must also drop the fields referring to it.
    """

    def pre_generate(self, type_graph: TypeGraph) -> TypeGraph:
        """Return the graph to generate from; may be ``type_graph`` itself."""
        ...


@runtime_checkable
class PostGenerateHook(Protocol):
    """Rewrites one rendered artifact.

    Runs for package ``__init__`` files as well as for model, input, enum
    and family modules. The result must still parse as Python.
    """

    def post_generate(self, path: str, content: str) -> str:
        """Return the text to store at ``path`` (e.g. ``github/models/user.py``)."""
        ...


class AddHeaderHook:
    """Prepends a fixed header to every artifact, followed by a blank line.

        emit("github", sink, graph, hooks=[AddHeaderHook("# Generated SDK, do not edit")])
    """

    def __init__(self, header: str):
        self.header = header

    def post_generate(self, _path: str, content: str) -> str:
        return self.header.rstrip("\n") + "\n\n" + content


class HookRunner:
    """Runs a collection of hooks in order."""

    def __init__(self, hooks=()):
        self.pre_hooks: list[PreGenerateHook] = []
        self.post_hooks: list[PostGenerateHook] = []
        for hook in hooks:
            self.add(hook)

    def add(self, hook):
        """Register a hook under every protocol it implements.

        Raises:
            TypeError: If the object implements neither hook protocol
        """
        matched = False
        if isinstance(hook, PreGenerateHook):
            self.pre_hooks.append(hook)
            matched = True
        if isinstance(hook, PostGenerateHook):
            self.post_hooks.append(hook)
            matched = True
        if not matched:
            raise TypeError(f"{type(hook).__name__} implements no generation hook")

    def run_pre_hooks(self, type_graph: TypeGraph) -> TypeGraph:
        for hook in self.pre_hooks:
            type_graph = hook.pre_generate(type_graph)
        return type_graph

    def run_post_hooks(self, path: str, content: str) -> str:
        for hook in self.post_hooks:
            content = hook.post_generate(path, content)
        return content
