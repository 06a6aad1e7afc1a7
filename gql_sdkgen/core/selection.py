"""Field selection builders used by generated SDK code.

A generated ``<Type>SelectionBuilder`` subclasses :class:`SelectionBuilder`
and adds one ``fetch_*`` (or ``invoke_*``) method per schema field. Each call
appends the field to the builder's wire text and returns the builder, so
calls chain::

    selection = (
        UserSelectionBuilder()
        .fetch_name()
        .fetch_friends(UserSelectionBuilder().fetch_name().build(), first=10)
        .build()
    )
    selection.wire_text
    # '{ __typename name friends ( first : 10 ) { __typename name } }'

``build()`` consumes the builder; it cannot be used afterwards.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

from .errors import SelectionConsumedError
from .ir import TypeKind

TYPENAME_FIELD = "__typename"
OPEN_SELECTION = "{ " + TYPENAME_FIELD
CLOSE_SELECTION = " }"


@dataclass(frozen=True)
class CompiledSelection:
    """Immutable result of :meth:`SelectionBuilder.build`."""
    wire_text: str

    def __str__(self) -> str:
        return self.wire_text


def render_value(value: Any) -> str:
    """Render a Python value as a GraphQL literal, choosing by its type."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return json.dumps(value)
    if hasattr(value, "to_literal"):
        return value.to_literal()
    if isinstance(value, (list, tuple)):
        return render_list(render_value(item) for item in value)
    if isinstance(value, dict):
        entries = " ".join(f"{key} : {render_value(item)}" for key, item in value.items())
        return "{ " + entries + " }" if entries else "{ }"
    return json.dumps(str(value))


def render_list(items: Iterable[str]) -> str:
    rendered = " ".join(items)
    return "[ " + rendered + " ]" if rendered else "[ ]"


def render_argument(value: Any, kind: TypeKind | None = None) -> str:
    """Render an argument or input field value.

    ``kind`` is the named (leaf) kind of the argument's type: STRING and ID
    values are always quoted, ENUM values are written bare, anything else is
    rendered by its Python type. Lists apply the kind to every element.
    """
    if value is None:
        return "null"
    if isinstance(value, (list, tuple)):
        return render_list(render_argument(item, kind) for item in value)
    if kind in (TypeKind.STRING, TypeKind.ID):
        return json.dumps(value.value if isinstance(value, Enum) else str(value))
    if kind is TypeKind.ENUM:
        return str(value.value) if isinstance(value, Enum) else str(value)
    return render_value(value)


def render_arguments(arguments: Iterable[tuple[str, Any, TypeKind | None]]) -> str:
    """Render ``(name, value, kind)`` triples as ``" ( a : 1 b : "x" )"``.

    Arguments whose value is None are left out; if none remain the result is
    empty.
    """
    rendered = [
        f"{name} : {render_argument(value, kind)}"
        for name, value, kind in arguments
        if value is not None
    ]
    if not rendered:
        return ""
    return " ( " + " ".join(rendered) + " )"


class SelectionBuilder:
    """Base class for generated selection builders.

    The wire-text accumulator starts with the ``__typename`` selection so
    polymorphic results can always be decoded. Subclasses set
    ``selection_type`` to their compiled selection class.
    """

    selection_type: type[CompiledSelection] = CompiledSelection

    def __init__(self):
        self._parts: list[str] = [OPEN_SELECTION]
        self._consumed = False

    @property
    def wire_text(self) -> str:
        """Text accumulated so far (without the closing brace)."""
        self._ensure_usable()
        return "".join(self._parts)

    def _ensure_usable(self):
        if self._consumed:
            raise SelectionConsumedError(
                f"{type(self).__name__} was already built; create a new builder"
            )

    def _select(
        self,
        field_name: str,
        arguments: Iterable[tuple[str, Any, TypeKind | None]] = (),
        selection: CompiledSelection | None = None,
        on_type: str | None = None,
    ):
        """Append one field selection and return ``self``.

        Args:
            field_name: Wire name of the field
            arguments: ``(name, value, kind)`` triples in schema order
            selection: Nested selection for object, interface and union fields
            on_type: Concrete type for an inline fragment around ``selection``
        """
        self._ensure_usable()
        text = " " + field_name + render_arguments(arguments)
        if selection is not None:
            nested = selection.wire_text
            if on_type:
                nested = f"{{ ... on {on_type} {nested} }}"
            text += " " + nested
        self._parts.append(text)
        return self

    def build(self) -> CompiledSelection:
        """Close the selection and return it; the builder is unusable afterwards."""
        self._ensure_usable()
        self._parts.append(CLOSE_SELECTION)
        wire_text = "".join(self._parts)
        self._parts.clear()
        self._consumed = True
        return self.selection_type(wire_text)
