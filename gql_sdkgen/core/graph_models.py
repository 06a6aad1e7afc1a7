"""Pydantic base classes and polymorphic decoding for generated SDK code.

Generated result holders subclass :class:`GraphModel`, generated input types
subclass :class:`GraphInput`. Interface and union fields are decoded through
a :class:`FamilyRegistry`, which maps the ``__typename`` of a response object
to the concrete generated model to instantiate.
"""

import importlib
import threading
from typing import Any, ClassVar, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from .ir import TypeKind
from .selection import render_argument


class GraphModel(BaseModel):
    """Base class for generated result holders.

    Every result holder carries the ``__typename`` discriminator, which every
    generated selection requests.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        coerce_numbers_to_str=True,
        protected_namespaces=(),
    )

    typename: Optional[str] = Field(default=None, alias="__typename")


class GraphInput(BaseModel):
    """Base class for generated input types.

    ``str()`` of an input renders it as a GraphQL input-object literal, e.g.
    ``{ stars : 5 commentary : "Great" }``. Fields left as None are omitted.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        protected_namespaces=(),
    )

    # attribute name -> named kind of the field's type
    __literal_kinds__: ClassVar[dict[str, TypeKind]] = {}

    def to_literal(self) -> str:
        entries = []
        for name, info in type(self).model_fields.items():
            value = getattr(self, name)
            if value is None:
                continue
            wire_name = info.alias or name
            kind = self.__literal_kinds__.get(name)
            entries.append(f"{wire_name} : {render_argument(value, kind)}")
        if not entries:
            return "{ }"
        return "{ " + " ".join(entries) + " }"

    def __str__(self) -> str:
        return self.to_literal()


class FamilyRegistry:
    """Maps ``__typename`` values of an interface/union family to model classes.

    Members are given as ``"package.module:ClassName"`` paths and imported on
    first use, so generated modules never import each other at load time.

    Example:
        NODE_FAMILY = FamilyRegistry("Node", {
            "User": "github.models.user:User",
            "Repository": "github.models.repository:Repository",
        })
        NODE_FAMILY.decode({"__typename": "User", "login": "octocat"})
    """

    def __init__(self, family: str, members: Mapping[str, str]):
        self.family = family
        self._members = dict(members)
        self._resolved: dict[str, type[GraphModel]] = {}
        self._lock = threading.Lock()

    @property
    def typenames(self) -> list[str]:
        return sorted(self._members)

    def resolve(self, typename: str) -> type[GraphModel]:
        """Return the model class registered for ``typename``.

        Raises:
            LookupError: If ``typename`` is not a member of this family
        """
        with self._lock:
            model = self._resolved.get(typename)
            if model is not None:
                return model
            path = self._members.get(typename)
            if path is None:
                raise LookupError(f"{typename!r} is not a member of the {self.family} family")
            module_name, _, class_name = path.partition(":")
            model = getattr(importlib.import_module(module_name), class_name)
            self._resolved[typename] = model
            return model

    def decode(self, value: Any) -> Any:
        """Decode one response object into its concrete model.

        Used as a pydantic ``PlainValidator``; raising ValueError makes the
        surrounding validation fail.
        """
        if value is None or isinstance(value, GraphModel):
            return value
        if not isinstance(value, Mapping):
            raise ValueError(f"Expected an object for the {self.family} family, got {value!r}")
        typename = value.get("__typename")
        if typename is None:
            raise ValueError(f"Missing __typename in {self.family} family object")
        try:
            model = self.resolve(typename)
        except LookupError as e:
            raise ValueError(str(e)) from e
        return model.model_validate(value)
