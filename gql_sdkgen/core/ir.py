"""In-memory model (TypeGraph) of a crawled GraphQL schema.

This module defines the dataclasses the crawler fills in and the code
generator reads. Types reference each other by name only, so self- and
mutually-referential schemas are representable without nesting copies.
"""

import threading
from dataclasses import dataclass, field
from enum import Enum


class TypeKind(Enum):
    """Kinds of types a field or class can have."""
    INT = "INT"
    FLOAT = "FLOAT"
    STRING = "STRING"
    BOOLEAN = "BOOLEAN"
    ID = "ID"
    LIST = "LIST"
    OBJECT = "OBJECT"
    INTERFACE = "INTERFACE"
    UNION = "UNION"
    ENUM = "ENUM"
    INPUT_OBJECT = "INPUT_OBJECT"

    @property
    def is_scalar(self) -> bool:
        return self in _SCALAR_KINDS

    @property
    def is_compound(self) -> bool:
        """True for kinds that need a nested selection."""
        return self in (TypeKind.OBJECT, TypeKind.INTERFACE, TypeKind.UNION)

    @property
    def is_polymorphic(self) -> bool:
        return self in (TypeKind.INTERFACE, TypeKind.UNION)


_SCALAR_KINDS = frozenset({
    TypeKind.INT, TypeKind.FLOAT, TypeKind.STRING, TypeKind.BOOLEAN, TypeKind.ID,
})


@dataclass
class FieldType:
    """Type of a field or argument.

    ``sub_type`` is only set for lists and holds the element type, which may
    itself be a list.
    """
    name: str
    kind: TypeKind
    nullable: bool = True
    sub_type: "FieldType | None" = None

    @property
    def leaf(self) -> "FieldType":
        """The named type at the bottom of any list nesting."""
        current = self
        while current.kind is TypeKind.LIST and current.sub_type is not None:
            current = current.sub_type
        return current


@dataclass
class FieldInfo:
    """A field of an object/interface, an input field or a field argument."""
    name: str
    field_type: FieldType
    description: str | None = None
    default_value: str | None = None
    field_args: list["FieldInfo"] | None = None


@dataclass
class EnumValue:
    """A single value of an enum type."""
    name: str
    description: str | None = None


@dataclass
class ClassInfo:
    """A discovered schema type.

    Created empty on first reference and filled in when its own introspection
    response arrives. Parent/child edges are added through ``add_parent`` and
    ``add_child`` because other types' responses can name this one while it
    is being resolved concurrently.
    """
    name: str
    type_kind: TypeKind = TypeKind.OBJECT
    description: str | None = None
    child_classes: set[str] = field(default_factory=set)
    parent_classes: set[str] = field(default_factory=set)
    fields: list[FieldInfo] = field(default_factory=list)
    enum_values: list[EnumValue] = field(default_factory=list)
    query_args: list[FieldInfo] = field(default_factory=list)

    def __post_init__(self):
        self._edge_lock = threading.Lock()

    def add_parent(self, parent: str):
        with self._edge_lock:
            self.parent_classes.add(parent)

    def add_child(self, child: str):
        with self._edge_lock:
            self.child_classes.add(child)

    @property
    def is_family_head(self) -> bool:
        """True if this type is an interface/union with known members."""
        return bool(self.child_classes)


@dataclass
class TypeGraph:
    """The fully resolved model of a schema."""
    api_host: str
    query_class: ClassInfo
    mutation_class: ClassInfo | None = None
    class_map: dict[str, ClassInfo] = field(default_factory=dict)
    # lower-cased name -> number of distinct schema names folding to it
    name_collision_counts: dict[str, int] = field(default_factory=dict)

    def get(self, name: str) -> ClassInfo | None:
        """Look up a class by its exact schema name."""
        return self.class_map.get(name)

    def is_root(self, name: str) -> bool:
        return name == self.query_class.name or self.is_mutation_root(name)

    def is_mutation_root(self, name: str) -> bool:
        return self.mutation_class is not None and name == self.mutation_class.name

    def collision_count(self, name: str) -> int:
        return self.name_collision_counts.get(name.lower(), 1)

    @staticmethod
    def count_name_collisions(names) -> dict[str, int]:
        """Count how many names fold to each lower-cased name."""
        counts: dict[str, int] = {}
        for name in names:
            key = name.lower()
            counts[key] = counts.get(key, 0) + 1
        return counts
