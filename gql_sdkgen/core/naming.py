"""Python identifiers and type annotations for generated code.

Schema names are kept as class names wherever they are valid Python;
field, argument and module names are snake_cased. Anything that would clash
with a keyword, a pydantic attribute or another generated name is suffixed.
"""

import keyword
import re
from typing import Iterable

from pydantic import BaseModel

from .ir import ClassInfo, FieldType, TypeGraph, TypeKind

# Python type of each built-in scalar kind
SCALAR_TYPES = {
    TypeKind.INT: "int",
    TypeKind.FLOAT: "float",
    TypeKind.STRING: "str",
    TypeKind.BOOLEAN: "bool",
    TypeKind.ID: "str",
}

SCALAR_DEFAULTS = {
    TypeKind.INT: "0",
    TypeKind.FLOAT: "0.0",
    TypeKind.STRING: '""',
    TypeKind.BOOLEAN: "False",
    TypeKind.ID: '""',
}

BUILTIN_SCALAR_NAMES = {"Int", "Float", "String", "Boolean", "ID"}

# Attributes generated models inherit and must not shadow
RESERVED_ATTRIBUTES = frozenset(dir(BaseModel)) | {
    "typename", "to_literal", "str", "int", "float", "bool",
}

# Names used by generated method signatures themselves
RESERVED_PARAMS = frozenset({
    "self", "cls", "selection", "transport", "headers", "url", "request", "result",
})

SUBPACKAGES = {
    TypeKind.ENUM: "enums",
    TypeKind.INPUT_OBJECT: "inputs",
}
MODELS_SUBPACKAGE = "models"
FAMILIES_SUBPACKAGE = "families"


def snake_case(name: str) -> str:
    """Convert PascalCase or camelCase to snake_case."""
    s1 = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    return re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1).lower()


def safe_identifier(name: str, reserved: Iterable[str] = ()) -> str:
    """Suffix ``name`` with an underscore if it is a keyword or reserved."""
    if not name or name[0].isdigit():
        name = f"_{name}"
    if keyword.iskeyword(name) or name in reserved:
        return f"{name}_"
    return name


def field_attribute(name: str, reserved: Iterable[str] = ()) -> str:
    """Attribute name of a schema field on a pydantic model.

    Leading underscores are dropped since pydantic treats such names as
    private attributes. Names in ``reserved`` are suffixed too; generated
    models pass the schema class names, which an attribute of the same name
    would shadow while pydantic evaluates the class's annotations.
    """
    attribute = snake_case(name).lstrip("_") or "field"
    return safe_identifier(attribute, RESERVED_ATTRIBUTES | frozenset(reserved))


def param_name(name: str) -> str:
    return safe_identifier(snake_case(name).lstrip("_") or "arg", RESERVED_PARAMS)


def enum_member_name(value: str) -> str:
    """Enum member identifier for a schema enum value."""
    member = value.upper()
    # Enum reserves _sunder_ names
    if member.startswith("_") and member.endswith("_"):
        member = f"V{member}"
    return safe_identifier(member)


def unique_names(names: Iterable[str]) -> list[str]:
    """Suffix repeated names with ``_1``, ``_2``, ... keeping the first as is."""
    seen: set[str] = set()
    result = []
    for name in names:
        candidate = name
        counter = 0
        while candidate in seen:
            counter += 1
            candidate = f"{name}_{counter}"
        seen.add(candidate)
        result.append(candidate)
    return result


def safe_docstring(text: str | None) -> str:
    """Escape text for use in docstrings."""
    if not text:
        return ""
    text = text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if text.endswith('"'):
        text += " "
    return text


class NameTable:
    """Class, module and import-path names for every type of a TypeGraph.

    Module names are snake_cased schema names. Types the crawler counted as
    colliding case-insensitively (``User`` and ``user``) are all given a
    numeric suffix in sorted order of their exact names: ``user_1``,
    ``user_2``. So are names that only fold together once snake_cased
    (``user_name`` and ``userName``).
    """

    def __init__(self, type_graph: TypeGraph, package_name: str):
        self.type_graph = type_graph
        self.package_name = package_name
        self.class_names = frozenset(self.class_name(n) for n in type_graph.class_map)
        self._modules: dict[str, str] = {}

        groups: dict[str, list[str]] = {}
        for name in type_graph.class_map:
            groups.setdefault(snake_case(name).lstrip("_") or "type", []).append(name)
        for base, names in groups.items():
            if len(names) == 1 and type_graph.collision_count(names[0]) == 1:
                self._modules[names[0]] = safe_identifier(base)
                continue
            for index, name in enumerate(sorted(names), start=1):
                self._modules[name] = f"{base}_{index}"

    def class_name(self, name: str) -> str:
        return safe_identifier(name)

    def module_name(self, name: str) -> str:
        return self._modules[name]

    def subpackage(self, class_info: ClassInfo) -> str:
        return SUBPACKAGES.get(class_info.type_kind, MODELS_SUBPACKAGE)

    def module_path(self, class_info: ClassInfo) -> str:
        """Dotted import path of the module generated for ``class_info``."""
        return ".".join(
            (self.package_name, self.subpackage(class_info), self.module_name(class_info.name))
        )

    def file_path(self, class_info: ClassInfo) -> str:
        return self.module_path(class_info).replace(".", "/") + ".py"

    def family_module_path(self, name: str) -> str:
        return ".".join((self.package_name, FAMILIES_SUBPACKAGE, self.module_name(name)))

    def family_alias(self, name: str) -> str:
        """Local alias under which a model module imports a family module."""
        return f"_family_{self.module_name(name)}"

    def enum_alias(self, name: str) -> str:
        return f"_enum_{self.module_name(name)}"

    def selection_name(self, name: str) -> str:
        return f"{self.class_name(name)}Selection"

    def builder_name(self, name: str) -> str:
        return f"{self.class_name(name)}SelectionBuilder"

    def marker_name(self, name: str) -> str:
        return f"{self.class_name(name)}Family"


class TypeAnnotator:
    """Renders FieldTypes as Python annotations for generated modules.

    Generated modules import ``typing`` as ``_t``. Schema classes are named
    bare; they are resolved when the generated package rebuilds its models.
    Interface and union fields are annotated with the ``Member`` alias of the
    family module, which decodes by ``__typename``.
    """

    def __init__(self, type_graph: TypeGraph, names: NameTable):
        self.type_graph = type_graph
        self.names = names

    def is_family(self, name: str) -> bool:
        class_info = self.type_graph.get(name)
        return class_info is not None and class_info.is_family_head

    def named_hint(self, field_type: FieldType) -> str:
        kind = field_type.kind
        if kind.is_scalar:
            if kind is TypeKind.STRING and field_type.name not in BUILTIN_SCALAR_NAMES:
                # custom scalars may carry any JSON value
                return "_t.Any"
            return SCALAR_TYPES[kind]
        if kind.is_polymorphic and self.is_family(field_type.name):
            return f"{self.names.family_alias(field_type.name)}.Member"
        return self.names.class_name(field_type.name)

    def result_hint(self, field_type: FieldType) -> str:
        """Annotation of a result-holder field."""
        if field_type.kind is TypeKind.LIST:
            inner = self.result_hint(field_type.sub_type)
            hint = f"_t.List[{inner}]"
        else:
            hint = self.named_hint(field_type)
        if field_type.nullable or not self._has_scalar_default(field_type):
            return f"_t.Optional[{hint}]"
        return hint

    def result_default(self, field_type: FieldType) -> str:
        if self._has_scalar_default(field_type):
            return SCALAR_DEFAULTS[field_type.kind]
        return "None"

    def input_hint(self, field_type: FieldType) -> str:
        """Annotation of an input field or argument, without the outer Optional."""
        if field_type.kind is TypeKind.LIST:
            inner = self.input_hint(field_type.sub_type)
            if field_type.sub_type.nullable:
                inner = f"_t.Optional[{inner}]"
            return f"_t.List[{inner}]"
        if field_type.kind.is_scalar:
            return SCALAR_TYPES[field_type.kind]
        return self.names.class_name(field_type.name)

    def kind_expression(self, field_type: FieldType) -> str:
        """Expression for the leaf kind used when rendering a literal."""
        return f"_rt.TypeKind.{field_type.leaf.kind.name}"

    def family_references(self, field_type: FieldType) -> set[str]:
        leaf = field_type.leaf
        if leaf.kind.is_polymorphic and self.is_family(leaf.name):
            return {leaf.name}
        return set()

    @staticmethod
    def _has_scalar_default(field_type: FieldType) -> bool:
        return (
            not field_type.nullable
            and field_type.kind in SCALAR_DEFAULTS
            and field_type.name in BUILTIN_SCALAR_NAMES
        )


def field_attributes(class_info: ClassInfo, reserved: Iterable[str] = ()) -> list[str]:
    """Model attribute names of a class's fields, in schema order."""
    reserved = frozenset(reserved)
    return unique_names(field_attribute(f.name, reserved) for f in class_info.fields)


def input_attributes(class_info: ClassInfo, reserved: Iterable[str] = ()) -> list[str]:
    reserved = frozenset(reserved)
    return unique_names(field_attribute(f.name, reserved) for f in class_info.query_args)


def enum_members(class_info: ClassInfo) -> list[tuple[str, str]]:
    """``(member identifier, schema value)`` pairs of an enum, in schema order."""
    values = [value.name for value in class_info.enum_values]
    return list(zip(unique_names(enum_member_name(v) for v in values), values))
