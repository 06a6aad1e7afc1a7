"""Selection protocol of generated result holders.

For every object, interface and union type the generator emits a compiled
selection class and a selection builder with one method per schema field:

    UserSelectionBuilder().fetch_name().fetch_friends(friends, first=10)

This module works out those methods: their names, parameters, defaults and
the wire arguments they render. Interface fields get one extra variant per
implementing type, union fields only the variants:

    fetch_node(selection: NodeSelection, id: str)
    fetch_node_as_user(selection: UserSelection, id: str)
"""

import json
import logging
from dataclasses import dataclass, field

from .ir import ClassInfo, FieldInfo, TypeGraph, TypeKind
from .naming import (
    NameTable,
    TypeAnnotator,
    enum_members,
    field_attributes,
    param_name,
    safe_docstring,
    snake_case,
    unique_names,
)

logger = logging.getLogger(__name__)

QUERY_PREFIX = "fetch"
MUTATION_PREFIX = "invoke"


@dataclass
class ParamSpec:
    """A keyword parameter of a generated method."""
    name: str
    hint: str
    default: str | None = None  # Python expression; None means required

    @property
    def required(self) -> bool:
        return self.default is None

    @property
    def declaration(self) -> str:
        if self.default is None:
            return f"{self.name}: {self.hint}"
        return f"{self.name}: {self.hint} = {self.default}"


@dataclass
class ArgumentSpec:
    """A field argument as rendered into wire text."""
    wire_name: str
    param: str
    kind: str


@dataclass
class SelectorSpec:
    """One ``fetch_*``/``invoke_*`` method of a selection builder."""
    method_name: str
    field_name: str
    attribute: str
    return_hint: str
    params: list[ParamSpec] = field(default_factory=list)
    arguments: list[ArgumentSpec] = field(default_factory=list)
    selection_hint: str | None = None
    on_type: str | None = None
    description: str = ""

    @property
    def parameters(self) -> str:
        """Parameter list after ``self``/``cls``, with a leading comma."""
        declarations = [p.declaration for p in self.params]
        if self.selection_hint:
            declarations.insert(0, f"selection: {self.selection_hint}")
        return "".join(f", {d}" for d in declarations)

    @property
    def call_arguments(self) -> str:
        """Arguments forwarding this method's parameters to the builder method."""
        values = [f"{p.name}={p.name}" for p in self.params]
        if self.selection_hint:
            values.insert(0, "selection")
        return ", ".join(values)

    @property
    def wire_arguments(self) -> str:
        """``(name, value, kind)`` triples in schema order, as a Python list."""
        triples = [f'("{a.wire_name}", {a.param}, {a.kind})' for a in self.arguments]
        return "[" + ", ".join(triples) + "]"


@dataclass
class ProtocolSpec:
    """Everything a model module needs to emit the selection protocol of one type."""
    class_name: str
    selection_name: str
    builder_name: str
    selectors: list[SelectorSpec]
    root: str | None = None  # "query" or "mutation"
    enum_references: set[str] = field(default_factory=set)

    @property
    def is_query_root(self) -> bool:
        return self.root == "query"

    @property
    def is_mutation_root(self) -> bool:
        return self.root == "mutation"


class QueryProtocolEmitter:
    """Builds the ProtocolSpec of each object, interface and union type."""

    def __init__(self, type_graph: TypeGraph, names: NameTable, annotator: TypeAnnotator):
        self.type_graph = type_graph
        self.names = names
        self.annotator = annotator

    def emit(self, class_info: ClassInfo) -> ProtocolSpec:
        name = class_info.name
        root = None
        if self.type_graph.is_mutation_root(name):
            root = "mutation"
        elif self.type_graph.is_root(name):
            root = "query"
        prefix = MUTATION_PREFIX if root == "mutation" else QUERY_PREFIX

        protocol = ProtocolSpec(
            class_name=self.names.class_name(name),
            selection_name=self.names.selection_name(name),
            builder_name=self.names.builder_name(name),
            selectors=[],
            root=root,
        )
        # method names are not affected by class names; model attributes are
        attributes = field_attributes(class_info, self.names.class_names)
        for field_info, method_base, attribute in zip(
            class_info.fields, field_attributes(class_info), attributes
        ):
            protocol.selectors.extend(
                self._selectors(field_info, method_base, attribute, prefix, protocol)
            )

        method_names = unique_names(s.method_name for s in protocol.selectors)
        for selector, method_name in zip(protocol.selectors, method_names):
            selector.method_name = method_name
        return protocol

    def _selectors(
        self,
        field_info: FieldInfo,
        method_base: str,
        attribute: str,
        prefix: str,
        protocol: ProtocolSpec,
    ) -> list[SelectorSpec]:
        params, arguments = self._arguments(field_info, protocol)
        leaf = field_info.field_type.leaf

        def selector(method_name, selection_hint=None, on_type=None):
            return SelectorSpec(
                method_name=method_name,
                field_name=field_info.name,
                attribute=attribute,
                return_hint=self.annotator.result_hint(field_info.field_type),
                params=params,
                arguments=arguments,
                selection_hint=selection_hint,
                on_type=on_type,
                description=safe_docstring(field_info.description),
            )

        base_name = f"{prefix}_{method_base}"
        if not leaf.kind.is_compound:
            return [selector(base_name)]

        members = self._members(leaf.name)
        selectors = []
        if leaf.kind is not TypeKind.UNION or not members:
            selectors.append(selector(base_name, self.names.selection_name(leaf.name)))
        if leaf.kind.is_polymorphic:
            for member in members:
                selectors.append(selector(
                    f"{base_name}_as_{snake_case(member).lstrip('_')}",
                    self.names.selection_name(member),
                    on_type=member,
                ))
        return selectors

    def _members(self, family: str) -> list[str]:
        class_info = self.type_graph.get(family)
        if class_info is None:
            return []
        return sorted(c for c in class_info.child_classes if c in self.type_graph.class_map)

    def _arguments(
        self, field_info: FieldInfo, protocol: ProtocolSpec
    ) -> tuple[list[ParamSpec], list[ArgumentSpec]]:
        """Parameters (required first) and wire arguments (schema order) of a field."""
        args = field_info.field_args or []
        names = unique_names(param_name(arg.name) for arg in args)
        required, optional, arguments = [], [], []
        for arg, name in zip(args, names):
            field_type = arg.field_type
            hint = self.annotator.input_hint(field_type)
            arguments.append(ArgumentSpec(arg.name, name, self.annotator.kind_expression(field_type)))

            if field_type.nullable:
                optional.append(ParamSpec(name, f"_t.Optional[{hint}]", "None"))
                continue
            if arg.default_value is None:
                required.append(ParamSpec(name, hint))
                continue
            default = self.python_default(arg)
            if default is None:
                # the server applies its own default when the argument is left out
                optional.append(ParamSpec(name, f"_t.Optional[{hint}]", "None"))
                continue
            if field_type.kind is TypeKind.ENUM:
                protocol.enum_references.add(field_type.name)
            optional.append(ParamSpec(name, hint, default))
        return required + optional, arguments

    def python_default(self, arg: FieldInfo) -> str | None:
        """Python expression for a schema default value, or None if unsupported.

        Supported are strings, numbers, booleans and enum values; lists, input
        objects and null are not.
        """
        field_type = arg.field_type
        text = arg.default_value
        kind = field_type.kind
        try:
            if kind in (TypeKind.STRING, TypeKind.ID):
                value = json.loads(text)
                return repr(value) if isinstance(value, str) else None
            if kind is TypeKind.INT:
                return repr(int(text))
            if kind is TypeKind.FLOAT:
                return repr(float(text))
        except ValueError:
            logger.debug("Unsupported default %r for argument %s", text, arg.name)
            return None
        if kind is TypeKind.BOOLEAN and text in ("true", "false"):
            return "True" if text == "true" else "False"
        if kind is TypeKind.ENUM:
            return self._enum_default(field_type.name, text)
        return None

    def _enum_default(self, enum_name: str, text: str) -> str | None:
        class_info = self.type_graph.get(enum_name)
        if class_info is None:
            return None
        for member, value in enum_members(class_info):
            if value == text:
                alias = self.names.enum_alias(enum_name)
                return f"{alias}.{self.names.class_name(enum_name)}.{member}"
        return None
