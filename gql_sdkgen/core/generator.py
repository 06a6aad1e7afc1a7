"""Code generator that turns a TypeGraph into a Python SDK package.

Renders Jinja2 templates, one artifact per schema type:

    <package>/__init__.py            roots, forward-reference rebuild
    <package>/enums/<module>.py      one per enum
    <package>/inputs/<module>.py     one per input type
    <package>/models/<module>.py     result holder and selection protocol
                                     of each object, interface and union
    <package>/families/<module>.py   marker and registry of each
                                     interface/union with members

Supports custom templates via the template_dir parameter:
    generator = CodeGenerator(graph, "github", sink, template_dir="./my_templates")

Template lookup order:
1. User's template directory (if provided)
2. Package default templates
"""

import ast
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from jinja2 import (
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    PackageLoader,
    TemplateError,
    select_autoescape,
)

from .errors import GenerationError
from .hooks import HookRunner
from .ir import ClassInfo, TypeGraph, TypeKind
from .naming import (
    FAMILIES_SUBPACKAGE,
    MODELS_SUBPACKAGE,
    SUBPACKAGES,
    NameTable,
    TypeAnnotator,
    enum_members,
    field_attributes,
    input_attributes,
    safe_docstring,
    snake_case,
)
from .protocol_emitter import QueryProtocolEmitter
from .sink import ArtifactSink

logger = logging.getLogger(__name__)

KIND_LABELS = {
    TypeKind.OBJECT: "object",
    TypeKind.INTERFACE: "interface",
    TypeKind.UNION: "union",
}


@dataclass
class FieldSpec:
    """A field declaration of a generated pydantic class."""
    attribute: str
    declaration: str
    kind: str = ""


@dataclass
class GenerationReport:
    """Summary of one ``emit`` pass."""
    package_name: str
    artifacts: list[str] = field(default_factory=list)
    entry_points: list[str] = field(default_factory=list)
    failures: list[GenerationError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class CodeGenerator:
    """Generates an SDK package from a TypeGraph.

    Each type is emitted independently on a thread pool; the TypeGraph is
    only read. Templates in template_dir take precedence over the built-in
    templates.

    Available templates to override:
        - enum.py.j2 - Enum generation
        - input.py.j2 - Input type generation
        - model.py.j2 - Result holder and selection builder generation
        - family.py.j2 - Interface/union family markers
        - package_init.py.j2 - Package entry point

    Example:
        generator = CodeGenerator(graph, "github", DirectorySink("./generated"))
        report = generator.emit()
    """

    def __init__(
        self,
        type_graph: TypeGraph,
        package_name: str,
        sink: ArtifactSink,
        *,
        template_dir: Optional[str] = None,
        hooks: Iterable[Any] = (),
        max_workers: int = 8,
        fail_fast: bool = True,
    ):
        """Initialize the code generator.

        Args:
            type_graph: The crawled model of the schema
            package_name: Dotted name of the package to generate
            sink: Destination of the generated artifacts
            template_dir: Optional directory with custom Jinja2 templates.
                          Templates here override the built-in templates.
            hooks: Pre- and post-generation hooks, run in order
            max_workers: Size of the thread pool emitting types
            fail_fast: Abort on the first failing artifact instead of
                       logging it and carrying on
        """
        self.type_graph = type_graph
        self.package_name = package_name
        self.sink = sink
        self.template_dir = template_dir
        self.hooks = hooks if isinstance(hooks, HookRunner) else HookRunner(hooks)
        self.max_workers = max_workers
        self.fail_fast = fail_fast

        # Build template loader - custom templates take precedence
        loaders = []
        if template_dir:
            template_path = Path(template_dir)
            if template_path.is_dir():
                loaders.append(FileSystemLoader(str(template_path)))
        loaders.append(PackageLoader("gql_sdkgen", "templates"))

        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.env.filters["repr"] = repr
        self.env.filters["snake_case"] = snake_case
        self.env.filters["safe_docstring"] = safe_docstring

        self._emitters = {
            TypeKind.ENUM: self._emit_enum,
            TypeKind.INPUT_OBJECT: self._emit_input,
            TypeKind.OBJECT: self._emit_model,
            TypeKind.INTERFACE: self._emit_model,
            TypeKind.UNION: self._emit_model,
        }

    def emit(self) -> GenerationReport:
        """Generate every artifact and hand it to the sink.

        Raises:
            GenerationError: On the first failing artifact when fail_fast is set
        """
        graph = self.hooks.run_pre_hooks(self.type_graph)
        self.graph = graph
        self.names = NameTable(graph, self.package_name)
        self.annotator = TypeAnnotator(graph, self.names)
        self.protocol_emitter = QueryProtocolEmitter(graph, self.names, self.annotator)

        report = GenerationReport(self.package_name)
        report.entry_points = [
            c.name for c in (graph.query_class, graph.mutation_class) if c is not None
        ]
        for name in sorted(graph.class_map):
            if graph.collision_count(name) > 1:
                logger.info(
                    "Type %s collides case-insensitively; emitted as module %s",
                    name,
                    self.names.module_name(name),
                )

        classes = [graph.class_map[name] for name in sorted(graph.class_map)]
        logger.info("Generating %d types into package %s", len(classes), self.package_name)

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = [pool.submit(self._emit_class, class_info) for class_info in classes]
            for future in futures:
                try:
                    report.artifacts.extend(future.result())
                except GenerationError as e:
                    if self.fail_fast:
                        for pending in futures:
                            pending.cancel()
                        raise
                    logger.error("%s", e)
                    report.failures.append(e)

        for emit_package in (self._emit_subpackages, self._emit_package_init):
            try:
                report.artifacts.extend(emit_package())
            except GenerationError as e:
                if self.fail_fast:
                    raise
                logger.error("%s", e)
                report.failures.append(e)

        logger.info(
            "Generated %d artifacts (%d failed)", len(report.artifacts), len(report.failures)
        )
        return report

    def _emit_class(self, class_info: ClassInfo) -> list[str]:
        logger.debug("Emitting %s (%s)", class_info.name, class_info.type_kind.value)
        return self._emitters[class_info.type_kind](class_info)

    def _write(self, path: str, template_name: str, context: Dict[str, Any]) -> str:
        """Render a template, run post hooks, validate and write the artifact."""
        try:
            content = self.env.get_template(template_name).render(context)
        except TemplateError as e:
            raise GenerationError(path, f"template {template_name} failed: {e}") from e
        return self._write_text(path, content)

    def _write_text(self, path: str, content: str) -> str:
        content = self.hooks.run_post_hooks(path, content)
        if path.endswith(".py"):
            try:
                ast.parse(content)
            except SyntaxError as e:
                raise GenerationError(path, f"generated invalid Python: {e}") from e
        try:
            self.sink.write(path, content)
        except OSError as e:
            raise GenerationError(path, f"could not write artifact: {e}") from e
        return path

    def _emit_enum(self, class_info: ClassInfo) -> list[str]:
        context = {
            "schema_name": class_info.name,
            "class_name": self.names.class_name(class_info.name),
            "description": safe_docstring(class_info.description),
            "members": enum_members(class_info),
        }
        return [self._write(self.names.file_path(class_info), "enum.py.j2", context)]

    def _emit_input(self, class_info: ClassInfo) -> list[str]:
        fields = []
        for info, attribute in zip(
            class_info.query_args, input_attributes(class_info, self.names.class_names)
        ):
            hint = self.annotator.input_hint(info.field_type)
            options = f"alias={info.name!r}"
            if info.description:
                options += f", description={info.description!r}"
            if info.field_type.nullable:
                hint = f"_t.Optional[{hint}]"
                options = "default=None, " + options
            fields.append(FieldSpec(
                attribute=attribute,
                declaration=f"{attribute}: {hint} = _p.Field({options})",
                kind=self.annotator.kind_expression(info.field_type),
            ))
        context = {
            "schema_name": class_info.name,
            "class_name": self.names.class_name(class_info.name),
            "description": safe_docstring(class_info.description),
            "fields": fields,
        }
        return [self._write(self.names.file_path(class_info), "input.py.j2", context)]

    def _emit_model(self, class_info: ClassInfo) -> list[str]:
        """Emit the result holder and selection protocol, plus the family marker of a head."""
        name = class_info.name
        protocol = self.protocol_emitter.emit(class_info)

        families = sorted(p for p in class_info.parent_classes if self.annotator.is_family(p))
        if class_info.is_family_head:
            families = sorted(set(families) | {name})
        bases = [f"{self.names.family_alias(f)}.{self.names.marker_name(f)}" for f in families]
        bases.append("_rt.GraphModel")

        family_imports = set(families)
        fields = []
        for info, attribute in zip(
            class_info.fields, field_attributes(class_info, self.names.class_names)
        ):
            family_imports |= self.annotator.family_references(info.field_type)
            options = (
                f"default={self.annotator.result_default(info.field_type)}, alias={info.name!r}"
            )
            if info.description:
                options += f", description={info.description!r}"
            fields.append(FieldSpec(
                attribute=attribute,
                declaration=(
                    f"{attribute}: {self.annotator.result_hint(info.field_type)}"
                    f" = _p.Field({options})"
                ),
            ))

        imports = [
            (FAMILIES_SUBPACKAGE, self.names.module_name(f), self.names.family_alias(f))
            for f in sorted(family_imports)
        ]
        imports += [
            (SUBPACKAGES[TypeKind.ENUM], self.names.module_name(e), self.names.enum_alias(e))
            for e in sorted(protocol.enum_references)
        ]

        context = {
            "schema_name": name,
            "class_name": self.names.class_name(name),
            "kind_label": KIND_LABELS[class_info.type_kind],
            "description": safe_docstring(class_info.description),
            "api_host": self.graph.api_host,
            "bases": bases,
            "imports": imports,
            "fields": fields,
            "protocol": protocol,
        }
        paths = [self._write(self.names.file_path(class_info), "model.py.j2", context)]
        if class_info.is_family_head:
            paths.append(self._emit_family(class_info))
        return paths

    def _emit_family(self, class_info: ClassInfo) -> str:
        members = [
            (
                child,
                f"{self.names.module_path(self.graph.class_map[child])}:{self.names.class_name(child)}",
            )
            for child in sorted(class_info.child_classes)
            if child in self.graph.class_map
        ]
        context = {
            "schema_name": class_info.name,
            "kind_label": KIND_LABELS[class_info.type_kind],
            "marker_name": self.names.marker_name(class_info.name),
            "members": members,
        }
        path = self.names.family_module_path(class_info.name).replace(".", "/") + ".py"
        return self._write(path, "family.py.j2", context)

    def _emit_subpackages(self) -> list[str]:
        root = self.package_name.replace(".", "/")
        subpackages = sorted({*SUBPACKAGES.values(), MODELS_SUBPACKAGE, FAMILIES_SUBPACKAGE})
        return [
            self._write_text(
                f"{root}/{subpackage}/__init__.py",
                f'"""Generated {subpackage} of the {self.package_name} SDK."""\n',
            )
            for subpackage in subpackages
        ]

    def _emit_package_init(self) -> list[str]:
        graph = self.graph
        roots = []
        for class_info in (graph.query_class, graph.mutation_class):
            if class_info is None:
                continue
            roots.append({
                "module": self.names.module_name(class_info.name),
                "class_name": self.names.class_name(class_info.name),
                "selection_name": self.names.selection_name(class_info.name),
                "builder_name": self.names.builder_name(class_info.name),
            })
        schema_classes = [
            (self.names.module_path(c), self.names.class_name(c.name))
            for c in (graph.class_map[name] for name in sorted(graph.class_map))
        ]
        context = {
            "api_host": graph.api_host,
            "roots": roots,
            "query": roots[0],
            "schema_classes": schema_classes,
        }
        path = self.package_name.replace(".", "/") + "/__init__.py"
        return [self._write(path, "package_init.py.j2", context)]


def emit(package_name: str, sink: ArtifactSink, type_graph: TypeGraph, **options) -> GenerationReport:
    """Generate the SDK for ``type_graph`` into ``sink``.

    Keyword options are passed to :class:`CodeGenerator`.
    """
    return CodeGenerator(type_graph, package_name, sink, **options).emit()
