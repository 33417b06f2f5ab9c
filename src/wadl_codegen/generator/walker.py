"""Source generator: walks a WADL resource tree into resource classes.

One ``SourceGenerator.build`` call reads a document, compiles its grammar,
and produces the intermediate representation of every resource class and
enum; ``generate`` also writes the Java sources.
"""

import logging
from pathlib import Path

from lxml import etree

from wadl_codegen.config import GeneratorOptions
from wadl_codegen.errors import WadlCodegenError
from wadl_codegen.generator.emitter import JavaEmitter
from wadl_codegen.generator.methods import RESOURCE_LEVEL_STYLES, MethodBuilder
from wadl_codegen.generator.model import EnumType, GenerationResult, MethodDescriptor, ResourceClass
from wadl_codegen.generator.naming import (
    class_name,
    class_package,
    resource_id_from_path,
    split_resource_id,
)
from wadl_codegen.generator.schema import DomSchemaCompiler, SchemaCompiler
from wadl_codegen.generator.types import ImportSet, TypeResolver
from wadl_codegen.parser.base import Application, GrammarInfo, ResolvedResource
from wadl_codegen.parser.document import DocumentLoader, read_document, wadl_elements
from wadl_codegen.parser.grammar import build_grammar_info, collect_schemas
from wadl_codegen.parser.references import ReferenceResolver

logger = logging.getLogger(__name__)

CODE_TYPE_GRAMMAR = "grammar"
CODE_TYPE_PROXY = "proxy"
CODE_TYPE_WEB = "web"


class GenerationContext:
    """State of one generation run; never shared between runs."""

    def __init__(self, app: Application):
        self.app = app
        self.type_names: set[str] = set()
        self.grammar = GrammarInfo()
        self.resource_class_names: set[str] = set()
        self.classes: list[ResourceClass] = []
        self.enums: dict[tuple[str, str], EnumType] = {}
        self.diagnostics: list[str] = []
        self.types: TypeResolver | None = None
        self.methods: MethodBuilder | None = None
        self.references: ReferenceResolver | None = None


class SourceGenerator:
    def __init__(self, options: GeneratorOptions | None = None,
                 loader: DocumentLoader | None = None,
                 compiler: SchemaCompiler | None = None,
                 emitter: JavaEmitter | None = None):
        self.options = options or GeneratorOptions()
        self.loader = loader or DocumentLoader()
        self.compiler = compiler or DomSchemaCompiler(self.options, self.loader)
        self.emitter = emitter or JavaEmitter()

    @property
    def wadl_ns(self) -> str:
        return self.options.wadl_namespace

    def generate(self, wadl: str, out_dir: Path, wadl_path: str | None = None,
                 code_type: str = CODE_TYPE_WEB) -> GenerationResult:
        """Build the resource classes of ``wadl`` and write them under ``out_dir``."""
        result = self.build(wadl, wadl_path, code_type)
        result.written_files = self.emitter.write(result, out_dir)
        return result

    def build(self, wadl: str, wadl_path: str | None = None,
              code_type: str = CODE_TYPE_WEB) -> GenerationResult:
        app = Application(root=read_document(wadl, wadl_path), path=wadl_path)
        ctx = GenerationContext(app)
        ctx.grammar = self._schema_code_and_info(ctx, app)
        ctx.types = TypeResolver(self.options, ctx.grammar, ctx.type_names)
        ctx.methods = MethodBuilder(self.options, ctx.types, ctx.enums)
        ctx.references = ReferenceResolver(
            self.loader, self.wadl_ns, lambda ref_app: self._schema_code_and_info(ctx, ref_app))

        if code_type != CODE_TYPE_GRAMMAR:
            self._resource_classes(ctx)

        return GenerationResult(
            resource_classes=ctx.classes,
            enums=list(ctx.enums.values()),
            type_names=sorted(ctx.type_names),
            diagnostics=ctx.diagnostics,
        )

    def _schema_code_and_info(self, ctx: GenerationContext, app: Application) -> GrammarInfo:
        schemas = collect_schemas(app, self.loader, self.wadl_ns)
        if schemas and not self.options.skip_schema_generation:
            compiled = self.compiler.compile(schemas)
            ctx.type_names.update(compiled.type_names)
            for message in compiled.diagnostics:
                logger.info(message)
            ctx.diagnostics.extend(compiled.diagnostics)
        return build_grammar_info(app, schemas, self.loader)

    def _resource_classes(self, ctx: GenerationContext) -> None:
        resources = wadl_elements(ctx.app.root, "resources", self.wadl_ns)
        if len(resources) != 1:
            raise WadlCodegenError("Single WADL resources element is expected")
        resource_els = wadl_elements(resources[0], "resource", self.wadl_ns)
        if not resource_els:
            raise WadlCodegenError("WADL has no resource elements")

        for resource_el in resource_els:
            resolved = ctx.references.resolve(ctx.app, resource_el, ctx.grammar)
            self._write_class(ctx, resolved, self.options.generate_interfaces, is_root=True)
            if self.options.generate_interfaces and self.options.generate_impl:
                self._write_class(ctx, resolved, False, is_root=True)
            if self.options.resource_name is not None:
                break

    def _write_class(self, ctx: GenerationContext, resolved: ResolvedResource,
                     interface_mode: bool, is_root: bool) -> None:
        resource_id = resolved.id
        if is_root and self.options.resource_name is not None:
            resource_id = self.options.resource_name
        if not resource_id:
            resource_id = resource_id_from_path(resolved.path)

        id_package, local = split_resource_id(resource_id, self.options.schema_package_map)
        if ctx.types.schema_class_name(id_package, local) is not None:
            logger.debug("Resource %s is a payload class, not generated", resource_id)
            return
        name = class_name(local, interface_mode, self.options.generate_interfaces, ctx.type_names)
        if name in ctx.resource_class_names:
            return
        ctx.resource_class_names.add(name)

        package = class_package(id_package, self.options.package_name)
        annotated = interface_mode or (not self.options.generate_interfaces
                                       and self.options.generate_impl)
        implements = None
        if self.options.generate_interfaces and not interface_mode:
            implements = class_name(local, True, True, ctx.type_names)

        imports = ImportSet(package)
        methods: list[MethodDescriptor] = []
        self._walk(ctx, resolved.element, resolved.app, resolved.id, methods,
                   package=package, imports=imports, is_root=is_root,
                   current_path="", inherited=())

        logger.debug("Resource class %s.%s with %d methods", package, name, len(methods))
        ctx.classes.append(ResourceClass(
            package=package,
            name=name,
            kind="interface" if interface_mode else "class",
            path=resolved.path if is_root and annotated and resolved.path else None,
            implements=implements,
            annotated=annotated,
            methods=methods,
            imports=imports.sorted(),
        ))
        self._write_subresource_classes(ctx, resolved.element, resolved.app,
                                        interface_mode, resource_id)

    def _walk(self, ctx: GenerationContext, resource_el: etree._Element, app: Application,
              resource_id: str, methods: list[MethodDescriptor], *, package: str,
              imports: ImportSet, is_root: bool, current_path: str, inherited: tuple) -> None:
        """Collect the methods of a resource and of its id-less descendants.

        ``inherited`` is never modified; a resource without methods of its own
        hands its template and matrix params down to its children in a new tuple.
        """
        method_els = wadl_elements(resource_el, "method", self.wadl_ns)
        for method_el in method_els:
            methods.extend(ctx.methods.build(
                method_el, resource_el, package=package, imports=imports,
                current_path=current_path, inherited=inherited,
                is_subresource_method=not is_root and bool(resource_id)))

        child_inherited = inherited
        if self.options.inherit_resource_params and not method_els:
            child_inherited = inherited + tuple(
                p for p in wadl_elements(resource_el, "param", self.wadl_ns)
                if p.get("style") in RESOURCE_LEVEL_STYLES)

        for child_el in wadl_elements(resource_el, "resource", self.wadl_ns):
            path = child_el.get("path", "")
            if not path.startswith("/"):
                path = "/" + path
            child_path = current_path + path.replace("//", "/")
            child = ctx.references.resolve(app, child_el, ctx.grammar)
            if not child.id:
                self._walk(ctx, child.element, child.app, "", methods,
                           package=package, imports=imports, is_root=False,
                           current_path=child_path, inherited=child_inherited)
            else:
                methods.append(ctx.methods.build_locator(
                    child.id, child.element, parent_id=resource_id, package=package,
                    imports=imports, current_path=child_path, inherited=child_inherited))

    def _write_subresource_classes(self, ctx: GenerationContext, resource_el: etree._Element,
                                   app: Application, interface_mode: bool,
                                   resource_id: str) -> None:
        """Write the classes of id-carrying descendants.

        A child with an id is handled by its own class, which covers its
        descendants. Id-less children and existing Java classes are descended
        into here.
        """
        for child_el in wadl_elements(resource_el, "resource", self.wadl_ns):
            child = ctx.references.resolve(app, child_el, ctx.grammar)
            if not child.id or child.id.startswith(("{java", "java")):
                self._write_subresource_classes(ctx, child.element, child.app, interface_mode,
                                                resource_id)
            elif child.id != resource_id:
                self._write_class(ctx, child, interface_mode, is_root=False)
