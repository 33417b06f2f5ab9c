"""Java emitter: renders resource classes and enums with Jinja2 templates."""

import logging
from pathlib import Path
from types import MappingProxyType

from jinja2 import Environment, FileSystemLoader

from wadl_codegen.generator.model import (
    EnumType,
    GenerationResult,
    MethodDescriptor,
    ParamBinding,
    ParamSource,
    ResourceClass,
)
from wadl_codegen.generator.types import ImportSet

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"
CLASS_COMMENT = "/**\n * Created by wadl-codegen\n**/"

VERB_ANNOTATIONS = MappingProxyType({
    "GET": "javax.ws.rs.GET",
    "PUT": "javax.ws.rs.PUT",
    "POST": "javax.ws.rs.POST",
    "DELETE": "javax.ws.rs.DELETE",
    "HEAD": "javax.ws.rs.HEAD",
    "OPTIONS": "javax.ws.rs.OPTIONS",
    "PATCH": "javax.ws.rs.PATCH",
})
PARAM_ANNOTATIONS = MappingProxyType({
    ParamSource.PATH: "javax.ws.rs.PathParam",
    ParamSource.HEADER: "javax.ws.rs.HeaderParam",
    ParamSource.QUERY: "javax.ws.rs.QueryParam",
    ParamSource.MATRIX: "javax.ws.rs.MatrixParam",
    ParamSource.FORM: "javax.ws.rs.FormParam",
    ParamSource.MULTIPART: "org.apache.cxf.jaxrs.ext.multipart.Multipart",
})
PATH_ANNOTATION = "javax.ws.rs.Path"
CONSUMES_ANNOTATION = "javax.ws.rs.Consumes"
PRODUCES_ANNOTATION = "javax.ws.rs.Produces"
DEFAULT_VALUE_ANNOTATION = "javax.ws.rs.DefaultValue"
SUSPENDED_ANNOTATION = "javax.ws.rs.container.Suspended"
ASYNC_RESPONSE_CLASS = "javax.ws.rs.container.AsyncResponse"

PRIMITIVE_DEFAULTS = MappingProxyType({
    "boolean": "false",
    "byte": "0",
    "short": "0",
    "int": "0",
    "long": "0L",
    "float": "0f",
    "double": "0d",
})
TAB = "    "


def java_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class JavaEmitter:
    """Renders the intermediate representation to Java source files."""

    def __init__(self, templates_dir: Path = TEMPLATES_DIR):
        self.env = Environment(
            loader=FileSystemLoader(templates_dir),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.env.filters["java_string"] = java_string

    def render_resource(self, cls: ResourceClass) -> str:
        imports = ImportSet(cls.package)
        for name in cls.imports:
            imports.add(name)
        class_annotations = []
        if cls.path:
            class_annotations.append(self._annotation(imports, PATH_ANNOTATION, cls.path))
        methods = [self._method_lines(cls, method, imports) for method in cls.methods]
        template = self.env.get_template("resource.java.j2")
        return template.render(
            header=CLASS_COMMENT,
            cls=cls,
            imports=imports.sorted(),
            class_annotations=class_annotations,
            methods=methods,
        )

    def render_enum(self, enum: EnumType) -> str:
        template = self.env.get_template("enum.java.j2")
        return template.render(header=CLASS_COMMENT, enum=enum)

    def write(self, result: GenerationResult, out_dir: Path) -> list[str]:
        """Write every class and enum; a file that fails to write is logged and skipped."""
        written = []
        artifacts = [(cls.package, cls.name, self.render_resource(cls))
                     for cls in result.resource_classes]
        artifacts += [(enum.package, enum.name, self.render_enum(enum)) for enum in result.enums]
        for package, name, content in artifacts:
            file_path = out_dir.joinpath(*package.split(".")) / f"{name}.java"
            try:
                file_path.parent.mkdir(parents=True, exist_ok=True)
                file_path.write_text(content, encoding="utf-8")
            except OSError as e:
                logger.warning("Problem writing into %s: %s", file_path, e)
                continue
            written.append(str(file_path))
        return written

    # -- helpers --------------------------------------------------------------

    @staticmethod
    def _annotation(imports: ImportSet, cls_name: str, value: str | list[str] | None = None) -> str:
        imports.add(cls_name)
        text = "@" + cls_name.rsplit(".", 1)[-1]
        if isinstance(value, list):
            values = ", ".join(java_string(v) for v in value)
            text += f"({{{values}}})" if len(value) > 1 else f"({values})"
        elif value is not None:
            text += f"({java_string(value)})"
        return text

    def _method_lines(self, cls: ResourceClass, method: MethodDescriptor,
                      imports: ImportSet) -> list[str]:
        lines = []
        if cls.annotated:
            if method.verb in VERB_ANNOTATIONS:
                lines.append(self._annotation(imports, VERB_ANNOTATIONS[method.verb]))
            if method.consumes:
                lines.append(self._annotation(imports, CONSUMES_ANNOTATION, method.consumes))
            if method.produces:
                lines.append(self._annotation(imports, PRODUCES_ANNOTATION, method.produces))
            if method.path_suffix and method.path_suffix != "/":
                lines.append(self._annotation(imports, PATH_ANNOTATION, method.path_suffix))

        params = [self._param(cls, p, imports) for p in method.parameters]
        if method.request_payload is not None:
            params.append(f"{method.request_payload.type} {method.request_payload.java_name}")
        if method.is_async:
            suspended = self._annotation(imports, SUSPENDED_ANNOTATION)
            imports.add(ASYNC_RESPONSE_CLASS)
            params.append(f"{suspended} AsyncResponse async")

        signature = f"{method.response_type} {method.generated_name}({', '.join(params)})"
        if cls.kind == "interface":
            lines.append(signature + ";")
            return lines

        lines.append(f"public {signature} {{")
        lines.append(TAB + "//TODO: implement")
        if method.returns_value:
            lines.append(TAB + f"return {PRIMITIVE_DEFAULTS.get(method.response_type, 'null')};")
        lines.append("}")
        return lines

    def _param(self, cls: ResourceClass, param: ParamBinding, imports: ImportSet) -> str:
        text = f"{param.type} {param.java_name}"
        if not cls.annotated:
            return text
        annotations = [self._annotation(imports, PARAM_ANNOTATIONS[param.source], param.name)]
        if param.default_value:
            annotations.append(
                self._annotation(imports, DEFAULT_VALUE_ANNOTATION, param.default_value))
        return " ".join(annotations + [text])
