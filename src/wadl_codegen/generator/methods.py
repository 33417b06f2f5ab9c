"""Method builder.

Turns WADL ``method`` elements, and child resources acting as sub-resource
locators, into method descriptors: verb, name, parameter bindings, request
payload and response type.
"""

import logging
import re
from types import MappingProxyType

from lxml import etree

from wadl_codegen.config import GeneratorOptions
from wadl_codegen.errors import UnsupportedParamStyleError
from wadl_codegen.generator.enums import build_enum, option_values
from wadl_codegen.generator.model import EnumType, MethodDescriptor, ParamBinding, ParamSource
from wadl_codegen.generator.naming import (
    class_name,
    class_package,
    first_char_upper,
    java_param_name,
    split_resource_id,
)
from wadl_codegen.generator.types import ImportSet, TypeResolver
from wadl_codegen.parser.document import first_child, wadl_elements

logger = logging.getLogger(__name__)

HTTP_OK_STATUSES = frozenset({"200", "201", "202", "203", "204"})
HTTP_VERBS = frozenset({"get", "put", "post", "delete", "head", "options", "patch"})
FORM_MEDIA_TYPE = "application/x-www-form-urlencoded"

PARAM_SOURCES = MappingProxyType({
    "template": ParamSource.PATH,
    "header": ParamSource.HEADER,
    "query": ParamSource.QUERY,
    "matrix": ParamSource.MATRIX,
})
RESOURCE_LEVEL_STYLES = frozenset({"template", "matrix"})
OPTIONAL_SOURCES = frozenset({ParamSource.QUERY, ParamSource.HEADER, ParamSource.MATRIX,
                              ParamSource.FORM})
AUTOBOXED_PRIMITIVES = MappingProxyType({
    "byte": "Byte",
    "short": "Short",
    "int": "Integer",
    "long": "Long",
    "float": "Float",
    "double": "Double",
    "boolean": "Boolean",
})

RESPONSE_CLASS = "javax.ws.rs.core.Response"
SOURCE_CLASS = "javax.xml.transform.Source"
FORM_MAP_CLASS = "javax.ws.rs.core.MultivaluedMap"
MULTIPART_CLASS = "org.apache.cxf.jaxrs.ext.multipart.MultipartBody"


def ok_response(responses: list[etree._Element]) -> etree._Element | None:
    """The success response: the first one without a status or with a 2xx status."""
    for response in responses:
        status = response.get("status", "")
        if not status or HTTP_OK_STATUSES.intersection(status.split()):
            return response
    return None


def is_method_matched(names: set[str], verb: str, method_id: str) -> bool:
    if not names:
        return False
    names = {name.lower() for name in names}
    return (verb in names
            or (method_id != verb and method_id.lower() in names)
            or names == {"*"})


def param_source(style: str) -> ParamSource:
    try:
        return PARAM_SOURCES[style]
    except KeyError:
        raise UnsupportedParamStyleError(style) from None


def path_segments(path: str) -> list[str]:
    return [segment for segment in path.split("/") if segment]


def is_true(value: str | None) -> bool:
    return (value or "").lower() == "true"


class MethodBuilder:
    def __init__(self, options: GeneratorOptions, types: TypeResolver,
                 enums: dict[tuple[str, str], EnumType]):
        self.options = options
        self.types = types
        self.enums = enums

    @property
    def wadl_ns(self) -> str:
        return self.options.wadl_namespace

    def xml_reps(self, reps: list[etree._Element]) -> list[etree._Element | None]:
        """Representations that name a grammar element, without duplicates.

        There is always at least one slot; ``None`` stands for "no element".
        """
        seen: set[str] = set()
        xml_reps: list[etree._Element | None] = []
        for rep in reps:
            value = rep.get("element", "")
            if (value and (":" in value or self.types.grammar.no_target_namespace)
                    and value not in seen):
                xml_reps.append(rep)
                seen.add(value)
        return xml_reps or [None]

    def actual_rep(self, reps: list[etree._Element],
                   xml_rep: etree._Element | None) -> etree._Element | None:
        if xml_rep is not None:
            return xml_rep
        for rep in reps:
            if first_child(rep, self.wadl_ns, "param") is not None:
                return rep
        return reps[0] if reps else None

    def build(self, method_el: etree._Element, resource_el: etree._Element, *, package: str,
              imports: ImportSet, current_path: str, inherited: tuple,
              is_subresource_method: bool) -> list[MethodDescriptor]:
        """Descriptors for one ``method``; several when XML representations get overloads."""
        verb = method_el.get("name", "").lower()
        if not verb:
            logger.warning("Method without a name in %s, skipping", resource_el.get("path", ""))
            return []
        if verb not in HTTP_VERBS:
            logger.warning("No JAX-RS annotation for HTTP method %s", verb.upper())
        method_id = method_el.get("id", "") or verb
        response_required = is_method_matched(self.options.response_methods, verb, method_id)
        is_async = not response_required and is_method_matched(
            self.options.suspended_async_methods, verb, method_id)

        responses = wadl_elements(method_el, "response", self.wadl_ns)
        requests = wadl_elements(method_el, "request", self.wadl_ns)
        request_el = requests[0] if requests else None
        request_reps = wadl_elements(request_el, "representation", self.wadl_ns)
        xml_reps = self.xml_reps(request_reps)
        source_required = len(xml_reps) > 1 and not self.options.support_multiple_xml_reps

        ok = ok_response(responses)
        consumes = _media_types(request_reps)
        produces = _media_types(wadl_elements(ok, "representation", self.wadl_ns))

        descriptors = []
        for xml_rep in xml_reps[:1] if source_required else xml_reps:
            suffix = ""
            if not source_required and xml_rep is not None and len(xml_reps) > 1:
                suffix = xml_rep.get("element", "").split(":", 1)[-1].replace("-", "")
            response_type = self.response_type(responses, imports, response_required, is_async)
            params = self.parameters(resource_el, inherited, is_subresource_method)
            rep = self.actual_rep(request_reps, xml_rep)
            bindings, payload = self.request_bindings(
                request_el, rep, params, source_required, package, imports)
            descriptors.append(MethodDescriptor(
                verb=verb.upper(),
                generated_name=self.method_name(method_id + suffix, verb, current_path),
                path_suffix=current_path,
                consumes=consumes,
                produces=produces,
                parameters=bindings,
                request_payload=payload,
                response_type=response_type,
                is_async=is_async,
            ))
        return descriptors

    def build_locator(self, resource_id: str, resource_el: etree._Element, *, parent_id: str,
                      package: str, imports: ImportSet, current_path: str,
                      inherited: tuple) -> MethodDescriptor:
        """``get<Name>()`` returning the class generated for a child resource with an id."""
        id_package, local = split_resource_id(resource_id, self.options.schema_package_map)
        schema_cls = self.types.schema_class_name(id_package, local)
        if schema_cls is None:
            local_name = class_name(local, True, self.options.generate_interfaces,
                                    self.types.type_names)
            qualified = f"{class_package(id_package, self.options.package_name)}.{local_name}"
        else:
            qualified = schema_cls
            local_name = schema_cls.rsplit(".", 1)[-1]
        if resource_id != parent_id:
            imports.add(qualified)

        params = self.parameters(resource_el, inherited, False)
        return MethodDescriptor(
            verb=None,
            generated_name="get" + local_name,
            path_suffix=current_path,
            parameters=[self.binding(p, package, imports) for p in params],
            response_type=local_name,
        )

    def method_name(self, name: str, verb: str, current_path: str) -> str:
        """Method name; a bare verb is completed with the capitalized path segments."""
        if name == verb:
            for segment in path_segments(current_path):
                segment = re.sub(r"[{}]", "", segment.split(";")[0])
                index = segment.find(":")
                if index > 0:
                    segment = segment[:index]
                name += first_char_upper(re.sub(r"\W", "", segment))
        return name.replace("-", "")

    def parameters(self, resource_el: etree._Element, inherited: tuple,
                   is_subresource_method: bool) -> list[etree._Element]:
        """Own params of the resource followed by inherited ones not shadowed by name.

        Template and matrix params of a sub-resource class already bind on its
        locator, so its methods leave them out.
        """
        params = []
        for param in wadl_elements(resource_el, "param", self.wadl_ns):
            if is_subresource_method and param.get("style") in RESOURCE_LEVEL_STYLES:
                continue
            params.append(param)
        names = {p.get("name") for p in params}
        for param in inherited:
            if param.get("name") not in names:
                params.append(param)
                names.add(param.get("name"))
        return params

    def response_type(self, responses: list[etree._Element], imports: ImportSet,
                      response_required: bool, is_async: bool) -> str:
        ok = None if is_async else ok_response(responses)
        reps = wadl_elements(ok, "representation", self.wadl_ns)

        if (not is_async and not response_required and len(responses) == 1
                and self.options.generate_response_if_headers_set
                and wadl_elements(responses[0], "param", self.wadl_ns)):
            return self.types.simple_name(imports, RESPONSE_CLASS)
        if not reps:
            if (self.options.use_void_for_empty_responses and not response_required) or is_async:
                return "void"
            return self.types.simple_name(imports, RESPONSE_CLASS)
        if response_required:
            return self.types.simple_name(imports, RESPONSE_CLASS)

        rep = self.actual_rep(reps, self.xml_reps(reps)[0])
        element_type = self.types.element_ref_name(rep, imports, True)
        if element_type is None:
            return self.types.simple_name(imports, RESPONSE_CLASS)
        return element_type

    def request_bindings(self, request_el: etree._Element | None, rep: etree._Element | None,
                         params: list[etree._Element], source_required: bool, package: str,
                         imports: ImportSet) -> tuple[list[ParamBinding], ParamBinding | None]:
        """Parameter bindings plus the request payload parameter, if there is one.

        A single form or multipart representation contributes its own params
        instead of a payload, unless the media type is mapped to a class.
        """
        param_els = list(params)
        form = multipart = form_params = False
        media_type = None
        if request_el is not None:
            param_els += wadl_elements(request_el, "param", self.wadl_ns)
            reps = wadl_elements(request_el, "representation", self.wadl_ns)
            if len(reps) == 1:
                media_type = reps[0].get("mediaType", "")
                if media_type == FORM_MEDIA_TYPE or media_type.startswith("multipart/"):
                    form = True
                    multipart = media_type.startswith("multipart/")
                    if media_type not in self.options.media_type_map:
                        rep_params = wadl_elements(reps[0], "param", self.wadl_ns)
                        param_els += rep_params
                        form_params = bool(rep_params)

        bindings = [self.binding(p, package, imports, form_params, multipart) for p in param_els]

        payload_type = payload_name = None
        if not form:
            if source_required:
                payload_type = self.types.simple_name(imports, SOURCE_CLASS)
                payload_name = "source"
            else:
                payload_type = self.types.element_ref_name(rep, imports, False)
                if payload_type is not None:
                    payload_name = payload_type.split("<")[0].lower()
                elif rep is not None:
                    param = first_child(rep, self.wadl_ns, "param")
                    if param is not None:
                        payload_type = self.types.primitive_type(param, imports)
                        payload_name = java_param_name(param.get("name", ""))
        elif not form_params:
            cls_name = self.options.media_type_map.get(media_type)
            if cls_name is None:
                cls_name = MULTIPART_CLASS if multipart else FORM_MAP_CLASS
            payload_type = self.types.simple_name(imports, cls_name)
            payload_name = "body" if multipart else "map"

        payload = None
        if payload_type is not None:
            payload = ParamBinding(source=ParamSource.BODY, name=payload_name,
                                   java_name=payload_name, type=payload_type)
        return bindings, payload

    def binding(self, param: etree._Element, package: str, imports: ImportSet,
                form_params: bool = False, multipart: bool = False) -> ParamBinding:
        source = param_source(param.get("style", ""))
        if source is ParamSource.QUERY and form_params:
            source = ParamSource.MULTIPART if multipart else ParamSource.FORM
        name = param.get("name", "")
        repeating = is_true(param.get("repeating"))
        required = is_true(param.get("required"))

        param_type = None
        if self.options.generate_enums:
            values = option_values(param, self.wadl_ns)
            if values:
                enum = build_enum(name, values, package)
                self.enums[(enum.package, enum.name)] = enum
                param_type = enum.name
        if param_type is None:
            param_type = self.types.primitive_type(param, imports)

        if (source in OPTIONAL_SOURCES and (repeating or not required)
                and param_type in AUTOBOXED_PRIMITIVES):
            param_type = AUTOBOXED_PRIMITIVES[param_type]
        if repeating:
            imports.add("java.util.List")
            param_type = f"List<{param_type}>"

        return ParamBinding(
            source=source,
            name=name,
            java_name=java_param_name(name),
            type=param_type,
            required=required,
            repeating=repeating,
            default_value=param.get("default") or None,
        )


def _media_types(reps: list[etree._Element]) -> list[str]:
    media_types: list[str] = []
    for rep in reps:
        media_type = rep.get("mediaType")
        if media_type and media_type not in media_types:
            media_types.append(media_type)
    return media_types
