"""Type resolution: maps WADL/XSD type references onto Java type names.

Resolution never changes state other than recording imports, so resolving
the same reference twice gives the same name.
"""

import re
from types import MappingProxyType

from lxml import etree

from wadl_codegen.config import XSD_NS, GeneratorOptions
from wadl_codegen.generator.naming import package_from_namespace
from wadl_codegen.parser.base import GrammarInfo
from wadl_codegen.parser.document import first_child

DEFAULT_TYPE = "String"

XSD_TYPE_MAP = MappingProxyType({
    "string": "String",
    "integer": "long",
    "float": "float",
    "double": "double",
    "int": "int",
    "long": "long",
    "short": "short",
    "byte": "byte",
    "boolean": "boolean",
    "unsignedInt": "long",
    "unsignedShort": "int",
    "unsignedByte": "short",
    "unsignedLong": "java.math.BigInteger",
    "decimal": "java.math.BigDecimal",
    "positiveInteger": "java.math.BigInteger",
    "QName": "javax.xml.namespace.QName",
    "duration": "javax.xml.datatype.Duration",
    "date": "java.util.Date",
    "dateTime": "java.util.Date",
    "time": "java.util.Date",
    "anyType": "String",
    "anyURI": "java.net.URI",
})


class ImportSet:
    """Classes a generated source file has to import."""

    def __init__(self, package: str):
        self.package = package
        self._names: set[str] = set()

    def add(self, cls_name: str) -> None:
        if cls_name.startswith("java.lang.") or "." not in cls_name:
            return
        self._names.add(cls_name)

    def __contains__(self, cls_name: str) -> bool:
        return cls_name in self._names

    def sorted(self) -> list[str]:
        """javax first, then alphabetical; classes from the file's own package are left out."""
        names = [n for n in self._names if n.rsplit(".", 1)[0] != self.package]
        return sorted(names, key=lambda n: (not n.startswith("javax"), n))


class TypeResolver:
    def __init__(self, options: GeneratorOptions, grammar: GrammarInfo, type_names: set[str]):
        self.options = options
        self.grammar = grammar
        self.type_names = type_names

    def package_for(self, namespace: str) -> str:
        return package_from_namespace(namespace, self.options.schema_package_map)

    def simple_name(self, imports: ImportSet, cls_name: str) -> str:
        """Import ``cls_name`` and return its simple name; ``X..Y`` becomes ``X<Y>``."""
        outer, sep, inner = cls_name.partition("..")
        if sep:
            return f"{self.simple_name(imports, outer)}<{self.simple_name(imports, inner)}>"
        imports.add(cls_name)
        return cls_name.rsplit(".", 1)[-1]

    def primitive_type(self, param: etree._Element, imports: ImportSet) -> str:
        """Java type of a ``param`` element's ``type`` attribute."""
        type_ref = param.get("type", "")
        if not type_ref:
            return DEFAULT_TYPE

        pair = type_ref.split(":")
        if len(pair) == 2:
            prefix, local = pair
            if local in XSD_TYPE_MAP:
                override = self.options.schema_type_map.get(f"{{{XSD_NS}}}{local}")
                return self.simple_name(imports, override or XSD_TYPE_MAP[local])
            return self.convert_ref(prefix, re.sub(r"[-_]", "", local), DEFAULT_TYPE, imports)
        return self.simple_name(imports, type_ref)

    def convert_ref(self, prefix: str, local: str, default: str | None,
                    imports: ImportSet) -> str | None:
        """Resolve a ``prefix:local`` grammar reference to a known class."""
        namespace = self.grammar.ns_map.get(prefix)
        if namespace is None and not (prefix == "" and self.grammar.no_target_namespace):
            return default
        namespace = namespace or ""
        cls_name = self.schema_class_name(self.package_for(namespace), local)
        if cls_name is None:
            cls_name = self.options.schema_type_map.get(f"{{{namespace}}}{local}")
        if cls_name is None:
            return default
        return self.simple_name(imports, cls_name)

    def schema_class_name(self, package: str, local: str) -> str | None:
        """Qualified name of the payload class for ``local`` in ``package``, if any.

        Tries the class name itself, then the type of an element called
        ``local`` (also with underscores removed, also in the type's own
        namespace), then the java type map.
        """
        cls_name = self.match_class_name(package, local)
        if cls_name is None:
            element_type = self.grammar.element_type_map.get(local)
            if element_type is not None:
                pair = element_type.split(":")
                type_local = pair[-1]
                cls_name = self.match_class_name(package, type_local)
                if cls_name is None and "_" in type_local:
                    cls_name = self.match_class_name(package, type_local.replace("_", ""))
                if cls_name is None and len(pair) == 2:
                    namespace = self.grammar.ns_map.get(pair[0])
                    if namespace is not None:
                        cls_name = self.match_class_name(self.package_for(namespace), type_local)
        if cls_name is None:
            cls_name = self.options.java_type_map.get(f"{package}.{local}")
        return cls_name

    def match_class_name(self, package: str, local: str | None) -> str | None:
        if local is None:
            return None
        wanted = f"{package}.{local}".lower()
        for type_name in sorted(self.type_names):
            if type_name.lower() == wanted:
                return type_name
        return None

    def element_ref_name(self, rep: etree._Element | None, imports: ImportSet,
                         check_primitive: bool) -> str | None:
        """Java type carried by a representation, or None if unknown."""
        if rep is None:
            return None
        element_ref = rep.get("element", "")
        if element_ref:
            pair = element_ref.split(":")
            if len(pair) == 2:
                return self.convert_ref(pair[0], pair[1], None, imports)
            if len(pair) == 1 and self.grammar.no_target_namespace:
                return self.convert_ref("", pair[0], None, imports)
            return None

        media_type = rep.get("mediaType", "")
        if media_type and media_type in self.options.media_type_map:
            return self.simple_name(imports, self.options.media_type_map[media_type])
        if check_primitive:
            param = first_child(rep, self.options.wadl_namespace, "param")
            if param is not None:
                return self.primitive_type(param, imports)
        return None
