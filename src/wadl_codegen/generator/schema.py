"""Schema compilation collaborator.

Turning a grammar into payload classes is delegated to a ``SchemaCompiler``.
The generator only needs the names of the classes it produces.
"""

import logging
import re
from typing import Protocol

from pydantic import BaseModel

from wadl_codegen.config import XSD_NS, GeneratorOptions
from wadl_codegen.generator.naming import package_from_namespace
from wadl_codegen.parser.base import SchemaInfo
from wadl_codegen.parser.document import DocumentLoader
from wadl_codegen.parser.grammar import iter_schema_tree

logger = logging.getLogger(__name__)


class CompileResult(BaseModel):
    type_names: list[str] = []
    diagnostics: list[str] = []


class SchemaCompiler(Protocol):
    def compile(self, schemas: list[SchemaInfo]) -> CompileResult:
        ...


def to_class_name(name: str) -> str:
    """``book_list-item`` -> ``BookListItem``."""
    parts = [p for p in re.split(r"[^A-Za-z0-9]+", name) if p]
    cls_name = "".join(p[0].upper() + p[1:] for p in parts)
    if cls_name and cls_name[0].isdigit():
        cls_name = "_" + cls_name
    return cls_name


class DomSchemaCompiler:
    """Names the classes a JAXB-style compiler would generate, without writing them.

    Covers named complex types, enumerated simple types and elements with an
    anonymous complex type, including everything reachable by ``xs:include``.
    """

    def __init__(self, options: GeneratorOptions, loader: DocumentLoader):
        self.options = options
        self.loader = loader

    def compile(self, schemas: list[SchemaInfo]) -> CompileResult:
        result = CompileResult()
        seen: set[str] = set()
        visited: set[str] = set()
        for schema in schemas:
            if schema.xml_schema is None:
                result.diagnostics.append(
                    f"Schema {schema.system_id or '<inline>'} was named from its DOM only")
            package = package_from_namespace(schema.namespace, self.options.schema_package_map)
            for schema_el, _ in iter_schema_tree(schema.element, schema.system_id,
                                                 self.loader, visited):
                for local in self._declared_names(schema_el):
                    cls_name = f"{package}.{to_class_name(local)}"
                    if cls_name.lower() in seen:
                        result.diagnostics.append(f"Duplicate class {cls_name} ignored")
                        continue
                    seen.add(cls_name.lower())
                    result.type_names.append(cls_name)
        logger.debug("Schema classes: %s", result.type_names)
        return result

    @staticmethod
    def _declared_names(schema_el) -> list[str]:
        names = []
        for el in schema_el:
            if not isinstance(el.tag, str) or not el.get("name"):
                continue
            if el.tag == f"{{{XSD_NS}}}complexType":
                names.append(el.get("name"))
            elif el.tag == f"{{{XSD_NS}}}simpleType":
                if el.find(f"{{{XSD_NS}}}restriction/{{{XSD_NS}}}enumeration") is not None:
                    names.append(el.get("name"))
            elif el.tag == f"{{{XSD_NS}}}element":
                if not el.get("type") and el.find(f"{{{XSD_NS}}}complexType") is not None:
                    names.append(el.get("name"))
        return names
