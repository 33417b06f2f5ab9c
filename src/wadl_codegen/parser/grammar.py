"""Grammar builder.

Collects the schema fragments of a WADL ``grammars`` section and derives the
prefix bindings and element-to-type associations used for type resolution.
"""

import logging
from collections.abc import Iterator
from urllib.parse import urljoin, urlsplit

from lxml import etree

from wadl_codegen.config import XSD_NS
from wadl_codegen.parser.base import Application, GrammarInfo, SchemaInfo
from wadl_codegen.parser.document import DocumentLoader, wadl_elements

logger = logging.getLogger(__name__)


def collect_schemas(app: Application, loader: DocumentLoader, wadl_ns: str) -> list[SchemaInfo]:
    """Return the inline and included schema fragments of a document.

    A document without exactly one ``grammars`` element has no schemas.
    """
    grammars = wadl_elements(app.root, "grammars", wadl_ns)
    if len(grammars) != 1:
        return []

    schemas = []
    inline = list(grammars[0].iterchildren(f"{{{XSD_NS}}}schema"))
    for i, schema_el in enumerate(inline):
        system_id = app.path
        if len(inline) > 1 and system_id is not None:
            system_id += f"#grammar{i + 1}"
        schemas.append(create_schema_info(schema_el, system_id))

    for include in wadl_elements(grammars[0], "include", wadl_ns):
        location = resolve_location(include.get("href", ""), app.base_path)
        schemas.append(create_schema_info(loader.load(location), location))
    return schemas


def resolve_location(href: str, base_path: str | None) -> str:
    """Resolve an include href against the including document's directory."""
    if urlsplit(href).scheme or base_path is None:
        return href
    if not href.startswith("/") and ".." not in href:
        return base_path + href
    return urljoin(base_path, href)


def create_schema_info(schema_el: etree._Element, system_id: str | None) -> SchemaInfo:
    info = SchemaInfo(
        namespace=schema_el.get("targetNamespace", ""),
        system_id=system_id,
        element=schema_el,
    )
    try:
        info.xml_schema = etree.XMLSchema(schema_el)
    except etree.LxmlError as e:
        # Unsupported include protocols or sloppy schemas; the DOM is still usable.
        logger.warning("Schema %s could not be compiled: %s", system_id or "<inline>", e)
    return info


def build_grammar_info(app: Application, schemas: list[SchemaInfo],
                       loader: DocumentLoader) -> GrammarInfo:
    """Build the grammar info of one document from its schema fragments."""
    if not schemas:
        return GrammarInfo()

    ns_map = {prefix: uri for prefix, uri in app.root.nsmap.items() if prefix}
    element_type_map: dict[str, str] = {}
    visited: set[str] = set()
    for schema in schemas:
        for schema_el, _ in iter_schema_tree(schema.element, schema.system_id, loader, visited):
            for el in schema_el.iterchildren(f"{{{XSD_NS}}}element"):
                type_name = el.get("type", "")
                if type_name:
                    element_type_map[el.get("name", "")] = type_name

    no_target_namespace = len(schemas) == 1 and not schemas[0].namespace
    return GrammarInfo(
        ns_map=ns_map,
        element_type_map=element_type_map,
        no_target_namespace=no_target_namespace,
    )


def iter_schema_tree(schema_el: etree._Element, system_id: str | None, loader: DocumentLoader,
                     visited: set[str]) -> Iterator[tuple[etree._Element, str | None]]:
    """Yield a schema and, depth first, every schema it ``xs:include``s.

    Includes are resolved relative to the including schema's system id.
    Every location seen is recorded in ``visited`` and not loaded again.
    """
    if system_id is not None:
        visited.add(system_id)
    yield schema_el, system_id
    for include in schema_el.iterchildren(f"{{{XSD_NS}}}include"):
        if system_id is None or "/" not in system_id:
            continue
        location = system_id[: system_id.rfind("/") + 1] + include.get("schemaLocation", "")
        if location in visited:
            logger.debug("Schema %s already included, skipping", location)
            continue
        visited.add(location)
        yield from iter_schema_tree(loader.load(location), location, loader, visited)
