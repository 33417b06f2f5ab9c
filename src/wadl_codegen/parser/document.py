"""Reading WADL and schema documents, and walking their elements."""

import logging
from pathlib import Path

import httpx
from lxml import etree

from wadl_codegen.errors import DocumentReadError

logger = logging.getLogger(__name__)


def _xml_parser() -> etree.XMLParser:
    return etree.XMLParser(remove_comments=True, resolve_entities=False)


def read_document(text: str, location: str | None = None) -> etree._Element:
    """Parse document text and return its root element."""
    try:
        return etree.fromstring(text.encode("utf-8"), _xml_parser(), base_url=location)
    except etree.XMLSyntaxError as e:
        raise DocumentReadError(location or "<wadl>", f"Unable to read wadl: {e}") from e


class DocumentLoader:
    """Loads referenced documents: external WADLs and included schemas.

    Local paths and ``file:``/``http(s):`` URLs are supported.
    """

    def __init__(self, timeout: float = 30.0):
        self.timeout = timeout

    def load(self, location: str) -> etree._Element:
        logger.debug("Loading %s", location)
        if location.startswith(("http:", "https:")):
            return self._fetch(location)
        source = location
        if location.startswith("file:"):
            source = location[len("file:"):]
            if source.startswith("//"):
                source = source[2:]
        path = Path(source)
        if not path.is_file():
            raise DocumentReadError(location, "no such file")
        try:
            return etree.parse(str(path), _xml_parser()).getroot()
        except (OSError, etree.XMLSyntaxError) as e:
            raise DocumentReadError(location, str(e)) from e

    def _fetch(self, url: str) -> etree._Element:
        try:
            response = httpx.get(url, timeout=self.timeout, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise DocumentReadError(url, str(e)) from e
        try:
            return etree.fromstring(response.content, _xml_parser(), base_url=url)
        except etree.XMLSyntaxError as e:
            raise DocumentReadError(url, str(e)) from e


def wadl_elements(parent: etree._Element | None, name: str, wadl_ns: str) -> list[etree._Element]:
    """Return the WADL children of ``parent`` called ``name``.

    Everything except ``resource`` may be a local ``href="#id"`` reference;
    those are replaced by the element they point to.
    """
    if parent is None:
        return []
    elements = list(parent.iterchildren(f"{{{wadl_ns}}}{name}"))
    if name == "resource":
        return elements
    return [_follow_href(el, wadl_ns) for el in elements]


def first_child(parent: etree._Element | None, ns: str, name: str) -> etree._Element | None:
    if parent is None:
        return None
    return parent.find(f"{{{ns}}}{name}")


def find_local_reference(root: etree._Element, name: str, reference: str,
                         wadl_ns: str) -> etree._Element | None:
    """Find the top-level ``name`` element whose id is the fragment of ``reference``."""
    ref_id = reference[1:] if reference.startswith("#") else reference
    for el in root.iterchildren(f"{{{wadl_ns}}}{name}"):
        if el.get("id") == ref_id:
            return el
    return None


def _follow_href(el: etree._Element, wadl_ns: str) -> etree._Element:
    href = el.get("href", "")
    if not href.startswith("#"):
        return el
    local_name = etree.QName(el).localname
    target = find_local_reference(el.getroottree().getroot(), local_name, href, wadl_ns)
    if target is None:
        logger.warning("Unresolved %s reference %s", local_name, href)
        return el
    return target
