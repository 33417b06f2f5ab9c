"""Data models for parsed WADL documents and their grammars.

The generator never mutates the lxml trees it reads; everything derived
from them is carried in these records.
"""

from lxml import etree
from pydantic import BaseModel, ConfigDict


class Application(BaseModel):
    """A parsed description document and the location it was read from."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    root: etree._Element
    path: str | None = None

    @property
    def base_path(self) -> str | None:
        """Location of the directory holding this document, with trailing slash."""
        if self.path is None:
            return None
        index = self.path.rfind("/")
        return self.path[: index + 1] if index != -1 else self.path


class SchemaInfo(BaseModel):
    """One schema fragment from a grammar, inline or included."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    namespace: str
    system_id: str | None
    element: etree._Element
    xml_schema: etree.XMLSchema | None = None  # None when the fragment did not compile


class GrammarInfo(BaseModel):
    """Prefix bindings and element types gathered from a document's grammar."""

    ns_map: dict[str, str] = {}
    element_type_map: dict[str, str] = {}
    no_target_namespace: bool = False

    def merge(self, other: "GrammarInfo") -> None:
        """Add the other grammar's bindings; existing entries are overwritten, never removed."""
        self.element_type_map.update(other.element_type_map)
        self.ns_map.update(other.ns_map)


class ResolvedResource(BaseModel):
    """A resource after type indirection.

    ``id`` and ``path`` always come from the resource as written; ``element``
    is whatever supplies the methods and params, owned by ``app``.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    id: str
    path: str
    element: etree._Element
    app: Application
