"""Resource type indirection.

A ``resource`` whose ``type`` attribute is set takes its methods and params
from a ``resource_type``, found either in the same document (``#id``) or in
another WADL document (``other.wadl#id``).
"""

import logging
from collections.abc import Callable
from urllib.parse import urlsplit, urlunsplit

from lxml import etree

from wadl_codegen.errors import UnresolvedReferenceError
from wadl_codegen.parser.base import Application, GrammarInfo, ResolvedResource
from wadl_codegen.parser.document import DocumentLoader, find_local_reference

logger = logging.getLogger(__name__)


def is_local_reference(reference: str) -> bool:
    """True for a bare fragment such as ``#books``."""
    parts = urlsplit(reference)
    return not (parts.scheme or parts.netloc or parts.path) and bool(parts.fragment)


class ReferenceResolver:
    """Resolves resource types, loading external documents on demand.

    ``grammar_for`` is called once per external document and must return its
    grammar info; schema compilation for that document happens there as well.
    Loaded documents are kept for the lifetime of the resolver.
    """

    def __init__(self, loader: DocumentLoader, wadl_ns: str,
                 grammar_for: Callable[[Application], GrammarInfo]):
        self.loader = loader
        self.wadl_ns = wadl_ns
        self.grammar_for = grammar_for
        self._documents: dict[str, tuple[Application, GrammarInfo]] = {}

    def resolve(self, app: Application, element: etree._Element,
                grammar: GrammarInfo) -> ResolvedResource:
        """Resolve ``element``'s type, merging external grammars into ``grammar``."""
        return self._resolve(app, element, element.get("type", ""), grammar, frozenset())

    def _resolve(self, app: Application, original: etree._Element, reference: str,
                 grammar: GrammarInfo, seen: frozenset) -> ResolvedResource:
        if not reference:
            return self._record(original, original, app)

        key = (app.path or "", reference)
        if key in seen:
            raise UnresolvedReferenceError(reference, app.path, cyclic=True)
        seen = seen | {key}

        if is_local_reference(reference):
            target = find_local_reference(app.root, "resource_type", reference, self.wadl_ns)
            if target is None:
                raise UnresolvedReferenceError(reference, app.path)
            nested = target.get("type", "")
            if nested:
                # a resource_type deferring to yet another type
                return self._resolve(app, original, nested, grammar, seen)
            return self._record(original, target, app)

        parts = urlsplit(reference)
        if not parts.fragment:
            raise UnresolvedReferenceError(reference, app.path)
        if parts.scheme or parts.netloc:
            location = urlunsplit((parts.scheme, parts.netloc, parts.path, parts.query, ""))
        else:
            location = (app.base_path or "") + parts.path
        logger.debug("Resolving %s against external document %s", reference, location)
        ref_app, ref_grammar = self._document(location)
        grammar.merge(ref_grammar)
        return self._resolve(ref_app, original, "#" + parts.fragment, grammar, seen)

    def _document(self, location: str) -> tuple[Application, GrammarInfo]:
        if location not in self._documents:
            ref_app = Application(root=self.loader.load(location), path=location)
            self._documents[location] = ref_app, self.grammar_for(ref_app)
        return self._documents[location]

    @staticmethod
    def _record(original: etree._Element, body: etree._Element, app: Application) -> ResolvedResource:
        return ResolvedResource(
            id=original.get("id", ""),
            path=original.get("path", ""),
            element=body,
            app=app,
        )
