from unittest.mock import MagicMock, patch

import pytest

from wadl_codegen.config import WADL_NS
from wadl_codegen.errors import DocumentReadError, UnresolvedReferenceError
from wadl_codegen.parser.base import Application, GrammarInfo
from wadl_codegen.parser.document import DocumentLoader, read_document
from wadl_codegen.parser.references import ReferenceResolver, is_local_reference

TYPES = f"""<application xmlns="{WADL_NS}">
  <resource_type id="books">
    <method name="GET" id="listBooks"/>
  </resource_type>
  <resource_type id="alias" type="#books"/>
  <resource_type id="ping" type="#pong"/>
  <resource_type id="pong" type="#ping"/>
  <resource_type id="self" type="#self"/>
</application>"""

SHARED = f"""<application xmlns="{WADL_NS}" xmlns:o="urn:shared">
  <resource_type id="shared">
    <method name="GET" id="fetchShared"/>
  </resource_type>
  <resource_type id="loop" type="#loop"/>
</application>"""


def _resource(type_ref: str = ""):
    el = read_document(f'<resource xmlns="{WADL_NS}" id="Books" path="/books"/>')
    if type_ref:
        el.set("type", type_ref)
    return el


def _resolver(grammar_info: GrammarInfo | None = None) -> tuple[ReferenceResolver, MagicMock]:
    grammar_for = MagicMock(return_value=grammar_info or GrammarInfo())
    return ReferenceResolver(DocumentLoader(), WADL_NS, grammar_for), grammar_for


class TestIsLocalReference:
    def test_fragment_only(self):
        assert is_local_reference("#books") is True

    def test_document_reference(self):
        assert is_local_reference("other.wadl#books") is False
        assert is_local_reference("http://host/other.wadl#books") is False

    def test_empty_fragment(self):
        assert is_local_reference("#") is False


class TestLocalReferences:
    def test_no_type(self):
        app = Application(root=read_document(TYPES))
        resolver, _ = _resolver()
        el = _resource()
        resolved = resolver.resolve(app, el, GrammarInfo())
        assert resolved.element is el
        assert resolved.app is app

    def test_keeps_id_and_path(self):
        app = Application(root=read_document(TYPES))
        resolver, _ = _resolver()
        resolved = resolver.resolve(app, _resource("#books"), GrammarInfo())
        assert resolved.id == "Books"
        assert resolved.path == "/books"
        assert resolved.element.get("id") == "books"

    def test_type_chain(self):
        app = Application(root=read_document(TYPES))
        resolver, _ = _resolver()
        resolved = resolver.resolve(app, _resource("#alias"), GrammarInfo())
        assert resolved.element.get("id") == "books"

    def test_missing_type(self):
        app = Application(root=read_document(TYPES), path="/srv/api.wadl")
        resolver, _ = _resolver()
        with pytest.raises(UnresolvedReferenceError) as exc:
            resolver.resolve(app, _resource("#nope"), GrammarInfo())
        assert exc.value.cyclic is False
        assert "#nope" in str(exc.value)
        assert "/srv/api.wadl" in str(exc.value)

    def test_cycle(self):
        app = Application(root=read_document(TYPES))
        resolver, _ = _resolver()
        with pytest.raises(UnresolvedReferenceError) as exc:
            resolver.resolve(app, _resource("#ping"), GrammarInfo())
        assert exc.value.cyclic is True

    def test_self_reference(self):
        app = Application(root=read_document(TYPES))
        resolver, _ = _resolver()
        with pytest.raises(UnresolvedReferenceError, match="Cyclic"):
            resolver.resolve(app, _resource("#self"), GrammarInfo())

    def test_source_tree_untouched(self):
        app = Application(root=read_document(TYPES))
        resolver, _ = _resolver()
        el = _resource("#books")
        resolver.resolve(app, el, GrammarInfo())
        assert el.get("type") == "#books"
        assert len(el) == 0


class TestExternalReferences:
    def _app(self, tmp_path) -> Application:
        (tmp_path / "shared.wadl").write_text(SHARED)
        path = (tmp_path / "main.wadl").as_posix()
        return Application(root=read_document(TYPES, path), path=path)

    def test_resolves_in_other_document(self, tmp_path):
        resolver, _ = _resolver()
        resolved = resolver.resolve(self._app(tmp_path), _resource("shared.wadl#shared"),
                                    GrammarInfo())
        assert resolved.id == "Books"
        assert resolved.element.get("id") == "shared"
        assert resolved.app.path == (tmp_path / "shared.wadl").as_posix()

    def test_merges_external_grammar(self, tmp_path):
        resolver, grammar_for = _resolver(GrammarInfo(ns_map={"o": "urn:shared"}))
        grammar = GrammarInfo(ns_map={"m": "urn:main"})
        resolver.resolve(self._app(tmp_path), _resource("shared.wadl#shared"), grammar)
        grammar_for.assert_called_once()
        assert grammar.ns_map == {"m": "urn:main", "o": "urn:shared"}

    def test_document_loaded_once(self, tmp_path):
        resolver, grammar_for = _resolver(GrammarInfo(ns_map={"o": "urn:shared"}))
        app = self._app(tmp_path)
        grammar = GrammarInfo()
        with patch.object(resolver.loader, "load", wraps=resolver.loader.load) as load:
            first = resolver.resolve(app, _resource("shared.wadl#shared"), grammar)
            second = resolver.resolve(app, _resource("shared.wadl#shared"), grammar)
        load.assert_called_once()
        grammar_for.assert_called_once()
        assert first.app is second.app
        assert grammar.ns_map == {"o": "urn:shared"}

    def test_missing_fragment(self, tmp_path):
        resolver, _ = _resolver()
        with pytest.raises(UnresolvedReferenceError):
            resolver.resolve(self._app(tmp_path), _resource("shared.wadl#absent"), GrammarInfo())

    def test_no_fragment(self, tmp_path):
        resolver, _ = _resolver()
        with pytest.raises(UnresolvedReferenceError):
            resolver.resolve(self._app(tmp_path), _resource("shared.wadl"), GrammarInfo())

    def test_missing_document(self, tmp_path):
        resolver, _ = _resolver()
        with pytest.raises(DocumentReadError):
            resolver.resolve(self._app(tmp_path), _resource("absent.wadl#x"), GrammarInfo())

    def test_cycle_in_other_document(self, tmp_path):
        resolver, _ = _resolver()
        with pytest.raises(UnresolvedReferenceError) as exc:
            resolver.resolve(self._app(tmp_path), _resource("shared.wadl#loop"), GrammarInfo())
        assert exc.value.cyclic is True
