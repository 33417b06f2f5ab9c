from pathlib import Path

from wadl_codegen.config import WADL_NS, XSD_NS
from wadl_codegen.parser.base import Application, GrammarInfo
from wadl_codegen.parser.document import DocumentLoader, read_document
from wadl_codegen.parser.grammar import (
    build_grammar_info,
    collect_schemas,
    iter_schema_tree,
    resolve_location,
)

FIXTURES = Path(__file__).parent / "fixtures"


def _app(file_name: str) -> Application:
    path = (FIXTURES / file_name).as_posix()
    return Application(root=read_document((FIXTURES / file_name).read_text(), path), path=path)


def _inline_app(schemas: str, path: str | None = "/srv/api.wadl") -> Application:
    text = f"""<application xmlns="{WADL_NS}" xmlns:xs="{XSD_NS}" xmlns:t="urn:t">
  <grammars>{schemas}</grammars>
</application>"""
    return Application(root=read_document(text, path), path=path)


class TestCollectSchemas:
    def test_inline_schema(self):
        app = _app("books.wadl")
        schemas = collect_schemas(app, DocumentLoader(), WADL_NS)
        assert len(schemas) == 1
        assert schemas[0].namespace == "http://www.example.com/books"
        assert schemas[0].system_id == app.path

    def test_multiple_inline_schemas_get_fragment_ids(self):
        app = _inline_app(
            '<xs:schema targetNamespace="urn:a"/><xs:schema targetNamespace="urn:b"/>')
        schemas = collect_schemas(app, DocumentLoader(), WADL_NS)
        assert [s.system_id for s in schemas] == [
            "/srv/api.wadl#grammar1",
            "/srv/api.wadl#grammar2",
        ]

    def test_included_schema(self):
        schemas = collect_schemas(_app("library.wadl"), DocumentLoader(), WADL_NS)
        assert len(schemas) == 1
        assert schemas[0].system_id.endswith("/library.xsd")
        assert schemas[0].namespace == "http://example.org/library"

    def test_no_grammars(self):
        app = Application(root=read_document(f'<application xmlns="{WADL_NS}"/>'))
        assert collect_schemas(app, DocumentLoader(), WADL_NS) == []


class TestResolveLocation:
    def test_relative_to_base(self):
        assert resolve_location("types.xsd", "/srv/wadl/") == "/srv/wadl/types.xsd"

    def test_parent_directory(self):
        assert resolve_location("../types.xsd", "http://host/a/b/") == "http://host/a/types.xsd"

    def test_absolute_url(self):
        assert resolve_location("http://other/x.xsd", "/srv/") == "http://other/x.xsd"

    def test_no_base(self):
        assert resolve_location("types.xsd", None) == "types.xsd"


class TestBuildGrammarInfo:
    def test_follows_schema_includes(self):
        app = _app("library.wadl")
        loader = DocumentLoader()
        grammar = build_grammar_info(app, collect_schemas(app, loader, WADL_NS), loader)
        assert grammar.ns_map == {"lib": "http://example.org/library"}
        assert grammar.element_type_map == {"shelf": "lib:Shelf"}
        assert grammar.no_target_namespace is False

    def test_element_types(self):
        app = _app("books.wadl")
        loader = DocumentLoader()
        grammar = build_grammar_info(app, collect_schemas(app, loader, WADL_NS), loader)
        assert grammar.element_type_map == {"book": "bk:Book"}
        assert grammar.ns_map["bk"] == "http://www.example.com/books"

    def test_no_target_namespace(self):
        app = _inline_app('<xs:schema><xs:element name="note" type="xs:string"/></xs:schema>')
        loader = DocumentLoader()
        grammar = build_grammar_info(app, collect_schemas(app, loader, WADL_NS), loader)
        assert grammar.no_target_namespace is True

    def test_no_target_namespace_needs_single_schema(self):
        app = _inline_app('<xs:schema/><xs:schema targetNamespace="urn:b"/>')
        loader = DocumentLoader()
        grammar = build_grammar_info(app, collect_schemas(app, loader, WADL_NS), loader)
        assert grammar.no_target_namespace is False

    def test_no_schemas(self):
        assert build_grammar_info(_app("common.wadl"), [], DocumentLoader()) == GrammarInfo()


class TestIterSchemaTree:
    def test_include_cycle_visits_each_schema_once(self, tmp_path):
        (tmp_path / "a.xsd").write_text(
            f'<xs:schema xmlns:xs="{XSD_NS}"><xs:include schemaLocation="b.xsd"/></xs:schema>')
        (tmp_path / "b.xsd").write_text(
            f'<xs:schema xmlns:xs="{XSD_NS}"><xs:include schemaLocation="a.xsd"/></xs:schema>')
        loader = DocumentLoader()
        start = (tmp_path / "a.xsd").as_posix()
        visited = [system_id for _, system_id in
                   iter_schema_tree(loader.load(start), start, loader, set())]
        assert visited == [start, (tmp_path / "b.xsd").as_posix()]
