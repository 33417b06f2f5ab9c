from pathlib import Path
from unittest.mock import patch

from wadl_codegen.config import GeneratorOptions
from wadl_codegen.generator.emitter import JavaEmitter, java_string
from wadl_codegen.generator.model import (
    EnumMember,
    EnumType,
    GenerationResult,
    MethodDescriptor,
    ParamBinding,
    ParamSource,
    ResourceClass,
)
from wadl_codegen.generator.walker import SourceGenerator

FIXTURES = Path(__file__).parent / "fixtures"


def _books_result(**options) -> GenerationResult:
    path = FIXTURES / "books.wadl"
    return SourceGenerator(GeneratorOptions(**options)).build(
        path.read_text(), wadl_path=path.as_posix())


def _sample_class(**overrides) -> ResourceClass:
    fields = dict(
        package="org.example",
        name="Orders",
        kind="interface",
        path="/orders",
        methods=[
            MethodDescriptor(
                verb="GET",
                generated_name="getOrder",
                path_suffix="/{id}",
                produces=["application/json"],
                parameters=[
                    ParamBinding(source=ParamSource.PATH, name="id", java_name="id", type="long"),
                    ParamBinding(source=ParamSource.QUERY, name="fields", java_name="fields",
                                 type="String", default_value="all"),
                ],
                response_type="int",
            ),
        ],
    )
    fields.update(overrides)
    return ResourceClass(**fields)


class TestJavaString:
    def test_escapes(self):
        assert java_string('say "hi"\\') == '"say \\"hi\\"\\\\"'


class TestRenderResource:
    def test_interface(self):
        source = JavaEmitter().render_resource(_sample_class())
        assert "package org.example;" in source
        assert '@Path("/orders")\npublic interface Orders {' in source
        assert "    @GET" in source
        assert '    @Produces("application/json")' in source
        assert '    @Path("/{id}")' in source
        assert ('    int getOrder(@PathParam("id") long id, '
                '@QueryParam("fields") @DefaultValue("all") String fields);') in source
        assert "import javax.ws.rs.DefaultValue;" in source
        assert "import javax.ws.rs.PathParam;" in source

    def test_implementation_class(self):
        cls = _sample_class(name="OrdersImpl", kind="class", path=None, implements="Orders",
                            annotated=False)
        source = JavaEmitter().render_resource(cls)
        assert "public class OrdersImpl implements Orders {" in source
        assert "    public int getOrder(long id, String fields) {" in source
        assert "        //TODO: implement" in source
        assert "        return 0;" in source
        assert "@GET" not in source
        assert "import javax.ws.rs" not in source

    def test_object_return_stub(self):
        method = MethodDescriptor(verb="GET", generated_name="list", response_type="Book")
        cls = _sample_class(kind="class", annotated=False, methods=[method])
        assert "        return null;" in JavaEmitter().render_resource(cls)

    def test_void_stub_has_no_return(self):
        method = MethodDescriptor(verb="DELETE", generated_name="delete")
        cls = _sample_class(kind="class", annotated=False, methods=[method])
        assert "return" not in JavaEmitter().render_resource(cls)

    def test_multiple_media_types(self):
        method = MethodDescriptor(verb="POST", generated_name="add",
                                  consumes=["application/xml", "application/json"])
        source = JavaEmitter().render_resource(_sample_class(methods=[method]))
        assert '    @Consumes({"application/xml", "application/json"})' in source

    def test_async_method(self):
        method = MethodDescriptor(verb="GET", generated_name="get", is_async=True)
        source = JavaEmitter().render_resource(_sample_class(methods=[method]))
        assert "void get(@Suspended AsyncResponse async);" in source
        assert "import javax.ws.rs.container.AsyncResponse;" in source
        assert "import javax.ws.rs.container.Suspended;" in source

    def test_payload_last(self):
        method = MethodDescriptor(
            verb="PUT", generated_name="update",
            parameters=[ParamBinding(source=ParamSource.PATH, name="id", java_name="id",
                                     type="long")],
            request_payload=ParamBinding(source=ParamSource.BODY, name="book",
                                         java_name="book", type="Book"))
        source = JavaEmitter().render_resource(_sample_class(methods=[method]))
        assert 'void update(@PathParam("id") long id, Book book);' in source

    def test_locator_has_no_verb(self):
        store = _books_result().resource_classes[0]
        source = JavaEmitter().render_resource(store)
        assert '    @Path("/reviews")\n    Reviews getReviews(@MatrixParam("bookId") Long bookId);' in source
        assert "import com.example.books.Books;" in source

    def test_imports_sorted(self):
        source = JavaEmitter().render_resource(_books_result().resource_classes[0])
        imports = [line for line in source.splitlines() if line.startswith("import ")]
        assert imports[0].startswith("import javax.")
        assert imports[-1].startswith("import com.example.books.")


class TestRenderEnum:
    def test_enum(self):
        enum = EnumType(package="app", name="Sortorder", members=[
            EnumMember(name="ASC", value="asc"),
            EnumMember(name="DESC", value="desc"),
        ])
        source = JavaEmitter().render_enum(enum)
        assert "package app;" in source
        assert "public enum Sortorder {" in source
        assert '    ASC("asc"),\n    DESC("desc");' in source
        assert "public static Sortorder fromString(String value) {" in source
        assert "value.equalsIgnoreCase(v.value)" in source
        assert "throw new IllegalArgumentException();" in source


class TestWrite:
    def test_writes_package_dirs(self, tmp_path):
        written = JavaEmitter().write(_books_result(generate_enums=True), tmp_path)
        assert sorted(Path(p).name for p in written) == [
            "BookStore.java",
            "Reviews.java",
            "Sortorder.java",
        ]
        assert (tmp_path / "application" / "BookStore.java").exists()

    def test_write_failure_skips_file(self, tmp_path):
        result = GenerationResult(resource_classes=[
            _sample_class(name="Orders"),
            _sample_class(name="Invoices"),
        ])
        original = Path.write_text

        def failing_write(self, *args, **kwargs):
            if self.name == "Orders.java":
                raise OSError("disk full")
            return original(self, *args, **kwargs)

        with patch.object(Path, "write_text", failing_write):
            written = JavaEmitter().write(result, tmp_path)

        assert [Path(p).name for p in written] == ["Invoices.java"]
        assert not (tmp_path / "org" / "example" / "Orders.java").exists()
        assert (tmp_path / "org" / "example" / "Invoices.java").exists()
