"""Class, package and parameter naming."""

import re

DEFAULT_PACKAGE_NAME = "application"
DEFAULT_RESOURCE_NAME = "Resource"
NO_NAMESPACE_PACKAGE = "generated"
COLLISION_SUFFIX = "Resource"
IMPL_SUFFIX = "Impl"

JAVA_KEYWORDS = frozenset({
    "abstract", "assert", "boolean", "break", "byte", "case", "catch", "char", "class",
    "const", "continue", "default", "do", "double", "else", "enum", "extends", "false",
    "final", "finally", "float", "for", "goto", "if", "implements", "import",
    "instanceof", "int", "interface", "long", "native", "new", "null", "package",
    "private", "protected", "public", "return", "short", "static", "strictfp", "super",
    "switch", "synchronized", "this", "throw", "throws", "transient", "true", "try",
    "void", "volatile", "while",
})


def first_char_upper(name: str) -> str:
    if name and name[0].islower():
        return name[0].upper() + name[1:]
    return name


def resource_id_from_path(path: str) -> str:
    """``/books/{id}`` -> ``BooksIdResource``."""
    path = re.sub(r"[{}_]", "", path)
    name = ""
    for segment in path.split("/"):
        segment = re.sub(r"[^A-Za-z0-9]", "", segment)
        if segment:
            name += segment[0].upper() + segment[1:]
    return name + DEFAULT_RESOURCE_NAME


def split_resource_id(resource_id: str, schema_package_map: dict[str, str]) -> tuple[str, str]:
    """Split a resource id into (package, local name).

    ``{urn:ns}Books`` maps the namespace to a package; ``org.example.Books``
    splits at the last dot.
    """
    if resource_id.startswith("{"):
        end = resource_id.find("}")
        if end != -1:
            return (package_from_namespace(resource_id[1:end], schema_package_map),
                    resource_id[end + 1:])
    index = resource_id.rfind(".")
    if index == -1:
        return "", resource_id
    return resource_id[:index], resource_id[index + 1:]


def class_package(package: str, package_override: str | None) -> str:
    if package_override is not None:
        return package_override
    return package or DEFAULT_PACKAGE_NAME


def class_name(local_name: str, interface_mode: bool, generate_interfaces: bool,
               type_names) -> str:
    """Name of a generated resource class.

    Implementation classes get ``Impl`` when interfaces are generated too; a
    name equal (ignoring case) to a payload class gets ``Resource`` appended
    until it no longer matches any of them.
    """
    name = local_name
    if not interface_mode and generate_interfaces:
        name += IMPL_SUFFIX
    name = first_char_upper(name)
    taken = {type_name.rsplit(".", 1)[-1].lower() for type_name in type_names}
    while name.lower() in taken:
        name += COLLISION_SUFFIX
    return name


def package_from_namespace(namespace: str, schema_package_map: dict[str, str]) -> str:
    if namespace in schema_package_map:
        return schema_package_map[namespace]
    return derive_package(namespace)


def derive_package(namespace: str) -> str:
    """Derive a Java package from a namespace URI, the way JAXB does.

    ``http://www.example.com/books/v1.xsd`` -> ``com.example.books.v1``
    """
    if not namespace:
        return NO_NAMESPACE_PACKAGE
    scheme = ""
    index = namespace.find(":")
    if index >= 0:
        scheme = namespace[:index].lower()
        if scheme in ("http", "https", "urn"):
            namespace = namespace[index + 1:]
    tokens = [t for t in re.split(r"[/: ]", namespace) if t]
    if not tokens:
        return NO_NAMESPACE_PACKAGE
    if len(tokens) > 1:
        last = tokens[-1]
        dot = last.rfind(".")
        if dot > 0:
            tokens[-1] = last[:dot]

    domain = [t for t in re.split(r"[.\-]" if scheme == "urn" else r"\.", tokens[0]) if t]
    domain.reverse()
    if domain and domain[-1].lower() == "www":
        domain.pop()
    return ".".join(_package_token(t) for t in domain + tokens[1:])


def _package_token(token: str) -> str:
    token = re.sub(r"[^a-z0-9_]", "_", token.lower())
    if token[0].isdigit():
        token = "_" + token
    if token in JAVA_KEYWORDS:
        token += "_"
    return token


def typical_class_name(name: str) -> str:
    """Enum class name for a param: ``sort-order`` -> ``Sortorder``."""
    upper = name.upper()
    if len(upper) == 1:
        return upper
    return re.sub(r"[.\-]", "", upper[0] + upper[1:].lower())


def java_param_name(name: str) -> str:
    if name in JAVA_KEYWORDS:
        return name + "_arg"
    return re.sub(r"[:.\-]", "_", name)
