"""Intermediate representation of the generated JAX-RS sources.

The walker produces these records; the emitter turns them into Java text.
"""

from enum import Enum

from pydantic import BaseModel


class ParamSource(str, Enum):
    """Where a method parameter is bound from."""

    PATH = "path"
    HEADER = "header"
    QUERY = "query"
    MATRIX = "matrix"
    FORM = "form"
    MULTIPART = "multipart"
    BODY = "body"  # request payload, no annotation


class ParamBinding(BaseModel):
    source: ParamSource
    name: str  # as declared in the WADL
    java_name: str
    type: str
    required: bool = False
    repeating: bool = False
    default_value: str | None = None


class MethodDescriptor(BaseModel):
    """One generated Java method.

    ``verb`` is None for a sub-resource locator, which returns the
    sub-resource class instead of handling a request itself.
    """

    verb: str | None
    generated_name: str
    path_suffix: str = ""
    consumes: list[str] = []
    produces: list[str] = []
    parameters: list[ParamBinding] = []
    request_payload: ParamBinding | None = None
    response_type: str = "void"
    is_async: bool = False

    @property
    def returns_value(self) -> bool:
        return self.response_type != "void"


class ResourceClass(BaseModel):
    package: str
    name: str
    kind: str  # "interface" or "class"
    path: str | None = None  # class-level @Path, root resources only
    implements: str | None = None
    annotated: bool = True
    methods: list[MethodDescriptor] = []
    imports: list[str] = []

    @property
    def qualified_name(self) -> str:
        return f"{self.package}.{self.name}"


class EnumMember(BaseModel):
    name: str
    value: str


class EnumType(BaseModel):
    """A string-backed enum generated from a param's options."""

    package: str
    name: str
    members: list[EnumMember]

    @property
    def qualified_name(self) -> str:
        return f"{self.package}.{self.name}"

    def from_string(self, value: str) -> EnumMember:
        """Case-insensitive lookup on the literal, as the generated ``fromString`` does."""
        if value is not None:
            for member in self.members:
                if value.lower() == member.value.lower():
                    return member
        raise ValueError(f"No {self.name} constant for {value!r}")


class GenerationResult(BaseModel):
    resource_classes: list[ResourceClass] = []
    enums: list[EnumType] = []
    type_names: list[str] = []
    written_files: list[str] = []
    diagnostics: list[str] = []
