"""Errors raised while turning a WADL document into source code.

Anything raised from here aborts the whole generation run.
"""


class WadlCodegenError(Exception):
    """Base class for fatal generation errors."""


class DocumentReadError(WadlCodegenError):
    """A description or schema document could not be read or is malformed."""

    def __init__(self, location: str, reason: str = "") -> None:
        self.location = location
        self.reason = reason
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.reason:
            return f"Resource {self.location} can not be read: {self.reason}"
        return f"Resource {self.location} can not be read"


class UnresolvedReferenceError(WadlCodegenError):
    """A resource type reference points nowhere, or back at itself."""

    def __init__(self, reference: str, document: str | None = None, cyclic: bool = False) -> None:
        self.reference = reference
        self.document = document
        self.cyclic = cyclic
        super().__init__(str(self))

    def __str__(self) -> str:
        where = f" in {self.document}" if self.document else ""
        if self.cyclic:
            return f"Cyclic resource type reference {self.reference}{where}"
        return f"Unresolved resource type reference {self.reference}{where}"


class UnsupportedParamStyleError(WadlCodegenError):
    """A param uses a style that has no JAX-RS binding."""

    def __init__(self, style: str) -> None:
        self.style = style
        super().__init__(str(self))

    def __str__(self) -> str:
        message = f"Unsupported parameter style: {self.style}"
        if self.style == "plain":
            message += ", plain style parameters have to be wrapped by representations"
        return message
