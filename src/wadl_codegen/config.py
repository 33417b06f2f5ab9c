"""Generator options.

Options come from an optional YAML file and are overridden by CLI flags.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel

WADL_NS = "http://wadl.dev.java.net/2009/02"
XSD_NS = "http://www.w3.org/2001/XMLSchema"


class GeneratorOptions(BaseModel):
    """Everything that changes how resource classes are generated."""

    generate_interfaces: bool = True
    generate_impl: bool = False
    package_name: str | None = None
    resource_name: str | None = None
    generate_enums: bool = False
    skip_schema_generation: bool = False
    inherit_resource_params: bool = False
    use_void_for_empty_responses: bool = True
    generate_response_if_headers_set: bool = False
    support_multiple_xml_reps: bool = False
    wadl_namespace: str = WADL_NS

    schema_package_map: dict[str, str] = {}  # namespace URI -> package
    media_type_map: dict[str, str] = {}  # media type -> payload class
    schema_type_map: dict[str, str] = {}  # {ns}local -> class
    java_type_map: dict[str, str] = {}  # package.local -> class

    suspended_async_methods: set[str] = set()
    response_methods: set[str] = set()


def load_options(file_path: Path | None = None, **overrides) -> GeneratorOptions:
    """Read options from a YAML file, then apply non-None overrides on top."""
    data: dict = {}
    if file_path is not None:
        loaded = yaml.safe_load(file_path.read_text(encoding="utf-8"))
        if loaded:
            if not isinstance(loaded, dict):
                raise ValueError(f"{file_path}: expected a mapping of options")
            data.update(loaded)
    data.update({k: v for k, v in overrides.items() if v is not None})
    return GeneratorOptions(**data)
