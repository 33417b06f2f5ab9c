"""Enums for params that list their allowed values as ``option`` elements."""

import re

from lxml import etree

from wadl_codegen.generator.model import EnumMember, EnumType
from wadl_codegen.generator.naming import typical_class_name


def option_values(param: etree._Element, wadl_ns: str) -> list[str]:
    return [option.get("value", "") for option in param.iter(f"{{{wadl_ns}}}option")]


def build_enum(param_name: str, values: list[str], package: str) -> EnumType:
    members = [EnumMember(name=re.sub(r"[,\-]", "_", value.upper()), value=value)
               for value in values]
    return EnumType(package=package, name=typical_class_name(param_name), members=members)
