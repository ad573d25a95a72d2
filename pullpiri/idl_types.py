"""Data types describing DDS structures parsed from IDL files."""

from __future__ import annotations

from dataclasses import dataclass, field

_IDL_TO_RUST: dict[str, str] = {
    "boolean": "bool",
    "short": "i16",
    "int16_t": "i16",
    "unsigned short": "u16",
    "uint16_t": "u16",
    "long": "i32",
    "int32_t": "i32",
    "unsigned long": "u32",
    "uint32_t": "u32",
    "long long": "i64",
    "int64_t": "i64",
    "unsigned long long": "u64",
    "uint64_t": "u64",
    "float": "f32",
    "double": "f64",
    "string": "String",
    "std::string": "String",
    "octet": "u8",
    "byte": "u8",
    "char": "char",
}

_DEFAULT_TYPE = "String"


@dataclass
class DdsData:
    """A DDS structure: its name, a JSON value and its field types by name."""

    name: str
    value: str = "{}"
    fields: dict[str, str] = field(default_factory=dict)


def idl_to_rust_type(idl_type: str) -> str:
    """Map an IDL type name to the generated target type; unknown types become ``String``."""
    return _IDL_TO_RUST.get(idl_type, _DEFAULT_TYPE)