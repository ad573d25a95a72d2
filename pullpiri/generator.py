"""Generation of DDS type modules and registries from parsed IDL structures."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from os import PathLike
from pathlib import Path

from pullpiri.idl import get_idl_files, parse_idl_file
from pullpiri.idl_types import DdsData, idl_to_rust_type

log = logging.getLogger(__name__)

MODULES_FILE = "dds_modules.rs"
TYPES_FILE = "dds_types.rs"
REGISTRY_FILE = "dds_type_registry.rs"
METADATA_FILE = "dds_type_metadata.rs"

_GENERATED_BY = "// Generated by the DDS build step"
_TYPE_SUPPORT_IMPORT = (
    "use dust_dds::topic_definition::type_support::{DdsType, DdsSerialize, DdsDeserialize};"
)
_SERDE_IMPORT = "use serde::{Deserialize, Serialize};"
_LISTENER_SIGNATURE = (
    "pub fn create_typed_listener(type_name: &str, topic_name: String, "
    "tx: Sender<DdsData>, domain_id: i32) -> Option<Box<dyn DdsTopicListener>> {"
)
_METADATA_STRUCT = [
    "pub struct TypeMetadata {",
    "    pub name: String,",
    "    pub module: String,",
    "    pub fields: HashMap<String, String>,",
    "}",
    "",
    "pub fn get_type_metadata() -> HashMap<String, TypeMetadata> {",
]

# Errors that make an IDL file unusable; such files are skipped.
_PARSE_ERRORS = (OSError, UnicodeDecodeError, ValueError)


def _write_lines(path: Path, lines: Iterable[str]) -> None:
    path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")


def _parsed(idl_files: Iterable[str | PathLike[str]]) -> Iterable[tuple[str, DdsData]]:
    """Yield ``(module name, data)`` for each IDL file that parses; others are skipped."""
    for idl_file in idl_files:
        path = Path(idl_file)
        if not path.stem:
            continue
        try:
            data = parse_idl_file(path)
        except _PARSE_ERRORS as exc:
            log.warning("Skipping IDL file %s: %s", path, exc)
            continue
        yield path.stem, data


def generate_struct_file(
    out_dir: str | PathLike[str],
    file_name: str,
    struct_name: str,
    fields: Mapping[str, str],
) -> Path:
    """Write ``<file_name>.rs`` holding one DDS struct with the given fields; return its path."""
    output_path = Path(out_dir) / f"{file_name}.rs"
    lines = [
        _SERDE_IMPORT,
        _TYPE_SUPPORT_IMPORT,
        "",
        "#[derive(Debug, Clone, Serialize, Deserialize, DdsType, Default)]",
        f"pub struct {struct_name} {{",
    ]
    lines.extend(f"    pub {name}: {idl_to_rust_type(field_type)}," for name, field_type in fields.items())
    lines.append("}")
    _write_lines(output_path, lines)
    return output_path


def generate_type_registry(
    out_dir: str | PathLike[str], idl_files: Iterable[str | PathLike[str]]
) -> Path:
    """Write the listener registry mapping each type name to a typed listener."""
    registry_path = Path(out_dir) / REGISTRY_FILE
    lines = [
        "// Auto-generated DDS type registry",
        _GENERATED_BY,
        "",
        _TYPE_SUPPORT_IMPORT,
        _SERDE_IMPORT,
        "use super::dds_types::*;",
        "use std::sync::Arc;",
        "use crate::vehicle::dds::listener::GenericTopicListener;",
        "use crate::vehicle::dds::DdsData;",
        "",
        _LISTENER_SIGNATURE,
        '    println!("Generated - Creating listener for type: {}", type_name);',
        "    match type_name {",
    ]
    for module_name, data in _parsed(idl_files):
        struct_name = data.name
        lines.extend(
            [
                f'        "{struct_name}" => {{',
                f"            let listener = Box::new(GenericTopicListener::<{module_name}::{struct_name}>::new(",
                "                topic_name,",
                "                type_name.to_string(),",
                "                tx,",
                "                domain_id,",
                "            ));",
                "            Some(listener)",
                "        },",
            ]
        )
    lines.extend(["        _ => None,", "    }", "}"])
    _write_lines(registry_path, lines)
    return registry_path


def generate_dds_module(out_dir: str | PathLike[str], idl_dir: str | PathLike[str]) -> None:
    """Generate struct files plus the module and type index files for the IDL files in ``idl_dir``.

    Raises :class:`RuntimeError` if the index files are missing afterwards.
    """
    out_path = Path(out_dir)
    idl_files = [Path(file_path) for _, file_path in get_idl_files(idl_dir)]
    log.info("Found %d IDL files", len(idl_files))

    modules_path = out_path / MODULES_FILE
    types_path = out_path / TYPES_FILE

    if not idl_files:
        log.info("No IDL files to process, creating minimal empty module structure")
        _write_lines(
            modules_path,
            [
                "// Auto-generated DDS module file",
                _GENERATED_BY,
                "// Warning: No available IDL files",
            ],
        )
        _write_lines(
            types_path,
            [
                "// Auto-generated DDS type module",
                _GENERATED_BY,
                "// Warning: No available IDL files",
                "// This is an empty module",
                f'include!("{MODULES_FILE}");',
            ],
        )
        return

    module_lines = ["// Auto-generated DDS module file", _GENERATED_BY, ""]
    for file_stem, data in _parsed(idl_files):
        log.info("Parsed IDL file: %s (struct: %s)", file_stem, data.name)
        if not data.fields:
            log.warning("No fields found in struct %s", data.name)
        try:
            generate_struct_file(out_path, file_stem, data.name, data.fields)
        except OSError as exc:
            log.warning("Error generating struct file for %s: %s", file_stem, exc)
            continue
        module_lines.extend(
            [
                f"pub mod {file_stem} {{",
                f'    include!("{file_stem}.rs");',
                "}",
            ]
        )
    _write_lines(modules_path, module_lines)

    _write_lines(
        types_path,
        [
            "// Auto-generated DDS type module",
            _GENERATED_BY,
            "",
            "// Include generated modules",
            f'include!("{MODULES_FILE}");',
        ],
    )
    log.info("Generated DDS modules in %s", out_path)
    verify_generated_files(out_path, modules_path, types_path)


def generate_type_metadata_registry(
    out_dir: str | PathLike[str], idl_files: Iterable[str | PathLike[str]]
) -> Path:
    """Write the metadata registry describing each type's name, module and field types."""
    registry_path = Path(out_dir) / METADATA_FILE
    lines = [
        "// Auto-generated DDS type metadata",
        "use std::collections::HashMap;",
        "",
        *_METADATA_STRUCT,
        "    let mut metadata = HashMap::new();",
        "    let mut fields;",
    ]
    for module_name, data in _parsed(idl_files):
        struct_name = data.name
        lines.append("    fields = HashMap::new();")
        lines.extend(
            f'    fields.insert("{field_name}".to_string(), "{idl_to_rust_type(field_type)}".to_string());'
            for field_name, field_type in data.fields.items()
        )
        lines.extend(
            [
                f'    metadata.insert("{struct_name}".to_string(), TypeMetadata {{',
                f'        name: "{struct_name}".to_string(),',
                f'        module: "{module_name}".to_string(),',
                "        fields,",
                "    });",
            ]
        )
    lines.extend(["    metadata", "}"])
    _write_lines(registry_path, lines)
    return registry_path


def verify_generated_files(
    out_dir: str | PathLike[str],
    modules_path: str | PathLike[str],
    types_path: str | PathLike[str],
) -> None:
    """Check that the module and type index files exist; raise :class:`RuntimeError` if not."""
    modules = Path(modules_path)
    types = Path(types_path)
    if not modules.exists() or not types.exists():
        log.warning(
            "Expected output files were not created: %s exists: %s, %s exists: %s",
            modules.name,
            modules.exists(),
            types.name,
            types.exists(),
        )
        raise RuntimeError("Output files were not created properly")

    content = modules.read_text(encoding="utf-8")
    line_count = len(content.splitlines())
    log.info("%s size: %d bytes", modules.name, len(content.encode("utf-8")))
    if line_count < 5:
        log.warning("%s seems too short (only %d lines)", modules.name, line_count)
    for entry in sorted(Path(out_dir).iterdir()):
        log.debug("Output file: %s", entry)


def create_empty_modules(out_dir: str | PathLike[str]) -> None:
    """Write module, type, registry and metadata files that define no types."""
    out_path = Path(out_dir)
    _write_lines(
        out_path / MODULES_FILE,
        ["// Empty module (No IDL files found)", "// No types defined"],
    )
    _write_lines(
        out_path / TYPES_FILE,
        ["// Empty type module (No IDL files found)", f'include!("{MODULES_FILE}");'],
    )
    _write_lines(
        out_path / REGISTRY_FILE,
        [
            "// Empty DDS type registry (No IDL files found)",
            _TYPE_SUPPORT_IMPORT,
            _SERDE_IMPORT,
            "use std::sync::Arc;",
            "use crate::vehicle::dds::listener::GenericTopicListener;",
            "use crate::vehicle::dds::DdsData;",
            "",
            _LISTENER_SIGNATURE,
            "    // Empty registry - always returns None",
            "    match type_name {",
            "        _ => None,",
            "    }",
            "}",
            "",
        ],
    )
    _write_lines(
        out_path / METADATA_FILE,
        [
            "// Empty DDS type metadata (No IDL files found)",
            "use std::collections::HashMap;",
            "",
            *_METADATA_STRUCT,
            "    HashMap::new()  // Empty metadata",
            "}",
        ],
    )
    log.info("Created empty module files")