"""Reading DDS structure definitions from IDL files."""

from __future__ import annotations

import logging
from os import PathLike
from pathlib import Path

from pullpiri.idl_types import DdsData

log = logging.getLogger(__name__)

_IDL_SUFFIX = ".idl"


def _is_idl_file(path: Path) -> bool:
    return path.is_file() and path.suffix == _IDL_SUFFIX


def _struct_name(lines: list[str]) -> str:
    for raw in lines:
        line = raw.strip()
        pos = line.find("struct")
        if pos >= 0:
            remaining = line[pos + len("struct"):].strip()
            brace = remaining.find("{")
            return remaining[:brace].strip() if brace >= 0 else remaining
    return ""


def _struct_fields(lines: list[str]) -> dict[str, str]:
    fields: dict[str, str] = {}
    inside_struct = False
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("//"):
            continue
        if not inside_struct:
            if "{" in line:
                inside_struct = True
            continue
        if "}" in line:
            break
        parts = line.rstrip(";").split()
        if len(parts) >= 2:
            field_type, field_name = parts[0], parts[1]
            fields[field_name] = field_type
    return fields


def parse_idl_file(file_path: str | PathLike[str]) -> DdsData:
    """Parse the first struct of an IDL file into a :class:`DdsData`."""
    content = Path(file_path).read_text(encoding="utf-8")
    lines = content.splitlines()
    return DdsData(name=_struct_name(lines), value="{}", fields=_struct_fields(lines))


def collect_idl_files(directory: str | PathLike[str]) -> list[Path]:
    """Return the ``.idl`` files directly inside a directory; missing directories yield nothing."""
    dir_path = Path(directory)
    if not dir_path.exists():
        log.info("IDL directory does not exist: %s", dir_path)
        return []

    idl_files: list[Path] = []
    if dir_path.is_dir():
        for path in dir_path.iterdir():
            if _is_idl_file(path):
                log.debug("Found IDL file: %s", path)
                idl_files.append(path)

    if idl_files:
        log.info("Found %d IDL files in directory: %s", len(idl_files), dir_path)
    else:
        log.info("No IDL files found in directory: %s", dir_path)
    return idl_files


def get_idl_files(directory: str | PathLike[str]) -> list[tuple[str, str]]:
    """Return ``(type name, file path)`` pairs for the ``.idl`` files in a directory."""
    dir_path = Path(directory)
    if not dir_path.exists():
        log.info("Directory does not exist: %s", dir_path)
        return []

    result: list[tuple[str, str]] = []
    for path in dir_path.iterdir():
        log.debug("Directory entry: %s (is_file: %s)", path, path.is_file())
        if _is_idl_file(path):
            result.append((path.stem, str(path)))
    log.info("Found %d IDL files in %s", len(result), dir_path)
    return result


def load_idl_file(path: str | PathLike[str]) -> DdsData:
    """Load an IDL file as a :class:`DdsData`."""
    return parse_idl_file(path)