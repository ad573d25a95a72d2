"""Loading the DDS section of the project settings file."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from os import PathLike
from pathlib import Path
from typing import Any

import yaml

log = logging.getLogger(__name__)

DEFAULT_IDL_DIR = Path("src/vehicle/dds/idl")
DEFAULT_DOMAIN_ID = 0
SETTINGS_RELATIVE_PATH = Path("src/settings.yaml")

_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1


@dataclass(frozen=True)
class DdsSettings:
    """DDS settings: IDL directory (relative to the project root), domain id and output directory."""

    idl_dir: Path = DEFAULT_IDL_DIR
    domain_id: int = DEFAULT_DOMAIN_ID
    out_dir: str | None = None


def _settings_path(manifest_dir: str | PathLike[str]) -> Path:
    parents = Path(manifest_dir).parents
    if len(parents) < 3:
        raise ValueError("Failed to resolve project root for settings.yaml")
    return parents[2] / SETTINGS_RELATIVE_PATH


def _to_i32(value: int) -> int:
    return ((value + 2**31) % 2**32) - 2**31


def _domain_id(dds: dict[str, Any]) -> int:
    value = dds.get("domain_id")
    if isinstance(value, bool) or not isinstance(value, int):
        return DEFAULT_DOMAIN_ID
    if not _I64_MIN <= value <= _I64_MAX:
        return DEFAULT_DOMAIN_ID
    return _to_i32(value)


def _out_dir(dds: dict[str, Any], build_out_dir: str | PathLike[str] | None) -> str | None:
    value = dds.get("out_dir")
    if not isinstance(value, str):
        return None
    if value.startswith("/"):
        return value
    if build_out_dir is None:
        return None
    log.info("Converting relative path '%s' to the build directory", value)
    return str(build_out_dir)


def load_dds_settings(
    manifest_dir: str | PathLike[str],
    build_out_dir: str | PathLike[str] | None = None,
) -> DdsSettings:
    """Read DDS settings from ``src/settings.yaml`` three levels above ``manifest_dir``.

    Defaults are used when the file does not exist. A relative ``out_dir`` is
    replaced by ``build_out_dir``, or dropped when that is not given.
    """
    settings_path = _settings_path(manifest_dir)
    if not settings_path.exists():
        log.info("No settings file found, using defaults")
        return DdsSettings()

    log.info("Reading settings from: %s", settings_path)
    settings = yaml.safe_load(settings_path.read_text(encoding="utf-8"))

    dds = settings.get("dds") if isinstance(settings, dict) else None
    if not isinstance(dds, dict):
        dds = {}

    idl_path = dds.get("idl_path")
    idl_dir = Path(idl_path) if isinstance(idl_path, str) else DEFAULT_IDL_DIR

    result = DdsSettings(
        idl_dir=idl_dir,
        domain_id=_domain_id(dds),
        out_dir=_out_dir(dds, build_out_dir),
    )
    log.info("DDS settings: %s", result)
    return result