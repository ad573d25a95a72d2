"""Build step that generates DDS type modules from the configured IDL directory."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Sequence
from os import PathLike
from pathlib import Path

import yaml

from pullpiri.dds_settings import load_dds_settings
from pullpiri.generator import (
    MODULES_FILE,
    TYPES_FILE,
    create_empty_modules,
    generate_dds_module,
    generate_type_metadata_registry,
    generate_type_registry,
)
from pullpiri.idl import collect_idl_files

log = logging.getLogger(__name__)

BUILD_INFO_FILE = "dds_build_info.txt"


def _resolve_out_dir(custom_out_dir: str | None, build_out_dir: str | PathLike[str] | None) -> Path:
    if custom_out_dir is not None:
        path = Path(custom_out_dir)
        log.info("Using custom output directory: %s", path)
        path.mkdir(parents=True, exist_ok=True)
        return path
    if build_out_dir is None:
        raise ValueError("No output directory configured or given")
    log.info("Using default output directory: %s", build_out_dir)
    return Path(build_out_dir)


def run_build(
    manifest_dir: str | PathLike[str],
    build_out_dir: str | PathLike[str] | None = None,
    cwd: str | PathLike[str] | None = None,
) -> Path:
    """Generate the DDS modules and build information; return the output directory."""
    settings = load_dds_settings(manifest_dir, build_out_dir)
    base = Path(cwd) if cwd is not None else Path.cwd()
    idl_dir = base / settings.idl_dir
    log.info("IDL directory: %s, domain id: %d", idl_dir, settings.domain_id)
    if not idl_dir.exists():
        log.warning("IDL directory doesn't exist: %s; no files will be processed", idl_dir)

    out_dir = _resolve_out_dir(settings.out_dir, build_out_dir)

    try:
        generate_dds_module(out_dir, idl_dir)
    except (OSError, RuntimeError, UnicodeDecodeError) as exc:
        log.error("Error generating DDS modules: %s", exc)
        if not (out_dir / MODULES_FILE).exists() or not (out_dir / TYPES_FILE).exists():
            create_empty_modules(out_dir)

    info_lines = [
        "DDS Build Information",
        "--------------------",
        f'IDL Directory: "{idl_dir}"',
        f"Output Directory: {out_dir}",
        f"Domain ID: {settings.domain_id}",
    ]
    if idl_dir.exists():
        idl_files = collect_idl_files(idl_dir)
        generate_type_metadata_registry(out_dir, idl_files)
        generate_type_registry(out_dir, idl_files)
        info_lines.append(f"Found IDL Files: {len(idl_files)}")
        info_lines.extend(f'  - "{path}"' for path in idl_files)
    else:
        info_lines.append("IDL Directory does not exist")

    (out_dir / BUILD_INFO_FILE).write_text(
        "".join(f"{line}\n" for line in info_lines), encoding="utf-8"
    )
    return out_dir


def main(argv: Sequence[str] | None = None) -> int:
    """Run the DDS build step from the command line."""
    parser = argparse.ArgumentParser(description="Generate DDS type modules from IDL files.")
    parser.add_argument(
        "--manifest-dir",
        default=os.environ.get("CARGO_MANIFEST_DIR", os.getcwd()),
        help="component directory, three levels below the project root",
    )
    parser.add_argument(
        "--out-dir",
        default=os.environ.get("OUT_DIR"),
        help="default output directory",
    )
    parser.add_argument("--cwd", default=None, help="base directory for the IDL path")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(message)s")
    try:
        out_dir = run_build(args.manifest_dir, args.out_dir, args.cwd)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    print(f"DDS modules written to {out_dir}")
    return 0