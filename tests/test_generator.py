from pathlib import Path

import pytest

from pullpiri.generator import (
    create_empty_modules,
    generate_dds_module,
    generate_struct_file,
    generate_type_metadata_registry,
    generate_type_registry,
    verify_generated_files,
)
from pullpiri.idl_types import idl_to_rust_type

SENSOR_IDL = """// sample
struct Sensor {
    float speed;
    boolean active;
};
"""


@pytest.fixture
def idl_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "idl"
    directory.mkdir()
    (directory / "sensor.idl").write_text(SENSOR_IDL, encoding="utf-8")
    return directory


@pytest.fixture
def out_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "out"
    directory.mkdir()
    return directory


def test_generate_struct_file_writes_struct_and_fields(out_dir: Path):
    path = generate_struct_file(out_dir, "sensor", "Sensor", {"speed": "float", "label": "Custom"})
    assert path == out_dir / "sensor.rs"
    lines = path.read_text(encoding="utf-8").splitlines()
    assert "pub struct Sensor {" in lines
    assert f"    pub speed: {idl_to_rust_type('float')}," in lines
    assert f"    pub label: {idl_to_rust_type('Custom')}," in lines
    assert lines[-1] == "}"
    assert lines.index("pub struct Sensor {") < lines.index("    pub label: String,")


def test_generate_dds_module_with_idl(out_dir: Path, idl_dir: Path):
    generate_dds_module(out_dir, idl_dir)
    modules = (out_dir / "dds_modules.rs").read_text(encoding="utf-8")
    assert "pub mod sensor {" in modules
    assert 'include!("sensor.rs");' in modules
    types = (out_dir / "dds_types.rs").read_text(encoding="utf-8")
    assert 'include!("dds_modules.rs");' in types
    struct_text = (out_dir / "sensor.rs").read_text(encoding="utf-8")
    assert "pub struct Sensor {" in struct_text


def test_generate_dds_module_without_idl_files(out_dir: Path, tmp_path: Path):
    empty = tmp_path / "empty"
    empty.mkdir()
    generate_dds_module(out_dir, empty)
    assert sorted(p.name for p in out_dir.iterdir()) == ["dds_modules.rs", "dds_types.rs"]
    assert "pub mod" not in (out_dir / "dds_modules.rs").read_text(encoding="utf-8")


def test_generate_dds_module_missing_directory(out_dir: Path, tmp_path: Path):
    generate_dds_module(out_dir, tmp_path / "missing")
    types = (out_dir / "dds_types.rs").read_text(encoding="utf-8")
    assert 'include!("dds_modules.rs");' in types


def test_generate_dds_module_skips_unreadable_idl(out_dir: Path, idl_dir: Path):
    (idl_dir / "broken.idl").write_bytes(b"\xff\xfe\xfa")
    generate_dds_module(out_dir, idl_dir)
    modules = (out_dir / "dds_modules.rs").read_text(encoding="utf-8")
    assert "pub mod broken" not in modules
    assert "pub mod sensor {" in modules
    assert not (out_dir / "broken.rs").exists()


def test_generate_type_registry(out_dir: Path, idl_dir: Path):
    path = generate_type_registry(out_dir, [idl_dir / "sensor.idl"])
    lines = path.read_text(encoding="utf-8").splitlines()
    assert '        "Sensor" => {' in lines
    assert any("GenericTopicListener::<sensor::Sensor>::new(" in line for line in lines)
    assert lines[-3:] == ["        _ => None,", "    }", "}"]


def test_generate_type_registry_skips_bad_files(out_dir: Path, idl_dir: Path):
    bad = idl_dir / "broken.idl"
    bad.write_bytes(b"\xff\xfe")
    path = generate_type_registry(out_dir, [bad, idl_dir / "missing.idl"])
    assert "=> {" not in path.read_text(encoding="utf-8")


def test_generate_type_metadata_registry(out_dir: Path, idl_dir: Path):
    path = generate_type_metadata_registry(out_dir, [idl_dir / "sensor.idl"])
    text = path.read_text(encoding="utf-8")
    assert f'fields.insert("speed".to_string(), "{idl_to_rust_type("float")}".to_string());' in text
    assert f'fields.insert("active".to_string(), "{idl_to_rust_type("boolean")}".to_string());' in text
    assert 'metadata.insert("Sensor".to_string(), TypeMetadata {' in text
    assert 'module: "sensor".to_string(),' in text
    assert text.rstrip().endswith("metadata\n}")


def test_verify_generated_files_missing(out_dir: Path):
    with pytest.raises(RuntimeError, match="Output files were not created properly"):
        verify_generated_files(out_dir, out_dir / "dds_modules.rs", out_dir / "dds_types.rs")


def test_verify_generated_files_present(out_dir: Path):
    create_empty_modules(out_dir)
    assert verify_generated_files(out_dir, out_dir / "dds_modules.rs", out_dir / "dds_types.rs") is None
    assert (out_dir / "dds_modules.rs").exists()


def test_create_empty_modules(out_dir: Path):
    create_empty_modules(out_dir)
    assert sorted(p.name for p in out_dir.iterdir()) == [
        "dds_modules.rs",
        "dds_type_metadata.rs",
        "dds_type_registry.rs",
        "dds_types.rs",
    ]
    registry = (out_dir / "dds_type_registry.rs").read_text(encoding="utf-8")
    assert "        _ => None," in registry
    assert "=> {" not in registry
    metadata = (out_dir / "dds_type_metadata.rs").read_text(encoding="utf-8")
    assert "HashMap::new()  // Empty metadata" in metadata