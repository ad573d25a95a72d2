from pathlib import Path

import pytest
import yaml

from pullpiri.dds_settings import DdsSettings, load_dds_settings


@pytest.fixture
def project(tmp_path):
    manifest = tmp_path / "src" / "player" / "filtergateway"
    manifest.mkdir(parents=True)
    return manifest, tmp_path / "src" / "settings.yaml"


def test_defaults_without_settings_file(project):
    manifest, _ = project
    settings = load_dds_settings(manifest)
    assert settings == DdsSettings(Path("src/vehicle/dds/idl"), 0, None)


def test_reads_dds_section(project):
    manifest, settings_file = project
    settings_file.write_text(
        "dds:\n  idl_path: custom/idl\n  domain_id: 7\n  out_dir: /abs/out\n",
        encoding="utf-8",
    )
    settings = load_dds_settings(manifest, "/build/out")
    assert settings.idl_dir == Path("custom/idl")
    assert settings.domain_id == 7
    assert settings.out_dir == "/abs/out"


def test_relative_out_dir_uses_build_out_dir(project):
    manifest, settings_file = project
    settings_file.write_text("dds:\n  out_dir: generated\n", encoding="utf-8")
    assert load_dds_settings(manifest, "/build/out").out_dir == "/build/out"


def test_relative_out_dir_without_build_out_dir(project):
    manifest, settings_file = project
    settings_file.write_text("dds:\n  out_dir: generated\n", encoding="utf-8")
    assert load_dds_settings(manifest).out_dir is None


def test_missing_dds_section_gives_defaults(project):
    manifest, settings_file = project
    settings_file.write_text("host:\n  name: HPC\n", encoding="utf-8")
    assert load_dds_settings(manifest, "/build/out") == DdsSettings()


def test_empty_settings_file_gives_defaults(project):
    manifest, settings_file = project
    settings_file.write_text("", encoding="utf-8")
    assert load_dds_settings(manifest) == DdsSettings()


def test_wrongly_typed_values_fall_back(project):
    manifest, settings_file = project
    settings_file.write_text(
        "dds:\n  idl_path: 5\n  domain_id: seven\n  out_dir: 3\n", encoding="utf-8"
    )
    assert load_dds_settings(manifest, "/build/out") == DdsSettings()


def test_boolean_domain_id_is_ignored(project):
    manifest, settings_file = project
    settings_file.write_text("dds:\n  domain_id: true\n", encoding="utf-8")
    assert load_dds_settings(manifest).domain_id == 0


def test_domain_id_truncates_to_32_bits(project):
    manifest, settings_file = project
    settings_file.write_text(f"dds:\n  domain_id: {2**32 + 5}\n", encoding="utf-8")
    assert load_dds_settings(manifest).domain_id == 5


def test_invalid_yaml_raises(project):
    manifest, settings_file = project
    settings_file.write_text("dds: [unclosed\n", encoding="utf-8")
    with pytest.raises(yaml.YAMLError):
        load_dds_settings(manifest)


def test_shallow_manifest_dir_raises():
    with pytest.raises(ValueError):
        load_dds_settings(Path("a/b"))