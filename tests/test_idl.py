from pathlib import Path

import pytest

from pullpiri.idl import collect_idl_files, get_idl_files, load_idl_file, parse_idl_file

SPEED_IDL = """\
// Vehicle speed topic
struct VehicleSpeed {
    double speed;
    // unit is km/h
    long timestamp;
};
"""


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_parse_struct_name_and_fields(tmp_path):
    data = parse_idl_file(_write(tmp_path / "speed.idl", SPEED_IDL))
    assert data.name == "VehicleSpeed"
    assert data.fields == {"speed": "double", "timestamp": "long"}
    assert data.value == "{}"


def test_parse_brace_on_following_line(tmp_path):
    text = "struct Door\n{\n  boolean open;\n};\n"
    data = parse_idl_file(_write(tmp_path / "door.idl", text))
    assert data.name == "Door"
    assert data.fields == {"open": "boolean"}


def test_parse_multiword_type_takes_first_two_tokens(tmp_path):
    text = "struct Counter {\n  unsigned long count;\n};\n"
    data = parse_idl_file(_write(tmp_path / "counter.idl", text))
    assert data.fields == {"long": "unsigned"}


def test_parse_without_struct(tmp_path):
    data = parse_idl_file(_write(tmp_path / "empty.idl", "// nothing here\n"))
    assert data.name == ""
    assert data.fields == {}


def test_parse_stops_at_closing_brace(tmp_path):
    text = "struct A {\n  long a;\n};\nstruct B {\n  long b;\n};\n"
    data = parse_idl_file(_write(tmp_path / "two.idl", text))
    assert data.name == "A"
    assert data.fields == {"a": "long"}


def test_parse_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        parse_idl_file(tmp_path / "missing.idl")


def test_load_idl_file_matches_parse(tmp_path):
    path = _write(tmp_path / "speed.idl", SPEED_IDL)
    assert load_idl_file(path) == parse_idl_file(path)


def _populate(directory: Path) -> None:
    _write(directory / "a.idl", SPEED_IDL)
    _write(directory / "b.idl", SPEED_IDL)
    _write(directory / "c.txt", "not idl")
    (directory / "d.idl").mkdir()


def test_collect_idl_files_only_files_with_idl_suffix(tmp_path):
    _populate(tmp_path)
    found = collect_idl_files(tmp_path)
    assert sorted(p.name for p in found) == ["a.idl", "b.idl"]
    assert all(p.parent == tmp_path for p in found)


def test_collect_idl_files_missing_directory(tmp_path):
    assert collect_idl_files(tmp_path / "nope") == []


def test_collect_idl_files_on_a_file(tmp_path):
    path = _write(tmp_path / "a.idl", SPEED_IDL)
    assert collect_idl_files(path) == []


def test_get_idl_files_pairs(tmp_path):
    _populate(tmp_path)
    pairs = sorted(get_idl_files(tmp_path))
    assert pairs == [("a", str(tmp_path / "a.idl")), ("b", str(tmp_path / "b.idl"))]


def test_get_idl_files_agrees_with_collect(tmp_path):
    _populate(tmp_path)
    from_get = sorted(Path(path) for _, path in get_idl_files(tmp_path))
    assert from_get == sorted(collect_idl_files(tmp_path))


def test_get_idl_files_missing_directory(tmp_path):
    assert get_idl_files(tmp_path / "nope") == []


def test_get_idl_files_on_a_file_raises(tmp_path):
    path = _write(tmp_path / "a.idl", SPEED_IDL)
    with pytest.raises(NotADirectoryError):
        get_idl_files(path)