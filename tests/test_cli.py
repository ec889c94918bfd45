"""
Integration Tests: CLI

Drives the typer app against a temporary storage directory.
"""

import base64

import pytest
from typer.testing import CliRunner

from excaliapp.cli.app import app
from excaliapp.storage.drawing_store import DrawingStore


runner = CliRunner()


@pytest.fixture
def invoke(storage_dir):
    def _invoke(*args, input=None):
        return runner.invoke(app, ["--data-dir", str(storage_dir), *args], input=input)
    return _invoke


@pytest.fixture
def source_file(tmp_path):
    path = tmp_path / "sketch.excalidraw"
    path.write_text('{"elements": []}')
    return path


def test_save_and_show_content(invoke, source_file):
    result = invoke("save", str(source_file), "--id", "abc", "--name", "Draft", "--user", "u1")
    assert result.exit_code == 0, result.output
    assert "Saved drawing abc" in result.output

    result = invoke("show", "abc", "--content")
    assert result.exit_code == 0
    assert result.output == '{"elements": []}\n'


def test_save_defaults_name_to_file_stem(invoke, source_file, storage_dir):
    result = invoke("save", str(source_file), "--public")
    assert result.exit_code == 0, result.output

    [drawing] = DrawingStore(storage_dir).list_files()
    assert drawing.name == "sketch"
    assert drawing.is_public is True


def test_save_with_thumbnail(invoke, source_file, tmp_path, storage_dir):
    thumb = tmp_path / "thumb.png"
    thumb.write_bytes(b"\x89PNG")

    result = invoke("save", str(source_file), "--id", "abc", "--thumbnail", str(thumb))
    assert result.exit_code == 0, result.output

    drawing = DrawingStore(storage_dir).get_file("abc")
    assert base64.b64decode(drawing.thumbnail) == b"\x89PNG"


def test_save_rejects_bad_id(invoke, source_file):
    result = invoke("save", str(source_file), "--id", "../escape")

    assert result.exit_code == 1
    assert "Error" in result.output


def test_list(invoke, source_file):
    invoke("save", str(source_file), "--id", "abc", "--name", "Draft")

    result = invoke("list")

    assert result.exit_code == 0
    assert "abc" in result.output
    assert "Draft" in result.output


def test_list_empty(invoke):
    result = invoke("list")

    assert result.exit_code == 0
    assert "No drawings in storage" in result.output


def test_list_malformed_metadata(invoke, storage_dir, source_file):
    invoke("save", str(source_file), "--id", "abc")
    (storage_dir / "broken.i.json").write_text("{")

    result = invoke("list")
    assert result.exit_code == 1
    assert "broken.i.json" in result.output

    result = runner.invoke(app, ["--data-dir", str(storage_dir), "--skip-invalid", "list"])
    assert result.exit_code == 0
    assert "abc" in result.output


def test_show_metadata(invoke, source_file):
    invoke("save", str(source_file), "--id", "abc", "--name", "Draft", "--user", "u1")

    result = invoke("show", "abc")

    assert result.exit_code == 0
    assert "Draft" in result.output
    assert "u1" in result.output


def test_show_missing(invoke):
    result = invoke("show", "nope")

    assert result.exit_code == 1
    assert "not found" in result.output


def test_export_to_file(invoke, source_file, tmp_path):
    invoke("save", str(source_file), "--id", "abc")
    target = tmp_path / "out.excalidraw"

    result = invoke("export", "abc", "-o", str(target))

    assert result.exit_code == 0, result.output
    assert target.read_text() == '{"elements": []}'


def test_delete_with_force(invoke, source_file, storage_dir):
    invoke("save", str(source_file), "--id", "abc")

    result = invoke("delete", "abc", "--force")

    assert result.exit_code == 0, result.output
    assert list(storage_dir.iterdir()) == []


def test_delete_cancelled(invoke, source_file, storage_dir):
    invoke("save", str(source_file), "--id", "abc")

    result = invoke("delete", "abc", input="n\n")

    assert result.exit_code == 0
    assert "cancelled" in result.output
    assert (storage_dir / "abc.i.json").exists()


def test_delete_confirmed(invoke, source_file, storage_dir):
    invoke("save", str(source_file), "--id", "abc")

    result = invoke("delete", "abc", input="y\n")

    assert result.exit_code == 0, result.output
    assert not (storage_dir / "abc.i.json").exists()


def test_delete_missing(invoke):
    result = invoke("delete", "nope", "--force")

    assert result.exit_code == 1


def test_delete_without_content_file(invoke, source_file, storage_dir):
    invoke("save", str(source_file), "--id", "abc")
    (storage_dir / "abc.excalidraw").unlink()

    result = invoke("delete", "abc", "--force")

    assert result.exit_code == 0, result.output
    assert "already missing" in result.output
    assert list(storage_dir.iterdir()) == []


def test_duplicate(invoke, source_file, storage_dir):
    invoke("save", str(source_file), "--id", "abc", "--name", "Draft")

    result = invoke("duplicate", "abc")

    assert result.exit_code == 0, result.output
    names = sorted(d.name for d in DrawingStore(storage_dir).list_files())
    assert names == ["Draft", "Draft (Copy)"]


def test_help_does_not_create_storage(invoke, storage_dir):
    result = invoke("list", "--help")

    assert result.exit_code == 0
    assert not storage_dir.exists()


def test_binary_content_survives_save_and_export(invoke, tmp_path):
    payload = b"\x89PNG\xff\x00raw"
    source = tmp_path / "blob.excalidraw"
    source.write_bytes(payload)
    target = tmp_path / "out.excalidraw"

    assert invoke("save", str(source), "--id", "abc").exit_code == 0
    result = invoke("export", "abc", "--output", str(target))

    assert result.exit_code == 0, result.output
    assert target.read_bytes() == payload


def test_where(invoke, storage_dir):
    result = invoke("where")

    assert result.exit_code == 0
    assert result.output.strip() == str(storage_dir)
