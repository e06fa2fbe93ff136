import numpy as np
import pytest

from edge_response.utils.file_io import FileIO, read_json, write_json


def test_save_and_load_image(tmp_path, disk_image):
    io = FileIO()
    path = tmp_path / "nested" / "disk.png"

    io.save_image(path, disk_image.pixels)
    loaded = io.load_image(path)

    assert path.exists()
    np.testing.assert_array_equal(loaded, disk_image.pixels)


def test_save_without_suffix_uses_png(tmp_path, uniform_image):
    path = tmp_path / "plain"
    FileIO().save_image(path, uniform_image.pixels)
    assert path.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"


def test_load_missing_image(tmp_path):
    assert FileIO().load_image(tmp_path / "nope.png") is None


def test_json_roundtrip(tmp_path):
    path = tmp_path / "cfg" / "analysis.json"
    write_json({"detector": {"canny_low": 50}}, path)
    assert read_json(path) == {"detector": {"canny_low": 50}}


def test_read_missing_json(tmp_path):
    assert read_json(tmp_path / "missing.json") == {}


def test_read_blank_json(tmp_path):
    path = tmp_path / "blank.json"
    path.write_text("  \n", encoding="utf-8")
    assert read_json(path) == {}


@pytest.mark.parametrize("text", ["{broken", "[1, 2, 3]"])
def test_read_json_rejects_non_objects(tmp_path, text):
    path = tmp_path / "bad.json"
    path.write_text(text, encoding="utf-8")
    with pytest.raises(ValueError):
        read_json(path)


def test_save_image_unsupported_suffix(tmp_path, uniform_image):
    with pytest.raises(OSError):
        FileIO().save_image(tmp_path / "image.notaformat", uniform_image.pixels)
