"""Tests for the LUT library store."""

import json
import os

import numpy as np
import pytest

from conftest import identity_lut_pixels, write_png
from utils import LUTManager


@pytest.fixture
def manager(tmp_path):
    return LUTManager(str(tmp_path / "library"))


@pytest.fixture
def source_lut(tmp_path):
    return write_png(tmp_path / "Warm Film.png", identity_lut_pixels(4))


def test_new_library_is_empty(manager):
    assert manager.list_luts() == []
    assert os.path.isdir(manager.luts_dir)


def test_import_copies_file_and_persists(manager, source_lut, tmp_path):
    item = manager.import_lut(source_lut)

    assert item.name == "Warm Film"
    assert os.path.isabs(item.path)
    assert os.path.dirname(item.path) == manager.luts_dir
    assert os.path.basename(item.path) == f"Warm Film_{item.id}.png"
    assert os.path.exists(item.path)
    assert manager.list_luts() == [item]

    reopened = LUTManager(str(tmp_path / "library"))
    assert reopened.list_luts() == [item]


def test_same_file_can_be_imported_twice(manager, source_lut):
    first = manager.import_lut(source_lut)
    second = manager.import_lut(source_lut)
    assert first.id != second.id
    assert first.path != second.path
    assert len(manager.list_luts()) == 2


def test_cancelled_import_returns_none(manager):
    assert manager.import_lut(None) is None
    assert manager.import_lut("") is None


def test_import_rejects_non_png(manager, tmp_path):
    cube = tmp_path / "grade.cube"
    cube.write_text("LUT_3D_SIZE 2\n")
    with pytest.raises(ValueError, match="Only PNG"):
        manager.import_lut(str(cube))


def test_delete(manager, source_lut):
    item = manager.import_lut(source_lut)

    assert manager.delete_lut(item.id) is True
    assert not os.path.exists(item.path)
    assert manager.list_luts() == []
    with open(manager.index_path, encoding="utf-8") as f:
        assert json.load(f) == {"luts": []}


def test_delete_unknown_id(manager):
    assert manager.delete_lut("no-such-id") is False


def test_delete_removes_entry_even_if_file_is_gone(manager, source_lut):
    item = manager.import_lut(source_lut)
    os.remove(item.path)
    assert manager.delete_lut(item.id) is True
    assert manager.list_luts() == []


def test_lookup_by_display_name(manager, source_lut):
    item = manager.import_lut(source_lut)
    assert manager.get_lut_choices() == ["Warm Film"]
    assert manager.get_lut_path("Warm Film") == item.path
    assert manager.get_lut_path("Cold") is None


def test_corrupt_index_starts_empty(tmp_path):
    library = tmp_path / "library"
    library.mkdir()
    (library / "luts.json").write_text("{not json")
    assert LUTManager(str(library)).list_luts() == []


def test_sync_default_luts(manager, tmp_path):
    bundled = tmp_path / "bundled"
    (bundled / "Film").mkdir(parents=True)
    write_png(bundled / "Neutral.png", identity_lut_pixels(2))
    write_png(bundled / "Film" / "Portra.png", identity_lut_pixels(2))
    (bundled / "README.txt").write_text("not a lut")

    assert manager.sync_default_luts(str(bundled)) == 2
    assert sorted(manager.get_lut_choices()) == ["Film/Portra", "Neutral"]
    # second sync finds nothing new
    assert manager.sync_default_luts(str(bundled)) == 0
    assert all(os.path.exists(item.path) for item in manager.list_luts())


def test_sync_missing_bundle_dir(manager, tmp_path):
    assert manager.sync_default_luts(str(tmp_path / "nope")) == 0


def test_imported_lut_is_loadable(manager, source_lut):
    from core.lut_loader import load_lut

    item = manager.import_lut(source_lut)
    lut = load_lut(item.path)
    assert lut.level == 4
    np.testing.assert_array_equal(lut.pixels, identity_lut_pixels(4))
