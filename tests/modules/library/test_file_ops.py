from __future__ import annotations

from pathlib import Path

import pytest

from catalog.library.sync import file_ops

pytestmark = pytest.mark.library


def test_validate_library_path_accepts_directory(tmp_path: Path) -> None:
    assert file_ops.validate_library_path(tmp_path) is True


def test_validate_library_path_rejects_missing_and_file(tmp_path: Path) -> None:
    regular = tmp_path / "notes.txt"
    regular.write_text("x", encoding="utf-8")

    assert file_ops.validate_library_path(tmp_path / "missing") is False
    assert file_ops.validate_library_path(regular) is False
    assert file_ops.validate_library_path(str(tmp_path)) is True


def test_list_child_directories_skips_hidden_system_and_files(tmp_path: Path) -> None:
    for name in ("Zelazny", ".git", "_trash", "Asimov", "Banks"):
        (tmp_path / name).mkdir()
    (tmp_path / "README.txt").write_text("readme", encoding="utf-8")

    assert file_ops.list_child_directories(tmp_path) == ["Asimov", "Banks", "Zelazny"]


def test_list_child_directories_reflects_current_disk_state(tmp_path: Path) -> None:
    (tmp_path / "First").mkdir()
    assert file_ops.list_child_directories(tmp_path) == ["First"]

    (tmp_path / "Second").mkdir()
    assert file_ops.list_child_directories(tmp_path) == ["First", "Second"]


def test_list_child_directories_raises_for_unreadable_path(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        file_ops.list_child_directories(tmp_path / "missing")


def test_list_files_returns_sorted_regular_files(tmp_path: Path) -> None:
    (tmp_path / "b.mp3").write_bytes(b"")
    (tmp_path / "a.mp3").write_bytes(b"")
    (tmp_path / "nested").mkdir()

    assert file_ops.list_files(tmp_path) == ["a.mp3", "b.mp3"]


@pytest.mark.parametrize(
    ("name", "expected"),
    [(".hidden", True), ("_staging", True), ("Asimov", False), ("a_b", False)],
)
def test_is_skipped_name(name: str, expected: bool) -> None:
    assert file_ops.is_skipped_name(name) is expected
