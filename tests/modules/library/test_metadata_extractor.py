from __future__ import annotations

import base64
from datetime import date
from pathlib import Path

import pytest

from catalog.library.sync import metadata, utils
from catalog.library.sync.metadata import LibraryMetadataExtractor

pytestmark = pytest.mark.library


def _extract(library_root: Path, title_dir: Path, clock):
    extractor = LibraryMetadataExtractor(library_root, clock=clock)
    return extractor.extract(title_dir, title_dir.parent.name, title_dir.name)


def test_directory_without_audio_is_not_a_book(library_root, build_title, clock) -> None:
    title_dir = build_title("Author", "Notes", files=("cover.jpg", "book.epub"))

    assert _extract(library_root, title_dir, clock) is None


def test_fallbacks_without_sidecar(library_root, build_title, clock) -> None:
    title_dir = build_title("Ursula K. Le Guin", "The Dispossessed", files=("part1.mp3",))

    record = _extract(library_root, title_dir, clock)

    assert record is not None
    assert record.title == "The Dispossessed"
    assert record.author_name == "Ursula K. Le Guin"
    assert record.language == "en"
    assert record.format == "mp3"
    assert record.duration_seconds == 0
    assert record.published_date is None
    assert record.is_series is False
    assert record.series_name is None
    assert record.genres == ()
    assert record.cover_image_path is None
    assert record.file_path == str(title_dir)


def test_sidecar_values_take_precedence(library_root, build_title, clock) -> None:
    title_dir = build_title(
        "asimov",
        "foundation-dir",
        files=("Foundation.m4b", "Foundation.epub"),
        sidecar={
            "title": "Foundation",
            "subtitle": "The First Novel",
            "author": ["Isaac Asimov", "Someone Else"],
            "summary": "Psychohistory.",
            "publishedYear": "1951",
            "duration": 30000.7,
            "genres": ["Science Fiction", " ", "Science Fiction", "Classics"],
            "series": "Foundation",
            "sequence": 1,
            "language": "de",
            "isbn": "9780553293357",
            "asin": "B000FC0PDA",
            "publisher": "Gnome Press",
        },
    )

    record = _extract(library_root, title_dir, clock)

    assert record.title == "Foundation"
    assert record.subtitle == "The First Novel"
    assert record.author_name == "Isaac Asimov"
    assert record.description == "Psychohistory."
    assert record.published_date == date(1951, 1, 1)
    assert record.duration_seconds == 30000
    assert record.genres == ("Science Fiction", "Classics")
    assert record.is_series is True
    assert record.series_name == "Foundation"
    assert record.series_sequence == "1"
    assert record.language == "de"
    assert record.isbn == "9780553293357"
    assert record.asin == "B000FC0PDA"
    assert record.publisher == "Gnome Press"
    assert record.ebook_files == ("Foundation.epub",)


def test_format_precedence_prefers_m4b(library_root, build_title, clock) -> None:
    title_dir = build_title("Author", "Mixed", files=("a.mp3", "b.m4b", "c.flac"))

    assert _extract(library_root, title_dir, clock).format == "m4b"


def test_format_matching_ignores_case(library_root, build_title, clock) -> None:
    title_dir = build_title("Author", "Shouty", files=("CHAPTER.MP3",))

    assert _extract(library_root, title_dir, clock).format == "mp3"


def test_audio_outside_priority_list_has_unknown_format(library_root, build_title, clock) -> None:
    title_dir = build_title("Author", "Vorbis", files=("track.ogg",))

    record = _extract(library_root, title_dir, clock)

    assert record is not None
    assert record.format == "unknown"


def test_cover_selection_is_deterministic(library_root, build_title, clock) -> None:
    title_dir = build_title("Author", "Covers", files=("book.m4b", "folder.png", "cover.jpg"))

    record = _extract(library_root, title_dir, clock)

    assert record.cover_image_path == str(title_dir / "cover.jpg")


def test_cover_pattern_accepts_folder_images(library_root, build_title, clock) -> None:
    title_dir = build_title("Author", "Folder", files=("book.m4b", "folder.webp", "art.jpg"))

    record = _extract(library_root, title_dir, clock)

    assert record.cover_image_path == str(title_dir / "folder.webp")


def test_malformed_sidecar_falls_back_to_directory_names(library_root, build_title, clock) -> None:
    title_dir = build_title("Author", "Broken", files=("book.mp3",), sidecar="{not json")

    record = _extract(library_root, title_dir, clock)

    assert record is not None
    assert record.title == "Broken"
    assert record.author_name == "Author"


def test_non_object_sidecar_is_ignored(tmp_path: Path) -> None:
    (tmp_path / "metadata.json").write_text("[1, 2, 3]", encoding="utf-8")

    assert metadata.load_sidecar(tmp_path) == {}


def test_external_key_is_stable_and_reversible(library_root, build_title, clock) -> None:
    title_dir = build_title("Isaac Asimov", "Foundation")

    first = _extract(library_root, title_dir, clock)
    second = _extract(library_root, title_dir, clock)

    expected = base64.b64encode("Isaac Asimov/Foundation".encode("utf-8")).decode("ascii")
    assert first.external_key == second.external_key == expected
    assert utils.decode_external_key(first.external_key) == "Isaac Asimov/Foundation"


def test_decode_external_key_rejects_garbage() -> None:
    with pytest.raises(ValueError):
        utils.decode_external_key("not base64!")


@pytest.mark.parametrize(
    ("value", "expected"),
    [("2001", date(2001, 1, 1)), (1984, date(1984, 1, 1)), ("soon", None), (0, None), (None, None)],
)
def test_resolve_published_date(value, expected) -> None:
    assert metadata.resolve_published_date(value) == expected


def test_resolve_genres_accepts_single_string() -> None:
    assert metadata.resolve_genres("Fantasy") == ("Fantasy",)
    assert metadata.resolve_genres(42) == ()


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("  Foundation ", "Foundation"),
        (["", "  ", "Foundation #1", "Other"], "Foundation #1"),
        ([["nested"], 3], "3"),
        (2.5, "2.5"),
        (7, "7"),
        (True, None),
        (False, None),
        ({"name": "Foundation"}, None),
        ([], None),
        ("   ", None),
        (None, None),
    ],
)
def test_resolve_text(value, expected) -> None:
    assert metadata.resolve_text(value) == expected


def test_list_valued_sidecar_fields_use_first_entry(library_root, build_title, clock) -> None:
    title_dir = build_title(
        "asimov",
        "foundation-dir",
        sidecar={
            "title": ["Foundation"],
            "subtitle": [" ", "The First Novel"],
            "series": ["Foundation #1"],
            "sequence": [1, 2],
            "description": ["Psychohistory."],
            "isbn": [9780553293357],
            "asin": ["B000FC0PDA"],
            "publisher": ["Gnome Press", "Doubleday"],
            "language": ["fr"],
        },
    )

    record = _extract(library_root, title_dir, clock)

    assert record.title == "Foundation"
    assert record.subtitle == "The First Novel"
    assert record.series_name == "Foundation #1"
    assert record.is_series is True
    assert record.series_sequence == "1"
    assert record.description == "Psychohistory."
    assert record.isbn == "9780553293357"
    assert record.asin == "B000FC0PDA"
    assert record.publisher == "Gnome Press"
    assert record.language == "fr"


def test_boolean_and_object_sidecar_fields_fall_back(library_root, build_title, clock) -> None:
    title_dir = build_title(
        "Author",
        "Plain Title",
        sidecar={
            "title": {"main": "Ignored"},
            "subtitle": True,
            "series": False,
            "sequence": False,
            "description": {"text": "Ignored"},
            "summary": ["Short summary."],
            "isbn": False,
            "asin": {},
            "publisher": [],
            "language": False,
            "author": {"name": "Ignored"},
        },
    )

    record = _extract(library_root, title_dir, clock)

    assert record.title == "Plain Title"
    assert record.subtitle is None
    assert record.series_name is None
    assert record.is_series is False
    assert record.series_sequence is None
    assert record.description == "Short summary."
    assert record.isbn is None
    assert record.asin is None
    assert record.publisher is None
    assert record.language == "en"
    assert record.author_name == "Author"


def test_numeric_sequence_is_rendered_as_text(library_root, build_title, clock) -> None:
    title_dir = build_title("Author", "Half Step", sidecar={"series": "Saga", "sequence": 2.5})

    assert _extract(library_root, title_dir, clock).series_sequence == "2.5"
