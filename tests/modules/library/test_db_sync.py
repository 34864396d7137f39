from __future__ import annotations

from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import SQLAlchemyError

from catalog.library import BookRecord, CatalogReconciler, ReconcileOutcome

pytestmark = pytest.mark.library

SCANNED = datetime(2024, 3, 1, tzinfo=timezone.utc)


def make_record(**overrides) -> BookRecord:
    values = {
        "external_key": "SXNhYWMgQXNpbW92L0ZvdW5kYXRpb24=",
        "title": "Foundation",
        "author_name": "Isaac Asimov",
        "file_path": "/library/Isaac Asimov/Foundation",
        "last_scanned": SCANNED,
        "format": "m4b",
        "genres": ("Science Fiction",),
    }
    values.update(overrides)
    return BookRecord(**values)


def test_reconcile_creates_then_updates(repository) -> None:
    reconciler = CatalogReconciler(repository)

    assert reconciler.reconcile(make_record()) is ReconcileOutcome.ADDED
    assert reconciler.reconcile(make_record(format="mp3", title="Foundation (Unabridged)")) is (
        ReconcileOutcome.UPDATED
    )

    book = reconciler.find_existing(make_record().external_key)
    assert repository.count_books() == 1
    assert book.format == "mp3"
    assert book.title == "Foundation (Unabridged)"


def test_create_links_author_and_genres(repository) -> None:
    reconciler = CatalogReconciler(repository)

    created = reconciler.create_book(make_record(genres=("Science Fiction", "Classics")))

    assert repository.get_author_name(created.author_id) == "Isaac Asimov"
    assert repository.list_book_genres(created.id) == ["Classics", "Science Fiction"]


def test_authors_are_shared_between_books(repository) -> None:
    reconciler = CatalogReconciler(repository)
    reconciler.create_book(make_record())
    reconciler.create_book(make_record(external_key="b3RoZXI=", title="I, Robot", genres=()))

    assert repository.list_author_names() == ["Isaac Asimov"]


def test_update_keeps_author_and_genre_links(repository) -> None:
    reconciler = CatalogReconciler(repository)
    created = reconciler.create_book(make_record())

    reconciler.reconcile(make_record(author_name="Someone Else", genres=("Mystery",)))

    book = repository.get_book(created.id)
    assert book.author_id == created.author_id
    assert repository.list_author_names() == ["Isaac Asimov"]
    assert repository.list_book_genres(created.id) == ["Science Fiction"]


def test_create_rolls_back_when_a_step_fails(repository, monkeypatch) -> None:
    reconciler = CatalogReconciler(repository)

    def _fail_link(session, book_id, genre_id):
        raise SQLAlchemyError("link failed")

    monkeypatch.setattr(repository, "link_genre", _fail_link)

    with pytest.raises(SQLAlchemyError):
        reconciler.create_book(make_record())

    assert repository.count_books() == 0
    assert repository.list_author_names() == []
    assert repository.get_library_stats().genres == 0
