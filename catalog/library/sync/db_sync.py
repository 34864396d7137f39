"""Reconcile extracted book records against the persisted catalog."""

from __future__ import annotations

from typing import Optional

from catalog import logging_manager

from ..catalog_repository import CatalogRepository
from ..library_models import BookRecord, CatalogBook, ReconcileOutcome

LOGGER = logging_manager.get_logger().getChild("library.sync.db_sync")


class CatalogReconciler:
    """Insert or update catalog rows for extracted :class:`BookRecord` objects.

    Creation is transactional across author, book, genres and genre links.
    Updates are a single statement outside that transaction and leave the
    author reference and genre links untouched.
    """

    def __init__(self, repository: CatalogRepository) -> None:
        self._repository = repository

    def find_existing(self, external_key: str) -> Optional[CatalogBook]:
        return self._repository.find_book_by_key(external_key)

    def create_book(self, record: BookRecord) -> CatalogBook:
        with self._repository.transaction() as session:
            author = self._repository.find_or_create_author(session, record.author_name)
            book = self._repository.insert_book(
                session, record.book_fields(), author_id=author.id
            )
            for genre_name in record.genres:
                genre = self._repository.find_or_create_genre(session, genre_name)
                self._repository.link_genre(session, book.id, genre.id)
            created = CatalogBook.from_model(book)

        LOGGER.debug("Added new book: %s by %s", record.title, record.author_name)
        return created

    def update_book(self, book_id: int, record: BookRecord) -> None:
        self._repository.update_book(book_id, record.update_fields())
        LOGGER.debug("Updated book: %s", record.title)

    def reconcile(self, record: BookRecord) -> ReconcileOutcome:
        existing = self.find_existing(record.external_key)
        if existing is not None:
            self.update_book(existing.id, record)
            return ReconcileOutcome.UPDATED
        self.create_book(record)
        return ReconcileOutcome.ADDED


__all__ = ["CatalogReconciler"]
