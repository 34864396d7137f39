"""SQLAlchemy-backed catalog repository."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, List, Mapping, Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, sessionmaker

from catalog import logging_manager

from ..database.engine import (
    create_catalog_engine,
    create_session_factory,
    init_database,
    session_scope,
)
from ..database.models import (
    AuthorModel,
    BookGenreModel,
    BookModel,
    GenreModel,
    ScanHistoryModel,
)
from .exceptions import LibraryNotFoundError
from .library_models import (
    CatalogBook,
    LibraryStats,
    ScanResults,
    ScanRunRecord,
    ScanState,
    ScanType,
)

logger = logging_manager.get_logger().getChild("library.repository")


class CatalogRepository:
    """Persist authors, books, genres and scan runs.

    Operations that take a ``session`` participate in a caller-owned
    transaction opened with :meth:`transaction`. The remaining operations open
    and commit their own short-lived session.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    @classmethod
    def from_url(cls, url: str) -> "CatalogRepository":
        engine = create_catalog_engine(url)
        init_database(engine)
        return cls(create_session_factory(engine))

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Yield a session whose work commits together or rolls back together."""
        with session_scope(self._session_factory) as session:
            yield session

    # ------------------------------------------------------------------
    # Books
    # ------------------------------------------------------------------

    def find_book_by_key(self, external_key: str) -> Optional[CatalogBook]:
        with session_scope(self._session_factory) as session:
            model = session.execute(
                select(BookModel).where(BookModel.external_key == external_key)
            ).scalar_one_or_none()
            if model is None:
                return None
            return CatalogBook.from_model(model)

    def get_book(self, book_id: int) -> Optional[CatalogBook]:
        with session_scope(self._session_factory) as session:
            model = session.get(BookModel, book_id)
            if model is None:
                return None
            return CatalogBook.from_model(model)

    def insert_book(
        self, session: Session, values: Mapping[str, Any], *, author_id: int
    ) -> BookModel:
        model = BookModel(**dict(values), author_id=author_id)
        session.add(model)
        session.flush()
        return model

    def update_book(self, book_id: int, values: Mapping[str, Any]) -> None:
        """Apply ``values`` to one book with a single UPDATE statement."""
        with session_scope(self._session_factory) as session:
            result = session.execute(
                update(BookModel).where(BookModel.id == book_id).values(**dict(values))
            )
            if result.rowcount == 0:
                raise LibraryNotFoundError(f"Book {book_id} not found")

    def count_books(self) -> int:
        with session_scope(self._session_factory) as session:
            return session.execute(select(func.count()).select_from(BookModel)).scalar_one()

    def list_book_genres(self, book_id: int) -> List[str]:
        with session_scope(self._session_factory) as session:
            rows = session.execute(
                select(GenreModel.name)
                .join(BookGenreModel, BookGenreModel.genre_id == GenreModel.id)
                .where(BookGenreModel.book_id == book_id)
                .order_by(GenreModel.name)
            ).scalars()
            return list(rows)

    # ------------------------------------------------------------------
    # Dimension tables
    # ------------------------------------------------------------------

    def find_or_create_author(self, session: Session, name: str) -> AuthorModel:
        author = session.execute(
            select(AuthorModel).where(AuthorModel.name == name)
        ).scalar_one_or_none()
        if author is None:
            author = AuthorModel(name=name)
            session.add(author)
            session.flush()
            logger.debug("Created author %s", name)
        return author

    def find_or_create_genre(self, session: Session, name: str) -> GenreModel:
        genre = session.execute(
            select(GenreModel).where(GenreModel.name == name)
        ).scalar_one_or_none()
        if genre is None:
            genre = GenreModel(name=name)
            session.add(genre)
            session.flush()
            logger.debug("Created genre %s", name)
        return genre

    def link_genre(self, session: Session, book_id: int, genre_id: int) -> None:
        session.add(BookGenreModel(book_id=book_id, genre_id=genre_id))
        session.flush()

    def get_author_name(self, author_id: int) -> Optional[str]:
        with session_scope(self._session_factory) as session:
            author = session.get(AuthorModel, author_id)
            return author.name if author is not None else None

    def list_author_names(self) -> List[str]:
        with session_scope(self._session_factory) as session:
            return list(
                session.execute(select(AuthorModel.name).order_by(AuthorModel.id)).scalars()
            )

    # ------------------------------------------------------------------
    # Scan runs
    # ------------------------------------------------------------------

    def create_scan_run(self, scan_type: ScanType, *, started_at: datetime) -> int:
        with session_scope(self._session_factory) as session:
            model = ScanHistoryModel(
                scan_type=scan_type.value,
                status=ScanState.RUNNING.value,
                started_at=started_at,
            )
            session.add(model)
            session.flush()
            return model.id

    def complete_scan_run(
        self, run_id: int, *, completed_at: datetime, results: ScanResults
    ) -> None:
        self._finish_scan_run(
            run_id,
            status=ScanState.COMPLETED,
            completed_at=completed_at,
            books_found=results.books_found,
            books_added=results.books_added,
            books_updated=results.books_updated,
            books_removed=results.books_removed,
            scan_results=results.as_payload(),
        )

    def fail_scan_run(
        self,
        run_id: int,
        *,
        completed_at: datetime,
        error_message: str,
        results: Optional[ScanResults] = None,
    ) -> None:
        values: Dict[str, Any] = {"error_message": error_message}
        if results is not None:
            values["scan_results"] = results.as_payload()
        self._finish_scan_run(
            run_id, status=ScanState.FAILED, completed_at=completed_at, **values
        )

    def _finish_scan_run(
        self, run_id: int, *, status: ScanState, completed_at: datetime, **values: Any
    ) -> None:
        # Only a running row may transition; terminal rows are never revisited.
        with session_scope(self._session_factory) as session:
            result = session.execute(
                update(ScanHistoryModel)
                .where(
                    ScanHistoryModel.id == run_id,
                    ScanHistoryModel.status == ScanState.RUNNING.value,
                )
                .values(status=status.value, completed_at=completed_at, **values)
            )
            if result.rowcount == 0:
                raise LibraryNotFoundError(f"No running scan run with id {run_id}")

    def get_scan_run(self, run_id: int) -> ScanRunRecord:
        with session_scope(self._session_factory) as session:
            model = session.get(ScanHistoryModel, run_id)
            if model is None:
                raise LibraryNotFoundError(f"Scan run {run_id} not found")
            return ScanRunRecord.from_model(model)

    def latest_scan_run(self) -> Optional[ScanRunRecord]:
        runs = self.list_scan_runs(limit=1)
        return runs[0] if runs else None

    def list_scan_runs(self, *, limit: int = 20, offset: int = 0) -> List[ScanRunRecord]:
        stmt = (
            select(ScanHistoryModel)
            .order_by(ScanHistoryModel.started_at.desc(), ScanHistoryModel.id.desc())
            .limit(limit)
            .offset(offset)
        )
        with session_scope(self._session_factory) as session:
            return [ScanRunRecord.from_model(model) for model in session.execute(stmt).scalars()]

    def count_scan_runs(self) -> int:
        with session_scope(self._session_factory) as session:
            return session.execute(
                select(func.count()).select_from(ScanHistoryModel)
            ).scalar_one()

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def get_library_stats(self, *, recent_limit: int = 5, top_limit: int = 10) -> LibraryStats:
        with session_scope(self._session_factory) as session:
            books = session.execute(select(func.count()).select_from(BookModel)).scalar_one()
            authors = session.execute(select(func.count()).select_from(AuthorModel)).scalar_one()
            genres = session.execute(select(func.count()).select_from(GenreModel)).scalar_one()

            recent_rows = session.execute(
                select(BookModel.id, BookModel.title, BookModel.created_at)
                .order_by(BookModel.created_at.desc(), BookModel.id.desc())
                .limit(recent_limit)
            ).all()

            link_count = func.count(BookGenreModel.book_id).label("book_count")
            top_rows = session.execute(
                select(GenreModel.name, link_count)
                .join(BookGenreModel, BookGenreModel.genre_id == GenreModel.id)
                .group_by(GenreModel.id, GenreModel.name)
                .order_by(link_count.desc(), GenreModel.name)
                .limit(top_limit)
            ).all()

        return LibraryStats(
            books=books,
            authors=authors,
            genres=genres,
            recently_added=[
                {"id": row.id, "title": row.title, "created_at": row.created_at}
                for row in recent_rows
            ],
            top_genres=[{"name": row.name, "count": row.book_count} for row in top_rows],
        )


__all__ = ["CatalogRepository"]
