"""SQLAlchemy models; importing this package registers them with Base.metadata."""

from .catalog import AuthorModel, BookGenreModel, BookModel, GenreModel
from .scan import ScanHistoryModel

__all__ = [
    "AuthorModel",
    "BookGenreModel",
    "BookModel",
    "GenreModel",
    "ScanHistoryModel",
]
