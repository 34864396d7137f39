"""Catalog models: authors, books, genres and their join table."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..base import Base, TimestampMixin


class AuthorModel(TimestampMixin, Base):
    __tablename__ = "authors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(512), nullable=False, unique=True)

    books: Mapped[list[BookModel]] = relationship(back_populates="author")


class BookModel(TimestampMixin, Base):
    __tablename__ = "books"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    external_key: Mapped[str] = mapped_column(String(2048), nullable=False, unique=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    subtitle: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    author_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("authors.id", ondelete="CASCADE"), nullable=True
    )
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    isbn: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    asin: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    language: Mapped[str] = mapped_column(String(20), nullable=False, default="en")
    publisher: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    published_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    duration_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    format: Mapped[str] = mapped_column(String(20), nullable=False, default="unknown")
    cover_image_path: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    file_path: Mapped[str] = mapped_column(Text, nullable=False)
    is_series: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    series_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    series_sequence: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    last_scanned: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    author: Mapped[Optional[AuthorModel]] = relationship(back_populates="books")
    genre_links: Mapped[list[BookGenreModel]] = relationship(
        back_populates="book", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("idx_books_title", "title"),
        Index("idx_books_author", "author_id"),
    )


class GenreModel(TimestampMixin, Base):
    __tablename__ = "genres"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    book_links: Mapped[list[BookGenreModel]] = relationship(back_populates="genre")


class BookGenreModel(Base):
    __tablename__ = "book_genres"

    book_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("books.id", ondelete="CASCADE"), primary_key=True
    )
    genre_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("genres.id", ondelete="CASCADE"), primary_key=True
    )

    book: Mapped[BookModel] = relationship(back_populates="genre_links")
    genre: Mapped[GenreModel] = relationship(back_populates="book_links")

    __table_args__ = (Index("idx_book_genres_genre", "genre_id"),)
