"""Builders for catalog books, purchase events and sources used in tests."""

from datetime import datetime, timedelta

from bookrec.recommender.models import CandidateBook, PurchaseEvent, UserId
from bookrec.recommender.sources import DataFrameCatalogSource, DataFramePurchaseHistorySource

BASE_DATE = datetime(2024, 1, 1)


def make_book(
    book_id: int,
    category_code: str,
    popularity_rank: int,
    available_stock: int = 5,
    days_after_base: int = 0,
) -> CandidateBook:
    """Build a catalog book with a classification matching its category."""
    return CandidateBook(
        book_id=book_id,
        category_code=category_code,
        available_stock=available_stock,
        popularity_rank=popularity_rank,
        added_at=BASE_DATE + timedelta(days=days_after_base),
        title=f"Book {book_id}",
        author=f"Author {book_id}",
        classification=f"{category_code}{book_id}/1",
    )


def purchase(user_id: UserId, book_id: int, category_code: str, quantity: int = 1) -> PurchaseEvent:
    return PurchaseEvent(
        user_id=user_id, book_id=book_id, category_code=category_code, quantity=quantity
    )


def build_sources(books, events):
    """Wrap fixture books and events in the pandas-backed sources."""
    return (
        DataFrameCatalogSource.from_books(books),
        DataFramePurchaseHistorySource.from_events(events),
    )
