"""Purchase history and catalog collaborators.

The engine only talks to the two abstract interfaces defined here. The
pandas-backed implementations serve fixture data in tests and CSV exports in
the bundled service; a database-backed deployment plugs in its own
subclasses.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Collection, Dict, Iterable, List, Optional, Sequence

import pandas as pd

from bookrec.config import COUNTED_ORDER_STATUSES
from bookrec.exceptions import DataSourceUnavailableError
from bookrec.recommender.categories import extract_category_code
from bookrec.recommender.models import (
    CandidateBook,
    PurchaseEvent,
    UserId,
    coerce_user_id,
    user_id_sort_key,
)

# Configure module logger
logger = logging.getLogger(__name__)

ORDER_BY_POPULARITY = "popularity"
ORDER_BY_RECENCY = "recency"

CATALOG_COLUMNS = [
    "book_id",
    "category_code",
    "available_stock",
    "popularity_rank",
    "added_at",
    "title",
    "author",
    "classification",
]
ORDER_COLUMNS = ["user_id", "book_id", "category_code", "quantity", "status"]


class PurchaseHistorySource(ABC):
    """Read access to purchases that count toward preferences."""

    @abstractmethod
    def events_for_user(self, user_id: UserId) -> List[PurchaseEvent]:
        """Return the user's paid, delivered or completed order lines."""

    @abstractmethod
    def all_users_with_purchase_history(self) -> List[UserId]:
        """Return every user with at least one counted purchase."""


class CatalogSource(ABC):
    """Read access to books that can be recommended."""

    @abstractmethod
    def candidate_books(
        self,
        excluding: Collection[int] = (),
        category: Optional[str] = None,
        in_stock_only: bool = True,
        limit: int = 10,
        order_by: str = ORDER_BY_POPULARITY,
    ) -> List[CandidateBook]:
        """Return up to ``limit`` books matching the filters, best first."""


class DataFrameCatalogSource(CatalogSource):
    """Catalog served from a pandas DataFrame.

    Required columns are ``book_id``, ``available_stock`` and
    ``popularity_rank``, plus either ``category_code`` or ``classification``.
    ``added_at``, ``title`` and ``author`` are optional.
    """

    def __init__(self, books: pd.DataFrame):
        self._books = _prepare_catalog_frame(books)
        logger.info(
            "Initialized catalog source",
            extra={"num_books": len(self._books)},
        )

    @classmethod
    def from_books(cls, books: Iterable[CandidateBook]) -> "DataFrameCatalogSource":
        records = [
            {column: getattr(book, column) for column in CATALOG_COLUMNS}
            for book in books
        ]
        return cls(pd.DataFrame(records, columns=CATALOG_COLUMNS))

    @property
    def books(self) -> pd.DataFrame:
        return self._books

    def __len__(self) -> int:
        return len(self._books)

    def category_lookup(self) -> Dict[int, str]:
        """Map each book id to its category code."""
        return dict(zip(self._books["book_id"], self._books["category_code"]))

    def candidate_books(
        self,
        excluding: Collection[int] = (),
        category: Optional[str] = None,
        in_stock_only: bool = True,
        limit: int = 10,
        order_by: str = ORDER_BY_POPULARITY,
    ) -> List[CandidateBook]:
        if limit <= 0:
            return []

        df = self._books
        mask = pd.Series(True, index=df.index)
        if excluding:
            mask &= ~df["book_id"].isin(list(excluding))
        if category is not None:
            mask &= df["category_code"] == category.upper()
        if in_stock_only:
            mask &= df["available_stock"] > 0

        if order_by == ORDER_BY_POPULARITY:
            sort_columns = ["popularity_rank", "added_at", "book_id"]
            ascending = [False, False, True]
        elif order_by == ORDER_BY_RECENCY:
            sort_columns = ["added_at", "popularity_rank", "book_id"]
            ascending = [False, False, True]
        else:
            raise ValueError(f"Unknown order_by: {order_by}")

        selected = (
            df.loc[mask]
            .sort_values(sort_columns, ascending=ascending, na_position="last", kind="mergesort")
            .head(limit)
        )
        return [_row_to_book(row) for row in selected.to_dict("records")]


class DataFramePurchaseHistorySource(PurchaseHistorySource):
    """Order lines served from a pandas DataFrame.

    Each row is one order line with ``user_id``, ``book_id``, ``quantity``
    and ``status``. The category comes from a ``category_code`` column, a
    ``classification`` column, or the optional ``catalog`` lookup by book id.
    Only rows whose status is in ``counted_statuses`` are served.
    """

    def __init__(
        self,
        orders: pd.DataFrame,
        catalog: Optional[DataFrameCatalogSource] = None,
        counted_statuses: Collection[str] = COUNTED_ORDER_STATUSES,
    ):
        self._counted_statuses = {status.lower() for status in counted_statuses}
        self._orders = self._prepare(orders, catalog)
        logger.info(
            "Initialized purchase history source",
            extra={
                "num_order_lines": len(self._orders),
                "num_users": self._orders["user_id"].nunique(),
            },
        )

    @classmethod
    def from_events(cls, events: Iterable[PurchaseEvent]) -> "DataFramePurchaseHistorySource":
        records = [
            {
                "user_id": event.user_id,
                "book_id": event.book_id,
                "category_code": event.category_code,
                "quantity": event.quantity,
                "status": "completed",
            }
            for event in events
        ]
        return cls(pd.DataFrame(records, columns=ORDER_COLUMNS))

    def _prepare(
        self,
        orders: pd.DataFrame,
        catalog: Optional[DataFrameCatalogSource],
    ) -> pd.DataFrame:
        required = {"user_id", "book_id"}
        if not required.issubset(orders.columns):
            missing = required - set(orders.columns)
            raise ValueError(f"Orders missing required columns: {missing}")

        df = orders.copy()
        df["user_id"] = df["user_id"].map(coerce_user_id)
        if "quantity" not in df.columns:
            df["quantity"] = 1
        if "status" not in df.columns:
            df["status"] = "completed"

        if "category_code" in df.columns:
            df["category_code"] = df["category_code"].map(_extract_from_cell)
        elif "classification" in df.columns:
            df["category_code"] = df["classification"].map(_extract_from_cell)
        elif catalog is not None:
            lookup = catalog.category_lookup()
            df["category_code"] = df["book_id"].map(lookup).fillna("")
            df["category_code"] = df["category_code"].map(_extract_from_cell)
        else:
            raise ValueError(
                "Orders need a category_code or classification column, "
                "or a catalog to look categories up"
            )

        df["status"] = df["status"].astype(str).str.strip().str.lower()
        df["quantity"] = df["quantity"].fillna(0).astype(int)
        # Lines without a positive quantity are not purchases
        df = df[df["status"].isin(self._counted_statuses) & (df["quantity"] > 0)]

        return df[["user_id", "book_id", "category_code", "quantity"]].reset_index(drop=True)

    def __len__(self) -> int:
        return len(self._orders)

    def events_for_user(self, user_id: UserId) -> List[PurchaseEvent]:
        rows = self._orders.loc[self._orders["user_id"] == user_id]
        return [
            PurchaseEvent(
                user_id=_to_python(row["user_id"]),
                book_id=int(row["book_id"]),
                category_code=str(row["category_code"]),
                quantity=int(row["quantity"]),
            )
            for row in rows.to_dict("records")
        ]

    def all_users_with_purchase_history(self) -> List[UserId]:
        users = [_to_python(user_id) for user_id in self._orders["user_id"].unique()]
        return sorted(users, key=user_id_sort_key)


def _extract_from_cell(value: Any) -> str:
    if not isinstance(value, str):
        value = "" if pd.isna(value) else str(value)
    return extract_category_code(value)


def _to_python(value: Any) -> Any:
    # numpy scalars -> builtins so ids compare and serialize like the caller's
    return value.item() if hasattr(value, "item") else value


def _prepare_catalog_frame(books: pd.DataFrame) -> pd.DataFrame:
    required = {"book_id", "available_stock", "popularity_rank"}
    if not required.issubset(books.columns):
        missing = required - set(books.columns)
        raise ValueError(f"Catalog missing required columns: {missing}")

    df = books.copy()
    if "classification" not in df.columns:
        df["classification"] = ""
    df["classification"] = df["classification"].fillna("").astype(str)

    if "category_code" not in df.columns:
        df["category_code"] = df["classification"].map(_extract_from_cell)
    else:
        codes = df["category_code"].fillna("").astype(str).str.strip()
        codes = codes.where(codes != "", df["classification"])
        df["category_code"] = codes.map(_extract_from_cell)

    if "added_at" not in df.columns:
        df["added_at"] = pd.NaT
    df["added_at"] = pd.to_datetime(df["added_at"], errors="coerce")

    for column in ("title", "author"):
        if column not in df.columns:
            df[column] = ""
        df[column] = df[column].fillna("").astype(str)

    df["available_stock"] = df["available_stock"].fillna(0).astype(int)
    df["popularity_rank"] = df["popularity_rank"].fillna(0).astype(int)

    return df[CATALOG_COLUMNS].drop_duplicates(subset="book_id").reset_index(drop=True)


def _row_to_book(row: Dict[str, Any]) -> CandidateBook:
    added_at = row["added_at"]
    return CandidateBook(
        book_id=int(row["book_id"]),
        category_code=str(row["category_code"]),
        available_stock=int(row["available_stock"]),
        popularity_rank=int(row["popularity_rank"]),
        added_at=None if pd.isna(added_at) else added_at.to_pydatetime(),
        title=row["title"],
        author=row["author"],
        classification=row["classification"],
    )


def load_catalog_csv(csv_path: str) -> DataFrameCatalogSource:
    """Load a catalog export into a :class:`DataFrameCatalogSource`.

    Raises:
        DataSourceUnavailableError: If the file is missing or unreadable.
    """
    try:
        logger.info(f"Loading catalog from {csv_path}")
        df = pd.read_csv(csv_path)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise DataSourceUnavailableError("catalog", e, {"path": csv_path}) from e

    return DataFrameCatalogSource(df)


def load_orders_csv(
    csv_path: str,
    catalog: Optional[DataFrameCatalogSource] = None,
    counted_statuses: Sequence[str] = tuple(COUNTED_ORDER_STATUSES),
) -> DataFramePurchaseHistorySource:
    """Load an order line export into a :class:`DataFramePurchaseHistorySource`.

    Raises:
        DataSourceUnavailableError: If the file is missing or unreadable.
    """
    try:
        logger.info(f"Loading orders from {csv_path}")
        df = pd.read_csv(csv_path)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise DataSourceUnavailableError("purchase_history", e, {"path": csv_path}) from e

    return DataFramePurchaseHistorySource(df, catalog=catalog, counted_statuses=counted_statuses)
