"""Tests for the pandas-backed purchase history and catalog sources."""

import pandas as pd
import pytest

from bookrec.exceptions import DataSourceUnavailableError
from bookrec.recommender.models import coerce_user_id
from bookrec.recommender.sources import (
    ORDER_BY_RECENCY,
    DataFrameCatalogSource,
    DataFramePurchaseHistorySource,
    load_catalog_csv,
    load_orders_csv,
)
from helpers import make_book


@pytest.fixture
def catalog_df():
    """Raw catalog export without precomputed category codes."""
    return pd.DataFrame(
        [
            {"book_id": 1, "classification": "I247.5/1", "available_stock": 3,
             "popularity_rank": 10, "added_at": "2024-01-01", "title": "Novel"},
            {"book_id": 2, "classification": "TP312,TP311", "available_stock": 0,
             "popularity_rank": 50, "added_at": "2024-02-01", "title": "Compilers"},
            {"book_id": 3, "classification": "I712", "available_stock": 1,
             "popularity_rank": 10, "added_at": "2024-03-01", "title": "Stories"},
            {"book_id": 4, "classification": "", "available_stock": 8,
             "popularity_rank": 30, "added_at": "2023-06-01", "title": "Almanac"},
        ]
    )


@pytest.fixture
def orders_df():
    return pd.DataFrame(
        [
            {"user_id": 1, "book_id": 1, "quantity": 2, "status": "Completed"},
            {"user_id": 1, "book_id": 2, "quantity": 1, "status": "paid"},
            {"user_id": 1, "book_id": 3, "quantity": 5, "status": "pending"},
            {"user_id": 2, "book_id": 4, "quantity": 1, "status": "cancelled"},
            {"user_id": 3, "book_id": 4, "quantity": 1, "status": "delivered"},
            {"user_id": 4, "book_id": 2, "quantity": 1, "status": "shipped"},
        ]
    )


def test_catalog_derives_category_from_classification(catalog_df):
    catalog = DataFrameCatalogSource(catalog_df)

    assert catalog.category_lookup() == {1: "I", 2: "T", 3: "I", 4: "Z"}
    assert len(catalog) == 4


def test_catalog_orders_by_popularity_then_recency(catalog_df):
    """Test that equal popularity is broken by the most recently added book."""
    catalog = DataFrameCatalogSource(catalog_df)

    books = catalog.candidate_books(limit=10)

    # Book 2 is out of stock; books 1 and 3 tie on popularity
    assert [book.book_id for book in books] == [4, 3, 1]
    assert books[1].title == "Stories"
    assert books[1].added_at is not None


def test_catalog_filters(catalog_df):
    catalog = DataFrameCatalogSource(catalog_df)

    assert [b.book_id for b in catalog.candidate_books(category="I")] == [3, 1]
    assert [b.book_id for b in catalog.candidate_books(category="i", excluding={3})] == [1]
    assert [b.book_id for b in catalog.candidate_books(in_stock_only=False, limit=2)] == [2, 4]
    assert catalog.candidate_books(limit=0) == []


def test_catalog_orders_by_recency(catalog_df):
    catalog = DataFrameCatalogSource(catalog_df)

    books = catalog.candidate_books(in_stock_only=False, order_by=ORDER_BY_RECENCY)

    assert [book.book_id for book in books] == [3, 2, 1, 4]


def test_catalog_rejects_unknown_order(catalog_df):
    catalog = DataFrameCatalogSource(catalog_df)

    with pytest.raises(ValueError):
        catalog.candidate_books(order_by="price")


def test_catalog_requires_columns():
    with pytest.raises(ValueError, match="missing required columns"):
        DataFrameCatalogSource(pd.DataFrame([{"book_id": 1}]))


def test_catalog_from_books_round_trips_fields():
    book = make_book(7, "K", popularity_rank=3, available_stock=2)

    [served] = DataFrameCatalogSource.from_books([book]).candidate_books()

    assert served == book


def test_history_only_counts_paid_delivered_completed(orders_df, catalog_df):
    """Test that pending, shipped and cancelled lines are ignored."""
    catalog = DataFrameCatalogSource(catalog_df)
    history = DataFramePurchaseHistorySource(orders_df, catalog=catalog)

    assert history.all_users_with_purchase_history() == [1, 3]
    assert sorted(e.book_id for e in history.events_for_user(1)) == [1, 2]
    assert history.events_for_user(2) == []
    assert history.events_for_user(12345) == []


def test_history_uses_catalog_categories(orders_df, catalog_df):
    history = DataFramePurchaseHistorySource(
        orders_df, catalog=DataFrameCatalogSource(catalog_df)
    )

    events = {e.book_id: e for e in history.events_for_user(1)}

    assert events[1].category_code == "I"
    assert events[1].quantity == 2
    assert events[2].category_code == "T"


def test_history_uses_classification_column():
    orders = pd.DataFrame(
        [{"user_id": "u-1", "book_id": 1, "classification": "K825", "status": "paid"}]
    )

    history = DataFramePurchaseHistorySource(orders)

    [event] = history.events_for_user("u-1")
    assert event.category_code == "K"
    assert event.quantity == 1
    assert history.all_users_with_purchase_history() == ["u-1"]


def test_history_without_category_information_fails():
    orders = pd.DataFrame([{"user_id": 1, "book_id": 1}])

    with pytest.raises(ValueError):
        DataFramePurchaseHistorySource(orders)


def test_history_normalizes_category_code_column():
    """Test that raw codes in the order export are reduced to one letter."""
    orders = pd.DataFrame(
        [
            {"user_id": 1, "book_id": 20, "category_code": "TP312", "status": "paid"},
            {"user_id": 1, "book_id": 21, "category_code": " i", "status": "paid"},
            {"user_id": 1, "book_id": 22, "category_code": None, "status": "paid"},
        ]
    )

    history = DataFramePurchaseHistorySource(orders)

    codes = {e.book_id: e.category_code for e in history.events_for_user(1)}
    assert codes == {20: "T", 21: "I", 22: "Z"}


def test_history_drops_lines_without_positive_quantity():
    orders = pd.DataFrame(
        [
            {"user_id": 1, "book_id": 1, "category_code": "I", "quantity": None, "status": "paid"},
            {"user_id": 1, "book_id": 2, "category_code": "A", "quantity": 0, "status": "paid"},
            {"user_id": 1, "book_id": 3, "category_code": "K", "quantity": -2, "status": "paid"},
            {"user_id": 2, "book_id": 4, "category_code": "T", "quantity": 3, "status": "paid"},
        ]
    )

    history = DataFramePurchaseHistorySource(orders)

    assert history.events_for_user(1) == []
    assert history.all_users_with_purchase_history() == [2]
    assert [e.quantity for e in history.events_for_user(2)] == [3]


def test_history_matches_numeric_ids_given_as_text():
    """Test that "7" in a mixed id column is the same user as 7."""
    orders = pd.DataFrame(
        [
            {"user_id": "7", "book_id": 1, "category_code": "I", "status": "paid"},
            {"user_id": "u-2", "book_id": 2, "category_code": "A", "status": "paid"},
            {"user_id": " 3 ", "book_id": 3, "category_code": "K", "status": "paid"},
        ]
    )

    history = DataFramePurchaseHistorySource(orders)

    assert history.all_users_with_purchase_history() == [3, 7, "u-2"]
    assert [e.book_id for e in history.events_for_user(7)] == [1]
    assert [e.book_id for e in history.events_for_user("u-2")] == [2]


@pytest.mark.parametrize(
    "value, expected",
    [("42", 42), (" 42 ", 42), ("u-1", "u-1"), (" abc ", "abc"), (42, 42), ("-3", "-3")],
)
def test_coerce_user_id(value, expected):
    assert coerce_user_id(value) == expected
    assert type(coerce_user_id(value)) is type(expected)


def test_catalog_normalizes_category_code_column():
    books = pd.DataFrame(
        [
            {"book_id": 1, "category_code": "tp312", "available_stock": 1, "popularity_rank": 1},
            {"book_id": 2, "category_code": "", "classification": "K825",
             "available_stock": 1, "popularity_rank": 1},
            {"book_id": 3, "category_code": None, "available_stock": 1, "popularity_rank": 1},
        ]
    )

    catalog = DataFrameCatalogSource(books)

    assert catalog.category_lookup() == {1: "T", 2: "K", 3: "Z"}


def test_load_csv_files(tmp_path, catalog_df, orders_df):
    catalog_path = tmp_path / "catalog.csv"
    orders_path = tmp_path / "orders.csv"
    catalog_df.to_csv(catalog_path, index=False)
    orders_df.to_csv(orders_path, index=False)

    catalog = load_catalog_csv(str(catalog_path))
    history = load_orders_csv(str(orders_path), catalog=catalog)

    assert len(catalog) == 4
    assert history.all_users_with_purchase_history() == [1, 3]
    assert catalog.category_lookup()[4] == "Z"


def test_load_missing_csv_raises_data_source_unavailable(tmp_path):
    missing = str(tmp_path / "nope.csv")

    with pytest.raises(DataSourceUnavailableError) as exc_info:
        load_catalog_csv(missing)
    assert exc_info.value.status_code == 503
    assert exc_info.value.details["source"] == "catalog"

    with pytest.raises(DataSourceUnavailableError):
        load_orders_csv(missing)
