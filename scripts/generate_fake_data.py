"""Generate a fake book catalog and order history for development.

This module creates synthetic catalog and order-line CSV files in the layout
the BookRec service loads. Each simulated reader favors a couple of top-level
classes so that collaborative filtering has some structure to find.

Example:
    Run the script directly to generate default data:
        $ python scripts/generate_fake_data.py

    Or import and use programmatically:
        from scripts.generate_fake_data import generate_fake_catalog
        catalog = generate_fake_catalog(num_books=200)
"""

import random
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

import pandas as pd

# Default configuration constants
DEFAULT_NUM_USERS = 50
DEFAULT_NUM_BOOKS = 200
DEFAULT_NUM_ORDER_LINES = 1000
DEFAULT_DAYS_BACK = 365
DEFAULT_SEED = 42

CLASS_LETTERS = "ABCDEFGHIJKNOPQRSTUVXZ"
ORDER_STATUSES = ["pending", "paid", "shipped", "delivered", "completed", "cancelled"]
STATUS_WEIGHTS = [0.1, 0.2, 0.1, 0.2, 0.35, 0.05]


def generate_fake_catalog(
    num_books: int = DEFAULT_NUM_BOOKS,
    end_date: Optional[datetime] = None,
    seed: Optional[int] = DEFAULT_SEED,
) -> pd.DataFrame:
    """Generate a synthetic catalog.

    Args:
        num_books: Number of books. Must be positive.
        end_date: Latest inbound date. Defaults to now.
        seed: Random seed, None for non-deterministic output.

    Returns:
        DataFrame with columns book_id, title, author, classification,
        available_stock, popularity_rank and added_at.

    Raises:
        ValueError: If num_books is not positive.
    """
    if num_books <= 0:
        raise ValueError("num_books must be positive")

    rng = random.Random(seed)
    end_date = end_date or datetime.now()

    books = []
    for book_id in range(1, num_books + 1):
        letter = rng.choice(CLASS_LETTERS)
        classification = f"{letter}{rng.randint(0, 999)}.{rng.randint(1, 9)}/{rng.randint(1, 99)}"
        books.append({
            "book_id": book_id,
            "title": f"Book {book_id}",
            "author": f"Author {rng.randint(1, num_books // 2 + 1)}",
            "classification": classification,
            "available_stock": rng.choice([0, 1, 2, 5, 10, 20]),
            "popularity_rank": rng.randint(0, 500),
            "added_at": end_date - timedelta(days=rng.randrange(DEFAULT_DAYS_BACK)),
        })

    return pd.DataFrame(books)


def generate_fake_orders(
    catalog: pd.DataFrame,
    num_users: int = DEFAULT_NUM_USERS,
    num_order_lines: int = DEFAULT_NUM_ORDER_LINES,
    seed: Optional[int] = DEFAULT_SEED,
) -> pd.DataFrame:
    """Generate synthetic order lines against a catalog.

    Every user gets two favorite classes and picks from them 80% of the
    time.

    Returns:
        DataFrame with columns user_id, book_id, quantity and status.

    Raises:
        ValueError: If a count is not positive or the catalog is empty.
    """
    if num_users <= 0 or num_order_lines <= 0:
        raise ValueError("num_users and num_order_lines must be positive")
    if catalog.empty:
        raise ValueError("catalog must not be empty")

    rng = random.Random(seed)
    letters = catalog["classification"].str[0]
    books_by_class = {
        letter: group.tolist()
        for letter, group in catalog["book_id"].groupby(letters)
    }
    all_books = catalog["book_id"].tolist()
    classes = sorted(books_by_class)

    favorites = {
        user_id: rng.sample(classes, k=min(2, len(classes)))
        for user_id in range(1, num_users + 1)
    }

    lines = []
    for _ in range(num_order_lines):
        user_id = rng.randint(1, num_users)
        if rng.random() < 0.8:
            book_id = rng.choice(books_by_class[rng.choice(favorites[user_id])])
        else:
            book_id = rng.choice(all_books)

        lines.append({
            "user_id": user_id,
            "book_id": book_id,
            "quantity": rng.choice([1, 1, 1, 2, 3]),
            "status": rng.choices(ORDER_STATUSES, weights=STATUS_WEIGHTS)[0],
        })

    return pd.DataFrame(lines)


def main() -> None:
    """Generate default data into data/catalog.csv and data/orders.csv."""
    print(f"Generating {DEFAULT_NUM_BOOKS} books and {DEFAULT_NUM_ORDER_LINES} order lines...")

    try:
        catalog = generate_fake_catalog()
        orders = generate_fake_orders(catalog)
    except ValueError as e:
        print(f"Error generating data: {e}")
        return

    data_dir = Path(__file__).parent.parent / "data"
    data_dir.mkdir(exist_ok=True)

    catalog_path = data_dir / "catalog.csv"
    orders_path = data_dir / "orders.csv"
    catalog.to_csv(catalog_path, index=False)
    orders.to_csv(orders_path, index=False)

    print(f"\nData generated successfully!")
    print(f"Catalog saved to: {catalog_path}")
    print(f"Orders saved to: {orders_path}")
    print(f"\nData summary:")
    print(f"  Books: {len(catalog)} ({(catalog['available_stock'] > 0).sum()} in stock)")
    print(f"  Order lines: {len(orders)}")
    print(f"  Unique users: {orders['user_id'].nunique()}")
    print(f"  Status counts: {orders['status'].value_counts().to_dict()}")


if __name__ == "__main__":
    main()
