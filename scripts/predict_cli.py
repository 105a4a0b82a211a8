"""CLI script for getting book recommendations.

Useful for testing and evaluation. Loads the catalog and order exports,
gets recommendations for a user and prints them to the console.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from bookrec.config import RecommenderConfig
from bookrec.exceptions import BookRecException
from bookrec.recommender.categories import category_name
from bookrec.recommender.engine import BookRecommender
from bookrec.recommender.models import coerce_user_id
from bookrec.recommender.sources import load_catalog_csv, load_orders_csv

# Setup logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s"
)
logger = logging.getLogger(__name__)


def main() -> None:
    """Main CLI function."""
    parser = argparse.ArgumentParser(
        description="Get book recommendations for a user",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/predict_cli.py 42
  python scripts/predict_cli.py 42 --count 5
  python scripts/predict_cli.py 42 --threshold 0.5 --explain
  python scripts/predict_cli.py 42 --stats
        """
    )

    parser.add_argument(
        "user_id", type=coerce_user_id, help="User ID to get recommendations for"
    )
    parser.add_argument(
        "--count",
        type=int,
        default=10,
        help="Number of books to return (default: 10)",
    )
    parser.add_argument(
        "--catalog",
        type=str,
        default="data/catalog.csv",
        help="Catalog CSV (default: data/catalog.csv)",
    )
    parser.add_argument(
        "--orders",
        type=str,
        default="data/orders.csv",
        help="Order lines CSV (default: data/orders.csv)",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=0.3,
        help="Minimum neighbor similarity (default: 0.3)",
    )
    parser.add_argument(
        "--purchased-weight",
        type=float,
        default=0.5,
        help="Weight of categories the user already buys from (default: 0.5)",
    )
    parser.add_argument(
        "--explain",
        action="store_true",
        help="Show strategy and neighbors",
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Show the user's category statistics",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.INFO)

    try:
        catalog = load_catalog_csv(args.catalog)
        history = load_orders_csv(args.orders, catalog=catalog)
        recommender = BookRecommender(
            catalog=catalog,
            history=history,
            config=RecommenderConfig(
                similarity_threshold=args.threshold,
                purchased_category_weight=args.purchased_weight,
            ),
        )
        result = recommender.get_recommendations(args.user_id, args.count)
    except (BookRecException, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"\nRecommendations for user {args.user_id}:")
    for position, book in enumerate(result.books, start=1):
        print(
            f"  {position:>2}. [{book.book_id}] {book.title or '(untitled)'} "
            f"- {book.category_code} {category_name(book.category_code)} "
            f"(popularity {book.popularity_rank}, stock {book.available_stock})"
        )

    if args.explain:
        print(f"\nStrategy: {result.strategy}")
        for neighbor in result.neighbors:
            print(f"  Neighbor {neighbor.user_id}: similarity {neighbor.similarity:.3f}")

    if args.stats:
        print(f"\nCategory statistics:")
        for row in recommender.get_user_category_report(args.user_id):
            print(
                f"  {row['category_code']} {row['category_name']}: "
                f"{row['purchase_count']} units, score {row['preference_score']:.2f}"
            )

    print()


if __name__ == "__main__":
    main()
