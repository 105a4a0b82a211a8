"""BookRec: personalized book recommendations from purchase history.

This package provides a backend service that infers a reader's category
preferences from completed orders and recommends unseen catalog books using
user-to-user collaborative filtering.

Modules:
    api: FastAPI application and REST API endpoints
    recommender: preference vectors, similarity, neighbor selection and
        the tiered recommendation engine
"""

__version__ = "0.1.0"
