"""
Stores — store, product and review operations with activation triggers.
"""

from sellum.stores._service import StoreService, average_rating, RATING_RANGE

__all__ = ("StoreService", "average_rating", "RATING_RANGE")
