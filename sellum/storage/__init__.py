"""
Storage — SQLAlchemy async persistence.

    session_factory, engine = await create_database("sqlite+aiosqlite:///:memory:")
    repo = Repository(session_factory)
    store = await repo.get_store(StoreId("st_..."))
"""

from sellum.storage._tables import (
    Base,
    UserTable,
    StoreTable,
    ProductTable,
    ReviewTable,
    OrderTable,
)
from sellum.storage._database import create_database
from sellum.storage._repository import Repository, LOCATION_SEARCH_LIMIT

__all__ = (
    "Base",
    "UserTable",
    "StoreTable",
    "ProductTable",
    "ReviewTable",
    "OrderTable",
    "create_database",
    "Repository",
    "LOCATION_SEARCH_LIMIT",
)
