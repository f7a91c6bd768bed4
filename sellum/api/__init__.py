"""
API — FastAPI surface of the marketplace.

    app = create_app(Settings.from_env())
"""

from sellum.api._app import create_app, status_for, ERROR_STATUS

__all__ = ("create_app", "status_for", "ERROR_STATUS")
