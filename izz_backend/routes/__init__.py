"""
Route groups mounted by the izz FastAPI app.
"""

from izz_backend.routes import admin, auth, data, task, update

__all__ = ["admin", "auth", "data", "task", "update"]
