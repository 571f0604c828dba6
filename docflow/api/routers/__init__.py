"""API routers for DocFlow."""

from . import documents
from . import templates
from . import favorites
from . import health

__all__ = [
    "documents",
    "templates",
    "favorites",
    "health",
]
