"""API Routers package

Routers are organized by feature domain.
"""

from . import regions_router

__all__ = [
    "regions_router",
]
