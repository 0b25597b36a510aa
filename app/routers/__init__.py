"""API Routers for the rental booking service."""

from app.routers.auth import router as auth_router
from app.routers.properties import router as properties_router
from app.routers.rentals import router as rentals_router
from app.routers.rental_settings import router as rental_settings_router

__all__ = [
    "auth_router",
    "properties_router",
    "rentals_router",
    "rental_settings_router",
]
