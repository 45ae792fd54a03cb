"""
API routers for the Siedlisko Listings API.
"""

from .auth import router as auth_router
from .users import router as users_router
from .images import router as images_router
from .listings import router as listings_router

__all__ = ["auth_router", "users_router", "images_router", "listings_router"]
