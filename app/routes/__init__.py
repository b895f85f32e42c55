"""
API routers, one per audience. Mounted under /api by app.main.
"""

from app.routes.admin import router as admin_router
from app.routes.auth import router as auth_router
from app.routes.customer import router as customer_router
from app.routes.seller import router as seller_router

__all__ = [
    "admin_router",
    "auth_router",
    "customer_router",
    "seller_router",
]
