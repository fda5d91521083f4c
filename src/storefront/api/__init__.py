"""Storefront HTTP API package."""

from storefront.api.catalogue import brand_router, category_router, product_router
from storefront.api.errors import register_error_handlers
from storefront.api.routes import cart_router, order_router
from storefront.api.users import user_router

__all__ = [
    "brand_router",
    "cart_router",
    "category_router",
    "order_router",
    "product_router",
    "user_router",
    "register_error_handlers",
]
