import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from storefront.api import (
    brand_router,
    cart_router,
    category_router,
    order_router,
    product_router,
    register_error_handlers,
    user_router,
)
from storefront.identity.user import Role


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(user_router)
    app.include_router(product_router)
    app.include_router(brand_router)
    app.include_router(category_router)
    app.include_router(cart_router)
    app.include_router(order_router)
    register_error_handlers(app)
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture()
def customer(make_user):
    return {"X-User-Id": make_user(email="rider@example.com")}


@pytest.fixture()
def other_customer(make_user):
    return {"X-User-Id": make_user(email="someone@example.com")}


@pytest.fixture()
def admin(make_user):
    return {"X-User-Id": make_user(email="ops@example.com", role=Role.ADMIN.value)}


@pytest.fixture()
def shipping_body(shipping):
    return dict(shipping)
