"""Smoke tests for the assembled application and the management CLI."""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from protean import current_domain

from storefront.cart.cart import Cart
from storefront.identity.user import User


@pytest.fixture()
def app_client():
    from app import app

    return TestClient(app)


class TestApplication:
    def test_health(self, app_client):
        response = app_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_routes_mounted(self, app_client):
        paths = {route.path for route in app_client.app.routes}
        assert {
            "/cart",
            "/orders/from-cart",
            "/orders/paypal/webhook",
            "/users/me",
            "/products/{product_id}",
            "/brands",
            "/categories/tree",
        } <= paths

    def test_error_body_documented(self, app_client):
        schema = app_client.app.openapi()

        assert "ErrorResponse" in schema["components"]["schemas"]
        not_found = schema["paths"]["/products/{product_id}"]["get"]["responses"]["404"]
        assert not_found["content"]["application/json"]["schema"]["$ref"] == "#/components/schemas/ErrorResponse"

    def test_errors_use_json_body(self, app_client):
        response = app_client.get("/cart")

        assert response.status_code == 401
        assert response.json()["error"] == "Unauthorized"


class TestManageCli:
    @pytest.fixture(autouse=True)
    def _keep_initialized_domain(self, monkeypatch):
        from storefront.domain import storefront

        monkeypatch.setattr(storefront, "init", lambda **kwargs: None)

    def test_expire_carts(self, capsys):
        from manage import main

        repo = current_domain.repository_for(Cart)
        stale = Cart.create("user-stale")
        stale.updated_at = datetime.now(UTC) - timedelta(days=10)
        repo.add(stale)
        repo.add(Cart.create("user-fresh"))

        main(["expire-carts", "--max-age-days", "7"])

        assert "Deleted 1 expired cart(s)." in capsys.readouterr().out
        assert repo.find_for_user("user-stale") is None
        assert repo.find_for_user("user-fresh") is not None

    def test_create_admin(self, capsys):
        from manage import main

        main(["create-admin", "--email", "ops@example.com"])

        out = capsys.readouterr().out
        user_id = out.strip().rsplit(" ", 1)[-1]
        assert current_domain.repository_for(User).get(user_id).is_admin
