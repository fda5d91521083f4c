"""Integration tests for order endpoints via TestClient."""

import pytest


@pytest.fixture()
def product_id(make_product):
    return make_product(price=10.0, stock_quantity=5)


def _checkout(client, headers, shipping, product_id, quantity=2, **extra):
    client.post("/cart/items", json={"product_id": product_id, "quantity": quantity}, headers=headers)
    response = client.post("/orders/from-cart", json={"shipping": shipping, **extra}, headers=headers)
    assert response.status_code == 201
    return response.json()


class TestCheckout:
    def test_from_cart(self, client, customer, shipping_body, product_id):
        body = _checkout(client, customer, shipping_body, product_id)

        assert body["status"] == "PENDING"
        assert body["subtotal_amount"] == "20.00"
        assert body["total_amount"] == "20.00"
        assert body["payment_method"] == "PAYPAL"
        assert body["total_item_count"] == 2
        assert body["items"][0]["unit_price"] == "10.00"
        assert body["full_shipping_address"] == "1 Stable Lane, Barn 4, Lexington, KY 40507, US"
        assert body["is_cancellable"] is True
        assert client.get("/cart", headers=customer).json()["items"] == []

    def test_empty_cart(self, client, customer, shipping_body):
        client.get("/cart", headers=customer)

        response = client.post("/orders/from-cart", json={"shipping": shipping_body}, headers=customer)

        assert response.status_code == 400
        assert response.json()["field_errors"]["cart"] == ["Cart is empty"]

    def test_product_deleted_after_adding(self, client, customer, admin, shipping_body, product_id):
        client.post("/cart/items", json={"product_id": product_id, "quantity": 1}, headers=customer)
        assert client.delete(f"/products/{product_id}", headers=admin).status_code == 204

        response = client.post("/orders/from-cart", json={"shipping": shipping_body}, headers=customer)

        assert response.status_code == 400
        assert response.json()["field_errors"]["items"] == [f"Invalid product in cart: {product_id}"]

    def test_missing_shipping_field(self, client, customer, shipping_body, product_id):
        client.post("/cart/items", json={"product_id": product_id, "quantity": 1}, headers=customer)
        del shipping_body["city"]

        response = client.post("/orders/from-cart", json={"shipping": shipping_body}, headers=customer)

        assert response.status_code == 400
        assert "shipping.city" in response.json()["field_errors"]

    def test_explicit_order(self, client, customer, shipping_body, product_id):
        response = client.post(
            "/orders",
            json={
                "items": [{"product_id": product_id, "quantity": 1}],
                "shipping": shipping_body,
                "shipping_amount": "4.99",
                "tax_amount": "0.80",
            },
            headers=customer,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["shipping_amount"] == "4.99"
        assert body["tax_amount"] == "0.80"
        assert body["total_amount"] == "15.79"

    def test_explicit_order_sub_cent_amount_rejected(self, client, customer, shipping_body, product_id):
        response = client.post(
            "/orders",
            json={
                "items": [{"product_id": product_id, "quantity": 1}],
                "shipping": shipping_body,
                "shipping_amount": "4.999",
            },
            headers=customer,
        )
        assert response.status_code == 400


class TestReadOrders:
    def test_owner_can_read(self, client, customer, shipping_body, product_id):
        order = _checkout(client, customer, shipping_body, product_id)

        response = client.get(f"/orders/{order['id']}", headers=customer)

        assert response.status_code == 200
        assert response.json()["id"] == order["id"]

    def test_other_customer_forbidden(self, client, customer, other_customer, shipping_body, product_id):
        order = _checkout(client, customer, shipping_body, product_id)

        response = client.get(f"/orders/{order['id']}", headers=other_customer)

        assert response.status_code == 403

    def test_admin_can_read_any(self, client, customer, admin, shipping_body, product_id):
        order = _checkout(client, customer, shipping_body, product_id)
        assert client.get(f"/orders/{order['id']}", headers=admin).status_code == 200

    def test_unknown_order(self, client, customer):
        response = client.get("/orders/missing-order", headers=customer)

        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "Not Found"
        assert body["path"] == "/orders/missing-order"
        assert "timestamp" in body

    def test_history(self, client, customer, shipping_body, product_id):
        _checkout(client, customer, shipping_body, product_id, quantity=1)
        _checkout(client, customer, shipping_body, product_id, quantity=1)

        body = client.get("/orders/user", params={"page": 0, "size": 1}, headers=customer).json()

        assert body["total"] == 2
        assert body["total_pages"] == 2
        assert len(body["items"]) == 1
        assert body["items"][0]["total_amount"] == "10.00"

    def test_history_size_limit(self, client, customer):
        response = client.get("/orders/user", params={"size": 1000}, headers=customer)
        assert response.status_code == 400


class TestAdminEndpoints:
    def test_list_requires_admin(self, client, customer):
        assert client.get("/orders/admin", headers=customer).status_code == 403

    def test_list_all(self, client, customer, other_customer, admin, shipping_body, product_id):
        _checkout(client, customer, shipping_body, product_id, quantity=1)
        _checkout(client, other_customer, shipping_body, product_id, quantity=1)

        body = client.get("/orders/admin", headers=admin).json()
        assert body["total"] == 2

    def test_search(self, client, customer, admin, shipping_body, product_id):
        order = _checkout(client, customer, shipping_body, product_id, paypal_payment_id="PAY-FIND-ME")

        body = client.get("/orders/admin/search", params={"term": "find-me"}, headers=admin).json()

        assert [o["id"] for o in body["items"]] == [order["id"]]

    def test_search_with_blank_term(self, client, customer, admin, shipping_body, product_id):
        _checkout(client, customer, shipping_body, product_id)

        response = client.get("/orders/admin/search", params={"term": "   "}, headers=admin)

        assert response.status_code == 400
        assert response.json()["field_errors"] == {"term": ["Search term must not be blank"]}

    def test_update_status_and_tracking(self, client, customer, admin, shipping_body, product_id):
        order = _checkout(client, customer, shipping_body, product_id)
        order_id = order["id"]
        client.put(f"/orders/{order_id}/paypal/complete", json={"payment_id": "PAY-1"}, headers=customer)
        client.put(f"/orders/{order_id}", json={"status": "PROCESSING"}, headers=admin)

        response = client.put(
            f"/orders/{order_id}",
            json={"status": "SHIPPED", "tracking_number": "TRK-1", "carrier": "UPS"},
            headers=admin,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "SHIPPED"
        assert body["tracking_number"] == "TRK-1"
        assert body["shipped_at"] is not None

    def test_illegal_transition(self, client, customer, admin, shipping_body, product_id):
        order = _checkout(client, customer, shipping_body, product_id)

        response = client.put(f"/orders/{order['id']}", json={"status": "DELIVERED"}, headers=admin)

        assert response.status_code == 400
        assert response.json()["message"] == "Cannot transition order from PENDING to DELIVERED"

    def test_update_requires_admin(self, client, customer, shipping_body, product_id):
        order = _checkout(client, customer, shipping_body, product_id)
        response = client.put(f"/orders/{order['id']}", json={"status": "CANCELLED"}, headers=customer)
        assert response.status_code == 403


class TestCancel:
    def test_owner_cancels_and_stock_returns(self, client, customer, shipping_body, product_id):
        order = _checkout(client, customer, shipping_body, product_id)

        response = client.put(f"/orders/{order['id']}/cancel", headers=customer)

        assert response.status_code == 200
        assert response.json()["status"] == "CANCELLED"
        assert client.get(f"/products/{product_id}").json()["stock_quantity"] == 5

    def test_cancel_processing_order(self, client, customer, admin, shipping_body, product_id):
        order = _checkout(client, customer, shipping_body, product_id)
        client.put(f"/orders/{order['id']}/paypal/complete", json={"payment_id": "PAY-1"}, headers=customer)
        client.put(f"/orders/{order['id']}", json={"status": "PROCESSING"}, headers=admin)

        response = client.put(f"/orders/{order['id']}/cancel", headers=customer)

        assert response.status_code == 400

    def test_other_customer_cannot_cancel(self, client, customer, other_customer, shipping_body, product_id):
        order = _checkout(client, customer, shipping_body, product_id)
        response = client.put(f"/orders/{order['id']}/cancel", headers=other_customer)
        assert response.status_code == 403
