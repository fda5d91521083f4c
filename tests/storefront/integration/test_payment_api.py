"""Integration tests for the PayPal bridge endpoints via TestClient."""

import json

import pytest

from storefront.payment.gateway import PayPalGateway, set_gateway
from storefront.payment.gateway.fake_adapter import TEST_SIGNATURE


@pytest.fixture()
def order(client, customer, shipping, make_product):
    product_id = make_product(price=10.0, stock_quantity=5)
    client.post("/cart/items", json={"product_id": product_id, "quantity": 2}, headers=customer)
    response = client.post(
        "/orders/from-cart",
        json={"shipping": shipping, "paypal_payment_id": "PAY-1"},
        headers=customer,
    )
    return response.json()


def _webhook(client, payload, signature=TEST_SIGNATURE):
    return client.post(
        "/orders/paypal/webhook",
        content=json.dumps(payload),
        headers={"Content-Type": "application/json", "X-Gateway-Signature": signature},
    )


class TestInitPayment:
    def test_returns_descriptor(self, client, customer, order):
        response = client.get(f"/orders/{order['id']}/paypal/init", headers=customer)

        assert response.status_code == 200
        assert response.json() == {
            "client_id": "fake-paypal-client",
            "order_id": order["id"],
            "currency": "USD",
            "amount": "20.00",
        }

    def test_unknown_order(self, client, customer):
        assert client.get("/orders/missing/paypal/init", headers=customer).status_code == 404

    def test_other_customer_forbidden(self, client, other_customer, order):
        assert client.get(f"/orders/{order['id']}/paypal/init", headers=other_customer).status_code == 403


class TestCompletePayment:
    def test_marks_paid(self, client, customer, order):
        response = client.put(
            f"/orders/{order['id']}/paypal/complete",
            json={"payment_id": "PAY-1", "payer_id": "PAYER-1", "provider_order_id": "PP-1"},
            headers=customer,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "PAID"
        assert body["is_paid"] is True
        assert body["paypal_payer_id"] == "PAYER-1"
        assert body["paypal_order_id"] == "PP-1"

    def test_payment_id_reuse(self, client, customer, shipping, make_product, order):
        product_id = make_product(sku="HAL-001", name="Halter", stock_quantity=5)
        client.post("/cart/items", json={"product_id": product_id, "quantity": 1}, headers=customer)
        second = client.post("/orders/from-cart", json={"shipping": shipping}, headers=customer).json()

        response = client.put(
            f"/orders/{second['id']}/paypal/complete", json={"payment_id": "PAY-1"}, headers=customer
        )

        assert response.status_code == 400
        assert "payment_id" in response.json()["field_errors"]


class TestWebhook:
    def test_completed(self, client, customer, order):
        response = _webhook(client, {"payment_id": "PAY-1", "status": "COMPLETED"})

        assert response.status_code == 200
        assert response.json() == {"status": "PAID"}
        assert client.get(f"/orders/{order['id']}", headers=customer).json()["status"] == "PAID"

    def test_bad_signature(self, client, customer, order):
        response = _webhook(client, {"payment_id": "PAY-1", "status": "COMPLETED"}, signature="forged")

        assert response.status_code == 401
        assert client.get(f"/orders/{order['id']}", headers=customer).json()["status"] == "PENDING"

    def test_unmapped_status(self, client, order):
        response = _webhook(client, {"payment_id": "PAY-1", "status": "PENDING"})

        assert response.status_code == 400
        assert response.json()["message"] == "Unsupported payment status: PENDING"

    def test_long_unmapped_status(self, client, order):
        status = "UNDER_REVIEW_" * 25

        response = _webhook(client, {"payment_id": "PAY-1", "status": status})

        assert response.status_code == 400
        assert response.json()["message"] == f"Unsupported payment status: {status}"
        assert "field_errors" not in response.json()

    def test_unknown_payment_id(self, client):
        response = _webhook(client, {"payment_id": "PAY-404", "status": "COMPLETED"})
        assert response.status_code == 404
        assert response.json()["message"] == "No order for payment id PAY-404"

    def test_hmac_signed_with_paypal_gateway(self, client, order):
        gateway = PayPalGateway(client_id="live-client", webhook_secret="s3cret")
        set_gateway(gateway)
        payload = json.dumps({"payment_id": "PAY-1", "status": "cancelled"})

        response = client.post(
            "/orders/paypal/webhook",
            content=payload,
            headers={"Content-Type": "application/json", "X-Gateway-Signature": gateway.sign(payload)},
        )

        assert response.status_code == 200
        assert response.json()["status"] == "CANCELLED"
