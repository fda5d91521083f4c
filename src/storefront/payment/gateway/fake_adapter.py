"""Fake payment gateway for development and tests.

Never calls out. Records every call and accepts webhooks signed with the
literal ``test-signature``.
"""

from decimal import Decimal

from storefront.payment.gateway.port import PaymentDescriptor, PaymentGateway

TEST_SIGNATURE = "test-signature"


class FakeGateway(PaymentGateway):
    def __init__(self, client_id: str = "fake-paypal-client") -> None:
        self.client_id = client_id
        self.calls: list[dict] = []

    def describe_checkout(self, order_id: str, amount: Decimal, currency: str) -> PaymentDescriptor:
        self.calls.append(
            {
                "method": "describe_checkout",
                "order_id": order_id,
                "amount": amount,
                "currency": currency,
            }
        )
        return PaymentDescriptor(client_id=self.client_id, order_id=order_id, currency=currency, amount=amount)

    def verify_webhook_signature(self, payload: str, signature: str) -> bool:
        self.calls.append({"method": "verify_webhook_signature", "payload": payload})
        return signature == TEST_SIGNATURE
