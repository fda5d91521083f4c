"""PayPal gateway adapter.

Checkout itself runs in the buyer's browser with the PayPal JS SDK, so the
descriptor only needs the public client id. Webhooks are relayed to us with
an HMAC-SHA256 of the raw JSON body, keyed with the shared webhook secret.
"""

import hashlib
import hmac
from decimal import Decimal

from storefront.payment.gateway.port import PaymentDescriptor, PaymentGateway


class PayPalGateway(PaymentGateway):
    def __init__(self, client_id: str, webhook_secret: str) -> None:
        if not client_id:
            raise ValueError("PAYPAL_CLIENT_ID must be set to use the PayPal gateway")
        self.client_id = client_id
        self.webhook_secret = webhook_secret

    def describe_checkout(self, order_id: str, amount: Decimal, currency: str) -> PaymentDescriptor:
        return PaymentDescriptor(client_id=self.client_id, order_id=order_id, currency=currency, amount=amount)

    def sign(self, payload: str) -> str:
        return hmac.new(self.webhook_secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).hexdigest()

    def verify_webhook_signature(self, payload: str, signature: str) -> bool:
        if not self.webhook_secret or not signature:
            return False
        return hmac.compare_digest(self.sign(payload), signature)
