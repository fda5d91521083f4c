"""Payment gateway factory.

get_gateway() returns the adapter selected by PAYMENT_GATEWAY:
- FakeGateway ("fake", the default) for development and tests
- PayPalGateway ("paypal") for real checkouts
"""

from storefront.payment.gateway.fake_adapter import FakeGateway
from storefront.payment.gateway.paypal_adapter import PayPalGateway
from storefront.payment.gateway.port import PaymentDescriptor, PaymentGateway
from storefront.utils import settings

_current_gateway: PaymentGateway | None = None


def _configured_gateway() -> PaymentGateway:
    if settings.PAYMENT_GATEWAY == "paypal":
        return PayPalGateway(settings.PAYPAL_CLIENT_ID, settings.PAYPAL_WEBHOOK_SECRET)
    return FakeGateway()


def get_gateway() -> PaymentGateway:
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _configured_gateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    global _current_gateway
    _current_gateway = None


__all__ = [
    "FakeGateway",
    "PayPalGateway",
    "PaymentDescriptor",
    "PaymentGateway",
    "get_gateway",
    "reset_gateway",
    "set_gateway",
]
