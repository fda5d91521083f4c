"""Payment gateway port.

The contract the PayPal bridge relies on: describe a checkout to hand to the
provider's client-side flow, and authenticate webhook calls. Adapters are
swapped with :func:`storefront.payment.gateway.set_gateway`.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class PaymentDescriptor:
    """What the client-side checkout needs to open the provider's payment flow."""

    client_id: str
    order_id: str
    currency: str
    amount: Decimal


class PaymentGateway(ABC):
    @abstractmethod
    def describe_checkout(self, order_id: str, amount: Decimal, currency: str) -> PaymentDescriptor:
        """Build the provider-facing descriptor for an order awaiting payment."""
        ...

    @abstractmethod
    def verify_webhook_signature(self, payload: str, signature: str) -> bool:
        """Verify that a webhook payload really comes from the provider."""
        ...
