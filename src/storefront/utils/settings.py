"""Runtime settings read from the environment.

Infrastructure (databases, brokers) is configured in ``domain.toml``; the
values here are business knobs that operators tune per deployment.
"""

import os


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    return int(raw) if raw not in (None, "") else default


CART_MAX_AGE_DAYS = _int_env("CART_MAX_AGE_DAYS", 30)

STORE_CURRENCY = os.getenv("STORE_CURRENCY", "USD")

# "fake" for development and tests, "paypal" for real checkouts
PAYMENT_GATEWAY = os.getenv("PAYMENT_GATEWAY", "fake").lower()
PAYPAL_CLIENT_ID = os.getenv("PAYPAL_CLIENT_ID", "")
PAYPAL_WEBHOOK_SECRET = os.getenv("PAYPAL_WEBHOOK_SECRET", "")

DEFAULT_PAGE_SIZE = _int_env("DEFAULT_PAGE_SIZE", 10)
MAX_PAGE_SIZE = _int_env("MAX_PAGE_SIZE", 100)
