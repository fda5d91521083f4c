"""Storefront bounded context: catalogue, carts, orders and the PayPal bridge.

A single domain so that cart and order handlers can consult live product
stock inside the same unit of work.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

configure_logging(log_dir="logs", file_prefix="storefront")

storefront = Domain(name="storefront")

logger = get_logger(__name__)
