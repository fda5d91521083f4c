"""Cart expiry sweep: delete carts untouched for longer than the max age.

Runs to completion when triggered from outside (``manage.py expire-carts``
from cron or a scheduled job); nothing in the service schedules it.
"""

from datetime import UTC, datetime, timedelta

import structlog
from protean import handle
from protean.fields import DateTime, Integer
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.domain import storefront
from storefront.utils import settings

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Cart")
class ExpireCarts:
    max_age_days = Integer(min_value=0)  # Defaults to CART_MAX_AGE_DAYS
    as_of = DateTime()  # Defaults to now


@storefront.command_handler(part_of=Cart)
class ExpireCartsHandler:
    @handle(ExpireCarts)
    def expire_carts(self, command):
        max_age_days = command.max_age_days if command.max_age_days is not None else settings.CART_MAX_AGE_DAYS
        as_of = command.as_of or datetime.now(UTC)
        cutoff = as_of - timedelta(days=max_age_days)

        logger.info("Sweeping expired carts", cutoff=cutoff.isoformat(), max_age_days=max_age_days)

        repo = current_domain.repository_for(Cart)
        # Collect first: deleting while paging would shift the offsets
        expired = [cart for cart in repo.iter_all() if cart.is_older_than(cutoff)]

        for cart in expired:
            repo._dao.delete(cart)
            logger.info(
                "Expired cart deleted",
                cart_id=str(cart.id),
                user_id=str(cart.user_id),
                last_updated=str(cart.updated_at),
            )

        logger.info("Cart expiry sweep complete", deleted_count=len(expired))
        return len(expired)
