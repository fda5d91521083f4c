"""Repository for the Cart aggregate."""

from storefront.cart.cart import Cart
from storefront.domain import storefront

_SCAN_BATCH_SIZE = 100


@storefront.repository(part_of=Cart)
class CartRepository:
    def find_for_user(self, user_id) -> Cart | None:
        """Return the user's cart, or None when it has not been created yet."""
        result = self._dao.query.filter(user_id=str(user_id)).all()
        return result.items[0] if result.items else None

    def iter_all(self, batch_size: int = _SCAN_BATCH_SIZE):
        """Yield every cart, paging through storage ``batch_size`` rows at a time."""
        offset = 0
        while True:
            page = self._dao.query.order_by("created_at").offset(offset).limit(batch_size).all()
            yield from page.items
            if len(page.items) < batch_size:
                return
            offset += batch_size
