"""Repository for the Order aggregate: lookups by payment id and paged history."""

from storefront.domain import storefront
from storefront.order.order import Order
from storefront.shared.paging import Page, contains, page_of, scan, search_needle, slice_page


@storefront.repository(part_of=Order)
class OrderRepository:
    def find_by_payment_id(self, payment_id) -> Order | None:
        if not payment_id:
            return None
        result = self._dao.query.filter(paypal_payment_id=payment_id).all()
        return result.items[0] if result.items else None

    def page_for_user(self, user_id, page: int, size: int) -> Page:
        """A user's order history, newest first."""
        result = (
            self._dao.query.filter(user_id=str(user_id))
            .order_by("-created_at")
            .offset(page * size)
            .limit(size)
            .all()
        )
        return page_of(result, page, size)

    def page_all(self, page: int, size: int) -> Page:
        result = self._dao.query.order_by("-created_at").offset(page * size).limit(size).all()
        return page_of(result, page, size)

    def search(self, term: str, page: int, size: int) -> Page:
        """Orders whose id, shipping name, PayPal ids or tracking number contain ``term``."""
        needle = search_needle(term)

        def matches(order):
            return contains(
                needle,
                order.id,
                order.shipping_address.name if order.shipping_address else None,
                order.paypal_payment_id,
                order.paypal_order_id,
                order.tracking_number,
            )

        return slice_page(scan(self._dao.query.order_by("-created_at"), matches), page, size)
