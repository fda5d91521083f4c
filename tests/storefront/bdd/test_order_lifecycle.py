"""BDD tests for moving an order through payment and fulfillment."""

from protean.exceptions import InvalidOperationError, ValidationError
from protean.utils.globals import current_domain
from pytest_bdd import parsers, scenarios, then, when

from storefront.order.cancellation import CancelOrder
from storefront.order.fulfillment import ConfirmDelivery, MarkProcessing, ShipOrder
from storefront.order.order import Order
from storefront.payment.webhook import ProcessPaymentWebhook

scenarios("features/order_lifecycle.feature")


def _process(error, command):
    try:
        current_domain.process(command, asynchronous=False)
    except (InvalidOperationError, ValidationError) as exc:
        error["exc"] = exc


@when(parsers.cfparse('PayPal reports the payment as "{status}"'))
def paypal_reports(error, status):
    _process(error, ProcessPaymentWebhook(payment_id="PAY-1", provider_status=status))


@when("the order moves to processing")
def order_moves_to_processing(placed, error):
    _process(error, MarkProcessing(order_id=placed["order_id"]))


@when(parsers.cfparse('the order ships with tracking "{tracking}"'))
def order_ships(placed, error, tracking):
    _process(error, ShipOrder(order_id=placed["order_id"], tracking_number=tracking, carrier="UPS"))
    order = current_domain.repository_for(Order).get(placed["order_id"])
    placed["shipped_at"] = order.shipped_at


@when(parsers.cfparse('the order ships again with tracking "{tracking}"'))
def order_ships_again(placed, error, tracking):
    _process(error, ShipOrder(order_id=placed["order_id"], tracking_number=tracking, carrier="UPS"))


@when("the delivery is confirmed")
def delivery_confirmed(placed, error):
    _process(error, ConfirmDelivery(order_id=placed["order_id"]))


@when("the customer cancels the order")
def customer_cancels(placed, error):
    _process(error, CancelOrder(order_id=placed["order_id"], reason="Changed my mind"))


@then("the order records when it shipped and was delivered")
def order_records_timestamps(placed, error):
    assert error["exc"] is None
    order = current_domain.repository_for(Order).get(placed["order_id"])
    assert order.shipped_at is not None
    assert order.delivered_at is not None
    assert order.delivered_at >= order.shipped_at


@then("the order operation is refused")
def operation_refused(error):
    assert isinstance(error["exc"], InvalidOperationError)


@then(parsers.cfparse('the order keeps tracking "{tracking}" and its first ship time'))
def order_keeps_first_shipment(placed, tracking):
    order = current_domain.repository_for(Order).get(placed["order_id"])
    assert order.status == "SHIPPED"
    assert order.tracking_number == tracking
    assert order.shipped_at == placed["shipped_at"]
