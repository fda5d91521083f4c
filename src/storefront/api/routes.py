"""FastAPI routes for carts, orders and the PayPal bridge."""

import json

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request
from protean.utils.globals import current_domain

from storefront.api.auth import current_user, ensure_owner_or_admin, require_admin
from storefront.api.paging import PageParams, page_params, paged
from storefront.api.schemas import (
    ERROR_RESPONSES,
    AddCartItemRequest,
    CartResponse,
    CheckoutRequest,
    CompletePaymentRequest,
    CreateOrderRequest,
    OrderHistoryPageResponse,
    OrderHistoryResponse,
    OrderPageResponse,
    OrderResponse,
    PaymentInfoResponse,
    PaymentWebhookRequest,
    StatusResponse,
    UpdateCartItemRequest,
    UpdateOrderRequest,
)
from storefront.cart.cart import Cart
from storefront.cart.items import AddToCart, RemoveFromCart, UpdateCartItemQuantity
from storefront.cart.management import ClearCart, OpenCart
from storefront.cart.summary import summarize
from storefront.identity.user import User
from storefront.order.administration import UpdateOrder
from storefront.order.cancellation import CancelOrder
from storefront.order.creation import PlaceOrder, PlaceOrderFromCart
from storefront.order.order import Order
from storefront.payment.completion import CompletePayment
from storefront.payment.gateway import get_gateway
from storefront.payment.initiation import initiate_payment
from storefront.payment.webhook import ProcessPaymentWebhook


def _cart_response(user_id) -> CartResponse:
    cart_id = current_domain.process(OpenCart(user_id=user_id), asynchronous=False)
    cart = current_domain.repository_for(Cart).get(cart_id)
    return CartResponse.from_summary(summarize(cart))


def _order_response(order_id) -> OrderResponse:
    return OrderResponse.from_order(current_domain.repository_for(Order).get(order_id))


def _owned_order(order_id: str, user: User) -> Order:
    order = current_domain.repository_for(Order).get(order_id)
    ensure_owner_or_admin(user, order)
    return order


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"], responses=ERROR_RESPONSES)


@cart_router.get("", response_model=CartResponse)
async def get_cart(user: User = Depends(current_user)) -> CartResponse:
    """The caller's cart, created empty on first access."""
    return _cart_response(str(user.id))


@cart_router.post("/items", response_model=CartResponse)
async def add_cart_item(body: AddCartItemRequest, user: User = Depends(current_user)) -> CartResponse:
    command = AddToCart(
        user_id=str(user.id),
        product_id=body.product_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(str(user.id))


@cart_router.put("/items/{product_id}", response_model=CartResponse)
async def update_cart_item(
    product_id: str, body: UpdateCartItemRequest, user: User = Depends(current_user)
) -> CartResponse:
    command = UpdateCartItemQuantity(
        user_id=str(user.id),
        product_id=product_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(str(user.id))


@cart_router.delete("/items/{product_id}", response_model=CartResponse)
async def remove_cart_item(product_id: str, user: User = Depends(current_user)) -> CartResponse:
    command = RemoveFromCart(user_id=str(user.id), product_id=product_id)
    current_domain.process(command, asynchronous=False)
    return _cart_response(str(user.id))


@cart_router.delete("", response_model=CartResponse)
async def clear_cart(user: User = Depends(current_user)) -> CartResponse:
    current_domain.process(ClearCart(user_id=str(user.id)), asynchronous=False)
    return _cart_response(str(user.id))


@cart_router.get("/validate", response_model=CartResponse)
async def validate_cart(user: User = Depends(current_user)) -> CartResponse:
    """Check every line against live product data without changing anything."""
    cart = current_domain.repository_for(Cart).find_for_user(str(user.id))
    if cart is None:
        cart = Cart.create(str(user.id))
    return CartResponse.from_summary(summarize(cart))


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"], responses=ERROR_RESPONSES)


@order_router.post("", status_code=201, response_model=OrderResponse)
async def create_order(body: CreateOrderRequest, user: User = Depends(current_user)) -> OrderResponse:
    command = PlaceOrder(
        user_id=str(user.id),
        items=json.dumps([item.model_dump() for item in body.items]),
        shipping_address=json.dumps(body.shipping.model_dump()),
        shipping_amount=float(body.shipping_amount),
        tax_amount=float(body.tax_amount),
        paypal_payment_id=body.paypal_payment_id,
        paypal_payer_id=body.paypal_payer_id,
        paypal_order_id=body.paypal_order_id,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return _order_response(order_id)


@order_router.post("/from-cart", status_code=201, response_model=OrderResponse)
async def create_order_from_cart(body: CheckoutRequest, user: User = Depends(current_user)) -> OrderResponse:
    """Check out the caller's cart: price, reserve stock, and empty the cart."""
    command = PlaceOrderFromCart(
        user_id=str(user.id),
        shipping_address=json.dumps(body.shipping.model_dump()),
        paypal_payment_id=body.paypal_payment_id,
        paypal_payer_id=body.paypal_payer_id,
        paypal_order_id=body.paypal_order_id,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return _order_response(order_id)


@order_router.get("/user", response_model=OrderHistoryPageResponse)
async def list_my_orders(
    paging: PageParams = Depends(page_params), user: User = Depends(current_user)
) -> OrderHistoryPageResponse:
    result = current_domain.repository_for(Order).page_for_user(str(user.id), paging.page, paging.size)
    return paged(OrderHistoryPageResponse, result, OrderHistoryResponse.from_order)


@order_router.get("/admin", response_model=OrderPageResponse)
async def list_all_orders(
    paging: PageParams = Depends(page_params), admin: User = Depends(require_admin)
) -> OrderPageResponse:
    result = current_domain.repository_for(Order).page_all(paging.page, paging.size)
    return paged(OrderPageResponse, result, OrderResponse.from_order)


@order_router.get("/admin/search", response_model=OrderPageResponse)
async def search_orders(
    term: str = Query(..., min_length=1),
    paging: PageParams = Depends(page_params),
    admin: User = Depends(require_admin),
) -> OrderPageResponse:
    """Match on order id, shipping name, PayPal ids or tracking number."""
    result = current_domain.repository_for(Order).search(term, paging.page, paging.size)
    return paged(OrderPageResponse, result, OrderResponse.from_order)


@order_router.post("/paypal/webhook", response_model=StatusResponse)
async def paypal_webhook(
    request: Request,
    body: PaymentWebhookRequest,
    x_gateway_signature: str = Header(default=""),
) -> StatusResponse:
    """Apply a payment status change relayed from PayPal."""
    payload = (await request.body()).decode("utf-8")
    if not get_gateway().verify_webhook_signature(payload, x_gateway_signature):
        raise HTTPException(status_code=401, detail="Invalid webhook signature")

    command = ProcessPaymentWebhook(payment_id=body.payment_id, provider_status=body.status)
    status = current_domain.process(command, asynchronous=False)
    return StatusResponse(status=status)


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, user: User = Depends(current_user)) -> OrderResponse:
    return OrderResponse.from_order(_owned_order(order_id, user))


@order_router.put("/{order_id}", response_model=OrderResponse)
async def update_order(order_id: str, body: UpdateOrderRequest, admin: User = Depends(require_admin)) -> OrderResponse:
    command = UpdateOrder(
        order_id=order_id,
        status=body.status,
        tracking_number=body.tracking_number,
        carrier=body.carrier,
        notes=body.notes,
    )
    current_domain.process(command, asynchronous=False)
    return _order_response(order_id)


@order_router.put("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: str,
    reason: str | None = Query(None, max_length=500),
    user: User = Depends(current_user),
) -> OrderResponse:
    _owned_order(order_id, user)
    current_domain.process(CancelOrder(order_id=order_id, reason=reason), asynchronous=False)
    return _order_response(order_id)


@order_router.get("/{order_id}/paypal/init", response_model=PaymentInfoResponse)
async def init_paypal_payment(order_id: str, user: User = Depends(current_user)) -> PaymentInfoResponse:
    """Everything the PayPal JS SDK needs to render checkout for this order."""
    _owned_order(order_id, user)
    return PaymentInfoResponse.from_descriptor(initiate_payment(order_id))


@order_router.put("/{order_id}/paypal/complete", response_model=OrderResponse)
async def complete_paypal_payment(
    order_id: str, body: CompletePaymentRequest, user: User = Depends(current_user)
) -> OrderResponse:
    _owned_order(order_id, user)
    command = CompletePayment(
        order_id=order_id,
        payment_id=body.payment_id,
        payer_id=body.payer_id,
        provider_order_id=body.provider_order_id,
    )
    current_domain.process(command, asynchronous=False)
    return _order_response(order_id)
