"""Pydantic request/response schemas for the storefront API.

These are the external contracts, kept apart from the Protean commands.
Money goes out as fixed-point strings ("20.00") and timestamps as ISO-8601.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from storefront.cart.cart import MAX_LINE_QUANTITY
from storefront.shared.money import format_amount


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class ShippingDetails(BaseModel):
    name: str = Field(..., max_length=200)
    address_line1: str = Field(..., max_length=255)
    address_line2: str | None = Field(None, max_length=255)
    city: str = Field(..., max_length=100)
    state: str | None = Field(None, max_length=100)
    postal_code: str = Field(..., max_length=20)
    country: str = Field(..., max_length=100)
    phone: str | None = Field(None, max_length=30)


class StatusResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    error: str
    message: str
    status: int
    path: str
    timestamp: datetime
    field_errors: dict[str, list[str]] | None = None


ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid argument or operation not allowed in the current state"},
    401: {"model": ErrorResponse, "description": "Caller is not identified"},
    403: {"model": ErrorResponse, "description": "Caller may not act on this resource"},
    404: {"model": ErrorResponse, "description": "Resource does not exist"},
    500: {"model": ErrorResponse, "description": "Unexpected failure"},
}


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddCartItemRequest(BaseModel):
    product_id: str
    quantity: int = Field(1, ge=1, le=MAX_LINE_QUANTITY)

    model_config = {"json_schema_extra": {"examples": [{"product_id": "prod-001", "quantity": 2}]}}


class UpdateCartItemRequest(BaseModel):
    """A quantity of zero or less removes the line."""

    quantity: int = Field(..., le=MAX_LINE_QUANTITY)


class CartLineResponse(BaseModel):
    product_id: str
    product_name: str | None
    sku: str | None
    brand: str | None
    model: str | None
    quantity: int
    unit_price: str
    total_price: str
    available_stock: int
    product_active: bool
    in_stock: bool
    quantity_available: bool
    valid: bool
    validation_message: str | None

    @classmethod
    def from_line(cls, line) -> "CartLineResponse":
        return cls(
            product_id=line.product_id,
            product_name=line.product_name,
            sku=line.sku,
            brand=line.brand,
            model=line.model,
            quantity=line.quantity,
            unit_price=format_amount(line.unit_price),
            total_price=format_amount(line.line_total),
            available_stock=line.available_stock,
            product_active=line.product_active,
            in_stock=line.in_stock,
            quantity_available=line.quantity_available,
            valid=line.is_valid,
            validation_message=line.validation_message,
        )


class CartResponse(BaseModel):
    id: str
    user_id: str
    items: list[CartLineResponse]
    total_item_count: int
    unique_item_count: int
    total_amount: str
    has_invalid_items: bool
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_summary(cls, summary) -> "CartResponse":
        return cls(
            id=summary.cart_id,
            user_id=summary.user_id,
            items=[CartLineResponse.from_line(line) for line in summary.lines],
            total_item_count=summary.total_item_count,
            unique_item_count=summary.unique_item_count,
            total_amount=format_amount(summary.total_amount),
            has_invalid_items=summary.has_invalid_items,
            created_at=summary.created_at,
            updated_at=summary.updated_at,
        )


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class OrderLineRequest(BaseModel):
    product_id: str
    quantity: int = Field(..., ge=1, le=MAX_LINE_QUANTITY)


class CreateOrderRequest(BaseModel):
    items: list[OrderLineRequest] = Field(..., min_length=1)
    shipping: ShippingDetails
    shipping_amount: Decimal = Field(Decimal("0.00"), ge=0, decimal_places=2)
    tax_amount: Decimal = Field(Decimal("0.00"), ge=0, decimal_places=2)
    paypal_payment_id: str | None = None
    paypal_payer_id: str | None = None
    paypal_order_id: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [{"product_id": "prod-001", "quantity": 1}],
                    "shipping": {
                        "name": "Jane Rider",
                        "address_line1": "1 Stable Lane",
                        "city": "Lexington",
                        "state": "KY",
                        "postal_code": "40507",
                        "country": "US",
                    },
                    "shipping_amount": "4.99",
                    "tax_amount": "0.00",
                }
            ]
        }
    }


class CheckoutRequest(BaseModel):
    shipping: ShippingDetails
    paypal_payment_id: str | None = None
    paypal_payer_id: str | None = None
    paypal_order_id: str | None = None


class UpdateOrderRequest(BaseModel):
    status: str | None = None
    tracking_number: str | None = Field(None, max_length=255)
    carrier: str | None = Field(None, max_length=100)
    notes: str | None = None

    model_config = {
        "json_schema_extra": {"examples": [{"status": "SHIPPED", "tracking_number": "TRK123", "carrier": "UPS"}]}
    }


class OrderItemResponse(BaseModel):
    id: str
    product_id: str
    product_name: str
    sku: str | None
    brand: str | None
    model: str | None
    quantity: int
    unit_price: str
    total_price: str

    @classmethod
    def from_item(cls, item) -> "OrderItemResponse":
        return cls(
            id=str(item.id),
            product_id=str(item.product_id),
            product_name=item.product_name,
            sku=item.sku,
            brand=item.brand,
            model=item.model,
            quantity=item.quantity,
            unit_price=format_amount(item.unit_price),
            total_price=format_amount(item.total_price),
        )


class OrderResponse(BaseModel):
    id: str
    user_id: str
    status: str
    items: list[OrderItemResponse]
    total_item_count: int
    subtotal_amount: str
    shipping_amount: str
    tax_amount: str
    total_amount: str
    shipping: ShippingDetails | None
    full_shipping_address: str
    payment_method: str | None
    paypal_payment_id: str | None
    paypal_payer_id: str | None
    paypal_order_id: str | None
    tracking_number: str | None
    carrier: str | None
    notes: str | None
    is_paid: bool
    is_shippable: bool
    is_completed: bool
    is_cancellable: bool
    created_at: datetime | None
    updated_at: datetime | None
    shipped_at: datetime | None
    delivered_at: datetime | None

    @classmethod
    def from_order(cls, order) -> "OrderResponse":
        address = order.shipping_address
        return cls(
            id=str(order.id),
            user_id=str(order.user_id),
            status=order.status,
            items=[OrderItemResponse.from_item(item) for item in order.items],
            total_item_count=order.total_item_count,
            subtotal_amount=format_amount(order.totals.subtotal_amount),
            shipping_amount=format_amount(order.totals.shipping_amount),
            tax_amount=format_amount(order.totals.tax_amount),
            total_amount=format_amount(order.totals.total_amount),
            shipping=(
                ShippingDetails(
                    name=address.name,
                    address_line1=address.address_line1,
                    address_line2=address.address_line2,
                    city=address.city,
                    state=address.state,
                    postal_code=address.postal_code,
                    country=address.country,
                    phone=address.phone,
                )
                if address
                else None
            ),
            full_shipping_address=order.full_shipping_address,
            payment_method=order.payment_method,
            paypal_payment_id=order.paypal_payment_id,
            paypal_payer_id=order.paypal_payer_id,
            paypal_order_id=order.paypal_order_id,
            tracking_number=order.tracking_number,
            carrier=order.carrier,
            notes=order.notes,
            is_paid=order.is_paid,
            is_shippable=order.is_shippable,
            is_completed=order.is_completed,
            is_cancellable=order.is_cancellable,
            created_at=order.created_at,
            updated_at=order.updated_at,
            shipped_at=order.shipped_at,
            delivered_at=order.delivered_at,
        )


class OrderHistoryResponse(BaseModel):
    """Compact order row for a customer's history list."""

    id: str
    status: str
    total_item_count: int
    total_amount: str
    tracking_number: str | None
    created_at: datetime | None

    @classmethod
    def from_order(cls, order) -> "OrderHistoryResponse":
        return cls(
            id=str(order.id),
            status=order.status,
            total_item_count=order.total_item_count,
            total_amount=format_amount(order.totals.total_amount),
            tracking_number=order.tracking_number,
            created_at=order.created_at,
        )


class OrderHistoryPageResponse(BaseModel):
    items: list[OrderHistoryResponse]
    page: int
    size: int
    total: int
    total_pages: int


class OrderPageResponse(BaseModel):
    items: list[OrderResponse]
    page: int
    size: int
    total: int
    total_pages: int


# ---------------------------------------------------------------------------
# Payment bridge
# ---------------------------------------------------------------------------
class PaymentInfoResponse(BaseModel):
    client_id: str
    order_id: str
    currency: str
    amount: str

    @classmethod
    def from_descriptor(cls, descriptor) -> "PaymentInfoResponse":
        return cls(
            client_id=descriptor.client_id,
            order_id=descriptor.order_id,
            currency=descriptor.currency,
            amount=format_amount(descriptor.amount),
        )


class CompletePaymentRequest(BaseModel):
    payment_id: str = Field(..., max_length=255)
    payer_id: str | None = Field(None, max_length=255)
    provider_order_id: str | None = Field(None, max_length=255)


class PaymentWebhookRequest(BaseModel):
    payment_id: str
    status: str  # PayPal vocabulary: completed, cancelled, refunded, ...


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------
class CreateProductRequest(BaseModel):
    name: str = Field(..., max_length=200)
    price: Decimal = Field(..., gt=0, decimal_places=2)
    stock_quantity: int = Field(0, ge=0)
    description: str | None = None
    brand_id: str | None = None
    brand: str | None = Field(None, max_length=100)
    model: str | None = Field(None, max_length=100)
    sku: str | None = Field(None, max_length=50)
    category_id: str | None = None
    category: str | None = Field(None, max_length=100)
    featured: bool = False
    low_stock_threshold: int = Field(10, ge=0)


class UpdateProductRequest(BaseModel):
    name: str | None = Field(None, max_length=200)
    price: Decimal | None = Field(None, gt=0, decimal_places=2)
    stock_quantity: int | None = Field(None, ge=0)
    description: str | None = None
    brand_id: str | None = None
    brand: str | None = Field(None, max_length=100)
    model: str | None = Field(None, max_length=100)
    sku: str | None = Field(None, max_length=50)
    category_id: str | None = None
    category: str | None = Field(None, max_length=100)
    featured: bool | None = None
    is_active: bool | None = None
    low_stock_threshold: int | None = Field(None, ge=0)


class ProductResponse(BaseModel):
    id: str
    name: str
    description: str | None
    price: str
    stock_quantity: int
    low_stock_threshold: int | None
    brand_id: str | None
    brand: str | None
    model: str | None
    sku: str | None
    category_id: str | None
    category: str | None
    featured: bool
    is_active: bool
    in_stock: bool
    low_stock: bool

    @classmethod
    def from_product(cls, product) -> "ProductResponse":
        return cls(
            id=str(product.id),
            name=product.name,
            description=product.description,
            price=format_amount(product.price),
            stock_quantity=product.stock_quantity or 0,
            low_stock_threshold=product.low_stock_threshold,
            brand_id=str(product.brand_id) if product.brand_id else None,
            brand=product.brand,
            model=product.model,
            sku=product.sku,
            category_id=str(product.category_id) if product.category_id else None,
            category=product.category,
            featured=bool(product.featured),
            is_active=bool(product.is_active),
            in_stock=product.is_in_stock,
            low_stock=product.is_low_stock,
        )


class ProductPageResponse(BaseModel):
    items: list[ProductResponse]
    page: int
    size: int
    total: int
    total_pages: int


class BrandRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    logo_url: str | None = Field(None, max_length=255)
    website_url: str | None = Field(None, max_length=255)
    country_of_origin: str | None = Field(None, max_length=100)

    model_config = {"json_schema_extra": {"examples": [{"name": "Circle Y", "country_of_origin": "USA"}]}}


class UpdateBrandRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = None
    logo_url: str | None = Field(None, max_length=255)
    website_url: str | None = Field(None, max_length=255)
    country_of_origin: str | None = Field(None, max_length=100)
    is_active: bool | None = None


class BrandResponse(BaseModel):
    id: str
    name: str
    description: str | None
    logo_url: str | None
    website_url: str | None
    country_of_origin: str | None
    is_active: bool
    product_count: int
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_brand(cls, brand, product_count: int = 0) -> "BrandResponse":
        return cls(
            id=str(brand.id),
            name=brand.name,
            description=brand.description,
            logo_url=brand.logo_url,
            website_url=brand.website_url,
            country_of_origin=brand.country_of_origin,
            is_active=bool(brand.is_active),
            product_count=product_count,
            created_at=brand.created_at,
            updated_at=brand.updated_at,
        )


class BrandPageResponse(BaseModel):
    items: list[BrandResponse]
    page: int
    size: int
    total: int
    total_pages: int


class CategoryRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    parent_category_id: str | None = None
    display_order: int = 0


class UpdateCategoryRequest(BaseModel):
    """Sending ``parent_category_id: null`` explicitly turns the category into a root."""

    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = None
    parent_category_id: str | None = None
    display_order: int | None = None
    is_active: bool | None = None


class CategoryResponse(BaseModel):
    id: str
    name: str
    description: str | None
    parent_category_id: str | None
    parent_name: str | None
    level: int
    display_order: int
    is_root: bool
    is_active: bool
    product_count: int
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_category(cls, category, parent_name=None, product_count: int = 0) -> "CategoryResponse":
        return cls(
            id=str(category.id),
            name=category.name,
            description=category.description,
            parent_category_id=str(category.parent_category_id) if category.parent_category_id else None,
            parent_name=parent_name,
            level=category.level or 0,
            display_order=category.display_order or 0,
            is_root=category.is_root,
            is_active=bool(category.is_active),
            product_count=product_count,
            created_at=category.created_at,
            updated_at=category.updated_at,
        )


class CategoryTreeResponse(BaseModel):
    id: str
    name: str
    full_path: str
    level: int
    product_count: int
    children: list["CategoryTreeResponse"]

    @classmethod
    def from_node(cls, node) -> "CategoryTreeResponse":
        return cls(
            id=str(node.category.id),
            name=node.category.name,
            full_path=node.full_path,
            level=node.category.level or 0,
            product_count=node.product_count,
            children=[cls.from_node(child) for child in node.children],
        )


class CategoryPageResponse(BaseModel):
    items: list[CategoryResponse]
    page: int
    size: int
    total: int
    total_pages: int


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
class RegisterUserRequest(BaseModel):
    email: str = Field(..., max_length=254, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)


class UserResponse(BaseModel):
    id: str
    email: str
    first_name: str | None
    last_name: str | None
    role: str

    @classmethod
    def from_user(cls, user) -> "UserResponse":
        return cls(
            id=str(user.id),
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role,
        )
