"""
Shared Pydantic schemas used across the application.

Catalog, order and admin payloads use camelCase on the wire (the
storefront client speaks camelCase); the payment-provider checkout keeps
the provider's snake_case field names.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from shared.config.constants import (
    Limits,
    OrderStatus,
    PaymentMethod,
    normalize_payment_method,
)
from shared.utils.validators import validate_image_url


class CamelModel(BaseModel):
    """Base for camelCase wire models that also read ORM objects."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# Common
# =============================================================================


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
    code: str | None = None


# =============================================================================
# Catalog Schemas (Public API)
# =============================================================================


class EstablishmentOutput(CamelModel):
    id: int
    name: str
    type: str
    description: str | None = None
    icon: str | None = None
    is_active: bool


class CategoryOutput(CamelModel):
    id: int
    name: str
    icon: str | None = None
    color: str | None = None
    establishment_id: int


class ProductOutput(CamelModel):
    """Product as shown in listings and used to build cart snapshots."""

    id: int
    name: str
    description: str | None = None
    price: Decimal
    original_price: Decimal | None = None
    unit: str
    stock: int
    image_url: str | None = None
    is_active: bool
    is_featured: bool
    category_id: int
    category_name: str | None = None
    establishment_id: int
    created_at: datetime | None = None


class CategoryWithProductsOutput(CategoryOutput):
    products: list[ProductOutput] = Field(default_factory=list)


class OfferOutput(CamelModel):
    id: int
    title: str
    description: str | None = None
    discount_percentage: int
    product_id: int
    establishment_id: int
    is_active: bool
    valid_until: datetime | None = None
    created_at: datetime | None = None


class ActiveOfferOutput(OfferOutput):
    """Active offer with its product embedded."""

    product: ProductOutput


class SearchOutput(CamelModel):
    """Global search results."""

    products: list[ProductOutput]
    categories: list[CategoryOutput]


# =============================================================================
# Order Schemas
# =============================================================================


class DeliveryAddress(CamelModel):
    zip_code: str = Field(min_length=1, max_length=20)
    street: str = Field(min_length=1, max_length=200)
    number: str = Field(min_length=1, max_length=20)
    complement: str | None = Field(default=None, max_length=200)
    neighborhood: str = Field(default="", max_length=100)
    city: str = Field(min_length=1, max_length=100)
    state: str | None = Field(default=None, max_length=50)

    @field_validator("zip_code", "street", "number", "city")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class OrderDraft(CamelModel):
    """Customer-facing part of a new order."""

    customer_name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    customer_email: EmailStr
    customer_phone: str | None = Field(default=None, max_length=30)
    delivery_address: DeliveryAddress
    payment_method: str
    total_amount: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    delivery_fee: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    establishment_id: int = Field(gt=0)

    @field_validator("customer_name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

    @field_validator("payment_method")
    @classmethod
    def known_payment_method(cls, v: str) -> str:
        method = normalize_payment_method(v)
        if method not in PaymentMethod.ALL:
            raise ValueError(f"must be one of {', '.join(PaymentMethod.ALL)}")
        return method


class LineItemInput(CamelModel):
    product_id: int = Field(gt=0)
    quantity: int = Field(ge=Limits.MIN_QUANTITY, le=Limits.MAX_QUANTITY)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)


class CreateOrderRequest(CamelModel):
    """Body of POST /api/orders."""

    order: OrderDraft
    items: list[LineItemInput] = Field(min_length=1)


class OrderStatusUpdate(CamelModel):
    status: str

    @field_validator("status")
    @classmethod
    def known_status(cls, v: str) -> str:
        if v not in OrderStatus.ALL:
            raise ValueError(f"must be one of {', '.join(OrderStatus.ALL)}")
        return v


class PaymentSuccessRequest(CamelModel):
    payment_intent_id: str = Field(min_length=1, max_length=255)


class OrderItemOutput(CamelModel):
    id: int
    order_id: int
    product_id: int
    quantity: int
    price: Decimal
    product: ProductOutput | None = None


class OrderOutput(CamelModel):
    id: int
    customer_name: str
    customer_email: str
    customer_phone: str | None = None
    delivery_address: DeliveryAddress
    payment_method: str
    payment_status: str
    order_status: str
    total_amount: Decimal
    delivery_fee: Decimal
    establishment_id: int
    external_transaction_ref: str | None = None
    external_order_ref: str | None = None
    created_at: datetime | None = None


class OrderDetailOutput(OrderOutput):
    """Order with its items and their products."""

    items: list[OrderItemOutput] = Field(default_factory=list)


# =============================================================================
# Intent-based payment Schemas
# =============================================================================


class PaymentIntentRequest(CamelModel):
    # Sign is checked by the intent gateway
    amount: Decimal


class PaymentIntentResponse(CamelModel):
    client_secret: str


# =============================================================================
# Remote-order payment Schemas (provider field names)
# =============================================================================


class RemoteCustomer(BaseModel):
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    email: EmailStr
    phone: str | None = Field(default=None, max_length=30)
    document: str | None = Field(default=None, max_length=20)


class RemoteAddress(BaseModel):
    street: str = Field(min_length=1, max_length=200)
    number: str = Field(min_length=1, max_length=20)
    complement: str | None = Field(default=None, max_length=200)
    neighborhood: str = Field(default="", max_length=100)
    city: str = Field(min_length=1, max_length=100)
    state: str = Field(default="", max_length=50)
    zipcode: str = Field(min_length=1, max_length=20)


class RemoteItem(BaseModel):
    """Line item; ``price`` is the unit price in minor units."""

    id: int = Field(gt=0)
    description: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    quantity: int = Field(ge=Limits.MIN_QUANTITY, le=Limits.MAX_QUANTITY)
    price: int = Field(ge=0)


class CardInput(BaseModel):
    number: str = Field(min_length=12, max_length=19, pattern=r"^\d+$")
    holder_name: str = Field(min_length=1, max_length=100)
    exp_month: int = Field(ge=1, le=12)
    exp_year: int = Field(ge=2000, le=2100)
    cvv: str = Field(min_length=3, max_length=4, pattern=r"^\d+$")

    def __repr__(self) -> str:
        # Never render card data in logs or tracebacks
        return f"CardInput(last4={self.number[-4:]!r})"

    __str__ = __repr__


class RemoteOrderRequest(BaseModel):
    """Body of POST /api/payment-provider/create-order (amounts in minor units)."""

    customer: RemoteCustomer
    address: RemoteAddress
    items: list[RemoteItem] = Field(min_length=1)
    payment_method: str
    card: CardInput | None = None
    establishment_id: int = Field(gt=0)
    total_amount: int = Field(gt=0)

    @field_validator("payment_method")
    @classmethod
    def known_payment_method(cls, v: str) -> str:
        method = normalize_payment_method(v)
        if method not in PaymentMethod.ALL:
            raise ValueError(f"must be one of {', '.join(PaymentMethod.ALL)}")
        return method

    @model_validator(mode="after")
    def card_required_for_card_payments(self) -> "RemoteOrderRequest":
        if self.payment_method == PaymentMethod.CREDIT_CARD and self.card is None:
            raise ValueError("card is required for credit_card payments")
        return self


class RemoteOrderResponse(BaseModel):
    success: bool
    order_id: int | None = None
    transaction_id: str | None = None
    status: str | None = None
    pix_qr_code: str | None = None
    pix_qr_code_url: str | None = None
    pix_expires_at: str | None = None
    error: str | None = None


# =============================================================================
# Admin Schemas
# =============================================================================


class AdminLoginRequest(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1, max_length=200)


class AdminInfo(BaseModel):
    id: int
    username: str


class AdminLoginResponse(CamelModel):
    success: bool = True
    token: str
    expires_at: datetime
    admin: AdminInfo


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ForgotPasswordResponse(BaseModel):
    success: bool
    message: str


class DashboardStatsOutput(CamelModel):
    today_sales: Decimal
    today_orders: int
    active_products: int
    active_establishments: int


class ProductCreate(CamelModel):
    """Admin product creation."""

    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    description: str | None = Field(default=None, max_length=2000)
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    original_price: Decimal | None = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    unit: str = Field(default="un", min_length=1, max_length=20)
    stock: int = Field(default=0, ge=0)
    image_url: str | None = None
    is_active: bool = True
    is_featured: bool = False
    category_id: int = Field(gt=0)
    establishment_id: int = Field(gt=0)

    @field_validator("image_url")
    @classmethod
    def check_image_url(cls, v: str | None) -> str | None:
        return validate_image_url(v)
