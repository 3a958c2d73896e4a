"""
Order Models: Order, OrderItem.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import JSON, CheckConstraint, ForeignKey, Index, Integer, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin

if TYPE_CHECKING:
    from .catalog import Product
    from .establishment import Establishment


class Order(TimestampMixin, Base):
    """
    Customer order for one establishment.

    After creation only payment_status, the external references and
    (through the fulfillment path) order_status change. Orders are never
    deleted.
    """

    __tablename__ = "customer_order"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    customer_name: Mapped[str] = mapped_column(Text, nullable=False)
    customer_email: Mapped[str] = mapped_column(Text, nullable=False)
    customer_phone: Mapped[Optional[str]] = mapped_column(Text)
    # {zip_code, street, number, complement, neighborhood, city, state}
    delivery_address: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    payment_method: Mapped[str] = mapped_column(Text, nullable=False)  # instant_transfer, credit_card
    payment_status: Mapped[str] = mapped_column(
        Text, default="pending", nullable=False, index=True
    )  # pending, paid, failed
    order_status: Mapped[str] = mapped_column(
        Text, default="processing", nullable=False
    )  # processing, confirmed, preparing, delivering, delivered, cancelled
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    delivery_fee: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), default=Decimal("5.00"), nullable=False
    )
    establishment_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("establishment.id"), nullable=False, index=True
    )
    # Payment processor identifiers; webhooks only know these
    external_transaction_ref: Mapped[Optional[str]] = mapped_column(Text, index=True)
    external_order_ref: Mapped[Optional[str]] = mapped_column(Text, index=True)

    # Relationships
    establishment: Mapped["Establishment"] = relationship(back_populates="orders")
    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order", order_by="OrderItem.id"
    )

    __table_args__ = (
        # Establishment order list, newest first
        Index("ix_order_establishment_created", "establishment_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Order(id={self.id}, payment_status='{self.payment_status}', "
            f"order_status='{self.order_status}', establishment_id={self.establishment_id})>"
        )


class OrderItem(Base):
    """
    Line of an order. ``price`` is the unit price at checkout time.
    Immutable after creation.
    """

    __tablename__ = "order_item"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("customer_order.id"), nullable=False, index=True
    )
    product_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("product.id"), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    # Relationships
    order: Mapped["Order"] = relationship(back_populates="items")
    product: Mapped["Product"] = relationship()

    __table_args__ = (
        CheckConstraint("quantity > 0", name="chk_order_item_quantity_positive"),
        CheckConstraint("price >= 0", name="chk_order_item_price_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<OrderItem(id={self.id}, order_id={self.order_id}, product_id={self.product_id}, qty={self.quantity})>"
