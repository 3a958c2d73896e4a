"""
Sales aggregate Model: ProductSales.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, utcnow

if TYPE_CHECKING:
    from .catalog import Product


class ProductSales(Base):
    """
    Running sales totals for a product.

    One row per product. quantity_sold and total_revenue only ever grow:
    they are incremented when order items are created and never rolled
    back by cancellations or failed payments.
    """

    __tablename__ = "product_sales"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    product_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("product.id"), nullable=False, unique=True
    )
    establishment_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("establishment.id"), nullable=False, index=True
    )
    quantity_sold: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_revenue: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0.00"), nullable=False
    )
    last_sale_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    product: Mapped["Product"] = relationship(back_populates="sales")

    __table_args__ = (
        # Best sellers per establishment
        Index("ix_product_sales_establishment_qty", "establishment_id", "quantity_sold"),
    )

    def __repr__(self) -> str:
        return f"<ProductSales(product_id={self.product_id}, quantity_sold={self.quantity_sold}, total_revenue={self.total_revenue})>"
