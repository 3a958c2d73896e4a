"""
Catalog Models: Category, Product, Offer.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin

if TYPE_CHECKING:
    from .establishment import Establishment
    from .sales import ProductSales


class Category(TimestampMixin, Base):
    """Product category within an establishment."""

    __tablename__ = "category"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    icon: Mapped[Optional[str]] = mapped_column(Text)
    color: Mapped[Optional[str]] = mapped_column(Text)
    establishment_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("establishment.id"), nullable=False, index=True
    )

    # Relationships
    establishment: Mapped["Establishment"] = relationship(back_populates="categories")
    products: Mapped[list["Product"]] = relationship(back_populates="category")


class Product(TimestampMixin, Base):
    """
    Sellable product.
    ``original_price`` is set when the product is on discount; the catalog
    discount sort ranks by (original_price - price) / original_price.
    """

    __tablename__ = "product"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    original_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))
    unit: Mapped[str] = mapped_column(Text, default="un", nullable=False)  # kg, un, pct, l
    stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("category.id"), nullable=False, index=True
    )
    establishment_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("establishment.id"), nullable=False, index=True
    )

    # Relationships
    category: Mapped["Category"] = relationship(back_populates="products")
    establishment: Mapped["Establishment"] = relationship(back_populates="products")
    offers: Mapped[list["Offer"]] = relationship(back_populates="product")
    sales: Mapped[Optional["ProductSales"]] = relationship(back_populates="product", uselist=False)

    __table_args__ = (
        # Catalog listing query (establishment_id + is_active)
        Index("ix_product_establishment_active", "establishment_id", "is_active"),
    )

    @property
    def category_name(self) -> str | None:
        return self.category.name if self.category is not None else None

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name='{self.name}', price={self.price})>"


class Offer(TimestampMixin, Base):
    """Time-limited discount announcement for a product."""

    __tablename__ = "offer"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    discount_percentage: Mapped[int] = mapped_column(Integer, nullable=False)
    product_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("product.id"), nullable=False, index=True
    )
    establishment_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("establishment.id"), nullable=False, index=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    valid_until: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    # Relationships
    product: Mapped["Product"] = relationship(back_populates="offers")
    establishment: Mapped["Establishment"] = relationship(back_populates="offers")
