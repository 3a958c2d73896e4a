"""
Establishment Model: the tenant of the storefront (supermarket, butcher, bakery).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin

if TYPE_CHECKING:
    from .catalog import Category, Product, Offer
    from .order import Order


class Establishment(TimestampMixin, Base):
    """
    A store served by the platform. Every catalog row, order and sales
    aggregate belongs to exactly one establishment.
    """

    __tablename__ = "establishment"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(Text, nullable=False)  # supermarket, butcher, bakery
    description: Mapped[Optional[str]] = mapped_column(Text)
    icon: Mapped[Optional[str]] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)

    # Relationships
    categories: Mapped[list["Category"]] = relationship(back_populates="establishment")
    products: Mapped[list["Product"]] = relationship(back_populates="establishment")
    offers: Mapped[list["Offer"]] = relationship(back_populates="establishment")
    orders: Mapped[list["Order"]] = relationship(back_populates="establishment")

    def __repr__(self) -> str:
        return f"<Establishment(id={self.id}, name='{self.name}', type='{self.type}')>"
