"""
SQLAlchemy ORM Models Package.

All models are organized into domain-specific modules:
- base: Base class and TimestampMixin
- establishment: Establishment
- catalog: Category, Product, Offer
- order: Order, OrderItem
- sales: ProductSales
- admin: AdminUser, AdminToken
"""

# Base classes
from .base import Base, TimestampMixin

# Tenants
from .establishment import Establishment

# Catalog
from .catalog import Category, Product, Offer

# Orders
from .order import Order, OrderItem

# Sales aggregate
from .sales import ProductSales

# Admin users and tokens
from .admin import AdminUser, AdminToken

__all__ = [
    "Base",
    "TimestampMixin",
    "Establishment",
    "Category",
    "Product",
    "Offer",
    "Order",
    "OrderItem",
    "ProductSales",
    "AdminUser",
    "AdminToken",
]
