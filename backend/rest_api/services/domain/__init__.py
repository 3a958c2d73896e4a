"""
Domain Services - Application Layer.

Services contain business logic and own their transactions.
Routers stay thin: they validate the request shape, call a service and
serialize the result.

Structure:
    Router (thin controller)
        ↓
    Service (business logic)  ← YOU ARE HERE
        ↓
    Model (entity)

Usage:
    from rest_api.services.domain import OrderService

    # In router
    service = OrderService(db)
    order = service.create_order(body.order, body.items)
"""

from .catalog_service import CatalogService
from .sales_service import SalesService
from .order_service import OrderService
from .admin_service import AdminService

__all__ = [
    "CatalogService",
    "SalesService",
    "OrderService",
    "AdminService",
]
