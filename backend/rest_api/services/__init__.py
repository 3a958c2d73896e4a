"""
Services module for business logic.

- domain/: Application services (catalog, orders, sales aggregate, admin)
- payments/: Payment processors, remote checkout and webhook reconciliation

Usage:
    from rest_api.services.domain import OrderService
    service = OrderService(db)
    order = service.create_order(draft, items)
"""
