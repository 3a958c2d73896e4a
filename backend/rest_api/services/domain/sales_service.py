"""
Sales Aggregate Domain Service.

Maintains the per-product running totals (units sold, revenue) that
back the best sellers sort. record_sale is called once per order item,
inside the transaction that creates the item; it never commits.
"""

from decimal import Decimal

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shared.config.logging import get_logger
from shared.utils.exceptions import ProductNotFoundError
from shared.utils.validators import CENTS
from rest_api.models import Product, ProductSales
from rest_api.models.base import utcnow

logger = get_logger(__name__)


class SalesService:
    """Domain service for the ProductSales aggregate."""

    def __init__(self, db: Session):
        self._db = db

    def _increment(self, product_id: int, quantity: int, revenue: Decimal) -> int:
        """Atomic in-place increment. Returns the number of rows touched."""
        result = self._db.execute(
            update(ProductSales)
            .where(ProductSales.product_id == product_id)
            .values(
                quantity_sold=ProductSales.quantity_sold + quantity,
                total_revenue=ProductSales.total_revenue + revenue,
                last_sale_date=utcnow(),
            )
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def record_sale(
        self,
        product_id: int,
        quantity: int,
        unit_price: Decimal,
        establishment_id: int | None = None,
    ) -> None:
        """
        Add one sold line to the product's aggregate.

        The first sale of a product inserts the row (establishment resolved
        from the product when not given); later sales increment it with a
        single UPDATE so concurrent orders never lose an increment.
        """
        revenue = (Decimal(quantity) * Decimal(unit_price)).quantize(CENTS)

        if self._increment(product_id, quantity, revenue):
            return

        if establishment_id is None:
            establishment_id = self._db.scalar(
                select(Product.establishment_id).where(Product.id == product_id)
            )
            if establishment_id is None:
                raise ProductNotFoundError(product_id)

        try:
            with self._db.begin_nested():
                self._db.add(
                    ProductSales(
                        product_id=product_id,
                        establishment_id=establishment_id,
                        quantity_sold=quantity,
                        total_revenue=revenue,
                        last_sale_date=utcnow(),
                    )
                )
                self._db.flush()
        except IntegrityError:
            # A concurrent first sale inserted the row after our UPDATE
            logger.debug("Sales row created concurrently, incrementing", product_id=product_id)
            self._increment(product_id, quantity, revenue)

    def get_product_sales(self, product_id: int) -> ProductSales | None:
        return self._db.scalar(
            select(ProductSales).where(ProductSales.product_id == product_id)
        )

    def best_sellers(self, establishment_id: int, limit: int = 10) -> list[tuple[Product, int]]:
        """
        Active products ranked by units sold.
        Products without sales are included with 0.
        """
        quantity = func.coalesce(ProductSales.quantity_sold, 0)
        rows = self._db.execute(
            select(Product, quantity)
            .outerjoin(ProductSales, ProductSales.product_id == Product.id)
            .where(
                Product.establishment_id == establishment_id,
                Product.is_active.is_(True),
            )
            .order_by(quantity.desc(), Product.id)
            .limit(limit)
        ).all()
        return [(product, int(sold)) for product, sold in rows]
