"""
Order Domain Service.

Single writer of Order and OrderItem rows. An order, its items and the
sales aggregate increments for those items are written in one
transaction: either all of them become visible or none does.
"""

from collections.abc import Sequence

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from shared.config.constants import (
    OrderStatus,
    PaymentStatus,
    is_valid_order_status,
    is_valid_payment_status,
    validate_order_transition,
)
from shared.config.logging import mask_email, mask_reference, orders_logger as logger
from shared.config.settings import settings
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import (
    EstablishmentNotFoundError,
    InvalidTransitionError,
    OrderNotFoundError,
    PersistenceError,
    ValidationError,
)
from shared.utils.schemas import LineItemInput, OrderDraft
from rest_api.models import Establishment, Order, OrderItem, Product
from .catalog_service import CatalogService
from .sales_service import SalesService


class OrderService:
    """
    Domain service for order creation and status updates.

    Usage:
        service = OrderService(db)
        order = service.create_order(draft, items)
    """

    def __init__(self, db: Session):
        self._db = db
        self._sales = SalesService(db)

    # =========================================================================
    # Creation
    # =========================================================================

    def validate_order(self, draft: OrderDraft, items: Sequence[LineItemInput]) -> None:
        """
        Check an order against the catalog. Nothing is written.

        Raises:
            EstablishmentNotFoundError: Unknown or inactive establishment.
            ValidationError: Empty order, bad quantity, unknown product or
                product of another establishment (message names the item).
        """
        establishment = self._db.get(Establishment, draft.establishment_id)
        if establishment is None or not establishment.is_active:
            raise EstablishmentNotFoundError(draft.establishment_id)

        if not items:
            raise ValidationError("Order must contain at least one item")

        products = CatalogService(self._db).get_products_by_ids(i.product_id for i in items)
        for index, item in enumerate(items):
            if item.quantity < 1:
                raise ValidationError(
                    f"Item {index}: quantity must be at least 1", item_index=index
                )
            product = products.get(item.product_id)
            if product is None:
                raise ValidationError(
                    f"Item {index}: product {item.product_id} does not exist",
                    item_index=index,
                )
            if product.establishment_id != draft.establishment_id:
                raise ValidationError(
                    f"Item {index}: product {item.product_id} does not belong to "
                    f"establishment {draft.establishment_id}",
                    item_index=index,
                )

    def create_order(
        self,
        draft: OrderDraft,
        items: Sequence[LineItemInput],
        *,
        payment_status: str = PaymentStatus.PENDING,
        external_transaction_ref: str | None = None,
        external_order_ref: str | None = None,
    ) -> Order:
        """
        Persist an order with its items and record the sales.

        Validation (establishment, products, quantities) happens before
        any write. The order row is flushed first to obtain its id, then
        each item is inserted in input order followed by its sales
        increment. Any store failure rolls the whole order back.

        Raises:
            ValidationError: Bad input, nothing written.
            EstablishmentNotFoundError: Unknown or inactive establishment.
            PersistenceError: Store rejected the order or an item
                (``item_index`` tells which).
        """
        if not is_valid_payment_status(payment_status):
            raise ValidationError(f"Invalid payment status '{payment_status}'")

        self.validate_order(draft, items)

        delivery_fee = (
            draft.delivery_fee if draft.delivery_fee is not None else settings.default_delivery_fee
        )
        order = Order(
            customer_name=draft.customer_name,
            customer_email=str(draft.customer_email),
            customer_phone=draft.customer_phone,
            delivery_address=draft.delivery_address.model_dump(),
            payment_method=draft.payment_method,
            payment_status=payment_status,
            order_status=OrderStatus.PROCESSING,
            total_amount=draft.total_amount,
            delivery_fee=delivery_fee,
            establishment_id=draft.establishment_id,
            external_transaction_ref=external_transaction_ref,
            external_order_ref=external_order_ref,
        )

        try:
            self._db.add(order)
            self._db.flush()
        except SQLAlchemyError as e:
            self._db.rollback()
            raise PersistenceError("order creation", error=str(e)) from e

        order_id = order.id
        item_index: int | None = None
        try:
            for item_index, item in enumerate(items):
                self._db.add(
                    OrderItem(
                        order_id=order_id,
                        product_id=item.product_id,
                        quantity=item.quantity,
                        price=item.price,
                    )
                )
                self._db.flush()
                self._sales.record_sale(
                    item.product_id,
                    item.quantity,
                    item.price,
                    establishment_id=draft.establishment_id,
                )
            safe_commit(self._db)
        except SQLAlchemyError as e:
            self._db.rollback()
            raise PersistenceError(
                "order item creation",
                item_index=item_index,
                order_id=order_id,
                error=str(e),
            ) from e

        self._db.refresh(order)
        logger.info(
            "Order created",
            order_id=order.id,
            establishment_id=order.establishment_id,
            items=len(items),
            total_amount=str(order.total_amount),
            payment_method=order.payment_method,
            payment_status=order.payment_status,
            customer_email=mask_email(order.customer_email),
        )
        return order

    # =========================================================================
    # Queries
    # =========================================================================

    def get_order(self, order_id: int) -> Order:
        """Order with items and their products. Raises OrderNotFoundError."""
        order = self._db.scalar(
            select(Order)
            .where(Order.id == order_id)
            .options(
                selectinload(Order.items)
                .joinedload(OrderItem.product)
                .joinedload(Product.category)
            )
        )
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    def list_orders_by_establishment(self, establishment_id: int) -> list[Order]:
        return list(
            self._db.scalars(
                select(Order)
                .where(Order.establishment_id == establishment_id)
                .order_by(Order.created_at.desc(), Order.id.desc())
            ).all()
        )

    def find_by_external_ref(self, refs: Sequence[str], lock: bool = False) -> Order | None:
        """
        Find the order a payment processor knows by one of ``refs``.
        Matches either the external order or transaction reference.
        """
        refs = [r for r in refs if r]
        if not refs:
            return None
        query = (
            select(Order)
            .where(
                or_(
                    Order.external_order_ref.in_(refs),
                    Order.external_transaction_ref.in_(refs),
                )
            )
            .order_by(Order.id)
            .limit(1)
        )
        if lock:
            query = query.with_for_update()
        return self._db.scalar(query)

    # =========================================================================
    # Status updates
    # =========================================================================

    def _get_for_update(self, order_id: int) -> Order:
        order = self._db.scalar(select(Order).where(Order.id == order_id).with_for_update())
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    def update_order_status(self, order_id: int, new_status: str) -> Order:
        """
        Overwrite the fulfillment status.

        Any status may follow any status unless
        ``enforce_order_status_transitions`` is enabled, in which case
        ORDER_TRANSITIONS applies.
        """
        if not is_valid_order_status(new_status):
            raise ValidationError(
                f"Invalid order status '{new_status}'. Expected one of: {', '.join(OrderStatus.ALL)}"
            )

        order = self._get_for_update(order_id)
        old_status = order.order_status
        if settings.enforce_order_status_transitions and not validate_order_transition(
            old_status, new_status
        ):
            self._db.rollback()
            raise InvalidTransitionError("order", old_status, new_status, order_id=order_id)

        order.order_status = new_status
        try:
            safe_commit(self._db)
        except SQLAlchemyError as e:
            raise PersistenceError("order status update", order_id=order_id, error=str(e)) from e

        self._db.refresh(order)
        logger.info(
            "Order status updated",
            order_id=order_id,
            old_status=old_status,
            new_status=new_status,
        )
        return order

    def update_order_payment_status(
        self,
        order_id: int,
        new_status: str,
        external_ref: str | None = None,
    ) -> Order:
        """
        Overwrite the payment status and, when given, the external
        transaction reference.

        Idempotent: re-applying the current (status, ref) pair writes
        nothing. Sales aggregates are never touched here.
        """
        if not is_valid_payment_status(new_status):
            raise ValidationError(f"Invalid payment status '{new_status}'")

        order = self._get_for_update(order_id)
        return self.apply_payment_status(order, new_status, external_ref)

    def apply_payment_status(
        self,
        order: Order,
        new_status: str,
        external_ref: str | None = None,
    ) -> Order:
        """Payment status update on an order already loaded (and locked) by the caller."""
        unchanged = order.payment_status == new_status and (
            external_ref is None or external_ref == order.external_transaction_ref
        )
        if unchanged:
            # Release the row lock taken by the caller
            self._db.rollback()
            logger.debug(
                "Payment status already applied",
                order_id=order.id,
                payment_status=new_status,
            )
            return order

        old_status = order.payment_status
        order.payment_status = new_status
        if external_ref is not None:
            order.external_transaction_ref = external_ref

        try:
            safe_commit(self._db)
        except SQLAlchemyError as e:
            raise PersistenceError(
                "payment status update", order_id=order.id, error=str(e)
            ) from e

        self._db.refresh(order)
        logger.info(
            "Order payment status updated",
            order_id=order.id,
            old_status=old_status,
            new_status=new_status,
            external_ref=mask_reference(external_ref),
        )
        return order
