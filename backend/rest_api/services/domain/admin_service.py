"""
Admin Domain Service.

Back-office authentication (opaque bearer tokens), password reset
requests, dashboard statistics and product creation.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shared.config.constants import PaymentStatus
from shared.config.logging import admin_logger as logger, audit_auth_event, mask_email
from shared.config.settings import settings
from shared.infrastructure.db import safe_commit
from shared.security.password import verify_password
from shared.security.tokens import generate_token, hash_token
from shared.utils.exceptions import (
    AuthError,
    EstablishmentNotFoundError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from shared.utils.schemas import ProductCreate
from rest_api.models import AdminToken, AdminUser, Category, Establishment, Order, Product
from rest_api.models.base import utcnow


class AdminService:
    """Domain service for admin operations."""

    def __init__(self, db: Session):
        self._db = db

    # =========================================================================
    # Authentication
    # =========================================================================

    def authenticate(
        self,
        username: str,
        password: str,
        ip_address: str | None = None,
    ) -> tuple[AdminUser, str, datetime]:
        """
        Verify credentials and issue a bearer token.

        Returns:
            (admin, token, expires_at). The token is only ever returned
            here; the database keeps its SHA-256 digest.

        Raises:
            AuthError: Unknown user, inactive user or wrong password.
        """
        admin = self._db.scalar(select(AdminUser).where(AdminUser.username == username))

        if admin is None or not admin.is_active or not verify_password(password, admin.password):
            audit_auth_event(
                "LOGIN",
                user_id=username,
                success=False,
                reason="invalid_credentials",
                ip_address=ip_address,
            )
            raise AuthError("Invalid credentials")

        # Expired tokens of this admin are dropped at each login
        self._db.execute(
            delete(AdminToken).where(
                AdminToken.admin_id == admin.id,
                AdminToken.expires_at <= utcnow(),
            )
            .execution_options(synchronize_session=False)
        )

        token = generate_token()
        expires_at = utcnow() + timedelta(hours=settings.admin_token_expire_hours)
        self._db.add(AdminToken(token_hash=hash_token(token), admin_id=admin.id, expires_at=expires_at))
        try:
            safe_commit(self._db)
        except SQLAlchemyError as e:
            raise PersistenceError("admin login", error=str(e)) from e

        audit_auth_event(
            "LOGIN",
            user_id=admin.id,
            email=admin.email,
            success=True,
            ip_address=ip_address,
        )
        return admin, token, expires_at

    def resolve_token(self, token: str) -> AdminUser:
        """
        Admin owning an unexpired token.

        Raises:
            AuthError: Unknown or expired token, or inactive admin.
        """
        admin = self._db.scalar(
            select(AdminUser)
            .join(AdminToken, AdminToken.admin_id == AdminUser.id)
            .where(
                AdminToken.token_hash == hash_token(token),
                AdminToken.expires_at > utcnow(),
                AdminUser.is_active.is_(True),
            )
        )
        if admin is None:
            raise AuthError("Invalid or expired token")
        return admin

    def forgot_password(self, email: str) -> AdminUser:
        """
        Register a password reset request.

        No mail is sent; the request is logged for an operator.

        Raises:
            NotFoundError: No active admin with that email.
        """
        admin = self._db.scalar(
            select(AdminUser).where(
                func.lower(AdminUser.email) == email.strip().lower(),
                AdminUser.is_active.is_(True),
            )
        )
        if admin is None:
            raise NotFoundError("Admin", email=mask_email(email))

        logger.info(
            "Password reset requested",
            admin_id=admin.id,
            username=admin.username,
            email=mask_email(admin.email),
        )
        audit_auth_event("PASSWORD_RESET_REQUESTED", user_id=admin.id, email=admin.email)
        return admin

    # =========================================================================
    # Dashboard
    # =========================================================================

    def dashboard_stats(self, establishment_id: int, now: datetime | None = None) -> dict:
        """
        Today's figures for an establishment.

        ``today`` starts at 00:00 UTC. Sales only count paid orders;
        the order count includes every order placed today.
        """
        if self._db.get(Establishment, establishment_id) is None:
            raise EstablishmentNotFoundError(establishment_id)

        now = now or utcnow()
        start_of_day = now.astimezone(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)

        today_sales = self._db.scalar(
            select(func.coalesce(func.sum(Order.total_amount), 0)).where(
                Order.establishment_id == establishment_id,
                Order.payment_status == PaymentStatus.PAID,
                Order.created_at >= start_of_day,
            )
        )
        today_orders = self._db.scalar(
            select(func.count(Order.id)).where(
                Order.establishment_id == establishment_id,
                Order.created_at >= start_of_day,
            )
        )
        active_products = self._db.scalar(
            select(func.count(Product.id)).where(
                Product.establishment_id == establishment_id,
                Product.is_active.is_(True),
            )
        )
        active_establishments = self._db.scalar(
            select(func.count(Establishment.id)).where(Establishment.is_active.is_(True))
        )

        return {
            "today_sales": Decimal(str(today_sales or 0)).quantize(Decimal("0.01")),
            "today_orders": today_orders or 0,
            "active_products": active_products or 0,
            "active_establishments": active_establishments or 0,
        }

    # =========================================================================
    # Products
    # =========================================================================

    def create_product(self, data: ProductCreate, admin: AdminUser | None = None) -> Product:
        """
        Create a product.

        Raises:
            EstablishmentNotFoundError: Unknown establishment.
            ValidationError: Category missing or owned by another establishment.
        """
        if self._db.get(Establishment, data.establishment_id) is None:
            raise EstablishmentNotFoundError(data.establishment_id)

        category = self._db.get(Category, data.category_id)
        if category is None or category.establishment_id != data.establishment_id:
            raise ValidationError(
                f"Category {data.category_id} does not belong to establishment {data.establishment_id}",
                category_id=data.category_id,
            )

        product = Product(**data.model_dump())
        self._db.add(product)
        try:
            safe_commit(self._db)
        except SQLAlchemyError as e:
            raise PersistenceError("product creation", error=str(e)) from e

        self._db.refresh(product)
        logger.info(
            "Product created",
            product_id=product.id,
            establishment_id=product.establishment_id,
            admin_id=admin.id if admin else None,
        )
        return product
