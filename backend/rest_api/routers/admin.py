"""
Admin router.
Login, password reset requests, dashboard figures and product management.
"""

from fastapi import APIRouter, Depends, Request, status
from slowapi.util import get_remote_address
from sqlalchemy.orm import Session

from shared.config.settings import settings
from shared.infrastructure.db import get_db
from shared.security.rate_limit import limiter
from shared.utils.schemas import (
    AdminInfo,
    AdminLoginRequest,
    AdminLoginResponse,
    DashboardStatsOutput,
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    OrderOutput,
    ProductCreate,
    ProductOutput,
)
from rest_api.core.auth import require_admin
from rest_api.models import AdminUser
from rest_api.services.domain import AdminService, CatalogService, OrderService


router = APIRouter(prefix="/api", tags=["admin"])


@router.post("/admin/login", response_model=AdminLoginResponse)
@limiter.limit(settings.login_rate_limit)
def login(request: Request, body: AdminLoginRequest, db: Session = Depends(get_db)):
    """
    Authenticate an admin and return an opaque bearer token.

    The token is random and only its digest is stored, so it cannot be
    shown again after this response.
    """
    admin, token, expires_at = AdminService(db).authenticate(
        body.username,
        body.password,
        ip_address=get_remote_address(request),
    )
    return AdminLoginResponse(
        token=token,
        expires_at=expires_at,
        admin=AdminInfo(id=admin.id, username=admin.username),
    )


@router.post("/admin/forgot-password", response_model=ForgotPasswordResponse)
@limiter.limit(settings.login_rate_limit)
def forgot_password(request: Request, body: ForgotPasswordRequest, db: Session = Depends(get_db)):
    AdminService(db).forgot_password(str(body.email))
    return ForgotPasswordResponse(
        success=True,
        message="Password reset instructions were registered for this account.",
    )


@router.get("/establishments/{establishment_id}/stats", response_model=DashboardStatsOutput)
def dashboard_stats(
    establishment_id: int,
    db: Session = Depends(get_db),
    admin: AdminUser = Depends(require_admin),
):
    return DashboardStatsOutput(**AdminService(db).dashboard_stats(establishment_id))


@router.get("/establishments/{establishment_id}/orders", response_model=list[OrderOutput])
def list_establishment_orders(
    establishment_id: int,
    db: Session = Depends(get_db),
    admin: AdminUser = Depends(require_admin),
):
    """Orders of an establishment, newest first."""
    CatalogService(db).get_establishment(establishment_id)
    return OrderService(db).list_orders_by_establishment(establishment_id)


@router.post("/admin/products", response_model=ProductOutput, status_code=status.HTTP_201_CREATED)
def create_product(
    body: ProductCreate,
    db: Session = Depends(get_db),
    admin: AdminUser = Depends(require_admin),
):
    return AdminService(db).create_product(body, admin=admin)
