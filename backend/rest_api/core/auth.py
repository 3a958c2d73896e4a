"""
Admin authentication dependency.

Usage:
    @router.get("/api/establishments/{establishment_id}/stats")
    def stats(establishment_id: int, admin: AdminUser = Depends(require_admin), ...):
        ...
"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.security.tokens import get_bearer_token
from shared.utils.exceptions import AuthError
from rest_api.models import AdminUser
from rest_api.services.domain import AdminService


def require_admin(request: Request, db: Session = Depends(get_db)) -> AdminUser:
    """Resolve ``Authorization: Bearer <token>`` to an active admin or raise 401."""
    token = get_bearer_token(request)
    if token is None:
        raise AuthError("Missing bearer token", path=request.url.path)
    return AdminService(db).resolve_token(token)
