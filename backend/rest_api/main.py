"""
REST API main application.
Entry point for the FastAPI REST server.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from shared.config.settings import settings
from shared.config.logging import rest_api_logger as logger
from shared.security.rate_limit import limiter, rate_limit_exceeded_handler
from rest_api.core.cors import configure_cors
from rest_api.core.lifespan import lifespan
from rest_api.core.middlewares import register_middlewares
from rest_api.routers.admin import router as admin_router
from rest_api.routers.catalog import router as catalog_router
from rest_api.routers.orders import router as orders_router
from rest_api.routers.payments import router as payments_router
from rest_api.routers.public import health_router


# Endpoints whose failures answer {"success": false, "error": ...}
SUCCESS_SHAPED_PATHS = frozenset({"/api/payment-provider/create-order"})


def _format_validation_error(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    message = error.get("msg", "invalid value")
    return f"{location}: {message}" if location else message


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Request validation failures answer 400 with one message per field."""
    errors = [_format_validation_error(e) for e in exc.errors()]
    logger.warning("Request validation failed", path=request.url.path, errors=errors)
    detail = "; ".join(errors)
    content = {"detail": detail, "errors": errors}
    if request.url.path in SUCCESS_SHAPED_PATHS:
        content.update(success=False, error=detail)
    return JSONResponse(status_code=400, content=content)


# Create FastAPI application
app = FastAPI(
    title="Storefront REST API",
    description="Multi-establishment storefront: catalog, orders and payments",
    version="0.1.0",
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)

register_middlewares(app)
configure_cors(app)


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(health_router)
app.include_router(catalog_router)
app.include_router(orders_router)
app.include_router(payments_router)
app.include_router(admin_router)


# =============================================================================
# Development entry point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "rest_api.main:app",
        host="0.0.0.0",
        port=settings.rest_api_port,
        reload=True,
    )
