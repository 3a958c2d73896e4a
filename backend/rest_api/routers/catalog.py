"""
Public catalog router.
Exposes establishments, categories, products and offers to the storefront.
No authentication required.
"""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.security.rate_limit import limiter
from shared.utils.schemas import (
    ActiveOfferOutput,
    CategoryOutput,
    CategoryWithProductsOutput,
    EstablishmentOutput,
    OfferOutput,
    ProductOutput,
    SearchOutput,
)
from rest_api.services.domain import CatalogService


router = APIRouter(prefix="/api", tags=["catalog"])


# =============================================================================
# Establishments
# =============================================================================


@router.get("/establishments", response_model=list[EstablishmentOutput])
def list_establishments(db: Session = Depends(get_db)):
    return CatalogService(db).list_establishments()


@router.get("/establishments/{establishment_id}", response_model=EstablishmentOutput)
def get_establishment(establishment_id: int, db: Session = Depends(get_db)):
    return CatalogService(db).get_establishment(establishment_id)


# =============================================================================
# Categories
# =============================================================================


@router.get(
    "/establishments/{establishment_id}/categories",
    response_model=list[CategoryOutput],
)
def list_categories(establishment_id: int, db: Session = Depends(get_db)):
    service = CatalogService(db)
    service.get_establishment(establishment_id)
    return service.list_categories(establishment_id)


@router.get(
    "/establishments/{establishment_id}/categories-with-products",
    response_model=list[CategoryWithProductsOutput],
)
def list_categories_with_products(establishment_id: int, db: Session = Depends(get_db)):
    """Categories of an establishment, each with its active products sorted by name."""
    service = CatalogService(db)
    service.get_establishment(establishment_id)
    return [
        CategoryWithProductsOutput(
            **CategoryOutput.model_validate(category).model_dump(),
            products=[ProductOutput.model_validate(p) for p in products],
        )
        for category, products in service.list_categories_with_products(establishment_id)
    ]


@router.get("/categories/{category_id}/products", response_model=list[ProductOutput])
def list_products_by_category(category_id: int, db: Session = Depends(get_db)):
    return CatalogService(db).list_products_by_category(category_id)


# =============================================================================
# Products
# =============================================================================


@router.get(
    "/establishments/{establishment_id}/products",
    response_model=list[ProductOutput],
)
def list_products(
    establishment_id: int,
    sort_by: str | None = Query(default=None, alias="sortBy"),
    db: Session = Depends(get_db),
):
    """
    Active products of an establishment.

    ``sortBy``: price_asc, price_desc, name_asc, name_desc, best_sellers
    or discount. Newest first when absent.
    """
    service = CatalogService(db)
    service.get_establishment(establishment_id)
    return service.list_products(establishment_id, sort_by)


@router.get(
    "/establishments/{establishment_id}/featured-products",
    response_model=list[ProductOutput],
)
def list_featured_products(establishment_id: int, db: Session = Depends(get_db)):
    service = CatalogService(db)
    service.get_establishment(establishment_id)
    return service.list_featured_products(establishment_id)


@router.get(
    "/establishments/{establishment_id}/products/search",
    response_model=list[ProductOutput],
)
@limiter.limit("60/minute")
def search_products(
    request: Request,
    establishment_id: int,
    q: str | None = None,
    db: Session = Depends(get_db),
):
    """Case-insensitive match over product name, description and category name."""
    service = CatalogService(db)
    service.get_establishment(establishment_id)
    return service.search_products(establishment_id, q)


@router.get("/products/{product_id}", response_model=ProductOutput)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return CatalogService(db).get_product(product_id)


@router.get("/search", response_model=SearchOutput)
@limiter.limit("60/minute")
def global_search(request: Request, q: str | None = None, db: Session = Depends(get_db)):
    products, categories = CatalogService(db).global_search(q)
    return SearchOutput(
        products=[ProductOutput.model_validate(p) for p in products],
        categories=[CategoryOutput.model_validate(c) for c in categories],
    )


# =============================================================================
# Offers
# =============================================================================


@router.get(
    "/establishments/{establishment_id}/offers",
    response_model=list[OfferOutput],
)
def list_offers(establishment_id: int, db: Session = Depends(get_db)):
    service = CatalogService(db)
    service.get_establishment(establishment_id)
    return service.list_offers(establishment_id)


@router.get(
    "/establishments/{establishment_id}/active-offers",
    response_model=list[ActiveOfferOutput],
)
def list_active_offers(establishment_id: int, db: Session = Depends(get_db)):
    service = CatalogService(db)
    service.get_establishment(establishment_id)
    return service.list_active_offers(establishment_id)
