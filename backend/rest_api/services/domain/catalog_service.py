"""
Catalog Domain Service.

Read-only queries over establishments, categories, products and offers.
Used by the public catalog routes and by order validation.
"""

from collections.abc import Iterable

from sqlalchemy import Select, case, func, or_, select
from sqlalchemy.orm import Session, selectinload

from shared.config.constants import Limits, ProductSort
from shared.config.logging import catalog_logger as logger
from shared.utils.exceptions import (
    EstablishmentNotFoundError,
    ProductNotFoundError,
    ValidationError,
)
from shared.utils.validators import escape_like_pattern, sanitize_search_term
from rest_api.models import Category, Establishment, Offer, Product, ProductSales
from rest_api.models.base import utcnow


class CatalogService:
    """Domain service for catalog reads."""

    def __init__(self, db: Session):
        self._db = db

    # =========================================================================
    # Establishments
    # =========================================================================

    def list_establishments(self) -> list[Establishment]:
        return list(
            self._db.scalars(
                select(Establishment)
                .where(Establishment.is_active.is_(True))
                .order_by(Establishment.id)
            ).all()
        )

    def get_establishment(self, establishment_id: int) -> Establishment:
        """Raises EstablishmentNotFoundError for unknown or inactive ids."""
        establishment = self._db.get(Establishment, establishment_id)
        if establishment is None or not establishment.is_active:
            raise EstablishmentNotFoundError(establishment_id)
        return establishment

    # =========================================================================
    # Categories
    # =========================================================================

    def list_categories(self, establishment_id: int) -> list[Category]:
        return list(
            self._db.scalars(
                select(Category)
                .where(Category.establishment_id == establishment_id)
                .order_by(Category.name)
            ).all()
        )

    def list_categories_with_products(
        self, establishment_id: int
    ) -> list[tuple[Category, list[Product]]]:
        """Categories of an establishment, each with its active products."""
        categories = self._db.scalars(
            select(Category)
            .where(Category.establishment_id == establishment_id)
            .options(selectinload(Category.products))
            .order_by(Category.name)
        ).all()
        return [
            (
                category,
                sorted(
                    (p for p in category.products if p.is_active),
                    key=lambda p: p.name,
                ),
            )
            for category in categories
        ]

    # =========================================================================
    # Products
    # =========================================================================

    def _active_products(self) -> Select:
        return (
            select(Product)
            .where(Product.is_active.is_(True))
            .options(selectinload(Product.category))
        )

    def list_products(self, establishment_id: int, sort_by: str | None = None) -> list[Product]:
        """
        Active products of an establishment.

        sort_by: one of ProductSort.ALL; absent means newest first.
        best_sellers treats products without a sales row as 0 sold.
        """
        query = self._active_products().where(Product.establishment_id == establishment_id)

        if sort_by is None or sort_by == "":
            query = query.order_by(Product.created_at.desc(), Product.id.desc())
        elif sort_by == ProductSort.PRICE_ASC:
            query = query.order_by(Product.price.asc(), Product.id)
        elif sort_by == ProductSort.PRICE_DESC:
            query = query.order_by(Product.price.desc(), Product.id)
        elif sort_by == ProductSort.NAME_ASC:
            query = query.order_by(Product.name.asc(), Product.id)
        elif sort_by == ProductSort.NAME_DESC:
            query = query.order_by(Product.name.desc(), Product.id)
        elif sort_by == ProductSort.BEST_SELLERS:
            query = query.outerjoin(
                ProductSales, ProductSales.product_id == Product.id
            ).order_by(func.coalesce(ProductSales.quantity_sold, 0).desc(), Product.id)
        elif sort_by == ProductSort.DISCOUNT:
            discount = case(
                (
                    Product.original_price > Product.price,
                    (Product.original_price - Product.price) / Product.original_price,
                ),
                else_=0,
            )
            query = query.order_by(discount.desc(), Product.id)
        else:
            raise ValidationError(
                f"Invalid sortBy '{sort_by}'. Expected one of: {', '.join(ProductSort.ALL)}",
                sort_by=sort_by,
            )

        return list(self._db.scalars(query).all())

    def list_featured_products(self, establishment_id: int) -> list[Product]:
        return list(
            self._db.scalars(
                self._active_products()
                .where(
                    Product.establishment_id == establishment_id,
                    Product.is_featured.is_(True),
                )
                .order_by(Product.name)
            ).all()
        )

    def list_products_by_category(self, category_id: int) -> list[Product]:
        return list(
            self._db.scalars(
                self._active_products()
                .where(Product.category_id == category_id)
                .order_by(Product.name)
            ).all()
        )

    def get_product(self, product_id: int) -> Product:
        product = self._db.scalar(
            select(Product)
            .where(Product.id == product_id)
            .options(selectinload(Product.category))
        )
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    def get_products_by_ids(self, product_ids: Iterable[int]) -> dict[int, Product]:
        ids = set(product_ids)
        if not ids:
            return {}
        products = self._db.scalars(select(Product).where(Product.id.in_(ids))).all()
        return {p.id: p for p in products}

    # =========================================================================
    # Search
    # =========================================================================

    @staticmethod
    def _like(term: str) -> str:
        return f"%{escape_like_pattern(term)}%"

    def search_products(self, establishment_id: int, q: str | None) -> list[Product]:
        """
        Case-insensitive substring search over product name, description
        and category name within one establishment.
        """
        term = sanitize_search_term(q)
        if not term:
            raise ValidationError("Search query is required")

        pattern = self._like(term)
        products = self._db.scalars(
            self._active_products()
            .join(Category, Category.id == Product.category_id)
            .where(
                Product.establishment_id == establishment_id,
                or_(
                    Product.name.ilike(pattern, escape="\\"),
                    Product.description.ilike(pattern, escape="\\"),
                    Category.name.ilike(pattern, escape="\\"),
                ),
            )
            .order_by(Product.name)
        ).all()

        logger.debug(
            "Product search",
            establishment_id=establishment_id,
            term_length=len(term),
            results=len(products),
        )
        return list(products)

    def global_search(self, q: str | None) -> tuple[list[Product], list[Category]]:
        """Products and categories across all establishments (capped)."""
        term = sanitize_search_term(q)
        if not term:
            return [], []

        pattern = self._like(term)
        products = self._db.scalars(
            self._active_products()
            .where(
                or_(
                    Product.name.ilike(pattern, escape="\\"),
                    Product.description.ilike(pattern, escape="\\"),
                )
            )
            .order_by(Product.name)
            .limit(Limits.MAX_SEARCH_RESULTS)
        ).all()
        categories = self._db.scalars(
            select(Category)
            .where(Category.name.ilike(pattern, escape="\\"))
            .order_by(Category.name)
            .limit(Limits.MAX_SEARCH_RESULTS)
        ).all()
        return list(products), list(categories)

    # =========================================================================
    # Offers
    # =========================================================================

    def list_offers(self, establishment_id: int) -> list[Offer]:
        return list(
            self._db.scalars(
                select(Offer)
                .where(Offer.establishment_id == establishment_id)
                .order_by(Offer.created_at.desc(), Offer.id.desc())
            ).all()
        )

    def list_active_offers(self, establishment_id: int) -> list[Offer]:
        """Active, unexpired offers with their product loaded."""
        return list(
            self._db.scalars(
                select(Offer)
                .where(
                    Offer.establishment_id == establishment_id,
                    Offer.is_active.is_(True),
                    or_(Offer.valid_until.is_(None), Offer.valid_until > utcnow()),
                )
                .options(selectinload(Offer.product).selectinload(Product.category))
                .order_by(Offer.discount_percentage.desc(), Offer.id)
            ).all()
        )
