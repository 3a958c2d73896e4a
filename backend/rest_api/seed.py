"""
Seed data for development and testing.
Creates the demo storefront: three establishments with categories,
products and offers, plus one admin user.
"""

from datetime import timedelta
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import AdminUser, Category, Establishment, Offer, Product
from rest_api.models.base import utcnow
from shared.config.constants import EstablishmentType
from shared.config.logging import get_logger
from shared.security.password import hash_password

logger = get_logger(__name__)


DEFAULT_ADMIN_USERNAME = "admin"
DEFAULT_ADMIN_EMAIL = "admin@storefront.local"
DEFAULT_ADMIN_PASSWORD = "admin123"

OFFER_VALIDITY_DAYS = 30

_IMG = "https://images.unsplash.com/{}?auto=format&fit=crop&w=400&h=300"

# establishment -> category -> products
CATALOG = [
    {
        "name": "Supermercado Central",
        "type": EstablishmentType.SUPERMARKET,
        "description": "Alimentação e produtos gerais",
        "icon": "shopping-cart",
        "categories": [
            {
                "name": "Frutas e Verduras", "icon": "carrot", "color": "green",
                "products": [
                    {"name": "Maçã Red Delicious", "description": "Maçã vermelha doce e crocante",
                     "price": "6.74", "original_price": "8.99", "unit": "kg", "stock": 50,
                     "image": "photo-1560806887-1e4cd0b6cbd6", "is_featured": True},
                    {"name": "Banana Nanica", "description": "Banana madura e doce",
                     "price": "4.50", "unit": "kg", "stock": 30,
                     "image": "photo-1571771894821-ce9b6c11b08e"},
                    {"name": "Tomate Italiano", "description": "Tomate fresco para molhos",
                     "price": "7.20", "unit": "kg", "stock": 40,
                     "image": "photo-1546094096-0df4bcaaa337"},
                ],
            },
            {
                "name": "Laticínios", "icon": "cheese", "color": "blue",
                "products": [
                    {"name": "Leite Integral", "description": "Leite integral 1L",
                     "price": "4.24", "original_price": "4.99", "unit": "unidade", "stock": 100,
                     "image": "photo-1563636619-e9143da7973b", "is_featured": True},
                    {"name": "Queijo Mussarela", "description": "Mussarela fatiada 200g",
                     "price": "12.90", "unit": "unidade", "stock": 25,
                     "image": "photo-1486297678162-eb2a19b0a32d"},
                ],
            },
            {"name": "Limpeza", "icon": "spray-can", "color": "purple", "products": []},
            {"name": "Bebê", "icon": "baby", "color": "pink", "products": []},
        ],
    },
    {
        "name": "Açougue Premium",
        "type": EstablishmentType.BUTCHER,
        "description": "Carnes e embutidos",
        "icon": "cut",
        "categories": [
            {
                "name": "Carnes", "icon": "drumstick-bite", "color": "red",
                "products": [
                    {"name": "Picanha Premium", "description": "Picanha bovina maturada",
                     "price": "45.90", "unit": "kg", "stock": 15,
                     "image": "photo-1603048297172-c92544798d5a", "is_featured": True},
                    {"name": "Alcatra", "description": "Alcatra bovina em bifes",
                     "price": "32.50", "unit": "kg", "stock": 20,
                     "image": "photo-1588168333986-5078d3ae3976"},
                ],
            },
            {
                "name": "Embutidos", "icon": "sausage", "color": "orange",
                "products": [
                    {"name": "Linguiça Toscana", "description": "Linguiça suína temperada",
                     "price": "18.90", "unit": "kg", "stock": 30,
                     "image": "photo-1601628828688-632f38a5a7d0"},
                ],
            },
        ],
    },
    {
        "name": "Padaria Artesanal",
        "type": EstablishmentType.BAKERY,
        "description": "Pães e doces",
        "icon": "bread-slice",
        "categories": [
            {
                "name": "Pães", "icon": "bread-slice", "color": "yellow",
                "products": [
                    {"name": "Pão Francês", "description": "Pão francês crocante",
                     "price": "12.50", "unit": "kg", "stock": 60,
                     "image": "photo-1509440159596-0249088772ff", "is_featured": True},
                    {"name": "Pão Integral", "description": "Pão integral com grãos",
                     "price": "8.90", "unit": "unidade", "stock": 20,
                     "image": "photo-1598373182133-52452f7691ef"},
                ],
            },
            {
                "name": "Doces", "icon": "cake", "color": "pink",
                "products": [
                    {"name": "Bolo de Chocolate", "description": "Bolo de chocolate com cobertura",
                     "price": "25.00", "unit": "unidade", "stock": 10,
                     "image": "photo-1578985545062-69928b1d9587"},
                ],
            },
        ],
    },
]

# product name -> (title, description, discount)
OFFERS = {
    "Maçã Red Delicious": ("25% OFF em Maçãs", "Maçãs Red Delicious com desconto", 25),
    "Leite Integral": ("15% OFF em Leite", "Leite integral com desconto", 15),
}


def seed_catalog(db: Session) -> dict[str, Product]:
    """Insert establishments, categories and products. Returns products by name."""
    products: dict[str, Product] = {}

    for est_data in CATALOG:
        establishment = Establishment(
            name=est_data["name"],
            type=est_data["type"],
            description=est_data["description"],
            icon=est_data["icon"],
            is_active=True,
        )
        db.add(establishment)
        db.flush()

        for cat_data in est_data["categories"]:
            category = Category(
                name=cat_data["name"],
                icon=cat_data["icon"],
                color=cat_data["color"],
                establishment_id=establishment.id,
            )
            db.add(category)
            db.flush()

            for p in cat_data["products"]:
                product = Product(
                    name=p["name"],
                    description=p["description"],
                    price=Decimal(p["price"]),
                    original_price=Decimal(p["original_price"]) if p.get("original_price") else None,
                    unit=p["unit"],
                    stock=p["stock"],
                    image_url=_IMG.format(p["image"]),
                    is_active=True,
                    is_featured=p.get("is_featured", False),
                    category_id=category.id,
                    establishment_id=establishment.id,
                )
                db.add(product)
                products[product.name] = product

    db.flush()
    return products


def seed_offers(db: Session, products: dict[str, Product]) -> None:
    valid_until = utcnow() + timedelta(days=OFFER_VALIDITY_DAYS)
    for product_name, (title, description, discount) in OFFERS.items():
        product = products[product_name]
        db.add(
            Offer(
                title=title,
                description=description,
                discount_percentage=discount,
                product_id=product.id,
                establishment_id=product.establishment_id,
                is_active=True,
                valid_until=valid_until,
            )
        )


def seed_admin(db: Session) -> None:
    if db.scalar(select(AdminUser.id).where(AdminUser.username == DEFAULT_ADMIN_USERNAME)):
        return
    db.add(
        AdminUser(
            username=DEFAULT_ADMIN_USERNAME,
            email=DEFAULT_ADMIN_EMAIL,
            password=hash_password(DEFAULT_ADMIN_PASSWORD),
            is_active=True,
        )
    )


def seed(db: Session) -> None:
    """
    Seed the demo storefront.
    Idempotent: does nothing when establishments already exist.
    """
    if db.scalar(select(Establishment.id).limit(1)):
        logger.info("Database already seeded, skipping")
        return

    logger.info("Seeding demo storefront")
    products = seed_catalog(db)
    seed_offers(db, products)
    seed_admin(db)
    db.commit()
    logger.info(
        "Seed completed",
        establishments=len(CATALOG),
        products=len(products),
        offers=len(OFFERS),
    )
