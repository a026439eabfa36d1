# catalog_http_api/db/seed.py

"""
Demo data for local development.

Inserts one ADMIN and one USER identity (each only if its email is not yet
registered) and ten sample products when the products table is empty.
Enabled with ``SEED_DEMO_DATA=true``.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy.orm import Session

from catalog_http_api.config import Settings
from catalog_http_api.logging import get_logger
from catalog_http_api.repositories.products import ProductsRepository
from catalog_http_api.repositories.users import UsersRepository
from catalog_http_api.security.passwords import PasswordHasher
from catalog_http_api.security.tokens import utcnow

from .models import Role

logger = get_logger(__name__)

# (name, description, price, category, stock_quantity)
DEMO_PRODUCTS = [
    ('MacBook Pro 16"', "Apple MacBook Pro with M2 Pro chip, 16GB RAM, 512GB SSD", "2499.99", "Electronics", 15),
    ("iPhone 15 Pro", "Apple iPhone 15 Pro with A17 Pro chip, 128GB storage", "999.99", "Electronics", 25),
    ("Sony WH-1000XM5", "Wireless noise-canceling headphones with 30-hour battery life", "349.99", "Electronics", 30),
    ("Nike Air Max 270", "Comfortable running shoes with Air Max technology", "129.99", "Sports", 50),
    ("Adidas Ultraboost 22", "Premium running shoes with Boost midsole technology", "179.99", "Sports", 35),
    ('Samsung 65" QLED TV', "4K QLED Smart TV with Quantum Dot technology", "1299.99", "Electronics", 10),
    ("Dell XPS 13", "13-inch laptop with Intel i7 processor, 16GB RAM", "1199.99", "Electronics", 20),
    ("Canon EOS R6", "Full-frame mirrorless camera with 20MP sensor", "2499.99", "Electronics", 8),
    ("Yoga Mat Premium", "Non-slip yoga mat with alignment lines", "49.99", "Sports", 100),
    ("Wireless Charger", "Fast wireless charging pad compatible with all devices", "29.99", "Electronics", 75),
]


def seed_demo_data(session: Session, settings: Settings, hasher: PasswordHasher) -> None:
    """
    Idempotent: running it twice leaves the database unchanged.

    The caller owns the transaction (see ``db_session``).
    """
    users = UsersRepository(session)
    products = ProductsRepository(session)
    now = utcnow()

    demo_users = [
        (settings.SEED_ADMIN_EMAIL, settings.SEED_ADMIN_PASSWORD, Role.ADMIN),
        (settings.SEED_USER_EMAIL, settings.SEED_USER_PASSWORD, Role.USER),
    ]
    for email, password, role in demo_users:
        if users.exists_by_email(email):
            continue
        users.create(
            email=email,
            password_hash=hasher.hash(password),
            role=role,
            created_at=now,
        )
        logger.info("demo_user_created", email=email, role=role.value)

    if products.count() == 0:
        for name, description, price, category, stock in DEMO_PRODUCTS:
            products.create(
                name=name,
                description=description,
                price=Decimal(price),
                category=category,
                stock_quantity=stock,
                created_at=now,
            )
        logger.info("demo_products_created", count=len(DEMO_PRODUCTS))


__all__ = ["DEMO_PRODUCTS", "seed_demo_data"]
