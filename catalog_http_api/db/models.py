# catalog_http_api/db/models.py

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

import enum
from sqlalchemy import (
    DateTime,
    Enum as SQLEnum,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import (
    declarative_base,
    Mapped,
    mapped_column,
)

# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------

Base = declarative_base()


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Role(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"


# Stock below this threshold is reported as "low".
LOW_STOCK_THRESHOLD = 10

# Largest value an INTEGER column (and LIMIT/OFFSET) can hold.
MAX_ROW_ID = 2**63 - 1


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(Base):
    """
    A registered identity. ``email`` is the login name.

    Only the bcrypt hash of the password is stored.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    role: Mapped[Role] = mapped_column(
        SQLEnum(Role, name="user_role_enum"),
        nullable=False,
        default=Role.USER,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<User id={self.id!r} email={self.email!r} role={self.role.value!r}>"


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


class Product(Base):
    """
    A catalog item.

    Timestamps are assigned by the catalog service on every mutation; there
    are no ORM-side defaults for them.
    """

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    stock_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    @property
    def in_stock(self) -> bool:
        return self.stock_quantity > 0

    @property
    def low_stock(self) -> bool:
        return self.stock_quantity < LOW_STOCK_THRESHOLD

    def __repr__(self) -> str:
        return f"<Product id={self.id!r} name={self.name!r} stock={self.stock_quantity!r}>"
