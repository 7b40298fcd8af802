"""SQLAlchemy Base model."""

from decimal import Decimal

from sqlalchemy import BigInteger, Integer, Numeric
from sqlalchemy.orm import DeclarativeBase

# SQLite autoincrement працює тільки з INTEGER PRIMARY KEY
BigIntPK = BigInteger().with_variant(Integer, "sqlite")

Amount = Numeric(precision=20, scale=8, asdecimal=True)


class Base(DeclarativeBase):
    """Base class для всіх ORM models.

    Використовується для declarative mapping в SQLAlchemy 2.0+.
    """

    type_annotation_map = {Decimal: Amount}
