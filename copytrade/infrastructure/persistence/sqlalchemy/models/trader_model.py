"""Trader та BrokerageConnection ORM models."""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, BigIntPK


class TraderModel(Base):
    __tablename__ = "traders"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    # Opaque credentials брокерського агрегатора; secret зашифрований Fernet
    brokerage_user_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True, unique=True
    )
    brokerage_user_secret: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<TraderModel(id={self.id}, role={self.role})>"


class BrokerageConnectionModel(Base):
    __tablename__ = "brokerage_connections"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    trader_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("traders.id"), nullable=False, index=True
    )
    account_id: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    brokerage_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_brokerage_connections_trader_status", "trader_id", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<BrokerageConnectionModel(id={self.id}, trader_id={self.trader_id}, "
            f"status={self.status})>"
        )
