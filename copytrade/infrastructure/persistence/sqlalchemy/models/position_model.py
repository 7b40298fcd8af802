"""Position ORM Model - SQLAlchemy mapping для Position aggregate."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import BigInteger, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, BigIntPK


class PositionModel(Base):
    """ORM model для Position aggregate.

    Це ТІЛЬКИ для персистенції - БЕЗ business logic!
    Business logic в domain.copying.entities.Position.
    """

    __tablename__ = "positions"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    owner_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("traders.id"), nullable=False
    )
    relationship_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("copy_relationships.id"), nullable=True, index=True
    )
    account_id: Mapped[str] = mapped_column(String(255), nullable=False)

    symbol: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(nullable=False)
    average_cost: Mapped[Decimal] = mapped_column(nullable=False)
    current_price: Mapped[Decimal | None] = mapped_column(nullable=True)

    # Platform-managed protective levels (не brokerage stop orders)
    stop_loss: Mapped[Decimal | None] = mapped_column(nullable=True)
    take_profit: Mapped[Decimal | None] = mapped_column(nullable=True)

    exit_reason: Mapped[str | None] = mapped_column(String(20), nullable=True)
    exit_price: Mapped[Decimal | None] = mapped_column(nullable=True)
    opened_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # Claim risk monitor'а: поки виставлений, SELL для позиції вже в дорозі
    close_claimed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __table_args__ = (
        # Query: owner's open position by symbol
        Index("ix_positions_owner_status_symbol", "owner_id", "status", "symbol"),
        # Query: risk monitor scan
        Index("ix_positions_status", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<PositionModel(id={self.id}, owner_id={self.owner_id}, "
            f"symbol={self.symbol}, status={self.status})>"
        )
