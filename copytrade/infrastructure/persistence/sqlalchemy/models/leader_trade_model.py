"""LeaderTrade та PositionSnapshot ORM models."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, BigIntPK


class LeaderTradeModel(Base):
    """ORM model для LeaderTrade aggregate (append-only)."""

    __tablename__ = "leader_trades"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    leader_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("traders.id"), nullable=False, index=True
    )
    account_id: Mapped[str] = mapped_column(String(255), nullable=False)

    symbol: Mapped[str] = mapped_column(String(32), nullable=False)
    side: Mapped[str] = mapped_column(String(10), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(nullable=False)
    price: Mapped[Decimal | None] = mapped_column(nullable=True)
    order_type: Mapped[str] = mapped_column(String(20), nullable=False, default="market")
    asset_class: Mapped[str] = mapped_column(String(20), nullable=False, default="stock")
    source: Mapped[str] = mapped_column(String(20), nullable=False)
    brokerage_order_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_exit: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # SL/TP лідера, якщо брокер їх віддає
    stop_loss_price: Mapped[Decimal | None] = mapped_column(nullable=True)
    take_profit_price: Mapped[Decimal | None] = mapped_column(nullable=True)

    detected_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    executed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    processed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __table_args__ = (
        # Query: pending trades for the copy engine
        Index("ix_leader_trades_processed_detected", "processed", "detected_at"),
        # Query: webhook dedup window
        Index("ix_leader_trades_dedup", "leader_id", "symbol", "side", "detected_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<LeaderTradeModel(id={self.id}, leader_id={self.leader_id}, "
            f"symbol={self.symbol}, side={self.side}, processed={self.processed})>"
        )


class PositionSnapshotModel(Base):
    """ORM model для PositionSnapshot.

    ``positions`` - JSON {symbol: quantity string}, Decimal не втрачає точність.
    """

    __tablename__ = "position_snapshots"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    account_id: Mapped[str] = mapped_column(String(255), nullable=False)
    positions: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    captured_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    previous_snapshot_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    __table_args__ = (
        Index("ix_position_snapshots_account_captured", "account_id", "captured_at"),
        # Один baseline → один наступний snapshot
        UniqueConstraint(
            "account_id", "previous_snapshot_id", name="uq_position_snapshots_account_previous"
        ),
    )

    def __repr__(self) -> str:
        return f"<PositionSnapshotModel(id={self.id}, account_id={self.account_id})>"
