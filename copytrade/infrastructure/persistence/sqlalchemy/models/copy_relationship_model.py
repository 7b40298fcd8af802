"""CopyRelationship ORM Model."""

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


class CopyRelationshipModel(Base):
    """ORM model для CopyRelationship aggregate.

    Business logic в domain.copying.entities.CopyRelationship.
    """

    __tablename__ = "copy_relationships"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    follower_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("traders.id"), nullable=False
    )
    leader_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("traders.id"), nullable=False
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False)

    # Sizing
    allocation_method: Mapped[str] = mapped_column(String(20), nullable=False)
    allocation_value: Mapped[Decimal] = mapped_column(nullable=False)
    max_position_size: Mapped[Decimal | None] = mapped_column(nullable=True)
    max_risk_per_trade: Mapped[Decimal | None] = mapped_column(nullable=True)

    # Filters & limits
    allowed_asset_classes: Mapped[list | None] = mapped_column(JSON, nullable=True)
    stop_copying_threshold: Mapped[Decimal | None] = mapped_column(nullable=True)
    max_open_positions: Mapped[int | None] = mapped_column(Integer, nullable=True)
    max_daily_trades: Mapped[int | None] = mapped_column(Integer, nullable=True)
    max_daily_volume: Mapped[Decimal | None] = mapped_column(nullable=True)
    max_position_concentration: Mapped[Decimal | None] = mapped_column(nullable=True)
    skip_penny_stocks: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    min_stock_price: Mapped[Decimal | None] = mapped_column(nullable=True)
    max_stock_price: Mapped[Decimal | None] = mapped_column(nullable=True)

    # Protective levels
    copy_stop_loss: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    copy_take_profit: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    custom_stop_loss_percent: Mapped[Decimal | None] = mapped_column(nullable=True)
    custom_take_profit_percent: Mapped[Decimal | None] = mapped_column(nullable=True)
    trailing_stop: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    total_trades_copied: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    stopped_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __table_args__ = (
        UniqueConstraint("follower_id", "leader_id", name="uq_copy_relationships_pair"),
        Index("ix_copy_relationships_leader_status", "leader_id", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<CopyRelationshipModel(id={self.id}, follower_id={self.follower_id}, "
            f"leader_id={self.leader_id}, status={self.status})>"
        )
