"""CopyExecution ORM Model."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, BigIntPK


class CopyExecutionModel(Base):
    """ORM model для CopyExecution aggregate.

    Unique (leader_trade_id, relationship_id) - це і є claim: другий INSERT
    для тієї ж пари падає з IntegrityError.
    """

    __tablename__ = "copy_executions"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    relationship_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("copy_relationships.id"), nullable=False
    )
    leader_trade_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("leader_trades.id"), nullable=False
    )
    follower_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    leader_id: Mapped[int] = mapped_column(BigInteger, nullable=False)

    symbol: Mapped[str] = mapped_column(String(32), nullable=False)
    side: Mapped[str] = mapped_column(String(10), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    brokerage_order_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    executed_price: Mapped[Decimal | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    executed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __table_args__ = (
        UniqueConstraint(
            "leader_trade_id", "relationship_id", name="uq_copy_executions_trade_relationship"
        ),
        # Query: daily trade limit
        Index("ix_copy_executions_follower_status_created", "follower_id", "status", "created_at"),
        # Query: stale claim reaper
        Index("ix_copy_executions_status_updated", "status", "updated_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<CopyExecutionModel(id={self.id}, trade={self.leader_trade_id}, "
            f"relationship={self.relationship_id}, status={self.status})>"
        )
