"""Integration tests для SQLAlchemy repositories copy pipeline'а."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from copytrade.domain.copying.entities import CopyExecution, PositionSnapshot
from copytrade.domain.copying.exceptions import DuplicateRelationshipError
from copytrade.domain.copying.value_objects import (
    AllocationMethod,
    ConnectionStatus,
    ExecutionStatus,
    ExitReason,
    SkipReason,
    TradeSide,
    TraderRole,
)


class TestCopyExecutionClaim:
    """Tests для claim-first at-most-once."""

    async def test_second_claim_for_same_pair_is_rejected(self, seed, uow_factory):
        # Arrange
        leader = await seed.leader()
        follower = await seed.follower("alice", "alice-acc")
        relationship = await seed.relationship(follower, leader)
        trade = await seed.trade(leader)

        # Act
        async with uow_factory() as uow:
            first = await uow.executions.claim(CopyExecution.claim(trade, relationship))
            await uow.commit()
        async with uow_factory() as uow:
            second = await uow.executions.claim(CopyExecution.claim(trade, relationship))

        # Assert
        assert first is True
        assert second is False
        async with uow_factory() as uow:
            executions = await uow.executions.list_for_trade(trade.id)
        assert len(executions) == 1
        assert executions[0].status is ExecutionStatus.PENDING

    async def test_state_changes_are_persisted(self, seed, uow_factory):
        leader = await seed.leader()
        follower = await seed.follower("alice", "alice-acc")
        relationship = await seed.relationship(follower, leader)
        trade = await seed.trade(leader)

        async with uow_factory() as uow:
            execution = CopyExecution.claim(trade, relationship)
            await uow.executions.claim(execution)
            execution.mark_skipped(SkipReason.SIZE_TOO_SMALL)
            await uow.executions.save(execution)
            await uow.commit()

        async with uow_factory() as uow:
            stored = await uow.executions.get_for_pair(trade.id, relationship.id)
        assert stored.status is ExecutionStatus.SKIPPED
        assert stored.reason == "size_too_small"

    async def test_get_stale_returns_old_non_terminal(self, seed, uow_factory):
        leader = await seed.leader()
        follower = await seed.follower("alice", "alice-acc")
        relationship = await seed.relationship(follower, leader)
        old_trade = await seed.trade(leader, symbol="AAPL")
        fresh_trade = await seed.trade(leader, symbol="MSFT")

        async with uow_factory() as uow:
            old = CopyExecution.claim(old_trade, relationship)
            old.updated_at = datetime.now(timezone.utc) - timedelta(minutes=30)
            await uow.executions.claim(old)
            await uow.executions.claim(CopyExecution.claim(fresh_trade, relationship))
            await uow.commit()

        async with uow_factory() as uow:
            stale = await uow.executions.get_stale(
                datetime.now(timezone.utc) - timedelta(minutes=5)
            )

        assert [e.symbol for e in stale] == ["AAPL"]


class TestLeaderTradeRepository:
    async def test_get_unprocessed_oldest_first_with_limit(self, seed, uow_factory):
        leader = await seed.leader()
        first = await seed.trade(leader, symbol="AAPL")
        second = await seed.trade(leader, symbol="MSFT")
        await seed.trade(leader, symbol="TSLA")

        async with uow_factory() as uow:
            stored = await uow.leader_trades.get_by_id(first.id)
            stored.mark_processed()
            await uow.leader_trades.save(stored)
            await uow.commit()

        async with uow_factory() as uow:
            pending = await uow.leader_trades.get_unprocessed(limit=1)

        assert [t.id for t in pending] == [second.id]

    async def test_find_recent_duplicate(self, seed, uow_factory):
        leader = await seed.leader()
        trade = await seed.trade(leader, symbol="AAPL", quantity="10")
        since = datetime.now(timezone.utc) - timedelta(minutes=5)

        async with uow_factory() as uow:
            same = await uow.leader_trades.find_recent_duplicate(
                leader.id, "AAPL", TradeSide.BUY, Decimal("10"), since
            )
            other_side = await uow.leader_trades.find_recent_duplicate(
                leader.id, "AAPL", TradeSide.SELL, Decimal("10"), since
            )
            other_quantity = await uow.leader_trades.find_recent_duplicate(
                leader.id, "AAPL", TradeSide.BUY, Decimal("11"), since
            )

        assert same is not None and same.id == trade.id
        assert other_side is None
        assert other_quantity is None


class TestPositionSnapshotRepository:
    async def test_latest_snapshot_per_account(self, uow_factory):
        async with uow_factory() as uow:
            await uow.snapshots.append(
                PositionSnapshot.capture("acc-1", {"AAPL": Decimal("10")})
            )
            await uow.snapshots.append(
                PositionSnapshot.capture("acc-1", {"AAPL": Decimal("4"), "MSFT": Decimal("2.5")})
            )
            await uow.snapshots.append(PositionSnapshot.capture("acc-2", {"TSLA": Decimal("1")}))
            await uow.commit()

        async with uow_factory() as uow:
            latest = await uow.snapshots.get_latest("acc-1")
            missing = await uow.snapshots.get_latest("acc-3")

        assert latest.positions == {"AAPL": Decimal("4"), "MSFT": Decimal("2.5")}
        assert missing is None

    async def test_baseline_consumed_only_once(self, uow_factory):
        """Test: два snapshots від одного baseline → другий append повертає False."""
        async with uow_factory() as uow:
            baseline = PositionSnapshot.capture("acc-1", {"AAPL": Decimal("100")})
            await uow.snapshots.append(baseline)
            await uow.commit()

        async with uow_factory() as uow:
            first = await uow.snapshots.append(
                PositionSnapshot.capture("acc-1", {"AAPL": Decimal("150")}, previous=baseline)
            )
            await uow.commit()

        async with uow_factory() as uow:
            second = await uow.snapshots.append(
                PositionSnapshot.capture("acc-1", {"AAPL": Decimal("150")}, previous=baseline)
            )

        async with uow_factory() as uow:
            latest = await uow.snapshots.get_latest("acc-1")

        assert first is True
        assert second is False
        assert latest.previous_snapshot_id == baseline.id


class TestPositionCloseClaim:
    async def test_claim_is_exclusive_until_released(self, seed, uow_factory):
        """Test: другий claim_close → False; після release_close позицію знову можна claim'нути."""
        follower = await seed.follower("alice", "alice-acc")
        position = await seed.position(follower, "alice-acc", stop_loss="95")
        stale_before = datetime.now(timezone.utc) - timedelta(minutes=5)

        async with uow_factory() as uow:
            first = await uow.positions.claim_close(position.id, stale_before)
            await uow.commit()
        async with uow_factory() as uow:
            second = await uow.positions.claim_close(position.id, stale_before)
            await uow.positions.release_close(position.id)
            await uow.commit()
        async with uow_factory() as uow:
            third = await uow.positions.claim_close(position.id, stale_before)

        assert (first, second, third) == (True, False, True)

    async def test_closed_position_cannot_be_claimed(self, seed, uow_factory):
        follower = await seed.follower("alice", "alice-acc")
        position = await seed.position(follower, "alice-acc", stop_loss="95")
        position.close(ExitReason.STOP_LOSS, Decimal("94"))
        async with uow_factory() as uow:
            await uow.positions.save(position)
            await uow.commit()

        async with uow_factory() as uow:
            claimed = await uow.positions.claim_close(position.id, datetime.now(timezone.utc))

        assert claimed is False


class TestTraderRepositories:
    async def test_leaders_with_active_connections(self, seed, uow_factory):
        leader = await seed.leader("lead-1", "lead-1-acc")
        await seed.trader("lead-2", TraderRole.LEADER)  # без connection
        await seed.trader("lead-3", TraderRole.LEADER, "lead-3-acc", with_credentials=False)
        both = await seed.trader("hybrid", TraderRole.BOTH, "hybrid-acc")
        await seed.follower("alice", "alice-acc")

        async with uow_factory() as uow:
            leaders = await uow.traders.get_leaders_with_active_connections()

        assert [t.id for t in leaders] == [leader.id, both.id]

    async def test_disabled_connection_excluded(self, seed, uow_factory):
        leader = await seed.leader()

        async with uow_factory() as uow:
            connection = (await uow.connections.get_active_for_trader(leader.id))[0]
            connection.disable()
            await uow.connections.save(connection)
            await uow.commit()

        async with uow_factory() as uow:
            assert await uow.traders.get_leaders_with_active_connections() == []
            assert await uow.connections.get_active_for_trader(leader.id) == []
        assert connection.status is ConnectionStatus.DISABLED

    async def test_get_by_brokerage_user_id(self, seed, uow_factory):
        leader = await seed.leader("lead-1")

        async with uow_factory() as uow:
            found = await uow.traders.get_by_brokerage_user_id("snap-lead-1")

        assert found.id == leader.id
        assert found.is_leader is True


class TestCopyRelationshipRepository:
    async def test_duplicate_relationship_rejected(self, seed):
        leader = await seed.leader()
        follower = await seed.follower("alice", "alice-acc")
        await seed.relationship(follower, leader)

        with pytest.raises(DuplicateRelationshipError):
            await seed.relationship(follower, leader, value="5")

    async def test_stopped_relationships_not_active(self, seed, uow_factory):
        leader = await seed.leader()
        alice = await seed.follower("alice", "alice-acc")
        bob = await seed.follower("bob", "bob-acc")
        kept = await seed.relationship(alice, leader)
        stopped = await seed.relationship(bob, leader)

        async with uow_factory() as uow:
            stored = await uow.relationships.get_by_id(stopped.id)
            stored.stop()
            await uow.relationships.save(stored)
            await uow.commit()

        async with uow_factory() as uow:
            active = await uow.relationships.get_active_for_leader(leader.id)

        assert [r.id for r in active] == [kept.id]

    async def test_filters_and_limits_persisted(self, seed, uow_factory):
        leader = await seed.leader()
        follower = await seed.follower("alice", "alice-acc")
        relationship = await seed.relationship(
            follower,
            leader,
            method=AllocationMethod.MULTIPLIER,
            value="0.5",
            skip_penny_stocks=True,
            min_stock_price=Decimal("10"),
            max_stock_price=Decimal("500"),
            max_daily_volume=Decimal("25000"),
            max_position_concentration=Decimal("15"),
        )

        async with uow_factory() as uow:
            stored = await uow.relationships.get_by_id(relationship.id)

        assert stored.allocation_method is AllocationMethod.MULTIPLIER
        assert stored.skip_penny_stocks is True
        assert stored.min_stock_price == Decimal("10")
        assert stored.max_stock_price == Decimal("500")
        assert stored.max_daily_volume == Decimal("25000")
        assert stored.max_position_concentration == Decimal("15")
