"""Integration tests для Trade Detector (PollLeadersHandler + TradeDetector)."""

from decimal import Decimal

from copytrade.application.detection import PollLeadersCommand
from copytrade.domain.copying.value_objects import TradeSide, TradeSource
from copytrade.infrastructure.persistence.sqlalchemy.repositories import (
    SQLAlchemyPositionSnapshotRepository,
)


class TestPollLeaders:
    """Tests для snapshot polling."""

    async def test_first_poll_records_baseline_only(self, container, seed, fake_brokerage, uow_factory):
        """Test: вже відкриті позиції лідера не стають угодами."""
        # Arrange
        await seed.leader()
        fake_brokerage.set_holdings("leader-acc", AAPL=100)

        # Act
        summary = await container.poll_leaders_handler().handle(PollLeadersCommand())

        # Assert
        assert summary.leaders_polled == 1
        assert summary.accounts_polled == 1
        assert summary.trades_detected == 0
        async with uow_factory() as uow:
            snapshot = await uow.snapshots.get_latest("leader-acc")
            assert await uow.leader_trades.get_unprocessed() == []
        assert snapshot.positions == {"AAPL": Decimal("100")}

    async def test_second_poll_detects_changes(self, container, seed, fake_brokerage, uow_factory):
        # Arrange
        leader = await seed.leader()
        fake_brokerage.set_holdings("leader-acc", AAPL=100, MSFT=5)
        fake_brokerage.set_price("NVDA", "120.50")
        handler = container.poll_leaders_handler()
        await handler.handle(PollLeadersCommand())

        # Act: AAPL продано повністю, NVDA куплено, MSFT без змін
        fake_brokerage.set_holdings("leader-acc", MSFT=5, NVDA=3)
        summary = await handler.handle(PollLeadersCommand())

        # Assert
        assert summary.trades_detected == 2
        async with uow_factory() as uow:
            trades = await uow.leader_trades.get_unprocessed()
        by_symbol = {t.symbol: t for t in trades}
        assert set(by_symbol) == {"AAPL", "NVDA"}

        sell = by_symbol["AAPL"]
        assert sell.side is TradeSide.SELL
        assert sell.quantity == Decimal("100")
        assert sell.is_exit is True
        assert sell.leader_id == leader.id
        assert sell.source is TradeSource.POLL

        buy = by_symbol["NVDA"]
        assert buy.side is TradeSide.BUY
        assert buy.quantity == Decimal("3")
        assert buy.price == Decimal("120.50")

    async def test_unchanged_positions_detect_nothing(self, container, seed, fake_brokerage):
        await seed.leader()
        fake_brokerage.set_holdings("leader-acc", AAPL=100)
        handler = container.poll_leaders_handler()
        await handler.handle(PollLeadersCommand())

        summary = await handler.handle(PollLeadersCommand())

        assert summary.trades_detected == 0
        assert summary.failed_accounts == 0

    async def test_failing_account_does_not_stop_others(self, container, seed, fake_brokerage, uow_factory):
        """Test: брокер недоступний для одного рахунку → failed_accounts, snapshot не пишеться."""
        await seed.leader("lead-1", "acc-1")
        await seed.leader("lead-2", "acc-2")
        fake_brokerage.failing_accounts.add("acc-1")
        fake_brokerage.set_holdings("acc-2", AAPL=1)

        summary = await container.poll_leaders_handler().handle(PollLeadersCommand())

        assert summary.accounts_polled == 2
        assert summary.failed_accounts == 1
        async with uow_factory() as uow:
            assert await uow.snapshots.get_latest("acc-1") is None
            assert await uow.snapshots.get_latest("acc-2") is not None

    async def test_poll_single_leader(self, container, seed, fake_brokerage):
        await seed.leader("lead-1", "acc-1")
        second = await seed.leader("lead-2", "acc-2")

        summary = await container.poll_leaders_handler().handle(
            PollLeadersCommand(leader_id=second.id)
        )

        assert summary.leaders_polled == 1
        assert ("get_account_positions", "acc-1") not in fake_brokerage.calls

    async def test_overlapping_poll_records_change_once(
        self, container, seed, fake_brokerage, uow_factory, monkeypatch
    ):
        """Test: overlapping poll прочитав той самий baseline → друга LeaderTrade не пишеться."""
        # Arrange
        await seed.leader()
        fake_brokerage.set_holdings("leader-acc", AAPL=100)
        await container.poll_leaders_handler().handle(PollLeadersCommand())
        async with uow_factory() as uow:
            baseline = await uow.snapshots.get_latest("leader-acc")
        fake_brokerage.set_holdings("leader-acc", AAPL=150)

        first = await container.poll_leaders_handler().handle(PollLeadersCommand())

        async def stale_latest(self, account_id):
            return baseline

        monkeypatch.setattr(SQLAlchemyPositionSnapshotRepository, "get_latest", stale_latest)

        # Act
        second = await container.poll_leaders_handler().handle(PollLeadersCommand())

        # Assert
        assert first.trades_detected == 1
        assert second.trades_detected == 0
        assert second.failed_accounts == 0
        async with uow_factory() as uow:
            trades = await uow.leader_trades.get_unprocessed()
        assert [(t.symbol, t.side, t.quantity) for t in trades] == [
            ("AAPL", TradeSide.BUY, Decimal("50"))
        ]
