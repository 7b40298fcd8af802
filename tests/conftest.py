"""Pytest configuration and fixtures."""

from decimal import Decimal
from itertools import count
from typing import Optional

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from copytrade.config import Settings
from copytrade.domain.brokerage.exceptions import (
    BrokerageConnectionError,
    SymbolNotFoundError,
    TradeImpactRejectedError,
)
from copytrade.domain.brokerage.ports import BrokeragePort
from copytrade.domain.brokerage.value_objects import (
    AccountBalance,
    BrokerageCredentials,
    ImpactResult,
    OrderResult,
    OrderStatus,
    RawPosition,
    SymbolMatch,
)
from copytrade.domain.copying.entities import (
    BrokerageConnection,
    CopyRelationship,
    LeaderTrade,
    Position,
    Trader,
)
from copytrade.domain.copying.value_objects import (
    AllocationMethod,
    TradeSide,
    TradeSource,
    TraderRole,
)
from copytrade.infrastructure.encryption import CredentialResolver
from copytrade.infrastructure.persistence.sqlalchemy import Base, SQLAlchemyUnitOfWork
from copytrade.presentation.container import PipelineContainer


class FakeBrokerage(BrokeragePort):
    """In-memory brokerage для tests.

    Тримає holdings по рахунках і оновлює їх при кожному виконаному
    ордері, як справжній брокер.
    """

    def __init__(self) -> None:
        self.holdings: dict[str, dict[str, Decimal]] = {}
        self.prices: dict[str, Decimal] = {}
        self.cash: dict[str, Decimal] = {}
        self.failing_accounts: set[str] = set()
        self.rejecting_accounts: set[str] = set()
        self.unknown_symbols: set[str] = set()
        self.orders: list[dict] = []
        self.calls: list[tuple[str, str]] = []
        self.closed = False
        self._impacts: dict[str, dict] = {}
        self._ids = count(1)

    # ==================== Test setup helpers ====================

    def set_holdings(self, account_id: str, **quantities) -> None:
        self.holdings[account_id] = {s: Decimal(str(q)) for s, q in quantities.items()}

    def set_price(self, symbol: str, price) -> None:
        self.prices[symbol] = Decimal(str(price))

    def set_cash(self, account_id: str, amount) -> None:
        self.cash[account_id] = Decimal(str(amount))

    def orders_for(self, account_id: str) -> list[dict]:
        return [o for o in self.orders if o["account_id"] == account_id]

    # ==================== BrokeragePort ====================

    def _check(self, operation: str, account_id: str) -> None:
        self.calls.append((operation, account_id))
        if account_id in self.failing_accounts:
            raise BrokerageConnectionError("Brokerage unreachable", account_id=account_id)

    async def get_account_positions(
        self, credentials: BrokerageCredentials, account_id: str
    ) -> list[RawPosition]:
        self._check("get_account_positions", account_id)
        return [
            RawPosition(symbol=symbol, units=quantity, price=self.prices.get(symbol))
            for symbol, quantity in self.holdings.get(account_id, {}).items()
        ]

    async def get_account_balance(
        self, credentials: BrokerageCredentials, account_id: str
    ) -> AccountBalance:
        self._check("get_account_balance", account_id)
        cash = self.cash.get(account_id, Decimal("0"))
        market_value = sum(
            (q * self.prices.get(s, Decimal("0")) for s, q in self.holdings.get(account_id, {}).items()),
            Decimal("0"),
        )
        return AccountBalance(total_value=cash + market_value, cash=cash)

    async def search_symbol(
        self, credentials: BrokerageCredentials, account_id: str, symbol: str
    ) -> SymbolMatch:
        self._check("search_symbol", account_id)
        if symbol in self.unknown_symbols:
            raise SymbolNotFoundError(f"Symbol '{symbol}' not found", symbol=symbol)
        return SymbolMatch(symbol=symbol, universal_symbol_id=f"uid-{symbol}")

    async def get_quote(
        self, credentials: BrokerageCredentials, account_id: str, symbol: str
    ) -> Optional[Decimal]:
        self._check("get_quote", account_id)
        return self.prices.get(symbol)

    async def check_trade_impact(
        self,
        credentials: BrokerageCredentials,
        account_id: str,
        action: str,
        universal_symbol_id: str,
        order_type: str,
        quantity: Decimal,
        price: Optional[Decimal] = None,
    ) -> ImpactResult:
        self._check("check_trade_impact", account_id)
        if account_id in self.rejecting_accounts:
            raise TradeImpactRejectedError("Insufficient buying power", account_id=account_id)
        symbol = universal_symbol_id.removeprefix("uid-")
        trade_id = f"impact-{next(self._ids)}"
        self._impacts[trade_id] = {
            "account_id": account_id,
            "action": action,
            "symbol": symbol,
            "quantity": quantity,
            "order_type": order_type,
        }
        return ImpactResult(trade_id=trade_id, estimated_price=self.prices.get(symbol))

    async def place_order(
        self,
        credentials: BrokerageCredentials,
        trade_id: str,
        wait_to_confirm: bool = True,
    ) -> OrderResult:
        impact = self._impacts.pop(trade_id)
        self._check("place_order", impact["account_id"])
        symbol = impact["symbol"]
        price = self.prices.get(symbol, Decimal("1"))

        held = self.holdings.setdefault(impact["account_id"], {})
        delta = impact["quantity"] if impact["action"] == "BUY" else -impact["quantity"]
        held[symbol] = held.get(symbol, Decimal("0")) + delta
        if held[symbol] == 0:
            del held[symbol]

        order = {**impact, "order_id": f"ORD-{len(self.orders) + 1}", "price": price}
        self.orders.append(order)
        return OrderResult(
            order_id=order["order_id"],
            status=OrderStatus.EXECUTED,
            executed_price=price,
            filled_quantity=impact["quantity"],
        )

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_brokerage() -> FakeBrokerage:
    return FakeBrokerage()


@pytest.fixture
def credentials() -> BrokerageCredentials:
    return BrokerageCredentials(user_id="snap-user-1", user_secret="secret-1")


# ==================== Database fixtures ====================


@pytest.fixture
async def engine(tmp_path):
    """Create async SQLite engine for testing.

    Файлова БД (не :memory:): кожен UoW відкриває власне з'єднання, як
    паралельні workers у production.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'copytrade.db'}",
        echo=False,  # Set to True для debug
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def session_factory(engine):
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,  # Важливо для testing
    )


@pytest.fixture
def uow_factory(session_factory):
    return lambda: SQLAlchemyUnitOfWork(session_factory)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        environment="development",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'copytrade.db'}",
        cron_secret="cron-secret",
        webhook_secret="webhook-secret",
        brokerage_call_timeout_seconds=5,
        execution_stale_after_seconds=300,
        webhook_dedup_window_seconds=300,
    )


@pytest.fixture
def container(settings, engine, session_factory, fake_brokerage) -> PipelineContainer:
    return PipelineContainer(
        settings=settings,
        session_factory=session_factory,
        brokerage=fake_brokerage,
        credential_resolver=CredentialResolver(None),
        engine=engine,
    )


class Seeder:
    """Creates traders, connections, relationships та угоди через repositories.

    Secrets зберігаються plaintext (legacy шлях CredentialResolver без ключа).
    """

    def __init__(self, uow_factory, brokerage) -> None:
        self._uow_factory = uow_factory
        self._brokerage = brokerage

    async def trader(
        self,
        name: str,
        role: TraderRole,
        account_id: Optional[str] = None,
        with_credentials: bool = True,
    ) -> Trader:
        trader = Trader(
            display_name=name,
            role=role,
            brokerage_user_id=f"snap-{name}" if with_credentials else None,
            brokerage_user_secret=f"secret-{name}" if with_credentials else None,
        )
        async with self._uow_factory() as uow:
            await uow.traders.save(trader)
            if account_id is not None:
                await uow.connections.save(
                    BrokerageConnection(trader_id=trader.id, account_id=account_id)
                )
            await uow.commit()
        return trader

    async def leader(self, name: str = "leader", account_id: str = "leader-acc") -> Trader:
        return await self.trader(name, TraderRole.LEADER, account_id)

    async def follower(
        self, name: str, account_id: Optional[str] = None, cash="20000", **kwargs
    ) -> Trader:
        if account_id is not None:
            self._brokerage.set_cash(account_id, cash)
        return await self.trader(name, TraderRole.FOLLOWER, account_id, **kwargs)

    async def relationship(
        self,
        follower: Trader,
        leader: Trader,
        method: AllocationMethod = AllocationMethod.FIXED_PERCENT,
        value: str = "10",
        **options,
    ) -> CopyRelationship:
        relationship = CopyRelationship.create(
            follower_id=follower.id,
            leader_id=leader.id,
            allocation_method=method,
            allocation_value=Decimal(value),
            **options,
        )
        async with self._uow_factory() as uow:
            await uow.relationships.add(relationship)
            await uow.commit()
        return relationship

    async def trade(
        self,
        leader: Trader,
        symbol: str = "AAPL",
        side: TradeSide = TradeSide.BUY,
        quantity: str = "10",
        price: Optional[str] = "50",
        account_id: str = "leader-acc",
        is_exit: bool = False,
    ) -> LeaderTrade:
        trade = LeaderTrade(
            leader_id=leader.id,
            account_id=account_id,
            symbol=symbol,
            side=side,
            quantity=Decimal(quantity),
            price=Decimal(price) if price is not None else None,
            is_exit=is_exit,
            source=TradeSource.POLL,
        )
        async with self._uow_factory() as uow:
            await uow.leader_trades.add(trade)
            await uow.commit()
        return trade

    async def position(
        self,
        owner: Trader,
        account_id: str,
        symbol: str = "AAPL",
        quantity: str = "10",
        entry_price: str = "100",
        current_price: Optional[str] = None,
        stop_loss: Optional[str] = None,
        take_profit: Optional[str] = None,
    ) -> Position:
        position = Position.open(
            owner_id=owner.id,
            account_id=account_id,
            symbol=symbol,
            quantity=Decimal(quantity),
            entry_price=Decimal(entry_price),
            stop_loss=Decimal(stop_loss) if stop_loss else None,
            take_profit=Decimal(take_profit) if take_profit else None,
        )
        if current_price is not None:
            position.current_price = Decimal(current_price)
        async with self._uow_factory() as uow:
            await uow.positions.save(position)
            await uow.commit()
        return position


@pytest.fixture
def seed(uow_factory, fake_brokerage) -> Seeder:
    return Seeder(uow_factory, fake_brokerage)
