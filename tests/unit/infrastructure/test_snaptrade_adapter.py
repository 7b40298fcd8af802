"""Contract tests для SnapTradeBrokerageAdapter.

HTTP підмінено httpx.MockTransport: перевіряємо парсинг wire-format та
мапінг помилок брокера на domain exceptions.
"""

import json
from decimal import Decimal

import httpx
import pytest

from copytrade.domain.brokerage.exceptions import (
    BrokerageConnectionError,
    CircuitBreakerOpenError,
    OrderRejectedError,
    RateLimitError,
    SymbolNotFoundError,
    TradeImpactRejectedError,
)
from copytrade.domain.brokerage.value_objects import BrokerageCredentials, OrderStatus
from copytrade.infrastructure.brokerage import (
    CircuitState,
    SnapTradeBrokerageAdapter,
    sign_request,
)


def make_adapter(handler, **kwargs) -> SnapTradeBrokerageAdapter:
    options = {
        "max_retries": 2,
        "retry_base_delay": 0,
        "retry_max_delay": 0,
    }
    options.update(kwargs)
    return SnapTradeBrokerageAdapter(
        client_id="client-1",
        consumer_key="consumer-key",
        base_url="https://brokerage.test",
        transport=httpx.MockTransport(handler),
        **options,
    )


class TestSnapTradeReads:
    """Tests для read-викликів."""

    async def test_positions_parse_nested_symbol(self, credentials):
        """Test: вкладений symbol.symbol.symbol розгортається в ticker."""
        # Arrange
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/v1/accounts/acc-1/positions"
            assert request.url.params["userId"] == "snap-user-1"
            assert request.url.params["clientId"] == "client-1"
            assert "Signature" in request.headers
            return httpx.Response(
                200,
                json=[
                    {"symbol": {"symbol": {"symbol": "aapl"}}, "units": "10", "price": 150},
                    {"symbol": "MSFT", "quantity": 3},
                ],
            )

        adapter = make_adapter(handler)

        # Act
        positions = await adapter.get_account_positions(credentials, "acc-1")

        # Assert
        assert positions[0].symbol == "AAPL"
        assert positions[0].units == Decimal("10")
        assert positions[0].price == Decimal("150")
        assert positions[1].symbol == "MSFT"
        assert positions[1].units is None
        assert positions[1].quantity == Decimal("3")
        await adapter.close()

    async def test_rate_limit_is_retried(self, credentials):
        """Test: 429 → retry → success."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if len(calls) == 1:
                return httpx.Response(429)
            return httpx.Response(200, json=[])

        adapter = make_adapter(handler)

        positions = await adapter.get_account_positions(credentials, "acc-1")

        assert positions == []
        assert len(calls) == 2
        await adapter.close()

    async def test_persistent_rate_limit_raises(self, credentials):
        adapter = make_adapter(lambda request: httpx.Response(429))

        with pytest.raises(RateLimitError):
            await adapter.get_account_positions(credentials, "acc-1")
        await adapter.close()

    async def test_balance_is_cash_plus_market_value(self, credentials):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/balances"):
                return httpx.Response(200, json=[{"cash": "1000", "currency": {"code": "USD"}}])
            return httpx.Response(
                200, json=[{"symbol": "AAPL", "units": "10", "price": "50"}]
            )

        adapter = make_adapter(handler)

        balance = await adapter.get_account_balance(credentials, "acc-1")

        assert balance.total_value == Decimal("1500")
        assert balance.cash == Decimal("1000")
        await adapter.close()

    async def test_search_symbol_prefers_exact_match(self, credentials):
        def handler(request: httpx.Request) -> httpx.Response:
            assert json.loads(request.content) == {"substring": "AAPL"}
            return httpx.Response(
                200,
                json=[
                    {"id": "uid-aapl-b", "symbol": "AAPL.B"},
                    {"id": "uid-aapl", "symbol": "AAPL", "description": "Apple"},
                ],
            )

        adapter = make_adapter(handler)

        match = await adapter.search_symbol(credentials, "acc-1", "AAPL")

        assert match.universal_symbol_id == "uid-aapl"
        assert match.description == "Apple"
        await adapter.close()

    async def test_search_symbol_empty_raises(self, credentials):
        adapter = make_adapter(lambda request: httpx.Response(200, json=[]))

        with pytest.raises(SymbolNotFoundError):
            await adapter.search_symbol(credentials, "acc-1", "ZZZZ")
        await adapter.close()

    async def test_quote_falls_back_to_ask(self, credentials):
        adapter = make_adapter(
            lambda request: httpx.Response(
                200, json=[{"symbol": "AAPL", "last_trade_price": None, "ask_price": "51.5"}]
            )
        )

        assert await adapter.get_quote(credentials, "acc-1", "AAPL") == Decimal("51.5")
        await adapter.close()


class TestSnapTradeTrading:
    """Tests для impact / place order (без retry)."""

    async def test_impact_rejection_maps_to_domain_error(self, credentials):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(400, json={"detail": "Insufficient buying power"})

        adapter = make_adapter(handler)

        with pytest.raises(TradeImpactRejectedError) as exc_info:
            await adapter.check_trade_impact(
                credentials, "acc-1", "BUY", "uid-aapl", "Market", Decimal("10")
            )

        assert "Insufficient buying power" in str(exc_info.value)
        assert len(calls) == 1
        await adapter.close()

    async def test_impact_parses_trade_reference(self, credentials):
        adapter = make_adapter(
            lambda request: httpx.Response(
                200,
                json={
                    "trade": {"id": "trade-123", "price": "50.10"},
                    "trade_impacts": [{"estimated_commission": "0.5", "remaining_cash": "900"}],
                },
            )
        )

        impact = await adapter.check_trade_impact(
            credentials, "acc-1", "BUY", "uid-aapl", "Market", Decimal("10")
        )

        assert impact.trade_id == "trade-123"
        assert impact.estimated_price == Decimal("50.10")
        assert impact.estimated_commission == Decimal("0.5")
        await adapter.close()

    async def test_place_order_executed(self, credentials):
        adapter = make_adapter(
            lambda request: httpx.Response(
                200,
                json={
                    "brokerage_order_id": "ORD-9",
                    "status": "EXECUTED",
                    "execution_price": "50.02",
                    "filled_quantity": "10",
                },
            )
        )

        order = await adapter.place_order(credentials, "trade-123")

        assert order.order_id == "ORD-9"
        assert order.status is OrderStatus.EXECUTED
        assert order.executed_price == Decimal("50.02")
        assert order.filled_quantity == Decimal("10")
        await adapter.close()

    async def test_place_order_rejected_status_raises(self, credentials):
        adapter = make_adapter(
            lambda request: httpx.Response(200, json={"id": "ORD-9", "status": "REJECTED"})
        )

        with pytest.raises(OrderRejectedError):
            await adapter.place_order(credentials, "trade-123")
        await adapter.close()

    async def test_place_order_is_not_retried(self, credentials):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(503)

        adapter = make_adapter(handler)

        with pytest.raises(BrokerageConnectionError):
            await adapter.place_order(credentials, "trade-123")

        assert len(calls) == 1
        await adapter.close()


class TestSnapTradeCircuit:
    async def test_circuit_opens_after_repeated_failures(self, credentials):
        adapter = make_adapter(
            lambda request: httpx.Response(500), max_retries=1, failure_threshold=2
        )

        with pytest.raises(BrokerageConnectionError):
            await adapter.get_account_positions(credentials, "acc-1")

        assert adapter.circuit_for("snap-user-1").state is CircuitState.OPEN
        with pytest.raises(CircuitBreakerOpenError):
            await adapter.get_account_positions(credentials, "acc-1")
        await adapter.close()

    async def test_failing_user_does_not_block_other_users(self):
        """Test: брокер одного follower'а падає → circuit відкритий тільки для нього."""
        # Arrange
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.params["userId"] == "bad":
                return httpx.Response(502)
            return httpx.Response(200, json=[{"symbol": "AAPL", "units": 5}])

        adapter = make_adapter(handler, max_retries=1, failure_threshold=2)
        bad = BrokerageCredentials(user_id="bad", user_secret="s-bad")
        good = BrokerageCredentials(user_id="good", user_secret="s-good")

        # Act
        with pytest.raises(BrokerageConnectionError):
            await adapter.get_account_positions(bad, "bad-acc")
        with pytest.raises(CircuitBreakerOpenError):
            await adapter.get_account_positions(bad, "bad-acc")
        positions = await adapter.get_account_positions(good, "good-acc")

        # Assert
        assert adapter.circuit_for("bad").state is CircuitState.OPEN
        assert adapter.circuit_for("good").state is CircuitState.CLOSED
        assert [p.symbol for p in positions] == ["AAPL"]
        await adapter.close()


class TestSignRequest:
    def test_signature_is_deterministic(self):
        first = sign_request("key", "/api/v1/trade/impact", "a=1", {"units": 1, "action": "BUY"})
        second = sign_request("key", "/api/v1/trade/impact", "a=1", {"action": "BUY", "units": 1})

        assert first == second

    def test_signature_depends_on_key(self):
        assert sign_request("k1", "/p", "", None) != sign_request("k2", "/p", "", None)
