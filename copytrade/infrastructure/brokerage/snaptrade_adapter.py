"""SnapTrade Brokerage Adapter - implements BrokeragePort over REST.

httpx.AsyncClient + HMAC-SHA256 request signing. Read calls проходять через
retry та circuit breaker; trade impact і place order - тільки через circuit
breaker (без retry, щоб не подвоїти ордер).
"""

import base64
import hashlib
import hmac
import json
import logging
import time
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import httpx

from copytrade.config import Settings
from copytrade.domain.brokerage.exceptions import (
    BrokerageAPIError,
    BrokerageConnectionError,
    BrokerageError,
    BrokerageTimeoutError,
    OrderRejectedError,
    RateLimitError,
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

from .circuit_breaker import CircuitBreaker
from .retry import retry_with_backoff

logger = logging.getLogger(__name__)

_ORDER_STATUSES = {
    "EXECUTED": OrderStatus.EXECUTED,
    "FILLED": OrderStatus.EXECUTED,
    "PARTIAL": OrderStatus.PARTIAL,
    "ACCEPTED": OrderStatus.ACCEPTED,
    "PENDING": OrderStatus.PENDING,
    "REJECTED": OrderStatus.REJECTED,
    "CANCELED": OrderStatus.CANCELLED,
    "CANCELLED": OrderStatus.CANCELLED,
    "FAILED": OrderStatus.FAILED,
}


def _decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


def _ticker(symbol_field: Any) -> Optional[str]:
    """Extract ticker з plain string або вкладеного ``symbol.symbol...``."""
    while isinstance(symbol_field, dict):
        symbol_field = symbol_field.get("symbol") or symbol_field.get("raw_symbol")
    if isinstance(symbol_field, str) and symbol_field.strip():
        return symbol_field.strip().upper()
    return None


def sign_request(consumer_key: str, path: str, query: str, content: Any) -> str:
    """Compute the ``Signature`` header value.

    base64(HMAC-SHA256(consumer_key, canonical JSON of {content, path, query})).
    """
    payload = json.dumps(
        {"content": content, "path": path, "query": query},
        separators=(",", ":"),
        sort_keys=True,
    )
    digest = hmac.new(consumer_key.encode(), payload.encode(), hashlib.sha256).digest()
    return base64.b64encode(digest).decode()


class SnapTradeBrokerageAdapter(BrokeragePort):
    """SnapTrade adapter з retry logic та circuit breaker.

    Example:
        >>> adapter = SnapTradeBrokerageAdapter.from_settings(get_settings())
        >>> positions = await adapter.get_account_positions(creds, "acc-1")
        >>> await adapter.close()
    """

    def __init__(
        self,
        client_id: str,
        consumer_key: str,
        base_url: str = "https://api.snaptrade.com",
        timeout_seconds: float = 15.0,
        max_retries: int = 3,
        retry_base_delay: float = 1.0,
        retry_max_delay: float = 10.0,
        failure_threshold: int = 5,
        recovery_timeout: int = 60,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize adapter.

        Args:
            client_id: SnapTrade partner client id.
            consumer_key: Ключ для підпису запитів.
            base_url: API base URL.
            timeout_seconds: HTTP timeout на один запит.
            max_retries: Повтори для read-викликів.
            retry_base_delay: Базова затримка backoff.
            retry_max_delay: Максимальна затримка backoff.
            failure_threshold: Failures до відкриття circuit (окремо для кожного user).
            recovery_timeout: Секунди у стані OPEN.
            transport: Custom httpx transport (tests use httpx.MockTransport).
        """
        self._client_id = client_id
        self._consumer_key = consumer_key
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout_seconds,
            transport=transport,
            headers={"Accept": "application/json"},
        )
        self._failure_threshold = failure_threshold
        self._recovery_timeout = recovery_timeout
        self._circuits: dict[str, CircuitBreaker] = {}
        self._read = retry_with_backoff(
            max_retries=max_retries,
            base_delay=retry_base_delay,
            max_delay=retry_max_delay,
        )(self._guarded_request)

    @classmethod
    def from_settings(cls, settings: Settings) -> "SnapTradeBrokerageAdapter":
        return cls(
            client_id=settings.brokerage_client_id,
            consumer_key=settings.brokerage_consumer_key,
            base_url=settings.brokerage_base_url,
            timeout_seconds=settings.brokerage_call_timeout_seconds,
            max_retries=settings.brokerage_max_retries,
            retry_base_delay=settings.brokerage_retry_base_delay,
            retry_max_delay=settings.brokerage_retry_max_delay,
            failure_threshold=settings.circuit_breaker_failure_threshold,
            recovery_timeout=settings.circuit_breaker_recovery_timeout,
        )

    def circuit_for(self, user_id: str) -> CircuitBreaker:
        """Circuit breaker одного brokerage user.

        Збої підключеного брокера одного follower'а не блокують виклики
        для решти користувачів.
        """
        circuit = self._circuits.get(user_id)
        if circuit is None:
            circuit = CircuitBreaker(
                name=f"snaptrade:{user_id}",
                failure_threshold=self._failure_threshold,
                timeout_seconds=self._recovery_timeout,
            )
            self._circuits[user_id] = circuit
        return circuit

    async def close(self) -> None:
        await self._client.aclose()
        logger.info("snaptrade.closed")

    # ==================== Account data ====================

    async def get_account_positions(
        self, credentials: BrokerageCredentials, account_id: str
    ) -> list[RawPosition]:
        data = await self._read("GET", f"/api/v1/accounts/{account_id}/positions", credentials)
        positions = []
        for item in data or []:
            positions.append(
                RawPosition(
                    symbol=_ticker(item.get("symbol")),
                    units=_decimal(item.get("units")),
                    quantity=_decimal(item.get("quantity")),
                    price=_decimal(item.get("price")),
                    average_purchase_price=_decimal(item.get("average_purchase_price")),
                )
            )
        logger.debug(
            "snaptrade.positions_fetched",
            extra={"account_id": account_id, "count": len(positions)},
        )
        return positions

    async def get_account_balance(
        self, credentials: BrokerageCredentials, account_id: str
    ) -> AccountBalance:
        """Total value = cash + market value of all positions."""
        balances = await self._read("GET", f"/api/v1/accounts/{account_id}/balances", credentials)
        cash = Decimal("0")
        currency = "USD"
        for entry in balances or []:
            cash += _decimal(entry.get("cash")) or Decimal("0")
            code = (entry.get("currency") or {}).get("code")
            if code:
                currency = code

        positions = await self.get_account_positions(credentials, account_id)
        market_value = sum(
            ((p.units if p.units is not None else p.quantity or Decimal("0")) * (p.price or Decimal("0"))
             for p in positions),
            Decimal("0"),
        )
        return AccountBalance(total_value=cash + market_value, cash=cash, currency=currency)

    async def search_symbol(
        self, credentials: BrokerageCredentials, account_id: str, symbol: str
    ) -> SymbolMatch:
        """Resolve ticker → universal symbol id (exact match, інакше перший результат).

        Raises:
            SymbolNotFoundError: Пошук нічого не знайшов.
        """
        results = await self._read(
            "POST",
            f"/api/v1/accounts/{account_id}/symbols",
            credentials,
            body={"substring": symbol},
        )
        if not results:
            raise SymbolNotFoundError(f"Symbol '{symbol}' not found", symbol=symbol)

        wanted = symbol.upper()
        match = next(
            (r for r in results if _ticker(r.get("symbol", r)) == wanted),
            results[0],
        )
        universal_id = match.get("id") or (match.get("symbol") or {}).get("id")
        if not universal_id:
            raise SymbolNotFoundError(f"Symbol '{symbol}' has no universal id", symbol=symbol)

        return SymbolMatch(
            symbol=_ticker(match.get("symbol", match)) or wanted,
            universal_symbol_id=str(universal_id),
            description=str(match.get("description") or ""),
        )

    async def get_quote(
        self, credentials: BrokerageCredentials, account_id: str, symbol: str
    ) -> Optional[Decimal]:
        quotes = await self._read(
            "GET",
            f"/api/v1/accounts/{account_id}/quotes",
            credentials,
            params={"symbols": symbol, "use_ticker": "true"},
        )
        for quote in quotes or []:
            if _ticker(quote.get("symbol")) not in (None, symbol.upper()):
                continue
            for field in ("last_trade_price", "ask_price", "bid_price"):
                price = _decimal(quote.get(field))
                if price is not None and price > 0:
                    return price
        return None

    # ==================== Trading (no retry) ====================

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
        body = {
            "account_id": account_id,
            "action": action,
            "universal_symbol_id": universal_symbol_id,
            "order_type": order_type,
            "time_in_force": "Day",
            "units": float(quantity),
            "price": float(price) if price is not None else None,
        }
        try:
            data = await self._guarded_request("POST", "/api/v1/trade/impact", credentials, body=body)
        except BrokerageAPIError as e:
            raise TradeImpactRejectedError(
                f"Trade impact rejected: {e.message}", account_id=account_id, action=action
            ) from e

        trade = (data or {}).get("trade") or {}
        impacts = (data or {}).get("trade_impacts") or [{}]
        return ImpactResult(
            trade_id=str(trade.get("id") or ""),
            estimated_price=_decimal(trade.get("price")),
            estimated_commission=_decimal(impacts[0].get("estimated_commission")) or Decimal("0"),
            remaining_cash=_decimal(impacts[0].get("remaining_cash")),
        )

    async def place_order(
        self,
        credentials: BrokerageCredentials,
        trade_id: str,
        wait_to_confirm: bool = True,
    ) -> OrderResult:
        """Submit a previously checked trade.

        Raises:
            OrderRejectedError: Брокер відхилив або скасував ордер.
        """
        try:
            data = await self._guarded_request(
                "POST",
                f"/api/v1/trade/{trade_id}",
                credentials,
                body={"wait_to_confirm": wait_to_confirm},
            )
        except BrokerageAPIError as e:
            raise OrderRejectedError(f"Order rejected: {e.message}", trade_id=trade_id) from e

        data = data or {}
        status = _ORDER_STATUSES.get(str(data.get("status", "")).upper(), OrderStatus.PENDING)
        order_id = data.get("brokerage_order_id") or data.get("id") or trade_id
        if status.is_rejected:
            raise OrderRejectedError(
                f"Order {order_id} {status.value}", trade_id=trade_id, status=status.value
            )

        executed_price = _decimal(data.get("execution_price") or data.get("price"))
        return OrderResult(
            order_id=str(order_id),
            status=status,
            executed_price=executed_price if executed_price and executed_price > 0 else None,
            filled_quantity=_decimal(data.get("filled_quantity")),
        )

    # ==================== HTTP ====================

    async def _guarded_request(
        self, method: str, path: str, credentials: BrokerageCredentials, **kwargs: Any
    ) -> Any:
        circuit = self.circuit_for(credentials.user_id)
        return await circuit.call(self._request, method, path, credentials, **kwargs)

    async def _request(
        self,
        method: str,
        path: str,
        credentials: BrokerageCredentials,
        params: dict[str, str] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        query_params = {
            "clientId": self._client_id,
            "timestamp": str(int(time.time())),
            "userId": credentials.user_id,
            "userSecret": credentials.user_secret,
            **(params or {}),
        }
        query = str(httpx.QueryParams(query_params))
        headers = {"Signature": sign_request(self._consumer_key, path, query, body)}

        try:
            response = await self._client.request(
                method, f"{path}?{query}", json=body, headers=headers
            )
        except httpx.TimeoutException as e:
            logger.warning("snaptrade.timeout", extra={"path": path})
            raise BrokerageTimeoutError(f"SnapTrade timeout on {path}", path=path) from e
        except httpx.TransportError as e:
            logger.warning("snaptrade.network_error", extra={"path": path, "error": str(e)})
            raise BrokerageConnectionError(f"SnapTrade unreachable: {e}", path=path) from e

        return self._handle_response(path, response)

    @staticmethod
    def _handle_response(path: str, response: httpx.Response) -> Any:
        status = response.status_code
        if status == 429:
            raise RateLimitError("SnapTrade rate limit exceeded", path=path)
        if status >= 500:
            raise BrokerageConnectionError(
                f"SnapTrade server error {status}", path=path, status_code=status
            )
        if status >= 400:
            detail = SnapTradeBrokerageAdapter._error_detail(response)
            logger.warning(
                "snaptrade.api_error",
                extra={"path": path, "status_code": status, "detail": detail},
            )
            raise BrokerageAPIError(detail, path=path, status_code=status)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise BrokerageError("SnapTrade returned invalid JSON", path=path) from e

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        if isinstance(payload, dict):
            return str(payload.get("detail") or payload.get("message") or payload)
        return str(payload)
