"""BrokeragePort - abstract interface до brokerage aggregation API.

Domain визначає ЩО потрібно, infrastructure adapter - ЯК (HTTP, signing,
retry). Тести підставляють in-memory fake.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional

from ..value_objects import (
    AccountBalance,
    BrokerageCredentials,
    ImpactResult,
    OrderResult,
    RawPosition,
    SymbolMatch,
)


class BrokeragePort(ABC):
    """Brokerage aggregation client.

    Всі методи приймають per-user credentials; adapter нічого не кешує між
    users. Timeout'и накладає caller (``asyncio.wait_for``).

    Example:
        >>> impact = await brokerage.check_trade_impact(
        ...     credentials, "acc-1", "BUY", symbol_match.universal_symbol_id,
        ...     "Market", Decimal("40"),
        ... )
        >>> order = await brokerage.place_order(credentials, impact.trade_id)
    """

    @abstractmethod
    async def get_account_positions(
        self, credentials: BrokerageCredentials, account_id: str
    ) -> list[RawPosition]:
        """Get current positions of an account.

        Raises:
            BrokerageError: On any API/network failure.
        """

    @abstractmethod
    async def get_account_balance(
        self, credentials: BrokerageCredentials, account_id: str
    ) -> AccountBalance:
        """Get total portfolio value and cash of an account."""

    @abstractmethod
    async def search_symbol(
        self, credentials: BrokerageCredentials, account_id: str, symbol: str
    ) -> SymbolMatch:
        """Resolve a ticker to the brokerage's universal symbol id.

        Raises:
            SymbolNotFoundError: If nothing matches.
        """

    @abstractmethod
    async def get_quote(
        self, credentials: BrokerageCredentials, account_id: str, symbol: str
    ) -> Optional[Decimal]:
        """Last price for a ticker, or None if the brokerage has no quote."""

    @abstractmethod
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
        """Validate and price an order before submission.

        Args:
            action: "BUY" або "SELL".
            order_type: "Market" або "Limit".
            price: Limit price (тільки для Limit).

        Raises:
            TradeImpactRejectedError: Brokerage rejected the order.
        """

    @abstractmethod
    async def place_order(
        self,
        credentials: BrokerageCredentials,
        trade_id: str,
        wait_to_confirm: bool = True,
    ) -> OrderResult:
        """Submit a previously checked order.

        Raises:
            OrderRejectedError: Brokerage rejected/cancelled the order.
        """

    @abstractmethod
    async def close(self) -> None:
        """Release HTTP resources."""
