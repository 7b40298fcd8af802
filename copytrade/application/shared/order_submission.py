"""OrderSubmitter - symbol lookup, impact check and placement of one market order.

Спільний для Copy Execution Engine та Position Risk Monitor: обидва
ставлять ордер тим самим трикроковим протоколом брокера.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from copytrade.domain.brokerage.exceptions import OrderRejectedError
from copytrade.domain.brokerage.ports import BrokeragePort
from copytrade.domain.brokerage.value_objects import BrokerageCredentials, OrderResult

from .timeouts import with_timeout

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilledOrder:
    order_id: str
    executed_price: Decimal
    filled_quantity: Decimal


class OrderSubmitter:
    """Submit a Market order and wait for confirmation.

    Кожен крок обмежений ``call_timeout``. Ордер ніколи не ретраїться:
    повтор після timeout'у може подвоїти позицію.

    Example:
        >>> submitter = OrderSubmitter(brokerage, call_timeout=15)
        >>> fill = await submitter.submit(creds, "acc-2", "BUY", "AAPL",
        ...                               Decimal("40"), fallback_price=Decimal("50"))
        >>> fill.order_id
        'ORD-1'
    """

    def __init__(self, brokerage: BrokeragePort, call_timeout: float) -> None:
        self._brokerage = brokerage
        self._call_timeout = call_timeout

    async def submit(
        self,
        credentials: BrokerageCredentials,
        account_id: str,
        action: str,
        symbol: str,
        quantity: Decimal,
        fallback_price: Decimal,
    ) -> FilledOrder:
        """Place the order.

        Args:
            action: "BUY" або "SELL".
            fallback_price: Ціна, якщо ні брокер, ні impact check її не повернули.

        Raises:
            BrokerageError: Будь-який збій (SymbolNotFound, impact rejected,
                order rejected, timeout, circuit open).
        """
        match = await with_timeout(
            self._brokerage.search_symbol(credentials, account_id, symbol),
            self._call_timeout,
            "search_symbol",
        )
        impact = await with_timeout(
            self._brokerage.check_trade_impact(
                credentials,
                account_id,
                action,
                match.universal_symbol_id,
                "Market",
                quantity,
            ),
            self._call_timeout,
            "check_trade_impact",
        )
        order: OrderResult = await with_timeout(
            self._brokerage.place_order(credentials, impact.trade_id, wait_to_confirm=True),
            self._call_timeout,
            "place_order",
        )
        if order.status.is_rejected:
            raise OrderRejectedError(
                f"Order {order.order_id} {order.status.value}",
                order_id=order.order_id,
                status=order.status.value,
            )

        executed_price = order.executed_price or impact.estimated_price or fallback_price
        filled_quantity = order.filled_quantity or quantity

        logger.info(
            "order.placed",
            extra={
                "account_id": account_id,
                "action": action,
                "symbol": symbol,
                "quantity": str(filled_quantity),
                "executed_price": str(executed_price),
                "order_id": order.order_id,
                "status": order.status.value,
            },
        )
        return FilledOrder(
            order_id=order.order_id,
            executed_price=executed_price,
            filled_quantity=filled_quantity,
        )
