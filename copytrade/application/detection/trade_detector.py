"""TradeDetector - poll one account, diff against the last snapshot, persist.

Snapshot і згенеровані LeaderTrades комітяться однією транзакцією: або
обидва записані, або жоден, тож наступний цикл не втратить diff. Новий
snapshot посилається на свій baseline під unique constraint, тому з двох
overlapping polls угоди запише лише один.
"""

import logging

from copytrade.application.shared import UnitOfWorkFactory, with_timeout
from copytrade.domain.brokerage.exceptions import BrokerageError
from copytrade.domain.brokerage.ports import BrokeragePort
from copytrade.domain.copying.entities import (
    BrokerageConnection,
    LeaderTrade,
    PositionSnapshot,
    Trader,
)
from copytrade.domain.copying.exceptions import CredentialsNotConfiguredError
from copytrade.domain.copying.services import detect_trades, normalize_positions
from copytrade.infrastructure.encryption import CredentialResolver

from .dtos import AccountDetection

logger = logging.getLogger(__name__)


class TradeDetector:
    """Synthesizes leader trades from position snapshot diffs.

    Перший poll рахунку (немає snapshot'а) тільки записує baseline і не
    генерує жодної угоди: вже відкриті позиції лідера не копіюються.

    Example:
        >>> detector = TradeDetector(uow_factory, brokerage, resolver, call_timeout=15)
        >>> result = await detector.detect_for_account(leader, connection)
        >>> [t.symbol for t in result.trades]
        ['AAPL']
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        brokerage: BrokeragePort,
        credential_resolver: CredentialResolver,
        call_timeout: float,
    ) -> None:
        self._uow_factory = uow_factory
        self._brokerage = brokerage
        self._credentials = credential_resolver
        self._call_timeout = call_timeout

    async def detect_for_account(
        self, leader: Trader, connection: BrokerageConnection
    ) -> AccountDetection:
        account_id = connection.account_id

        try:
            credentials = self._credentials.resolve(leader)
            raw_positions = await with_timeout(
                self._brokerage.get_account_positions(credentials, account_id),
                self._call_timeout,
                "get_account_positions",
            )
        except (CredentialsNotConfiguredError, BrokerageError) as e:
            logger.warning(
                "trade_detector.account_failed",
                extra={"leader_id": leader.id, "account_id": account_id, "error": str(e)},
            )
            return AccountDetection(account_id=account_id, error=str(e))

        current = normalize_positions(raw_positions)
        prices = {
            raw.symbol.strip().upper(): raw.price
            for raw in raw_positions
            if raw.symbol and raw.price is not None and raw.price > 0
        }

        trades: list[LeaderTrade] = []
        async with self._uow_factory() as uow:
            latest = await uow.snapshots.get_latest(account_id)

            snapshot = PositionSnapshot.capture(account_id, current, previous=latest)
            if not await uow.snapshots.append(snapshot):
                # Baseline вже спожив інший poll; його diff і є результатом
                logger.info(
                    "trade_detector.baseline_taken",
                    extra={"leader_id": leader.id, "account_id": account_id},
                )
                return AccountDetection(account_id=account_id)

            if latest is None:
                logger.info(
                    "trade_detector.baseline_recorded",
                    extra={"account_id": account_id, "symbols": len(current)},
                )
            else:
                for detected in detect_trades(current, latest.positions):
                    trade = LeaderTrade.from_detection(leader.id, account_id, detected)
                    trade.price = prices.get(detected.symbol)
                    await uow.leader_trades.add(trade)
                    trades.append(trade)

            await uow.commit()

        if trades:
            logger.info(
                "trade_detector.trades_detected",
                extra={
                    "leader_id": leader.id,
                    "account_id": account_id,
                    "trades": [f"{t.side.value}:{t.symbol}:{t.quantity}" for t in trades],
                },
            )
        return AccountDetection(account_id=account_id, trades=trades)
