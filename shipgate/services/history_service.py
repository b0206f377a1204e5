"""
Order History Service v1.0.0

Records rate fetches and label purchases per order and reads them back for
the dashboard's orders page.

Write failures are logged and never raised to the rate or purchase caller.
"""
import json
import logging
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from shipgate.models.order_history import HistoryAction, OrderHistory

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100


def _dump(data: Any) -> str:
    return json.dumps(data, default=str)


class HistoryService:
    """Async access to the orders_history table."""

    def __init__(self, session_factory: async_sessionmaker, enabled: bool = True):
        self._session_factory = session_factory
        self.enabled = enabled

    async def _add(self, entry: OrderHistory) -> Optional[OrderHistory]:
        try:
            async with self._session_factory() as session:
                session.add(entry)
                await session.commit()
                return entry
        except SQLAlchemyError as e:
            logger.error(f"Failed to save {entry.action_type.value} history for order {entry.order_id}: {e}")
            return None

    async def record_rates_fetch(
        self,
        order_id: str,
        request_data: Any,
        response_data: Any,
    ) -> Optional[OrderHistory]:
        """Save a rate fetch action."""
        if not self.enabled:
            return None
        return await self._add(OrderHistory(
            order_id=order_id,
            action_type=HistoryAction.RATES,
            request_data=_dump(request_data),
            response_data=_dump(response_data),
        ))

    async def record_label_purchase(
        self,
        order_id: str,
        provider: str,
        carrier: Optional[str],
        service: Optional[str],
        price: Optional[float],
        currency: Optional[str],
        tracking_number: Optional[str],
        label_url: Optional[str],
        request_data: Any,
        response_data: Any,
    ) -> Optional[OrderHistory]:
        """Save a label purchase."""
        if not self.enabled:
            return None
        return await self._add(OrderHistory(
            order_id=order_id,
            action_type=HistoryAction.PURCHASE,
            provider=provider,
            carrier=carrier,
            service=service,
            price=price,
            currency=currency,
            tracking_number=tracking_number,
            label_url=label_url,
            request_data=_dump(request_data),
            response_data=_dump(response_data),
        ))

    async def get_order_history(self, order_id: str) -> List[OrderHistory]:
        """Get history for one order, newest first."""
        if not self.enabled:
            return []
        async with self._session_factory() as session:
            result = await session.execute(
                select(OrderHistory)
                .where(OrderHistory.order_id == order_id)
                .order_by(OrderHistory.created_at.desc(), OrderHistory.id.desc())
            )
            return list(result.scalars().all())

    async def list_history(self, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0) -> List[OrderHistory]:
        """Get all history with pagination, newest first."""
        if not self.enabled:
            return []
        async with self._session_factory() as session:
            result = await session.execute(
                select(OrderHistory)
                .order_by(OrderHistory.created_at.desc(), OrderHistory.id.desc())
                .limit(limit)
                .offset(offset)
            )
            return list(result.scalars().all())

    async def list_history_between(self, start: datetime, end: datetime) -> List[OrderHistory]:
        """Get history created in [start, end], newest first."""
        if not self.enabled:
            return []
        async with self._session_factory() as session:
            result = await session.execute(
                select(OrderHistory)
                .where(OrderHistory.created_at.between(start, end))
                .order_by(OrderHistory.created_at.desc(), OrderHistory.id.desc())
            )
            return list(result.scalars().all())
