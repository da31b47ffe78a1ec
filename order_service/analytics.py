from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
import logging

from . import crud
from .schemas import SubmissionEvent

logger = logging.getLogger(__name__)


class AnalyticsLog:
    """Local sink: books every submitted order into the order_event_log table."""

    name = "analytics"

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def record(self, event: SubmissionEvent) -> None:
        logger.info(f"Received OrderSubmitted (in-process): {event.order_id}")
        # Own transaction, the order total is already committed by now
        async with self._session_factory() as session:
            async with session.begin():
                await crud.add_event_log_entry(session, event)
        logger.info(f"Logged OrderSubmitted (in-process): {event.order_id}")
