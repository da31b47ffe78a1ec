"""Fan-out of the OrderSubmitted notification.

The local sink is always tried and the broker only when a handle was resolved
at startup. A failing sink is logged and reported in the PublishOutcome but
never raised: by the time events go out the order total is committed.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Protocol
import logging

from . import models
from .errors import PublishError
from .schemas import BrokerSubmissionEvent, SubmissionEvent

logger = logging.getLogger(__name__)


class LocalSink(Protocol):
    name: str

    async def record(self, event: SubmissionEvent) -> None: ...


class ExternalSink(Protocol):
    name: str

    async def send(self, event: BrokerSubmissionEvent) -> None: ...


@dataclass(frozen=True)
class SinkResult:
    sink: str
    delivered: bool
    error: PublishError | None = None


@dataclass(frozen=True)
class PublishOutcome:
    local: SinkResult
    external: SinkResult | None = None # None when no broker is configured

    @property
    def all_delivered(self) -> bool:
        return self.local.delivered and (self.external is None or self.external.delivered)


def build_local_event(order: models.Order, total: Decimal, item_count: int) -> SubmissionEvent:
    return SubmissionEvent(
        order_id=order.id,
        total=total,
        item_count=item_count,
        customer_id=order.customer_id,
        submitted_at=datetime.now(timezone.utc),
    )


def build_broker_event(order: models.Order, total: Decimal) -> BrokerSubmissionEvent:
    return BrokerSubmissionEvent(
        order_id=order.id,
        total=total,
        customer_id=order.customer_id,
        completed_at=datetime.now(timezone.utc),
    )


class EventPublisher:
    def __init__(self, local_sink: LocalSink, external_sink: ExternalSink | None = None):
        self.local_sink = local_sink
        self.external_sink = external_sink

    async def publish_submission(self, order: models.Order, total: Decimal, item_count: int) -> PublishOutcome:
        local = await self._deliver_local(build_local_event(order, total, item_count))

        external = None
        if self.external_sink is not None:
            external = await self._deliver_external(build_broker_event(order, total))

        if not local.delivered or (external is not None and not external.delivered):
            logger.warning(f"OrderSubmitted for {order.id} only partially delivered: local={local.delivered}, "
                           f"external={None if external is None else external.delivered}")
        else:
            logger.info(f"Emitted OrderSubmitted for {order.id}")
        return PublishOutcome(local=local, external=external)

    async def _deliver_local(self, event: SubmissionEvent) -> SinkResult:
        try:
            await self.local_sink.record(event)
            return SinkResult(sink=self.local_sink.name, delivered=True)
        except Exception as e:
            logger.exception(f"Local sink '{self.local_sink.name}' failed for order {event.order_id}")
            return SinkResult(sink=self.local_sink.name, delivered=False, error=PublishError(self.local_sink.name, str(e)))

    async def _deliver_external(self, event: BrokerSubmissionEvent) -> SinkResult:
        try:
            await self.external_sink.send(event)
            logger.info(f"Messaging: OrderSubmitted for {event.order_id} sent to '{self.external_sink.name}'")
            return SinkResult(sink=self.external_sink.name, delivered=True)
        except Exception as e:
            logger.exception(f"External sink '{self.external_sink.name}' failed for order {event.order_id}")
            return SinkResult(sink=self.external_sink.name, delivered=False, error=PublishError(self.external_sink.name, str(e)))
