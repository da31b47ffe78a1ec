from decimal import Decimal
import asyncio
import logging

import httpx
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from . import crud, models, schemas, stock_client
from .config import ServiceConfig
from .errors import NoItemsError, NotFoundError, ServiceNotConfiguredError, ValidationError
from .events import EventPublisher
from .totals import OrderHasNoItems, OrderNotFound, TotalComputed, compute_and_persist_total
from .validation import validate_for_submission

logger = logging.getLogger(__name__)


class OrderService:
    """
    Submission-facing operations. Everything it needs (settings, store,
    event publisher, HTTP client) is passed in once at construction.
    """

    def __init__(
        self,
        config: ServiceConfig,
        session_factory: async_sessionmaker[AsyncSession],
        publisher: EventPublisher,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.config = config
        self._session_factory = session_factory
        self.publisher = publisher
        self._http_client = http_client

    # --- Creation and reads ---

    async def create_order(self, order_data: dict) -> models.Order:
        """Validates then stores a new order. Raises ValidationError before any write."""
        validate_for_submission(order_data)
        try:
            order = schemas.OrderCreate.model_validate(order_data)
        except PydanticValidationError as e:
            raise ValidationError(f"invalid order: {e}") from e
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    return await crud.create_order(session, order)
        except IntegrityError as e:
            # Item constraints were checked above, so a clash here is the client-supplied id
            logger.warning(f"Rejected order with duplicate id '{order.id}': {e.orig}")
            raise ValidationError(f"order {order.id} already exists") from e

    async def get_order(self, order_id: str) -> models.Order:
        async with self._session_factory() as session:
            order = await crud.get_order(session, order_id)
        if order is None:
            raise NotFoundError(order_id)
        return order

    async def list_orders(self) -> list[models.Order]:
        async with self._session_factory() as session:
            return await crud.list_orders(session)

    async def get_high_value_orders(self, min_total: Decimal) -> list[models.Order]:
        async with self._session_factory() as session:
            return await crud.get_orders_with_min_total(session, min_total)

    # --- Submission ---

    async def submit_order(self, order_id: str) -> schemas.SubmissionResult:
        logger.info(f"Received submission for order {order_id}")
        async with self._session_factory() as session:
            try:
                outcome = await compute_and_persist_total(session, order_id)
                if isinstance(outcome, TotalComputed):
                    await session.commit()
                else:
                    await session.rollback()
            except Exception as e:
                logger.error(f"Rolling back submission of order {order_id} due to error: {e}")
                await session.rollback()
                raise

        if isinstance(outcome, OrderNotFound):
            return schemas.SubmissionResult(success=False, message=str(NotFoundError(order_id)))
        if isinstance(outcome, OrderHasNoItems):
            return schemas.SubmissionResult(success=False, message=str(NoItemsError(order_id)))

        # Total is committed, from here on the submission has succeeded
        publish = await self.publisher.publish_submission(outcome.order, outcome.total, len(outcome.items))
        if not publish.all_delivered:
            logger.warning(f"Order {order_id} submitted but event delivery incomplete: {publish}")

        return schemas.SubmissionResult(
            success=True,
            message=f"Order {order_id} submitted, total={outcome.total}",
            total=outcome.total,
        )

    # --- Stock ---

    def _stock_base_url(self) -> str:
        if not self.config.stock_service_url:
            raise ServiceNotConfiguredError("stockService is not configured")
        return self.config.stock_service_url

    async def _lookup_stock(self, sku: str, client: httpx.AsyncClient | None) -> schemas.StockResult:
        return await stock_client.check_stock(
            self._stock_base_url(),
            sku,
            self.config.stock_max_attempts,
            client=client,
            backoff=self.config.stock_retry_backoff_seconds,
            timeout=self.config.stock_timeout_seconds,
        )

    async def check_stock(self, sku: str) -> schemas.StockResult:
        return await self._lookup_stock(sku, self._http_client)

    async def get_order_with_stock(self, order_id: str) -> schemas.OrderWithStock:
        """
        Order details plus one availability line per item. A failed lookup
        only degrades its own line, and lines follow item order.
        """
        async with self._session_factory() as session:
            order = await crud.get_order(session, order_id)
            if order is None:
                raise NotFoundError(order_id)
            items = await crud.get_order_items(session, order_id)

        if self._http_client is not None:
            results = await self._gather_stock(items, self._http_client)
        else:
            async with httpx.AsyncClient(timeout=self.config.stock_timeout_seconds) as client:
                results = await self._gather_stock(items, client)
        logger.info(f"Stock report for order {order_id} built over {len(items)} item(s)")

        return schemas.OrderWithStock(
            order_id=order.id,
            customer_id=order.customer_id,
            items=[schemas.OrderItemRead.model_validate(item) for item in items],
            stock_report=build_stock_report(items, results),
        )

    async def _gather_stock(self, items: list[models.OrderItem], client: httpx.AsyncClient) -> list:
        # gather keeps argument order, so results line up with items
        return await asyncio.gather(
            *(self._lookup_stock(item.sku, client) for item in items),
            return_exceptions=True,
        )


def build_stock_report(items: list[models.OrderItem], results: list) -> str:
    lines = []
    for item, result in zip(items, results):
        if isinstance(result, BaseException):
            logger.error(f"Stock check raised for SKU {item.sku}: {result!r}")
            lines.append(f"Item {item.sku}: failed to check stock")
        elif not result.ok:
            lines.append(f"Item {item.sku}: failed to check stock")
        else:
            lines.append(f"Item {item.sku}: availableQty={result.available_qty}")
    return "; ".join(lines)
