from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Union
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from . import crud, models

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


@dataclass(frozen=True)
class TotalComputed:
    order: models.Order
    items: list[models.OrderItem]
    total: Decimal


@dataclass(frozen=True)
class OrderNotFound:
    order_id: str


@dataclass(frozen=True)
class OrderHasNoItems:
    order: models.Order


TotalOutcome = Union[TotalComputed, OrderNotFound, OrderHasNoItems]


def sum_line_items(items: Iterable[models.OrderItem]) -> Decimal:
    """Exact qty x price sum, rounded to cents only once at the end."""
    total = sum((Decimal(item.qty) * Decimal(item.price) for item in items), Decimal("0"))
    return total.quantize(CENTS)


async def compute_and_persist_total(db: AsyncSession, order_id: str) -> TotalOutcome:
    """
    Recomputes the order total from its items and writes it back.

    Must run inside the caller's transaction: the reads and the single-row
    update share it, and the caller decides whether to commit. Missing orders
    and empty orders come back as variants, store errors propagate.
    """
    order = await crud.get_order(db, order_id)
    if order is None:
        logger.info(f"Order {order_id} not found while computing total")
        return OrderNotFound(order_id=order_id)

    items = await crud.get_order_items(db, order_id)
    if not items:
        logger.info(f"Order {order_id} has no items, total not computed")
        return OrderHasNoItems(order=order)

    total = sum_line_items(items)
    await crud.update_order_total(db, order_id, total)
    logger.info(f"Order {order_id}: total computed over {len(items)} item(s) = {total}")
    return TotalComputed(order=order, items=items, total=total)
