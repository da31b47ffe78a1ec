from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from decimal import Decimal
from . import schemas, models
import logging

logger = logging.getLogger(__name__)

# Every function works inside the session/transaction supplied by the caller;
# none of them commits.

async def get_order(db: AsyncSession, order_id: str) -> models.Order | None:
    result = await db.execute(select(models.Order).where(models.Order.id == order_id))
    return result.scalars().first()

async def get_order_items(db: AsyncSession, order_id: str) -> list[models.OrderItem]:
    stmt = (
        select(models.OrderItem)
        .where(models.OrderItem.order_id == order_id)
        .order_by(models.OrderItem.position, models.OrderItem.id)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())

async def list_orders(db: AsyncSession) -> list[models.Order]:
    result = await db.execute(select(models.Order).order_by(models.Order.created_at))
    return list(result.scalars().all())

async def get_orders_with_min_total(db: AsyncSession, min_total: Decimal) -> list[models.Order]:
    """Orders whose last submitted total is at least `min_total`. Unsubmitted orders never match."""
    stmt = (
        select(models.Order)
        .where(models.Order.total.is_not(None), models.Order.total >= min_total)
        .order_by(models.Order.created_at)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())

async def update_order_total(db: AsyncSession, order_id: str, total: Decimal) -> None:
    await db.execute(
        update(models.Order)
        .where(models.Order.id == order_id)
        .values(total=total)
        .execution_options(synchronize_session="fetch")
    )
    logger.debug(f"Updated total for order {order_id} to {total}")

async def create_order(db: AsyncSession, order: schemas.OrderCreate) -> models.Order:
    db_order = models.Order(customer_id=order.customer_id)
    if order.id:
        db_order.id = order.id
    if order.created_at:
        db_order.created_at = order.created_at
    db_order.items = [
        models.OrderItem(position=position, sku=item.sku, qty=item.qty, price=item.price)
        for position, item in enumerate(order.items)
    ]
    db.add(db_order)
    await db.flush()
    logger.info(f"Created order '{db_order.id}' with {len(db_order.items)} item(s)")
    return db_order

async def add_event_log_entry(db: AsyncSession, event: schemas.SubmissionEvent) -> models.OrderEventLog:
    entry = models.OrderEventLog(
        order_id=event.order_id,
        total=event.total,
        item_count=event.item_count,
        customer_id=event.customer_id,
        submitted_at=event.submitted_at,
    )
    db.add(entry)
    await db.flush()
    return entry
