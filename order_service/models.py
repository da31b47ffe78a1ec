from sqlalchemy import Column, Integer, String, Numeric, TIMESTAMP, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import uuid
from .database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_order_id() -> str:
    return f"ord-{uuid.uuid4().hex[:8]}"


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(64), primary_key=True, default=new_order_id)
    customer_id = Column(String(255), nullable=False, index=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=_utcnow)
    # Derived on submission, NULL until the first one
    total = Column(Numeric(12, 2), nullable=True, index=True)

    items = relationship(
        "OrderItem",
        back_populates="order",
        order_by="OrderItem.position",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    def __repr__(self):
        return f"<Order(id='{self.id}', customer_id='{self.customer_id}', total={self.total})>"


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(64), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0) # Insertion order within the order
    sku = Column(String(255), nullable=False)
    qty = Column(Integer, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)

    order = relationship("Order", back_populates="items")

    __table_args__ = (
        CheckConstraint('qty > 0', name='order_items_qty_positive'),
        CheckConstraint('price >= 0', name='order_items_price_non_negative'),
    )

    def __repr__(self):
        return f"<OrderItem(sku='{self.sku}', qty={self.qty}, price={self.price})>"


class OrderEventLog(Base):
    """One row per OrderSubmitted event seen by the in-process analytics sink."""
    __tablename__ = "order_event_log"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    order_id = Column(String(64), nullable=False, index=True)
    total = Column(Numeric(12, 2), nullable=False)
    item_count = Column(Integer, nullable=False)
    customer_id = Column(String(255), nullable=False)
    submitted_at = Column(TIMESTAMP(timezone=True), nullable=False)
    received_at = Column(TIMESTAMP(timezone=True), nullable=False, default=_utcnow)

    def __repr__(self):
        return f"<OrderEventLog(order_id='{self.order_id}', total={self.total})>"
