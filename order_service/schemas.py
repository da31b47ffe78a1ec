from pydantic import BaseModel, ConfigDict, Field, conint
from pydantic.alias_generators import to_camel
from typing import List
from decimal import Decimal
import datetime

THANK_YOU_NOTE = "Thank you for shopping!"


# --- Order creation / reads ---

class OrderItemCreate(BaseModel):
    sku: str = Field(..., min_length=1)
    qty: conint(gt=0) # Ensures quantity is integer > 0
    price: Decimal = Field(..., ge=0, decimal_places=2)

class OrderCreate(BaseModel):
    id: str | None = None # Generated when omitted
    customer_id: str = Field(..., min_length=1)
    created_at: datetime.datetime | None = None
    items: List[OrderItemCreate] = Field(..., min_length=1) # Require at least one item

class OrderItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    sku: str
    qty: int
    price: Decimal

class OrderRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    customer_id: str
    created_at: datetime.datetime
    total: Decimal | None = None
    items: List[OrderItemRead] = []
    note: str = THANK_YOU_NOTE # Runtime-only, never stored


# --- Stock lookup contract ---

class StockQuery(BaseModel):
    sku: str = Field(..., min_length=1)

class StockResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sku: str
    available_qty: int | None = Field(default=None, alias="availableQty") # None when the lookup failed

    @property
    def ok(self) -> bool:
        return self.available_qty is not None


# --- Submission-facing results ---

class SubmissionResult(BaseModel):
    success: bool
    message: str
    total: Decimal | None = None

class OrderWithStock(BaseModel):
    order_id: str
    customer_id: str
    items: List[OrderItemRead]
    stock_report: str


# --- Events, one explicit shape per sink ---

class SubmissionEvent(BaseModel):
    """In-process event consumed by the analytics log."""
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    order_id: str
    total: Decimal
    item_count: int
    customer_id: str
    submitted_at: datetime.datetime

class BrokerSubmissionEvent(BaseModel):
    """Event shape expected by consumers on the message broker."""
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    order_id: str
    total: Decimal
    customer_id: str
    completed_at: datetime.datetime
