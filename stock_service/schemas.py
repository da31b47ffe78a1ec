from pydantic import BaseModel, ConfigDict, Field

# Request body - must match what the order service sends
class StockRequest(BaseModel):
    sku: str

# Response body
class StockResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sku: str
    available_qty: int = Field(ge=0, alias="availableQty")
