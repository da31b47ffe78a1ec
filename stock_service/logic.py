from . import schemas # Use relative import within the package
import logging

logger = logging.getLogger(__name__)

# --- Hardcoded stock table (stands in for a real warehouse system) ---
STOCK_TABLE = {
    "SKU-RED": 50,
    "SKU-VN": 7,
    "SKU-BLUE": 999,
    "SKU-BLK": 20,
}


def lookup_stock(request: schemas.StockRequest, stock_table: dict[str, int] = STOCK_TABLE) -> schemas.StockResponse:
    """Unknown SKUs are reported as 0 available, never as an error."""
    qty = stock_table.get(request.sku, 0)
    if request.sku not in stock_table:
        logger.debug(f"SKU {request.sku} not in stock table, reporting 0")
    return schemas.StockResponse(sku=request.sku, available_qty=qty)
