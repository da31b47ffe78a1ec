from datetime import datetime, timezone
import logging

from .errors import ValidationError

logger = logging.getLogger(__name__)


def _as_quantity(value):
    """Numeric quantity or None when the value is not a number at all."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def validate_for_submission(order_data: dict) -> dict:
    """
    Checks the structural rules an order must satisfy before it is accepted.
    Runs before any persistence, so a rejected order leaves nothing behind.
    Stamps `created_at` when the payload has none and returns the payload.
    """
    items = order_data.get("items")
    if not isinstance(items, list) or not items:
        raise ValidationError("missing items")

    for item in items:
        raw_qty = item.get("qty") if isinstance(item, dict) else getattr(item, "qty", None)
        qty = _as_quantity(raw_qty)
        # Non-numeric quantities are left for schema parsing to reject
        if qty is not None and qty <= 0:
            raise ValidationError("invalid quantity")

    if not order_data.get("created_at"):
        order_data["created_at"] = datetime.now(timezone.utc)
    return order_data
