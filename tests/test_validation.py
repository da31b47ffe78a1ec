"""Tests for the submission-time order validator."""

from datetime import datetime, timezone

import pytest

from order_service.errors import ValidationError
from order_service.validation import validate_for_submission


@pytest.mark.parametrize(
    "payload",
    [
        {"customer_id": "c1"},
        {"customer_id": "c1", "items": []},
        {"items": None},
        {"customer_id": "c1", "items": 5},
        {"customer_id": "c1", "items": True},
        {"customer_id": "c1", "items": "SKU-RED"},
        {"customer_id": "c1", "items": {"sku": "SKU-RED", "qty": 1}},
    ],
)
def test_rejects_missing_items(payload):
    with pytest.raises(ValidationError, match="missing items"):
        validate_for_submission(payload)


@pytest.mark.parametrize("qty", [0, -1, "0", "-1", " -3 ", 0.0])
def test_rejects_non_positive_quantity(qty):
    payload = {"items": [{"sku": "SKU-RED", "qty": 1, "price": 1}, {"sku": "SKU-VN", "qty": qty, "price": 1}]}
    with pytest.raises(ValidationError, match="invalid quantity"):
        validate_for_submission(payload)


@pytest.mark.parametrize("qty", ["2", "abc", None, True])
def test_leaves_other_quantities_to_schema_parsing(qty):
    payload = {"items": [{"sku": "SKU-RED", "qty": qty, "price": 1}]}
    assert validate_for_submission(payload) is payload


def test_stamps_created_at_when_absent(sample_order_payload):
    before = datetime.now(timezone.utc)
    result = validate_for_submission(sample_order_payload)

    assert result is sample_order_payload
    assert before <= result["created_at"] <= datetime.now(timezone.utc)


def test_keeps_existing_created_at(sample_order_payload):
    stamp = datetime(2024, 1, 1, tzinfo=timezone.utc)
    sample_order_payload["created_at"] = stamp

    assert validate_for_submission(sample_order_payload)["created_at"] == stamp
