from decimal import Decimal

import pytest

from vetclinic.core.exceptions import PricingError, ValidationError
from vetclinic.modules.billing.pricing import (
    InventoryPrice,
    RequestedItem,
    UNKNOWN_ITEM_NAME,
    compute_bill,
)

INVENTORY = {
    "amox": InventoryPrice("Amoxicillin", Decimal("150.00")),
    "vax": InventoryPrice("Rabies Vaccine", Decimal("350.50")),
    "drops": InventoryPrice("Ear Drops", Decimal("33.335")),
}


@pytest.mark.parametrize(
    "requested",
    [
        [],
        [RequestedItem("amox", 1)],
        [RequestedItem("amox", 3), RequestedItem("vax", 2)],
        [RequestedItem("amox", 1), RequestedItem("vax", 1), RequestedItem("amox", 4)],
    ],
)
def test_total_is_fee_plus_line_subtotals(requested):
    priced = compute_bill(Decimal("500.00"), requested, INVENTORY)

    assert len(priced.lines) == len(requested)
    for line in priced.lines:
        assert line.subtotal == line.unit_price * line.quantity
    assert priced.total == priced.consultation_fee + sum((line.subtotal for line in priced.lines), Decimal("0"))
    assert priced.items_total == priced.total - priced.consultation_fee


def test_reference_invoice():
    priced = compute_bill(Decimal("500"), [RequestedItem("amox", 3)], INVENTORY)

    line = priced.lines[0]
    assert line.name == "Amoxicillin"
    assert line.unit_price == Decimal("150.00")
    assert line.subtotal == Decimal("450.00")
    assert priced.total == Decimal("950.00")


def test_lines_are_rounded_half_up_before_summing():
    priced = compute_bill(Decimal("0"), [RequestedItem("drops", 1)], INVENTORY)

    assert priced.lines[0].unit_price == Decimal("33.34")
    assert priced.total == Decimal("33.34")


def test_unknown_items_are_reported_together():
    with pytest.raises(PricingError) as excinfo:
        compute_bill(
            Decimal("100"),
            [RequestedItem("ghost", 1), RequestedItem("amox", 1), RequestedItem("phantom", 2)],
            INVENTORY,
        )

    assert excinfo.value.unresolved_ids == ["ghost", "phantom"]
    assert excinfo.value.status_code == 422


def test_legacy_fallback_prices_unknown_items_at_zero():
    priced = compute_bill(
        Decimal("100"),
        [RequestedItem("ghost", 2), RequestedItem("amox", 1)],
        INVENTORY,
        allow_unknown=True,
    )

    ghost = priced.lines[0]
    assert ghost.name == UNKNOWN_ITEM_NAME
    assert ghost.subtotal == Decimal("0.00")
    assert priced.total == Decimal("250.00")


def test_negative_fee_is_rejected():
    with pytest.raises(ValidationError):
        compute_bill(Decimal("-1"), [], INVENTORY)


def test_non_positive_quantity_is_rejected():
    with pytest.raises(ValidationError):
        compute_bill(Decimal("100"), [RequestedItem("amox", 0)], INVENTORY)


def test_pricing_error_lists_each_id_once_in_request_order():
    error = PricingError(["b", "a", "b", "c", "a"])

    assert error.unresolved_ids == ["b", "a", "c"]
    assert error.detail == "Unknown inventory items: b, a, c"
    assert error.status_code == 422
