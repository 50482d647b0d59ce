"""Bill pricing.

``compute_bill`` is pure: it prices requested inventory items against a price
snapshot that the caller loaded beforehand (see ``load_inventory_prices``).
Line subtotals are rounded to centavos, half-up, before they are summed.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vetclinic.core.exceptions import PricingError, ValidationError
from vetclinic.modules.records.models import InventoryItem

CENT = Decimal("0.01")
UNKNOWN_ITEM_NAME = "Unknown"


def to_money(value: Decimal | int | str) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class RequestedItem:
    inventory_id: str
    quantity: int


@dataclass(frozen=True)
class InventoryPrice:
    name: str
    unit_price: Decimal


@dataclass(frozen=True)
class PricedLine:
    inventory_id: str
    name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


@dataclass(frozen=True)
class PricedBill:
    consultation_fee: Decimal
    lines: tuple[PricedLine, ...]
    total: Decimal

    @property
    def items_total(self) -> Decimal:
        return sum((line.subtotal for line in self.lines), Decimal("0.00"))


def compute_bill(
    consultation_fee: Decimal,
    requested_items: Sequence[RequestedItem],
    inventory: Mapping[str, InventoryPrice],
    *,
    allow_unknown: bool = False,
) -> PricedBill:
    """Price every requested item and return the lines plus the grand total.

    Unknown inventory ids raise ``PricingError`` listing all of them, unless
    ``allow_unknown`` is set, in which case they are billed as "Unknown" at 0.
    """
    if consultation_fee < 0:
        raise ValidationError("consultation_fee must not be negative")
    fee = to_money(consultation_fee)

    unresolved = [item.inventory_id for item in requested_items if item.inventory_id not in inventory]
    if unresolved and not allow_unknown:
        raise PricingError(unresolved)

    lines: list[PricedLine] = []
    for item in requested_items:
        if item.quantity <= 0:
            raise ValidationError(f"quantity for {item.inventory_id} must be positive")
        price = inventory.get(item.inventory_id) or InventoryPrice(UNKNOWN_ITEM_NAME, Decimal("0"))
        unit_price = to_money(price.unit_price)
        lines.append(
            PricedLine(
                inventory_id=item.inventory_id,
                name=price.name,
                quantity=item.quantity,
                unit_price=unit_price,
                subtotal=to_money(unit_price * item.quantity),
            )
        )

    total = fee + sum((line.subtotal for line in lines), Decimal("0.00"))
    return PricedBill(consultation_fee=fee, lines=tuple(lines), total=total)


async def load_inventory_prices(db: AsyncSession, inventory_ids: Iterable[str]) -> dict[str, InventoryPrice]:
    """Read the current name and price for each id that exists."""
    ids = set(inventory_ids)
    if not ids:
        return {}
    result = await db.execute(
        select(InventoryItem.item_id, InventoryItem.name, InventoryItem.price).where(InventoryItem.item_id.in_(ids))
    )
    return {item_id: InventoryPrice(name=name, unit_price=price) for item_id, name, price in result.all()}
