"""Shopping cart stored as one entry per unit.

The persisted document is a flat list of ``CartEntry`` records, one per
physical unit, in the order they were added. Quantities are never stored:
``aggregate()`` counts entries per product on demand, so increment,
decrement and bulk quantity changes all work on the same representation
and there is no second copy to drift out of sync.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Callable

from ecomarket.config import MarketConfig
from ecomarket.constants import EVENT_CART_CHANGED, MAX_LINE_QUANTITY
from ecomarket.errors import ErrorCode, OperationResult
from ecomarket.money import Amount, parse_amount, round_money
from ecomarket.store_backend import StoreBackend

logger = logging.getLogger(__name__)

Listener = Callable[[str, dict[str, Any]], None]


def parse_quantity(value: object) -> int | None:
    """Parse a positive whole quantity, or return None.

    Accepts ints, integral floats and integer strings (``"3"``). Rejects
    booleans, fractions, zero, negatives and anything above
    ``MAX_LINE_QUANTITY``.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            return None
    elif isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    elif isinstance(value, Decimal):
        if not value.is_finite() or value != value.to_integral_value():
            return None
        value = int(value)
    if not isinstance(value, int) or not 1 <= value <= MAX_LINE_QUANTITY:
        return None
    return value


# ---------------------------------------------------------------------------
# CartEntry / CartLine / CartSummary
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CartEntry:
    """A single unit of a product."""

    product_id: str
    name: str
    unit_price: Decimal

    @classmethod
    def create(cls, product_id: str, name: str, unit_price: Amount) -> CartEntry:
        """Validate caller input and build an entry. Raises ValueError."""
        if not product_id or not isinstance(product_id, str):
            raise ValueError("product_id must be a non-empty string")
        if not isinstance(name, str):
            raise ValueError("name must be a string")
        price = parse_amount(unit_price)
        if price is None:
            raise ValueError("unit_price must be a non-negative number")
        return cls(product_id=product_id, name=name, unit_price=price)

    def to_dict(self) -> dict[str, Any]:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "unit_price": str(self.unit_price),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CartEntry:
        # Migration: browser-era entries used "id" and "price"
        product_id = data.get("product_id", data.get("id"))
        if product_id is None:
            raise KeyError("product_id")
        price = parse_amount(data.get("unit_price", data.get("price")))
        if price is None:
            raise ValueError(f"invalid unit_price for product {product_id!r}")
        return cls(
            product_id=str(product_id),
            name=str(data.get("name", "")),
            unit_price=price,
        )


@dataclass(frozen=True)
class CartLine:
    """Aggregated view of every unit of one product."""

    product_id: str
    name: str
    unit_price: Decimal
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return round_money(self.unit_price * self.quantity)

    def to_dict(self) -> dict[str, Any]:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "unit_price": str(self.unit_price),
            "quantity": self.quantity,
            "line_total": str(self.line_total),
        }


@dataclass(frozen=True)
class CartSummary:
    """Lines in first-added order, plus totals."""

    lines: list[CartLine] = field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return sum((line.line_total for line in self.lines), Decimal("0.00"))

    @property
    def unit_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def line_for(self, product_id: str) -> CartLine | None:
        return next((line for line in self.lines if line.product_id == product_id), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_empty": self.is_empty,
            "unit_count": self.unit_count,
            "lines": [line.to_dict() for line in self.lines],
            "total": str(self.total),
        }


def summarize(entries: list[CartEntry]) -> CartSummary:
    """Count entries per product. Name and price come from the first unit seen."""
    counts: dict[str, int] = {}
    first: dict[str, CartEntry] = {}
    for entry in entries:
        if entry.product_id not in first:
            first[entry.product_id] = entry
            counts[entry.product_id] = 0
        counts[entry.product_id] += 1

    return CartSummary(lines=[
        CartLine(
            product_id=pid,
            name=entry.name,
            unit_price=entry.unit_price,
            quantity=counts[pid],
        )
        for pid, entry in first.items()
    ])


# ---------------------------------------------------------------------------
# CartService
# ---------------------------------------------------------------------------


class CartService:
    """Cart operations over a StoreBackend.

    Every mutation reads the entry list, changes it and writes it back,
    then emits ``cart-changed`` with the new unit count. Operations on a
    product with no entries are no-ops and write nothing.
    """

    def __init__(self, store: StoreBackend, config: MarketConfig | None = None) -> None:
        self._store = store
        self._config = config or MarketConfig()
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _load(self) -> list[CartEntry]:
        """Read entries, returning an empty cart on missing/corrupt data."""
        raw = self._store.fetch(self._config.cart_key)
        if raw is None:
            return []
        try:
            obj = json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            logger.warning("Cart document is corrupt; starting with an empty cart.")
            return []
        if not isinstance(obj, list):
            logger.warning("Cart document is not a list; starting with an empty cart.")
            return []
        try:
            return [CartEntry.from_dict(e) for e in obj]
        except (KeyError, TypeError, ValueError, AttributeError):
            logger.warning("Cart document has a malformed entry; starting with an empty cart.")
            return []

    def _save(self, entries: list[CartEntry]) -> int:
        self._store.store(
            self._config.cart_key,
            json.dumps([e.to_dict() for e in entries]),
        )
        count = len(entries)
        for listener in list(self._listeners):
            listener(EVENT_CART_CHANGED, {"unit_count": count})
        return count

    # -- queries --------------------------------------------------------------

    def aggregate(self) -> CartSummary:
        return summarize(self._load())

    def unit_count(self) -> int:
        return len(self._load())

    # -- mutations ------------------------------------------------------------

    def add_unit(self, product_id: str, name: str, unit_price: Amount) -> int:
        """Append one unit. Returns the cart's total unit count."""
        entry = CartEntry.create(product_id, name, unit_price)
        entries = self._load()
        entries.append(entry)
        return self._save(entries)

    def add_units(
        self, product_id: str, name: str, unit_price: Amount, quantity: object = 1,
    ) -> int:
        """Append ``quantity`` units at once; an unusable quantity means one."""
        entry = CartEntry.create(product_id, name, unit_price)
        count = parse_quantity(quantity) or 1
        entries = self._load()
        entries.extend(replace(entry) for _ in range(count))
        return self._save(entries)

    def remove_all_units(self, product_id: str) -> int:
        """Drop every unit of ``product_id``."""
        entries = self._load()
        return self._save([e for e in entries if e.product_id != product_id])

    def set_quantity(self, product_id: str, new_qty: object) -> OperationResult:
        """Replace all units of ``product_id`` with exactly ``new_qty`` copies.

        On invalid input nothing is written and the result carries the
        unchanged summary so the view can re-render from it.
        """
        entries = self._load()
        qty = parse_quantity(new_qty)
        if qty is None:
            return OperationResult.fail(ErrorCode.INVALID_QUANTITY, value=summarize(entries))

        template = next((e for e in entries if e.product_id == product_id), None)
        if template is None:
            return OperationResult.ok(summarize(entries))

        kept = [e for e in entries if e.product_id != product_id]
        kept.extend(replace(template) for _ in range(qty))
        self._save(kept)
        return OperationResult.ok(summarize(kept))

    def increment_unit(self, product_id: str) -> int:
        """Clone one existing unit of ``product_id``."""
        entries = self._load()
        template = next((e for e in entries if e.product_id == product_id), None)
        if template is None:
            return len(entries)
        entries.append(replace(template))
        return self._save(entries)

    def decrement_unit(self, product_id: str) -> int:
        """Remove the first unit of ``product_id``."""
        entries = self._load()
        index = next((i for i, e in enumerate(entries) if e.product_id == product_id), None)
        if index is None:
            return len(entries)
        del entries[index]
        return self._save(entries)

    def clear(self) -> int:
        """Empty the cart (checkout hand-off)."""
        return self._save([])
