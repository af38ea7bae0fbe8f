"""Cart aggregate — the cart line store.

The Cart is an aggregate root that owns its lines.  It enforces the
invariants it can check on its own (line count, per-line quantity,
one line per product/package/warehouse); stock rules need the catalog
and are enforced by the stock availability service before the cart is
asked to commit anything.

Lines are immutable snapshots.  Every mutation replaces a line with an
updated copy, so a caller holding the previous ``lines`` tuple keeps an
exact picture of the state before the call.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal

from poscart.domain.exceptions import (
    LineLimitExceededError,
    LineNotFoundError,
    QuantityLimitExceededError,
    ValidationError,
)
from poscart.domain.model.product import Package, Product
from poscart.domain.model.value_objects import Money, format_quantity


# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
MAX_LINES = 10
MAX_QTY_PER_LINE = Decimal("50")
MAX_TOTAL_VALUE = Money(Decimal("500000"))


@dataclass(frozen=True)
class CartLimits:
    max_lines: int = MAX_LINES
    max_qty_per_line: Decimal = MAX_QTY_PER_LINE
    max_total_value: Money = MAX_TOTAL_VALUE


@dataclass(frozen=True)
class CartLine:
    """One line of the cart.

    ``base_quantity`` is derived from the package factor on every read,
    so it can never drift from ``quantity``.
    """

    id: str
    product_id: str
    product_name: str
    package: Package
    quantity: Decimal
    unit_price: Money
    warehouse_id: str | None

    @property
    def package_name(self) -> str:
        return self.package.name

    @property
    def base_quantity(self) -> Decimal:
        return self.quantity * self.package.factor

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity

    def matches(self, product_id: str, package_name: str, warehouse_id: str | None) -> bool:
        return (
            self.product_id == product_id
            and self.package.name == package_name
            and self.warehouse_id == warehouse_id
        )


@dataclass
class Cart:
    """Aggregate root for the point-of-sale cart.

    Lines keep insertion order for display; the domain does not rely on it
    except where "first matching line" is asked for.
    """

    limits: CartLimits = field(default_factory=CartLimits)
    _lines: list[CartLine] = field(default_factory=list)
    _next_id: int = 1

    # --- Queries --------------------------------------------------------------

    @property
    def lines(self) -> tuple[CartLine, ...]:
        return tuple(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def find(self, line_id: str) -> CartLine:
        for line in self._lines:
            if line.id == line_id:
                return line
        raise LineNotFoundError(f"Cart line '{line_id}' not found")

    def first_for_package(self, product_id: str, package_name: str) -> CartLine | None:
        for line in self._lines:
            if line.product_id == product_id and line.package.name == package_name:
                return line
        return None

    def line_at(
        self,
        product_id: str,
        package_name: str,
        warehouse_id: str | None,
        exclude_id: str | None = None,
    ) -> CartLine | None:
        for line in self._lines:
            if line.id != exclude_id and line.matches(product_id, package_name, warehouse_id):
                return line
        return None

    def allocated(
        self,
        product_id: str,
        warehouse_id: str | None,
        exclude_ids: frozenset[str] = frozenset(),
    ) -> Decimal:
        """Base units of *product_id* drawn from *warehouse_id* by the cart."""
        return sum(
            (
                line.base_quantity
                for line in self._lines
                if line.product_id == product_id
                and line.warehouse_id == warehouse_id
                and line.id not in exclude_ids
            ),
            Decimal("0"),
        )

    @property
    def total(self) -> Money:
        result = Money.zero(self.limits.max_total_value.currency)
        for line in self._lines:
            result = result + line.line_total
        return result

    @property
    def total_exceeded(self) -> bool:
        return self.total > self.limits.max_total_value

    # --- Limit checks ---------------------------------------------------------

    def assert_quantity_allowed(self, quantity: Decimal) -> None:
        if quantity > self.limits.max_qty_per_line:
            raise QuantityLimitExceededError(
                f"Maximum of {format_quantity(self.limits.max_qty_per_line)} "
                f"units per line (requested {format_quantity(quantity)})"
            )

    def assert_can_add_line(self) -> None:
        if len(self._lines) >= self.limits.max_lines:
            raise LineLimitExceededError(
                f"Cart line limit of {self.limits.max_lines} reached"
            )

    # --- Mutations ------------------------------------------------------------

    def add_line(
        self,
        product: Product,
        package: Package,
        warehouse_id: str | None,
        quantity: Decimal,
    ) -> CartLine:
        self.assert_can_add_line()
        self.assert_quantity_allowed(quantity)
        if self.line_at(product.id, package.name, warehouse_id) is not None:
            raise ValidationError(
                f"{product.name} ({package.name}) already has a line for this warehouse",
                product_id=product.id,
            )
        line = CartLine(
            id=f"line_{self._next_id}",
            product_id=product.id,
            product_name=product.name,
            package=package,
            quantity=quantity,
            unit_price=product.price_for(package),
            warehouse_id=warehouse_id,
        )
        self._next_id += 1
        self._lines.append(line)
        return line

    def set_quantity(self, line_id: str, quantity: Decimal) -> CartLine:
        self.assert_quantity_allowed(quantity)
        return self._replace(self.find(line_id), quantity=quantity)

    def change_package(self, line_id: str, product: Product, package: Package) -> CartLine:
        return self._replace(
            self.find(line_id), package=package, unit_price=product.price_for(package)
        )

    def move(self, line_id: str, warehouse_id: str) -> CartLine:
        return self._replace(self.find(line_id), warehouse_id=warehouse_id)

    def merge_into(self, source_id: str, target_id: str, quantity: Decimal) -> CartLine:
        """Drop *source_id* and give *target_id* the combined *quantity*."""
        self.assert_quantity_allowed(quantity)
        source = self.find(source_id)
        target = self._replace(self.find(target_id), quantity=quantity)
        self._lines.remove(source)
        return target

    def remove(self, line_id: str) -> CartLine:
        line = self.find(line_id)
        self._lines.remove(line)
        return line

    def clear(self) -> None:
        self._lines.clear()

    # --- Internal helpers -----------------------------------------------------

    def _replace(self, line: CartLine, **changes) -> CartLine:
        updated = replace(line, **changes)
        self._lines[self._lines.index(line)] = updated
        return updated
