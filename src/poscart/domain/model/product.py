"""Product aggregate of the catalog snapshot.

Products are read-only for the duration of a cart session.  A product
knows its packages (units of sale), how much of it each warehouse holds
and the minimum amount that may be sold at once.  Every stock figure is
expressed in the product's base unit.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from poscart.domain.exceptions import PackageNotFoundError, ValidationError
from poscart.domain.model.value_objects import Money

MEASURABLE_UNITS = frozenset({"KG", "L", "M", "M2", "M3", "M²", "M³"})

FRACTIONAL_STEP = Decimal("0.5")
UNIT_STEP = Decimal("1")


class ProductKind(Enum):
    GOOD = "GOOD"
    SERVICE = "SERVICE"


class StockPolicy(Enum):
    """Recorded on the product; never used to pick a batch."""

    FIFO = "FIFO"
    LIFO = "LIFO"


@dataclass(frozen=True)
class Package:
    """A sellable unit bundling ``factor`` base units (e.g. a case of 6)."""

    name: str
    factor: Decimal
    ean: str = ""
    price: Money | None = None  # overrides product.price * factor

    def __post_init__(self) -> None:
        if self.factor <= 0:
            raise ValidationError(
                f"Package '{self.name}' factor must be greater than zero"
            )


@dataclass(frozen=True)
class StockLevel:
    warehouse_id: str
    quantity: Decimal


@dataclass(frozen=True)
class Batch:
    """Lot / expiry record.  Informational only."""

    id: str
    number: str
    expiry_date: str
    quantity: Decimal
    warehouse_id: str


@dataclass(frozen=True)
class Product:
    """A product in the catalog snapshot.

    ``packages`` keeps catalog order; the first one is the default
    package offered when a product is added to the cart.  ``stock_levels``
    also keeps catalog order, which is the order warehouses are tried in.
    """

    id: str
    name: str
    price: Money
    base_unit: str
    packages: tuple[Package, ...]
    stock_levels: tuple[StockLevel, ...] = ()
    track_stock: bool = True
    min_purchase_quantity: Decimal | None = None
    kind: ProductKind = ProductKind.GOOD
    description: str = ""
    stock_policy: StockPolicy | None = None
    min_stock_level: Decimal | None = None
    batches: tuple[Batch, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.packages:
            raise ValidationError(f"Product '{self.name}' has no packages")

    # --- Packages -------------------------------------------------------------

    @property
    def default_package(self) -> Package:
        return self.packages[0]

    def package(self, name: str) -> Package:
        for pkg in self.packages:
            if pkg.name == name:
                return pkg
        raise PackageNotFoundError(
            f"Package '{name}' does not exist for {self.name}", product_id=self.id
        )

    def price_for(self, package: Package) -> Money:
        if package.price is not None:
            return package.price
        return self.price * package.factor

    @property
    def is_measurable(self) -> bool:
        return self.base_unit.upper() in MEASURABLE_UNITS

    def allows_fractional(self, package: Package) -> bool:
        """Decimals are only allowed on the base package of a measurable unit."""
        return self.is_measurable and package.factor == 1

    def quantity_step(self, package: Package) -> Decimal:
        return FRACTIONAL_STEP if self.allows_fractional(package) else UNIT_STEP

    # --- Minimum purchase -----------------------------------------------------

    @property
    def blocking_minimum(self) -> Decimal:
        """Minimum purchase used by the orphan-stock rule (0 when absent)."""
        return self.min_purchase_quantity or Decimal("0")

    def initial_quantity(self, package: Package) -> Decimal:
        """Package count put in the cart by a plain add.

        One package, raised to the minimum purchase when one package is
        not enough.  A missing minimum counts as one base unit here.
        """
        min_base = self.min_purchase_quantity or Decimal("1")
        quantity = Decimal("1")
        if package.factor * quantity < min_base:
            quantity = Decimal(math.ceil(min_base / package.factor))
        return quantity

    def min_quantity_in(self, package: Package) -> Decimal:
        """Minimum purchase expressed in units of *package*."""
        min_base = self.min_purchase_quantity or Decimal("1")
        if self.allows_fractional(package):
            return min_base
        return Decimal(math.ceil(min_base / package.factor))

    # --- Stock ----------------------------------------------------------------

    def stock_in(self, warehouse_id: str) -> Decimal:
        for level in self.stock_levels:
            if level.warehouse_id == warehouse_id:
                return level.quantity
        return Decimal("0")

    @property
    def total_stock(self) -> Decimal:
        return sum((level.quantity for level in self.stock_levels), Decimal("0"))

    @property
    def is_below_min_stock(self) -> bool:
        """Low-stock alert: total stock under the safety level."""
        if not self.track_stock or self.min_stock_level is None:
            return False
        return self.total_stock < self.min_stock_level
