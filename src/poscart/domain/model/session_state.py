"""Cart session states.

A session is always in exactly one of three states:

- ``Idle``: ready for any operation.
- ``AwaitingMergeDecision``: an add found that both extending an existing
  line and opening a new line in another warehouse are valid.  Only
  ``resolve`` (merge / separate / cancel) is accepted until it is answered.
- ``Rejected``: the last operation was refused; the cart is unchanged and
  the error is kept for display.  Any operation may follow.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Union

from poscart.domain.exceptions import ErrorKind
from poscart.domain.model.cart import CartLine
from poscart.domain.model.product import Package, Product


class MergeChoice(Enum):
    MERGE = "merge"
    SEPARATE = "separate"
    CANCEL = "cancel"


@dataclass(frozen=True)
class MergeConflict:
    product: Product
    package: Package
    existing_line: CartLine
    alternative_warehouse_id: str
    quantity_to_add: Decimal

    @property
    def merged_quantity(self) -> Decimal:
        return self.existing_line.quantity + self.quantity_to_add


@dataclass(frozen=True)
class CartError:
    kind: ErrorKind
    message: str
    product_id: str | None = None


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class AwaitingMergeDecision:
    conflict: MergeConflict


@dataclass(frozen=True)
class Rejected:
    error: CartError


SessionState = Union[Idle, AwaitingMergeDecision, Rejected]
