"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the presentation layer (CLI, UI) and the
application layer without exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from poscart.domain.exceptions import ErrorKind
from poscart.domain.model.session_state import CartError


class ResultStatus(Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    DECISION_REQUIRED = "decision_required"


@dataclass(frozen=True)
class WarehouseOptionDTO:
    """A warehouse a line may be moved to, with its stock for display."""

    id: str
    name: str
    stock: Decimal


@dataclass(frozen=True)
class CartLineDTO:
    """Output: a single cart line as displayed to the user."""

    id: str
    product_id: str
    product_name: str
    package_name: str
    package_names: list[str]
    quantity: Decimal
    base_quantity: Decimal
    base_unit: str
    unit_price: str  # formatted, e.g. "850.00 Kz"
    line_total: str
    warehouse_id: str | None
    warehouse_name: str | None
    track_stock: bool
    min_quantity: Decimal
    step: Decimal
    allows_fractional: bool
    warehouse_options: list[WarehouseOptionDTO] = field(default_factory=list)
    issues: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CartSummaryDTO:
    """Output: derived totals and per-line validation state."""

    total: str
    total_amount: Decimal
    max_total: str
    total_exceeded: bool
    line_count: int
    line_errors: dict[str, list[str]]
    error_kinds: dict[str, list[ErrorKind]]

    @property
    def has_line_errors(self) -> bool:
        return bool(self.line_errors)

    @property
    def can_finalize(self) -> bool:
        return self.line_count > 0 and not self.line_errors and not self.total_exceeded


@dataclass(frozen=True)
class MergeDecisionDTO:
    """Output: the choice the caller must make before the cart moves on."""

    product_id: str
    product_name: str
    package_name: str
    existing_line_id: str
    existing_warehouse_id: str | None
    existing_warehouse_name: str | None
    alternative_warehouse_id: str
    alternative_warehouse_name: str
    quantity_to_add: Decimal
    merged_quantity: Decimal


@dataclass(frozen=True)
class ReceiptLineDTO:
    product_name: str
    package_name: str
    quantity: Decimal
    unit_price: str
    line_total: str
    warehouse_id: str | None


@dataclass(frozen=True)
class ReceiptDTO:
    """Output: a finalized sale."""

    items: list[ReceiptLineDTO]
    total: str


@dataclass(frozen=True)
class CartResult:
    """Outcome of a cart operation.

    Expected business-rule refusals come back as ``REJECTED`` results,
    never as exceptions.
    """

    status: ResultStatus
    line_id: str | None = None
    error: CartError | None = None
    decision: MergeDecisionDTO | None = None
    receipt: ReceiptDTO | None = None

    @property
    def ok(self) -> bool:
        return self.status == ResultStatus.ACCEPTED

    @property
    def kind(self) -> ErrorKind | None:
        return self.error.kind if self.error is not None else None

    @staticmethod
    def accepted(line_id: str | None = None, receipt: ReceiptDTO | None = None) -> CartResult:
        return CartResult(ResultStatus.ACCEPTED, line_id=line_id, receipt=receipt)

    @staticmethod
    def rejected(error: CartError) -> CartResult:
        return CartResult(ResultStatus.REJECTED, error=error)

    @staticmethod
    def decision_required(decision: MergeDecisionDTO) -> CartResult:
        return CartResult(ResultStatus.DECISION_REQUIRED, decision=decision)
