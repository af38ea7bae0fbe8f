"""Cart session — the entry point the presentation layer talks to.

Owns one cart for the lifetime of a point-of-sale session and wires the
use-case handlers around it.  Every mutating call runs to completion and
returns a ``CartResult``; handlers signal refusals by raising
``DomainException`` and the session turns those into rejected results,
so callers never have to catch business-rule errors.

The session is a small state machine (see ``session_state``).  While a
merge/split decision is pending every mutating entry point is refused
with ``MergeConflictPending`` until ``resolve_merge_conflict`` answers it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from decimal import Decimal
from typing import Union

from poscart.application.add_line import AddLineHandler
from poscart.application.dto import (
    CartLineDTO,
    CartResult,
    CartSummaryDTO,
    MergeDecisionDTO,
    ReceiptDTO,
)
from poscart.application.finalize_cart import FinalizeCartHandler
from poscart.application.remove_line import RemoveLineHandler
from poscart.application.resolve_merge_conflict import ResolveMergeConflictHandler
from poscart.application.show_cart import ShowCartHandler
from poscart.application.update_package import UpdatePackageHandler
from poscart.application.update_quantity import UpdateQuantityHandler
from poscart.application.update_warehouse import UpdateWarehouseHandler
from poscart.domain.exceptions import (
    DomainException,
    ErrorKind,
    NoPendingDecisionError,
    ProductNotFoundError,
)
from poscart.domain.model.cart import Cart, CartLimits, CartLine
from poscart.domain.model.session_state import (
    AwaitingMergeDecision,
    CartError,
    Idle,
    MergeChoice,
    MergeConflict,
    Rejected,
    SessionState,
)
from poscart.domain.model.value_objects import to_quantity
from poscart.domain.repository.catalog_repository import CatalogRepository
from poscart.domain.service.cart_validation_service import CartValidationService
from poscart.domain.service.line_allocation_service import LineAllocationService
from poscart.domain.service.stock_availability_service import (
    StockAvailabilityService,
)

logger = logging.getLogger(__name__)

Outcome = Union[CartLine, MergeConflict, ReceiptDTO, None]


class CartSession:

    def __init__(
        self,
        catalog_repo: CatalogRepository,
        limits: CartLimits | None = None,
    ) -> None:
        self._catalog_repo = catalog_repo
        self._cart = Cart(limits=limits or CartLimits())
        self._state: SessionState = Idle()

        stock_service = StockAvailabilityService(catalog_repo)
        allocation_service = LineAllocationService(catalog_repo, stock_service)
        validation_service = CartValidationService(catalog_repo)

        self._add_line = AddLineHandler(catalog_repo, self._cart, allocation_service)
        self._resolve = ResolveMergeConflictHandler(self._cart, allocation_service)
        self._update_quantity = UpdateQuantityHandler(catalog_repo, self._cart, stock_service)
        self._update_package = UpdatePackageHandler(catalog_repo, self._cart, stock_service)
        self._update_warehouse = UpdateWarehouseHandler(catalog_repo, self._cart, stock_service)
        self._remove_line = RemoveLineHandler(self._cart)
        self._finalize = FinalizeCartHandler(self._cart, validation_service)
        self._show = ShowCartHandler(catalog_repo, self._cart, validation_service)

    # --- State ----------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def pending_decision(self) -> MergeDecisionDTO | None:
        if isinstance(self._state, AwaitingMergeDecision):
            return self._to_decision_dto(self._state.conflict)
        return None

    @property
    def last_error(self) -> CartError | None:
        if isinstance(self._state, Rejected):
            return self._state.error
        return None

    # --- Queries --------------------------------------------------------------

    def get_lines(self) -> tuple[CartLine, ...]:
        return self._cart.lines

    def view_lines(self, search: str | None = None) -> list[CartLineDTO]:
        return self._show.lines(search)

    def get_summary(self) -> CartSummaryDTO:
        return self._show.summary()

    # --- Commands -------------------------------------------------------------

    def add_line(self, product_id: str, package_name: str | None = None) -> CartResult:
        return self._run(
            f"add {product_id} ({package_name or 'default package'})",
            lambda: self._add_line.handle(product_id, package_name),
        )

    def update_quantity(self, line_id: str, quantity: str | float | int | Decimal) -> CartResult:
        """Set a line's quantity.

        Setting the quantity a line already has leaves both the cart and
        the session state as they are.
        """
        if not isinstance(self._state, AwaitingMergeDecision) and self._is_current_quantity(
            line_id, quantity
        ):
            logger.debug("Quantity of %s unchanged", line_id)
            return CartResult.accepted(line_id=line_id)
        return self._run(
            f"set quantity of {line_id} to {quantity}",
            lambda: self._update_quantity.handle(line_id, quantity),
        )

    def increment_quantity(self, line_id: str) -> CartResult:
        """One step up (0.5 for fractional packages, 1 otherwise)."""
        return self._run(
            f"increment {line_id}",
            lambda: self._update_quantity.handle(line_id, self._stepped(line_id, 1)),
        )

    def decrement_quantity(self, line_id: str) -> CartResult:
        """One step down, never below the line's minimum quantity."""
        return self._run(
            f"decrement {line_id}",
            lambda: self._update_quantity.handle(line_id, self._stepped(line_id, -1)),
        )

    def update_package(self, line_id: str, package_name: str) -> CartResult:
        return self._run(
            f"switch {line_id} to package {package_name}",
            lambda: self._update_package.handle(line_id, package_name),
        )

    def update_warehouse(self, line_id: str, warehouse_id: str) -> CartResult:
        return self._run(
            f"move {line_id} to warehouse {warehouse_id}",
            lambda: self._update_warehouse.handle(line_id, warehouse_id),
        )

    def remove_line(self, line_id: str) -> CartResult:
        refused = self._guard(f"remove {line_id}")
        if refused is not None:
            return refused

        previous = self._state
        try:
            removed = self._remove_line.handle(line_id)
        except DomainException as exc:
            return self._reject(exc, f"remove {line_id}")

        # Only an error attributed to the removed product goes away with it.
        if not (isinstance(previous, Rejected) and previous.error.product_id != removed.product_id):
            self._state = Idle()
        logger.info("Removed %s (%s)", removed.id, removed.product_id)
        return CartResult.accepted(line_id=removed.id)

    def finalize(self) -> CartResult:
        return self._run("finalize sale", self._finalize.handle)

    def resolve_merge_conflict(self, choice: MergeChoice | str) -> CartResult:
        """Answer the pending merge/split decision.

        The decision is consumed whatever the outcome: a commit that fails
        re-validation is reported as a rejection, not kept pending.  Text
        choices are case-insensitive; an unknown one is refused without
        touching the pending decision.
        """
        try:
            choice = MergeChoice(choice.strip().lower() if isinstance(choice, str) else choice)
        except ValueError:
            logger.info("Refused unknown merge choice %r", choice)
            return CartResult.rejected(
                CartError(
                    ErrorKind.INVALID_CHOICE,
                    f"Unknown merge choice {choice!r}; answer merge, separate or cancel",
                )
            )
        if not isinstance(self._state, AwaitingMergeDecision):
            return self._reject(
                NoPendingDecisionError("There is no pending merge decision"),
                f"resolve ({choice.value})",
            )

        conflict = self._state.conflict
        self._state = Idle()
        return self._run(
            f"resolve {conflict.product.id} ({choice.value})",
            lambda: self._resolve.handle(conflict, choice),
        )

    # --- Internal helpers -----------------------------------------------------

    def _guard(self, action: str) -> CartResult | None:
        """Refuse any mutation while a merge decision is pending."""
        if not isinstance(self._state, AwaitingMergeDecision):
            return None
        error = CartError(
            ErrorKind.MERGE_CONFLICT_PENDING,
            "Resolve the pending merge decision before changing the cart",
            self._state.conflict.product.id,
        )
        logger.info("Refused %s: merge decision pending", action)
        return CartResult.rejected(error)

    def _run(self, action: str, operation: Callable[[], Outcome]) -> CartResult:
        refused = self._guard(action)
        if refused is not None:
            return refused

        try:
            outcome = operation()
        except DomainException as exc:
            return self._reject(exc, action)

        if isinstance(outcome, MergeConflict):
            self._state = AwaitingMergeDecision(outcome)
            logger.info(
                "Merge decision required for %s: line %s or warehouse %s",
                outcome.product.id,
                outcome.existing_line.id,
                outcome.alternative_warehouse_id,
            )
            return CartResult.decision_required(self._to_decision_dto(outcome))

        self._state = Idle()
        logger.info("Committed %s", action)
        if isinstance(outcome, ReceiptDTO):
            logger.info("Sale finalized, total %s", outcome.total)
            return CartResult.accepted(receipt=outcome)
        if isinstance(outcome, CartLine):
            return CartResult.accepted(line_id=outcome.id)
        return CartResult.accepted()

    def _reject(self, exc: DomainException, action: str) -> CartResult:
        error = CartError(exc.kind, exc.message, exc.product_id)
        self._state = Rejected(error)
        logger.info("Rejected %s: [%s] %s", action, exc.kind.value, exc.message)
        return CartResult.rejected(error)

    def _is_current_quantity(self, line_id: str, quantity: str | float | int | Decimal) -> bool:
        # Unknown lines and bad input are reported by the handler instead.
        try:
            return to_quantity(quantity) == self._cart.find(line_id).quantity
        except DomainException:
            return False

    def _stepped(self, line_id: str, direction: int) -> Decimal:
        line = self._cart.find(line_id)
        product = self._catalog_repo.get_product(line.product_id)
        if product is None:
            raise ProductNotFoundError(
                f"Product '{line.product_id}' not found in the catalog",
                product_id=line.product_id,
            )
        quantity = line.quantity + direction * product.quantity_step(line.package)
        if direction < 0:
            quantity = max(product.min_quantity_in(line.package), quantity)
        return quantity

    def _to_decision_dto(self, conflict: MergeConflict) -> MergeDecisionDTO:
        existing = conflict.existing_line
        return MergeDecisionDTO(
            product_id=conflict.product.id,
            product_name=conflict.product.name,
            package_name=conflict.package.name,
            existing_line_id=existing.id,
            existing_warehouse_id=existing.warehouse_id,
            existing_warehouse_name=(
                self._catalog_repo.warehouse_name(existing.warehouse_id)
                if existing.warehouse_id is not None
                else None
            ),
            alternative_warehouse_id=conflict.alternative_warehouse_id,
            alternative_warehouse_name=self._catalog_repo.warehouse_name(
                conflict.alternative_warehouse_id
            ),
            quantity_to_add=conflict.quantity_to_add,
            merged_quantity=conflict.merged_quantity,
        )
