"""Application service: Resolve Merge Conflict use case."""

from __future__ import annotations

from poscart.domain.model.cart import Cart, CartLine
from poscart.domain.model.session_state import MergeChoice, MergeConflict
from poscart.domain.service.line_allocation_service import LineAllocationService


class ResolveMergeConflictHandler:

    def __init__(self, cart: Cart, allocation_service: LineAllocationService) -> None:
        self._cart = cart
        self._allocation_service = allocation_service

    def handle(self, conflict: MergeConflict, choice: MergeChoice) -> CartLine | None:
        """Apply the caller's answer to a pending merge/split decision.

        ``MERGE`` extends the existing line in its own warehouse,
        ``SEPARATE`` draws the addition from the alternative warehouse,
        ``CANCEL`` leaves the cart alone.  Both commits are re-validated.
        """
        if choice == MergeChoice.CANCEL:
            return None

        if choice == MergeChoice.MERGE:
            warehouse_id = conflict.existing_line.warehouse_id
        else:
            warehouse_id = conflict.alternative_warehouse_id

        return self._allocation_service.commit_addition(
            self._cart,
            conflict.product,
            conflict.package,
            warehouse_id,
            conflict.quantity_to_add,
        )
