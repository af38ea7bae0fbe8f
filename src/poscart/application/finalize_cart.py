"""Application service: Finalize Cart use case.

A sale can only be closed when the summary reports nothing wrong: no
line with a stock, orphan-stock or minimum-purchase issue, and a total
within the limit.  The issues are taken from the same validation the
summary shows, so finalize refuses exactly what the summary flags.
"""

from __future__ import annotations

from poscart.application.dto import ReceiptDTO, ReceiptLineDTO
from poscart.domain.exceptions import (
    EmptyCartError,
    TotalValueExceededError,
    exception_for,
)
from poscart.domain.model.cart import Cart
from poscart.domain.service.cart_validation_service import CartValidationService


class FinalizeCartHandler:

    def __init__(self, cart: Cart, validation_service: CartValidationService) -> None:
        self._cart = cart
        self._validation_service = validation_service

    def handle(self) -> ReceiptDTO:
        if len(self._cart) == 0:
            raise EmptyCartError("The cart is empty")

        issues = self._validation_service.validate(self._cart)
        if issues:
            first = next(iter(issues.values()))[0]
            details = "; ".join(
                f"{line_id}: {issue.message}"
                for line_id, line_issues in issues.items()
                for issue in line_issues
            )
            raise exception_for(
                first.kind,
                f"Check the cart lines with errors ({details})",
            )

        if self._cart.total_exceeded:
            raise TotalValueExceededError(
                f"The total value {self._cart.total} exceeds the limit of "
                f"{self._cart.limits.max_total_value}"
            )

        receipt = self._to_receipt(self._cart)
        self._cart.clear()
        return receipt

    # --- Mapping --------------------------------------------------------------

    @staticmethod
    def _to_receipt(cart: Cart) -> ReceiptDTO:
        return ReceiptDTO(
            items=[
                ReceiptLineDTO(
                    product_name=line.product_name,
                    package_name=line.package_name,
                    quantity=line.quantity,
                    unit_price=str(line.unit_price),
                    line_total=str(line.line_total),
                    warehouse_id=line.warehouse_id,
                )
                for line in cart.lines
            ],
            total=str(cart.total),
        )
