"""Application service: Update Quantity use case."""

from __future__ import annotations

from decimal import Decimal

from poscart.domain.exceptions import InvalidQuantityError, ProductNotFoundError
from poscart.domain.model.cart import Cart, CartLine
from poscart.domain.model.value_objects import format_quantity, to_quantity
from poscart.domain.repository.catalog_repository import CatalogRepository
from poscart.domain.service.stock_availability_service import (
    StockAvailabilityService,
)


class UpdateQuantityHandler:

    def __init__(
        self,
        catalog_repo: CatalogRepository,
        cart: Cart,
        stock_service: StockAvailabilityService,
    ) -> None:
        self._catalog_repo = catalog_repo
        self._cart = cart
        self._stock_service = stock_service

    def handle(self, line_id: str, quantity: str | float | int | Decimal) -> CartLine:
        """Set a line's package count.

        The line's own current allocation is left out of the stock check,
        so the new quantity is validated as a replacement, not an addition.
        Re-setting the current quantity is a no-op and is never re-validated.
        Zero is accepted; the summary flags it against the minimum purchase.
        """
        line = self._cart.find(line_id)
        product = self._catalog_repo.get_product(line.product_id)
        if product is None:
            raise ProductNotFoundError(
                f"Product '{line.product_id}' not found in the catalog",
                product_id=line.product_id,
            )

        new_quantity = to_quantity(quantity)
        if new_quantity == line.quantity:
            return line

        if (
            not product.allows_fractional(line.package)
            and new_quantity != new_quantity.to_integral_value()
        ):
            raise InvalidQuantityError(
                f"{line.package_name} of {product.name} must be sold in whole units "
                f"(got {format_quantity(new_quantity)})",
                product_id=product.id,
            )

        self._cart.assert_quantity_allowed(new_quantity)
        self._stock_service.require(
            self._cart,
            product.id,
            line.warehouse_id,
            new_quantity * line.package.factor,
            exclude_line_ids={line.id},
        )
        return self._cart.set_quantity(line.id, new_quantity)
