"""Application service: Update Warehouse use case."""

from __future__ import annotations

from decimal import Decimal

from poscart.domain.exceptions import NoWarehouseAvailableError, ProductNotFoundError
from poscart.domain.model.cart import Cart, CartLine
from poscart.domain.repository.catalog_repository import CatalogRepository
from poscart.domain.service.stock_availability_service import (
    StockAvailabilityService,
)


class UpdateWarehouseHandler:

    def __init__(
        self,
        catalog_repo: CatalogRepository,
        cart: Cart,
        stock_service: StockAvailabilityService,
    ) -> None:
        self._catalog_repo = catalog_repo
        self._cart = cart
        self._stock_service = stock_service

    def handle(self, line_id: str, warehouse_id: str) -> CartLine:
        """Draw a line's stock from another warehouse.

        The line's base quantity is re-validated against the destination,
        and the stock it frees in the old warehouse must not become an
        unsellable remainder.  If the destination already has a line for
        the same package, the two are merged and validated as one
        allocation.
        """
        line = self._cart.find(line_id)
        if line.warehouse_id == warehouse_id:
            return line

        product = self._catalog_repo.get_product(line.product_id)
        if product is None:
            raise ProductNotFoundError(
                f"Product '{line.product_id}' not found in the catalog",
                product_id=line.product_id,
            )
        if self._catalog_repo.get_warehouse(warehouse_id) is None:
            raise NoWarehouseAvailableError(
                f"Unknown warehouse '{warehouse_id}'", product_id=product.id
            )

        # What the line leaves behind in its old warehouse must stay sellable too.
        self._stock_service.require(
            self._cart,
            product.id,
            line.warehouse_id,
            Decimal("0"),
            exclude_line_ids={line.id},
        )

        target = self._cart.line_at(
            product.id, line.package_name, warehouse_id, exclude_id=line.id
        )

        if target is not None:
            merged_quantity = target.quantity + line.quantity
            self._cart.assert_quantity_allowed(merged_quantity)
            self._stock_service.require(
                self._cart,
                product.id,
                warehouse_id,
                merged_quantity * line.package.factor,
                exclude_line_ids={line.id, target.id},
            )
            return self._cart.merge_into(line.id, target.id, merged_quantity)

        self._stock_service.require(
            self._cart,
            product.id,
            warehouse_id,
            line.base_quantity,
            exclude_line_ids={line.id},
        )
        return self._cart.move(line.id, warehouse_id)
