"""Application service: Update Package use case.

Switching a line to another package keeps its package count and
recomputes the base quantity with the new factor.  When a line for the
same product, warehouse and new package already exists the two lines
are merged, and the combined allocation is validated as one.
"""

from __future__ import annotations

from poscart.domain.exceptions import InvalidQuantityError, ProductNotFoundError
from poscart.domain.model.cart import Cart, CartLine
from poscart.domain.repository.catalog_repository import CatalogRepository
from poscart.domain.service.stock_availability_service import (
    StockAvailabilityService,
)


class UpdatePackageHandler:

    def __init__(
        self,
        catalog_repo: CatalogRepository,
        cart: Cart,
        stock_service: StockAvailabilityService,
    ) -> None:
        self._catalog_repo = catalog_repo
        self._cart = cart
        self._stock_service = stock_service

    def handle(self, line_id: str, package_name: str) -> CartLine:
        """Change the package of a line, merging on collision.

        Returns the surviving line (the merge target when lines merge).
        """
        line = self._cart.find(line_id)
        product = self._catalog_repo.get_product(line.product_id)
        if product is None:
            raise ProductNotFoundError(
                f"Product '{line.product_id}' not found in the catalog",
                product_id=line.product_id,
            )
        package = product.package(package_name)
        if package.name == line.package_name:
            return line

        if (
            not product.allows_fractional(package)
            and line.quantity != line.quantity.to_integral_value()
        ):
            raise InvalidQuantityError(
                f"{package.name} of {product.name} must be sold in whole units; "
                f"adjust the quantity before switching package",
                product_id=product.id,
            )

        target = self._cart.line_at(
            product.id, package.name, line.warehouse_id, exclude_id=line.id
        )

        if target is not None:
            merged_quantity = target.quantity + line.quantity
            self._cart.assert_quantity_allowed(merged_quantity)
            self._stock_service.require(
                self._cart,
                product.id,
                line.warehouse_id,
                merged_quantity * package.factor,
                exclude_line_ids={line.id, target.id},
            )
            return self._cart.merge_into(line.id, target.id, merged_quantity)

        self._stock_service.require(
            self._cart,
            product.id,
            line.warehouse_id,
            line.quantity * package.factor,
            exclude_line_ids={line.id},
        )
        return self._cart.change_package(line.id, product, package)
