"""Domain service: Line Allocation.

Decides where an addition to the cart should draw its stock from and
commits it.  Planning never mutates the cart; committing validates
everything first (limits, then stock) and only then touches the cart,
so a refused addition leaves no trace.
"""

from __future__ import annotations

from decimal import Decimal

from poscart.domain.exceptions import (
    NoWarehouseAvailableError,
    StockInsufficientError,
)
from poscart.domain.model.cart import Cart, CartLine
from poscart.domain.model.product import Package, Product
from poscart.domain.model.session_state import MergeConflict
from poscart.domain.model.value_objects import format_quantity
from poscart.domain.repository.catalog_repository import CatalogRepository
from poscart.domain.service.stock_availability_service import (
    StockAvailabilityService,
)


class LineAllocationService:

    def __init__(
        self,
        catalog_repo: CatalogRepository,
        stock_service: StockAvailabilityService,
    ) -> None:
        self._catalog_repo = catalog_repo
        self._stock_service = stock_service

    # --- Planning -------------------------------------------------------------

    def plan_addition(
        self,
        cart: Cart,
        product: Product,
        package: Package,
        quantity: Decimal,
    ) -> str | MergeConflict:
        """Pick the warehouse for adding *quantity* packages, or report a conflict.

        Returns the warehouse id to commit to, or a ``MergeConflict`` when
        extending the existing line and opening a new one elsewhere are
        both possible and the caller has to choose.
        """
        if not product.track_stock:
            return self._untracked_warehouse(cart, product, package)

        base = quantity * package.factor
        existing = cart.first_for_package(product.id, package.name)

        if existing is not None:
            can_merge = self._stock_service.check(
                cart, product.id, existing.warehouse_id, base
            ).allowed
            alternative = self._first_warehouse_with_room(
                cart, product, base, skip=existing.warehouse_id
            )

            if can_merge and alternative is not None:
                return MergeConflict(
                    product=product,
                    package=package,
                    existing_line=existing,
                    alternative_warehouse_id=alternative,
                    quantity_to_add=quantity,
                )
            if can_merge:
                return existing.warehouse_id
            if alternative is not None:
                return alternative
            raise StockInsufficientError(
                f"Insufficient stock to add {product.name} ({package.name}). "
                f"Total in system: {format_quantity(product.total_stock)} {product.base_unit}.",
                product_id=product.id,
            )

        warehouse_id = self._first_warehouse_with_room(cart, product, base)
        if warehouse_id is None:
            raise NoWarehouseAvailableError(
                f"No stock available to add {product.name} ({package.name}). "
                f"Total in system: {format_quantity(product.total_stock)} {product.base_unit}.",
                product_id=product.id,
            )
        return warehouse_id

    # --- Commit ---------------------------------------------------------------

    def commit_addition(
        self,
        cart: Cart,
        product: Product,
        package: Package,
        warehouse_id: str | None,
        quantity: Decimal,
    ) -> CartLine:
        """Add *quantity* packages at *warehouse_id*, merging into a matching line."""
        current = cart.line_at(product.id, package.name, warehouse_id)

        if current is not None:
            new_quantity = current.quantity + quantity
            cart.assert_quantity_allowed(new_quantity)
            self._stock_service.require(
                cart, product.id, warehouse_id,
                new_quantity * package.factor,
                exclude_line_ids={current.id},
            )
            return cart.set_quantity(current.id, new_quantity)

        cart.assert_can_add_line()
        cart.assert_quantity_allowed(quantity)
        self._stock_service.require(
            cart, product.id, warehouse_id, quantity * package.factor
        )
        return cart.add_line(product, package, warehouse_id, quantity)

    # --- Internal helpers -----------------------------------------------------

    def _first_warehouse_with_room(
        self,
        cart: Cart,
        product: Product,
        base: Decimal,
        skip: str | None = None,
    ) -> str | None:
        for level in product.stock_levels:
            if level.warehouse_id == skip:
                continue
            if self._stock_service.check(cart, product.id, level.warehouse_id, base).allowed:
                return level.warehouse_id
        return None

    def _untracked_warehouse(self, cart: Cart, product: Product, package: Package) -> str:
        existing = cart.first_for_package(product.id, package.name)
        if existing is not None and existing.warehouse_id is not None:
            return existing.warehouse_id
        warehouses = self._catalog_repo.list_warehouses()
        if not warehouses:
            raise NoWarehouseAvailableError(
                "No warehouse configured.", product_id=product.id
            )
        return warehouses[0].id
