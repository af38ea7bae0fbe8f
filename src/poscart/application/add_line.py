"""Application service: Add Line use case.

Sizes the addition against the minimum purchase, lets the allocation
service pick a warehouse, and commits.  When the addition could go
either to the existing line or to a new line elsewhere, nothing is
committed and the conflict is handed back for the caller to resolve.
"""

from __future__ import annotations

from poscart.domain.exceptions import ProductNotFoundError
from poscart.domain.model.cart import Cart, CartLine
from poscart.domain.model.session_state import MergeConflict
from poscart.domain.repository.catalog_repository import CatalogRepository
from poscart.domain.service.line_allocation_service import LineAllocationService


class AddLineHandler:

    def __init__(
        self,
        catalog_repo: CatalogRepository,
        cart: Cart,
        allocation_service: LineAllocationService,
    ) -> None:
        self._catalog_repo = catalog_repo
        self._cart = cart
        self._allocation_service = allocation_service

    def handle(self, product_id: str, package_name: str | None = None) -> CartLine | MergeConflict:
        """Add one sellable quantity of a product to the cart.

        Steps:
        1. Resolve product and package (first package by default).
        2. Size the addition: one package, raised to the minimum purchase.
        3. Plan the warehouse; stop early on a merge/split conflict.
        4. Commit (merge into the matching line or append a new one).
        """
        product = self._catalog_repo.get_product(product_id)
        if product is None:
            raise ProductNotFoundError(
                f"Product '{product_id}' not found in the catalog", product_id=product_id
            )
        package = product.package(package_name) if package_name else product.default_package

        quantity = product.initial_quantity(package)
        plan = self._allocation_service.plan_addition(self._cart, product, package, quantity)
        if isinstance(plan, MergeConflict):
            return plan

        return self._allocation_service.commit_addition(
            self._cart, product, package, plan, quantity
        )
