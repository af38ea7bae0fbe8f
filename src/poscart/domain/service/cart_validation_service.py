"""Domain service: Cart Validation.

Derives every line's validation issues from scratch, from the catalog
snapshot and the current lines.  Nothing is cached between calls: the
cart and the catalog are small and in memory, and recomputing keeps the
reported issues from ever disagreeing with the lines they describe.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from poscart.domain.exceptions import ErrorKind
from poscart.domain.model.cart import Cart, CartLine
from poscart.domain.model.product import Product
from poscart.domain.model.value_objects import (
    MIN_PURCHASE_EPSILON,
    STOCK_EPSILON,
    format_quantity,
)
from poscart.domain.repository.catalog_repository import CatalogRepository


@dataclass(frozen=True)
class LineIssue:
    kind: ErrorKind
    message: str


class CartValidationService:

    def __init__(self, catalog_repo: CatalogRepository) -> None:
        self._catalog_repo = catalog_repo

    def validate(self, cart: Cart) -> dict[str, list[LineIssue]]:
        """Return the issues of every line that has any, keyed by line id."""
        issues: dict[str, list[LineIssue]] = {}
        for line in cart.lines:
            product = self._catalog_repo.get_product(line.product_id)
            if product is None:
                continue
            found = [
                issue
                for issue in (
                    self._stock_issue(cart, product, line),
                    self._minimum_issue(product, line),
                )
                if issue is not None
            ]
            if found:
                issues[line.id] = found
        return issues

    @staticmethod
    def _stock_issue(cart: Cart, product: Product, line: CartLine) -> LineIssue | None:
        if not product.track_stock:
            return None

        in_cart = cart.allocated(product.id, line.warehouse_id)
        stock = product.stock_in(line.warehouse_id) if line.warehouse_id else Decimal("0")

        if in_cart > stock + STOCK_EPSILON:
            return LineIssue(
                ErrorKind.STOCK_INSUFFICIENT,
                f"Insufficient stock: {in_cart:.2f} / {format_quantity(stock)} {product.base_unit}",
            )

        remaining = stock - in_cart
        minimum = product.blocking_minimum
        if minimum > 0 and STOCK_EPSILON < remaining < minimum - STOCK_EPSILON:
            return LineIssue(
                ErrorKind.ORPHAN_STOCK_VIOLATION,
                f"Unsellable remainder: {remaining:.2f} < Min ({format_quantity(minimum)})",
            )
        return None

    @staticmethod
    def _minimum_issue(product: Product, line: CartLine) -> LineIssue | None:
        if not product.min_purchase_quantity:
            return None

        minimum = product.min_purchase_quantity
        if line.base_quantity >= minimum - MIN_PURCHASE_EPSILON:
            return None

        min_packages = minimum / line.package.factor
        if min_packages == min_packages.to_integral_value():
            display = format_quantity(min_packages)
        else:
            display = f"{min_packages:.2f}"
        return LineIssue(
            ErrorKind.MIN_PURCHASE_NOT_MET,
            f"Minimum quantity: {format_quantity(minimum)} {product.base_unit} "
            f"(~{display} {line.package_name})",
        )
