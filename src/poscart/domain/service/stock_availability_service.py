"""Domain service: Stock Availability.

Answers one question: can the cart hold ``requested`` base units of a
product from a warehouse, on top of what its other lines already draw
from that warehouse?  It is pure: it reads the catalog snapshot and the
current cart lines and never mutates either, so every mutating handler
can ask it first and commit only on a yes.

Two rules are checked, in order:
  1. Stock: the combined allocation must fit the warehouse stock.
  2. Orphan stock: what is left behind must be zero or at least one
     more minimum purchase, otherwise it could never be sold.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from poscart.domain.exceptions import ErrorKind, exception_for
from poscart.domain.model.cart import Cart
from poscart.domain.model.value_objects import STOCK_EPSILON, format_quantity
from poscart.domain.repository.catalog_repository import CatalogRepository

logger = logging.getLogger(__name__)

UNLIMITED = Decimal("Infinity")


@dataclass(frozen=True)
class StockCheck:
    allowed: bool
    available: Decimal
    kind: ErrorKind | None = None
    message: str | None = None


class StockAvailabilityService:

    def __init__(self, catalog_repo: CatalogRepository) -> None:
        self._catalog_repo = catalog_repo

    def check(
        self,
        cart: Cart,
        product_id: str,
        warehouse_id: str | None,
        requested: Decimal,
        exclude_line_ids: frozenset[str] | set[str] | tuple[str, ...] = frozenset(),
    ) -> StockCheck:
        """Check whether *requested* more base units fit in *warehouse_id*.

        Lines listed in *exclude_line_ids* are left out of the in-cart
        sum; pass the line being replaced so it is not counted twice.
        """
        product = self._catalog_repo.get_product(product_id)
        if product is None:
            return StockCheck(
                allowed=False,
                available=Decimal("0"),
                kind=ErrorKind.PRODUCT_NOT_FOUND,
                message=f"Product '{product_id}' not found in the catalog.",
            )
        if not product.track_stock:
            return StockCheck(allowed=True, available=UNLIMITED)

        stock = product.stock_in(warehouse_id) if warehouse_id is not None else Decimal("0")
        in_cart = cart.allocated(product_id, warehouse_id, frozenset(exclude_line_ids))
        total = in_cart + requested
        logger.debug(
            "Stock check %s@%s: in cart %s + requested %s vs stock %s",
            product_id, warehouse_id, in_cart, requested, stock,
        )

        if total > stock + STOCK_EPSILON:
            warehouse = self._catalog_repo.warehouse_name(warehouse_id or "")
            return StockCheck(
                allowed=False,
                available=stock,
                kind=ErrorKind.STOCK_INSUFFICIENT,
                message=(
                    f"Insufficient stock in {warehouse}. "
                    f"Available: {format_quantity(stock)} {product.base_unit}. "
                    f"Total requested: {total:.2f}."
                ),
            )

        remaining = stock - total
        minimum = product.blocking_minimum
        if minimum > 0 and STOCK_EPSILON < remaining < minimum - STOCK_EPSILON:
            return StockCheck(
                allowed=False,
                available=stock,
                kind=ErrorKind.ORPHAN_STOCK_VIOLATION,
                message=(
                    f"Operation blocked: the remaining stock "
                    f"({remaining:.2f} {product.base_unit}) would be below the "
                    f"minimum purchase ({format_quantity(minimum)} {product.base_unit}). "
                    f"Sell the whole remainder or adjust the quantity."
                ),
            )

        return StockCheck(allowed=True, available=stock)

    def require(
        self,
        cart: Cart,
        product_id: str,
        warehouse_id: str | None,
        requested: Decimal,
        exclude_line_ids: frozenset[str] | set[str] | tuple[str, ...] = frozenset(),
    ) -> None:
        """Same as ``check`` but raises the matching DomainException on refusal."""
        result = self.check(cart, product_id, warehouse_id, requested, exclude_line_ids)
        if not result.allowed:
            raise exception_for(
                result.kind,  # type: ignore[arg-type]
                result.message or "Insufficient stock.",
                product_id=product_id,
            )
