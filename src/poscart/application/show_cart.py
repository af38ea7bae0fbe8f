"""Application service: Show Cart use case (query).

Recomputes the summary and every line's validation on each call.
"""

from __future__ import annotations

from decimal import Decimal

from poscart.application.dto import CartLineDTO, CartSummaryDTO, WarehouseOptionDTO
from poscart.domain.model.cart import Cart, CartLine
from poscart.domain.model.product import Product
from poscart.domain.repository.catalog_repository import CatalogRepository
from poscart.domain.service.cart_validation_service import CartValidationService


class ShowCartHandler:

    def __init__(
        self,
        catalog_repo: CatalogRepository,
        cart: Cart,
        validation_service: CartValidationService,
    ) -> None:
        self._catalog_repo = catalog_repo
        self._cart = cart
        self._validation_service = validation_service

    def summary(self) -> CartSummaryDTO:
        issues = self._validation_service.validate(self._cart)
        total = self._cart.total
        return CartSummaryDTO(
            total=str(total),
            total_amount=total.amount,
            max_total=str(self._cart.limits.max_total_value),
            total_exceeded=self._cart.total_exceeded,
            line_count=len(self._cart),
            line_errors={
                line_id: [issue.message for issue in line_issues]
                for line_id, line_issues in issues.items()
            },
            error_kinds={
                line_id: [issue.kind for issue in line_issues]
                for line_id, line_issues in issues.items()
            },
        )

    def lines(self, search: str | None = None) -> list[CartLineDTO]:
        """Cart lines for display, optionally filtered by product name or id."""
        issues = self._validation_service.validate(self._cart)
        needle = (search or "").strip().lower()
        result: list[CartLineDTO] = []
        for line in self._cart.lines:
            if needle and needle not in line.product_name.lower() and needle not in line.product_id.lower():
                continue
            product = self._catalog_repo.get_product(line.product_id)
            if product is None:
                continue
            result.append(
                self._to_dto(line, product, [i.message for i in issues.get(line.id, [])])
            )
        return result

    # --- Mapping --------------------------------------------------------------

    def _to_dto(self, line: CartLine, product: Product, issues: list[str]) -> CartLineDTO:
        return CartLineDTO(
            id=line.id,
            product_id=line.product_id,
            product_name=line.product_name,
            package_name=line.package_name,
            package_names=[pkg.name for pkg in product.packages],
            quantity=line.quantity,
            base_quantity=line.base_quantity,
            base_unit=product.base_unit,
            unit_price=str(line.unit_price),
            line_total=str(line.line_total),
            warehouse_id=line.warehouse_id,
            warehouse_name=(
                self._catalog_repo.warehouse_name(line.warehouse_id)
                if line.warehouse_id is not None
                else None
            ),
            track_stock=product.track_stock,
            min_quantity=product.min_quantity_in(line.package),
            step=product.quantity_step(line.package),
            allows_fractional=product.allows_fractional(line.package),
            warehouse_options=self._warehouse_options(line, product),
            issues=issues,
        )

    def _warehouse_options(self, line: CartLine, product: Product) -> list[WarehouseOptionDTO]:
        """Current warehouse plus every warehouse holding stock of the product."""
        if not product.track_stock:
            return []
        options: list[WarehouseOptionDTO] = []
        for warehouse in self._catalog_repo.list_warehouses():
            stock = product.stock_in(warehouse.id)
            if warehouse.id == line.warehouse_id or stock > Decimal("0"):
                options.append(
                    WarehouseOptionDTO(id=warehouse.id, name=warehouse.name, stock=stock)
                )
        return options
