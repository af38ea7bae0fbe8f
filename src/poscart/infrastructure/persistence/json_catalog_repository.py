"""JSON-file-backed implementation of CatalogRepository.

The file is read once, when the repository is built: a cart session
works against a point-in-time snapshot of the catalog and never sees
later edits to the file.
"""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path

from poscart.domain.exceptions import ValidationError
from poscart.domain.model.product import (
    Batch,
    Package,
    Product,
    ProductKind,
    StockLevel,
    StockPolicy,
)
from poscart.domain.model.value_objects import DEFAULT_CURRENCY, Money
from poscart.domain.model.warehouse import Warehouse, WarehouseType
from poscart.domain.repository.catalog_repository import CatalogRepository


class JsonCatalogRepository(CatalogRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        raw = self._load_raw()
        currency = raw.get("currency", DEFAULT_CURRENCY)
        self._warehouses = [self._to_warehouse(item) for item in raw.get("warehouses", [])]
        self._products = {
            item["id"]: self._to_product(item, currency) for item in raw.get("products", [])
        }

    # --- CatalogRepository interface ------------------------------------------

    def get_product(self, product_id: str) -> Product | None:
        return self._products.get(product_id)

    def list_products(self) -> list[Product]:
        return list(self._products.values())

    def get_warehouse(self, warehouse_id: str) -> Warehouse | None:
        for warehouse in self._warehouses:
            if warehouse.id == warehouse_id:
                return warehouse
        return None

    def list_warehouses(self) -> list[Warehouse]:
        return list(self._warehouses)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_warehouse(raw: dict) -> Warehouse:
        return Warehouse(
            id=raw["id"],
            name=raw["name"],
            type=WarehouseType(raw.get("type", WarehouseType.GENERAL.value)),
        )

    @staticmethod
    def _to_product(raw: dict, currency: str) -> Product:
        def money(value) -> Money:
            return Money(Decimal(str(value)), currency)

        def optional_decimal(value) -> Decimal | None:
            return Decimal(str(value)) if value is not None else None

        packages = tuple(
            Package(
                name=pkg["name"],
                factor=Decimal(str(pkg["factor"])),
                ean=pkg.get("ean", ""),
                price=money(pkg["price"]) if pkg.get("price") is not None else None,
            )
            for pkg in raw.get("packages", [])
        )
        if not packages:
            raise ValidationError(f"Product '{raw['id']}' has no packages")

        return Product(
            id=raw["id"],
            name=raw["name"],
            price=money(raw["price"]),
            base_unit=raw.get("base_unit", "UN"),
            packages=packages,
            stock_levels=tuple(
                StockLevel(
                    warehouse_id=level["warehouse_id"],
                    quantity=Decimal(str(level["quantity"])),
                )
                for level in raw.get("stock_levels", [])
            ),
            track_stock=raw.get("track_stock", True),
            min_purchase_quantity=optional_decimal(raw.get("min_purchase_quantity")),
            kind=ProductKind(raw.get("kind", ProductKind.GOOD.value)),
            description=raw.get("description", ""),
            stock_policy=(
                StockPolicy(raw["stock_policy"]) if raw.get("stock_policy") else None
            ),
            min_stock_level=optional_decimal(raw.get("min_stock_level")),
            batches=tuple(
                Batch(
                    id=batch["id"],
                    number=batch["number"],
                    expiry_date=batch["expiry_date"],
                    quantity=Decimal(str(batch["quantity"])),
                    warehouse_id=batch["warehouse_id"],
                )
                for batch in raw.get("batches", [])
            ),
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> dict:
        if not self._file_path.exists():
            raise ValidationError(f"Catalog file not found: {self._file_path}")
        return json.loads(self._file_path.read_text(encoding="utf-8"))
