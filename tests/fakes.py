"""In-memory fakes and catalog builders for testing.

The fake repository implements the same abstract interface as the JSON
repository but keeps everything in a dict.  No file I/O, no side effects.
"""

from __future__ import annotations

from decimal import Decimal

from poscart.domain.model.product import Package, Product, ProductKind, StockLevel
from poscart.domain.model.value_objects import Money
from poscart.domain.model.warehouse import Warehouse, WarehouseType
from poscart.domain.repository.catalog_repository import CatalogRepository


class FakeCatalogRepository(CatalogRepository):

    def __init__(
        self,
        products: list[Product] | None = None,
        warehouses: list[Warehouse] | None = None,
    ) -> None:
        self._products: dict[str, Product] = {p.id: p for p in products or []}
        self._warehouses: list[Warehouse] = list(warehouses or [])

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


WAREHOUSES = [
    Warehouse(id="wh_1", name="Main Warehouse", type=WarehouseType.GENERAL),
    Warehouse(id="wh_2", name="Store A", type=WarehouseType.STORE),
]


def make_product(
    product_id: str,
    *,
    name: str | None = None,
    price: str = "100.00",
    base_unit: str = "UN",
    packages: list[tuple] | None = None,
    stock: dict[str, int | str] | None = None,
    track_stock: bool = True,
    min_purchase: int | str | None = None,
    kind: ProductKind = ProductKind.GOOD,
) -> Product:
    """Build a product from compact package tuples.

    ``packages`` holds ``(name, factor)`` or ``(name, factor, price)`` tuples;
    ``stock`` maps warehouse id to quantity, in catalog order.
    """
    package_items = packages or [("UN", 1)]
    return Product(
        id=product_id,
        name=name or f"Product {product_id}",
        price=Money.of(price),
        base_unit=base_unit,
        packages=tuple(
            Package(
                name=item[0],
                factor=Decimal(str(item[1])),
                ean=f"{product_id}-{item[0]}",
                price=Money.of(item[2]) if len(item) > 2 else None,
            )
            for item in package_items
        ),
        stock_levels=tuple(
            StockLevel(warehouse_id=wh, quantity=Decimal(str(qty)))
            for wh, qty in (stock or {}).items()
        ),
        track_stock=track_stock,
        min_purchase_quantity=Decimal(str(min_purchase)) if min_purchase is not None else None,
        kind=kind,
    )


def pos_catalog() -> FakeCatalogRepository:
    """The four-product store catalog used across the cart tests."""
    return FakeCatalogRepository(
        products=[
            make_product(
                "prod_1", name="Orange Juice 1L", price="850.00",
                packages=[("UN", 1, "850.00"), ("CX", 6, "5000.00")],
                stock={"wh_1": 100, "wh_2": 20},
                min_purchase=12,
            ),
            make_product(
                "prod_2", name="Rice 5kg", price="4500.00", base_unit="KG",
                packages=[("SACO", 5, "4500.00")],
                stock={"wh_1": 50},
            ),
            make_product(
                "prod_3", name="AC Installation", price="25000.00", base_unit="SERV",
                packages=[("SERV", 1)],
                track_stock=False, kind=ProductKind.SERVICE,
            ),
            make_product(
                "prod_4", name="Mineral Water 1.5L", price="250.00",
                packages=[("UN", 1), ("FARDO", 6, "1400.00")],
                stock={"wh_1": 240, "wh_2": 60},
            ),
            make_product(
                "prod_5", name="Ground Beef", price="3000.00", base_unit="KG",
                packages=[("KG", 1), ("BOX", 10)],
                stock={"wh_1": "25.5"},
            ),
        ],
        warehouses=list(WAREHOUSES),
    )
