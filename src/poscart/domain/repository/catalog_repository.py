"""Abstract repository for the read-only catalog snapshot.

Defined in the domain layer so the domain never depends on
infrastructure.  Concrete implementations (JSON, in-memory) live in
the infrastructure layer and in the test fakes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from poscart.domain.model.product import Product
from poscart.domain.model.warehouse import Warehouse


class CatalogRepository(ABC):

    @abstractmethod
    def get_product(self, product_id: str) -> Product | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    def list_products(self) -> list[Product]:
        """Return every product in catalog order."""

    @abstractmethod
    def get_warehouse(self, warehouse_id: str) -> Warehouse | None:
        """Return a warehouse by its ID, or None if not found."""

    @abstractmethod
    def list_warehouses(self) -> list[Warehouse]:
        """Return every warehouse in catalog order."""

    def warehouse_name(self, warehouse_id: str) -> str:
        warehouse = self.get_warehouse(warehouse_id)
        return warehouse.name if warehouse is not None else warehouse_id
