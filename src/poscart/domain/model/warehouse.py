"""Warehouse reference data."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class WarehouseType(Enum):
    STORE = "STORE"
    GENERAL = "GENERAL"


@dataclass(frozen=True)
class Warehouse:
    id: str
    name: str
    type: WarehouseType = WarehouseType.GENERAL
