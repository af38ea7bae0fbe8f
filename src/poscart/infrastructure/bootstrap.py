"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from pathlib import Path

from poscart.application.cart_session import CartSession
from poscart.config import Settings, load_settings
from poscart.infrastructure.persistence.json_catalog_repository import (
    JsonCatalogRepository,
)


def catalog_repository(
    settings: Settings | None = None, path: Path | None = None
) -> JsonCatalogRepository:
    settings = settings or load_settings()
    return JsonCatalogRepository(path or settings.catalog_path)


def cart_session(settings: Settings | None = None, path: Path | None = None) -> CartSession:
    settings = settings or load_settings()
    return CartSession(catalog_repository(settings, path), limits=settings.limits())
