from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path

from dotenv import load_dotenv

from poscart.domain.model.cart import MAX_LINES, MAX_QTY_PER_LINE, MAX_TOTAL_VALUE, CartLimits
from poscart.domain.model.value_objects import DEFAULT_CURRENCY, Money

# Resolve the project root (repo root in an editable install).
ROOT_DIR = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=ROOT_DIR / ".env")


def _get_env(*keys: str, default: str | None = None) -> str | None:
    for k in keys:
        v = os.getenv(k)
        if v is not None and str(v).strip() != "":
            return v.strip()
    return default


def _get_int(*keys: str, default: int) -> int:
    v = _get_env(*keys)
    if v is None:
        return default
    try:
        return int(v)
    except ValueError as exc:
        raise RuntimeError(f"{keys[0]} must be an integer, got {v!r}") from exc


def _get_decimal(*keys: str, default: Decimal) -> Decimal:
    v = _get_env(*keys)
    if v is None:
        return default
    try:
        return Decimal(v)
    except InvalidOperation as exc:
        raise RuntimeError(f"{keys[0]} must be a number, got {v!r}") from exc


@dataclass(frozen=True)
class Settings:
    catalog_path: Path
    max_lines: int
    max_qty_per_line: Decimal
    max_total_value: Decimal
    currency: str
    log_level: str

    def limits(self) -> CartLimits:
        return CartLimits(
            max_lines=self.max_lines,
            max_qty_per_line=self.max_qty_per_line,
            max_total_value=Money(self.max_total_value, self.currency),
        )


def load_settings() -> Settings:
    """Read settings from the environment (and ``.env`` at the project root)."""
    return Settings(
        catalog_path=Path(
            _get_env("POSCART_CATALOG_PATH", default=str(ROOT_DIR / "data" / "catalog.json"))
            or ""
        ),
        max_lines=_get_int("POSCART_MAX_LINES", default=MAX_LINES),
        max_qty_per_line=_get_decimal("POSCART_MAX_QTY_PER_LINE", default=MAX_QTY_PER_LINE),
        max_total_value=_get_decimal(
            "POSCART_MAX_TOTAL_VALUE", default=MAX_TOTAL_VALUE.amount
        ),
        currency=_get_env("POSCART_CURRENCY", default=DEFAULT_CURRENCY) or DEFAULT_CURRENCY,
        log_level=(_get_env("POSCART_LOG_LEVEL", default="WARNING") or "WARNING").upper(),
    )
