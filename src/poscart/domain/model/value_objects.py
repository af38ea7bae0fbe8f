"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from poscart.domain.exceptions import InvalidQuantityError, ValidationError

# Tolerance used by every stock comparison.
STOCK_EPSILON = Decimal("0.0001")
# Tolerance used when checking a line against the minimum purchase quantity.
MIN_PURCHASE_EPSILON = Decimal("0.001")

DEFAULT_CURRENCY = "AOA"
_CURRENCY_SYMBOLS = {"AOA": "Kz", "USD": "$", "EUR": "€"}


@dataclass(frozen=True)
class Money:
    """Monetary amount with currency.

    Uses Decimal to avoid floating-point rounding errors that would be
    unacceptable in financial calculations.
    """

    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if self.amount < Decimal("0"):
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}"
            )

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, factor: int | Decimal) -> Money:
        # Fractional quantities (e.g. 2.5 KG) are legitimate multipliers.
        if isinstance(factor, bool) or not isinstance(factor, (int, Decimal)):
            raise TypeError(
                f"Can only multiply Money by int or Decimal, got {type(factor).__name__}"
            )
        return Money(self.amount * factor, self.currency)

    def __gt__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount > other.amount

    # --- Display --------------------------------------------------------------

    def __str__(self) -> str:
        symbol = _CURRENCY_SYMBOLS.get(self.currency, self.currency)
        return f"{self.amount:.2f} {symbol}"

    # --- Internal helpers -----------------------------------------------------

    def _assert_same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise ValidationError(
                f"Cannot combine {self.currency} with {other.currency}"
            )

    # --- Factories ------------------------------------------------------------

    @staticmethod
    def of(amount: str | float | int | Decimal, currency: str = DEFAULT_CURRENCY) -> Money:
        """Convenient factory that coerces to Decimal safely."""
        try:
            return Money(Decimal(str(amount)), currency)
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc

    @staticmethod
    def zero(currency: str = DEFAULT_CURRENCY) -> Money:
        return Money(Decimal("0"), currency)


def to_quantity(value: str | float | int | Decimal) -> Decimal:
    """Coerce a committed quantity into a finite, non-negative Decimal.

    Text buffers (e.g. ``"1."`` while the user is still typing) are the
    presentation layer's concern; anything reaching the engine goes
    through here and is either a clean number or rejected.
    """
    if isinstance(value, bool):
        raise InvalidQuantityError(f"Invalid quantity: {value!r}")
    try:
        quantity = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as exc:
        raise InvalidQuantityError(f"Invalid quantity: {value!r}") from exc
    if not quantity.is_finite():
        raise InvalidQuantityError(f"Quantity must be a finite number, got {value!r}")
    if quantity < 0:
        raise InvalidQuantityError(f"Quantity cannot be negative, got {value!r}")
    return quantity


def format_quantity(value: Decimal) -> str:
    """Render a quantity without trailing zeros (``12``, ``2.5``)."""
    if value == value.to_integral_value():
        return str(value.quantize(Decimal("1")))
    return f"{value.normalize():f}"
