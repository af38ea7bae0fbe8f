"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the session facade can catch them uniformly and turn them into
user-facing rejections.  Each subclass carries an ``ErrorKind`` so callers
can branch on the reason without parsing messages.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    STOCK_INSUFFICIENT = "StockInsufficient"
    ORPHAN_STOCK_VIOLATION = "OrphanStockViolation"
    MIN_PURCHASE_NOT_MET = "MinPurchaseNotMet"
    LINE_LIMIT_EXCEEDED = "LineLimitExceeded"
    QUANTITY_LIMIT_EXCEEDED = "QuantityLimitExceeded"
    TOTAL_VALUE_EXCEEDED = "TotalValueExceeded"
    NO_WAREHOUSE_AVAILABLE = "NoWarehouseAvailable"
    PRODUCT_NOT_FOUND = "ProductNotFound"
    MERGE_CONFLICT_PENDING = "MergeConflictPending"
    LINE_NOT_FOUND = "LineNotFound"
    PACKAGE_NOT_FOUND = "PackageNotFound"
    INVALID_QUANTITY = "InvalidQuantity"
    NO_PENDING_DECISION = "NoPendingDecision"
    EMPTY_CART = "EmptyCart"
    INVALID_CHOICE = "InvalidChoice"


class DomainException(Exception):
    """Base class for all domain errors."""

    kind: ErrorKind = ErrorKind.INVALID_QUANTITY

    def __init__(self, message: str, product_id: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.product_id = product_id


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class InvalidQuantityError(ValidationError):
    kind = ErrorKind.INVALID_QUANTITY


class StockInsufficientError(ValidationError):
    kind = ErrorKind.STOCK_INSUFFICIENT


class OrphanStockError(ValidationError):
    """Remaining warehouse stock would be non-zero but below the minimum purchase."""

    kind = ErrorKind.ORPHAN_STOCK_VIOLATION


class MinPurchaseNotMetError(ValidationError):
    kind = ErrorKind.MIN_PURCHASE_NOT_MET


class LineLimitExceededError(ValidationError):
    kind = ErrorKind.LINE_LIMIT_EXCEEDED


class QuantityLimitExceededError(ValidationError):
    kind = ErrorKind.QUANTITY_LIMIT_EXCEEDED


class TotalValueExceededError(ValidationError):
    kind = ErrorKind.TOTAL_VALUE_EXCEEDED


class NoWarehouseAvailableError(ValidationError):
    kind = ErrorKind.NO_WAREHOUSE_AVAILABLE


class EmptyCartError(ValidationError):
    kind = ErrorKind.EMPTY_CART


class MergeConflictPendingError(ValidationError):
    """A mutation was attempted while a merge/split decision is outstanding."""

    kind = ErrorKind.MERGE_CONFLICT_PENDING


class NoPendingDecisionError(ValidationError):
    kind = ErrorKind.NO_PENDING_DECISION


class ProductNotFoundError(EntityNotFoundError):
    kind = ErrorKind.PRODUCT_NOT_FOUND


class PackageNotFoundError(EntityNotFoundError):
    kind = ErrorKind.PACKAGE_NOT_FOUND


class LineNotFoundError(EntityNotFoundError):
    kind = ErrorKind.LINE_NOT_FOUND


_BY_KIND: dict[ErrorKind, type[DomainException]] = {
    cls.kind: cls
    for cls in (
        InvalidQuantityError,
        StockInsufficientError,
        OrphanStockError,
        MinPurchaseNotMetError,
        LineLimitExceededError,
        QuantityLimitExceededError,
        TotalValueExceededError,
        NoWarehouseAvailableError,
        EmptyCartError,
        MergeConflictPendingError,
        NoPendingDecisionError,
        ProductNotFoundError,
        PackageNotFoundError,
        LineNotFoundError,
    )
}


def exception_for(kind: ErrorKind, message: str, product_id: str | None = None) -> DomainException:
    """Build the DomainException subclass that reports *kind*."""
    return _BY_KIND[kind](message, product_id=product_id)
