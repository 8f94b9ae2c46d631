"""
Domain exceptions for the StockLedger application.

Provides specific exception types for different error scenarios.
"""

import math
from typing import Any


def _amount(value: float) -> float | str:
    """Amount as it can appear in a JSON error body; NaN and inf become text."""
    return value if math.isfinite(value) else str(value)


class LedgerError(Exception):
    """Base exception for all StockLedger errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Validation Exceptions (business-rule rejections, never retried)
class ValidationError(LedgerError):
    """A business event was rejected before anything was written."""

    pass


class InvalidQuantityError(ValidationError):
    """Quantity must be a positive number of units."""

    def __init__(self, quantity: int):
        super().__init__(
            f"invalid quantity: {quantity} (must be greater than 0)",
            code="INVALID_QUANTITY",
            details={"quantity": quantity},
        )


class InsufficientStockError(ValidationError):
    """Not enough stock to complete a sale."""

    def __init__(self, product_id: str, requested: int, available: int):
        super().__init__(
            f"insufficient stock: available {available}, requested {requested}",
            code="INSUFFICIENT_STOCK",
            details={
                "product_id": product_id,
                "requested": requested,
                "available": available,
            },
        )


class InvalidPriceError(ValidationError):
    """Sale price must be strictly positive."""

    def __init__(self, unit_price: float):
        super().__init__(
            f"invalid sale price: {unit_price} (must be a finite number greater than 0)",
            code="INVALID_PRICE",
            details={"unit_price": _amount(unit_price)},
        )


class InvalidCostError(ValidationError):
    """Production cost cannot be negative."""

    def __init__(self, unit_cost: float):
        super().__init__(
            f"invalid unit cost: {unit_cost} (must be a finite number, not negative)",
            code="INVALID_COST",
            details={"unit_cost": _amount(unit_cost)},
        )


class ZeroAdjustmentError(ValidationError):
    """An adjustment of zero units carries no information."""

    def __init__(self, product_id: str):
        super().__init__(
            "adjustment cannot be 0 units",
            code="ZERO_ADJUSTMENT",
            details={"product_id": product_id},
        )


class NegativeStockError(ValidationError):
    """An adjustment would drive stock below zero."""

    def __init__(self, product_id: str, delta: int, available: int):
        super().__init__(
            f"adjustment would leave negative stock: available {available}, delta {delta}",
            code="NEGATIVE_STOCK",
            details={"product_id": product_id, "delta": delta, "available": available},
        )


# Not-found Exceptions
class NotFoundError(LedgerError):
    """Base exception for missing entities."""

    pass


class ProductNotFoundError(NotFoundError):
    """Product not found in storage."""

    def __init__(self, product_id: str):
        super().__init__(
            f"Product not found: {product_id}",
            code="PRODUCT_NOT_FOUND",
            details={"product_id": product_id},
        )


class MovementNotFoundError(NotFoundError):
    """Movement not found in storage."""

    def __init__(self, movement_id: str):
        super().__init__(
            f"Movement not found: {movement_id}",
            code="MOVEMENT_NOT_FOUND",
            details={"movement_id": movement_id},
        )


# Storage Exceptions
class StorageError(LedgerError):
    """Base exception for storage operations."""

    pass


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


class UnknownIndexError(StorageError):
    """Lookup against an index that does not exist on the collection."""

    def __init__(self, collection: str, index_name: str):
        super().__init__(
            f"Unknown index '{index_name}' on collection '{collection}'",
            code="UNKNOWN_INDEX",
            details={"collection": collection, "index_name": index_name},
        )


# Backup Exceptions
class BackupError(LedgerError):
    """Base exception for backup export/import."""

    pass


class MalformedBackupError(BackupError):
    """Backup artifact is not a well-formed snapshot."""

    def __init__(self, reason: str):
        super().__init__(
            f"Malformed backup: {reason}",
            code="MALFORMED_BACKUP",
            details={"reason": reason},
        )


class BackupTooLargeError(MalformedBackupError):
    """Backup artifact exceeds the size limit."""

    def __init__(self, size: int, max_size: int):
        super().__init__(f"backup is too large ({size} bytes, max {max_size})")
        self.code = "BACKUP_TOO_LARGE"
        self.details.update({"size": size, "max_size": max_size})


class FutureSchemaError(BackupError):
    """Backup was written by a newer schema version than this installation."""

    def __init__(self, backup_version: int, current_version: int):
        super().__init__(
            f"Backup schema version {backup_version} is newer than supported "
            f"version {current_version}; upgrade before importing",
            code="FUTURE_SCHEMA",
            details={
                "backup_version": backup_version,
                "current_version": current_version,
            },
        )


class ConfigurationError(LedgerError):
    """Configuration error."""

    pass
