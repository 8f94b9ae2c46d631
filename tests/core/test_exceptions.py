"""Tests for domain exceptions."""

import pytest

from stockledger.core.exceptions import (
    BackupError,
    BackupTooLargeError,
    DatabaseError,
    FutureSchemaError,
    InsufficientStockError,
    InvalidCostError,
    InvalidPriceError,
    InvalidQuantityError,
    LedgerError,
    MalformedBackupError,
    MovementNotFoundError,
    NegativeStockError,
    NotFoundError,
    ProductNotFoundError,
    StorageError,
    UnknownIndexError,
    ValidationError,
    ZeroAdjustmentError,
)


class TestLedgerError:
    """Tests for base LedgerError."""

    def test_basic_initialization(self):
        error = LedgerError("Something went wrong")
        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.code == "LedgerError"
        assert error.details == {}

    def test_with_custom_code(self):
        error = LedgerError("Error message", code="CUSTOM_ERROR")
        assert error.code == "CUSTOM_ERROR"

    def test_to_dict(self):
        error = LedgerError("Test error", code="TEST_CODE", details={"extra": "info"})
        assert error.to_dict() == {
            "error": "TEST_CODE",
            "message": "Test error",
            "details": {"extra": "info"},
        }


class TestValidationErrors:
    """Business-rule rejections."""

    def test_insufficient_stock_message(self):
        error = InsufficientStockError(product_id="p1", requested=5, available=3)
        assert isinstance(error, ValidationError)
        assert error.code == "INSUFFICIENT_STOCK"
        assert error.message == "insufficient stock: available 3, requested 5"
        assert error.details == {"product_id": "p1", "requested": 5, "available": 3}

    @pytest.mark.parametrize(
        "error, code",
        [
            (InvalidQuantityError(0), "INVALID_QUANTITY"),
            (InvalidPriceError(0.0), "INVALID_PRICE"),
            (InvalidCostError(-1.0), "INVALID_COST"),
            (ZeroAdjustmentError("p1"), "ZERO_ADJUSTMENT"),
            (NegativeStockError("p1", delta=-5, available=2), "NEGATIVE_STOCK"),
        ],
    )
    def test_codes(self, error, code):
        assert isinstance(error, ValidationError)
        assert error.code == code


class TestNotFoundErrors:
    def test_product_not_found(self):
        error = ProductNotFoundError("abc-123")
        assert isinstance(error, NotFoundError)
        assert error.code == "PRODUCT_NOT_FOUND"
        assert "abc-123" in error.message

    def test_movement_not_found(self):
        error = MovementNotFoundError("mov-9")
        assert error.code == "MOVEMENT_NOT_FOUND"
        assert error.details["movement_id"] == "mov-9"


class TestStorageErrors:
    def test_database_error(self):
        error = DatabaseError("put", "CHECK constraint failed")
        assert isinstance(error, StorageError)
        assert error.code == "DATABASE_ERROR"
        assert "put" in error.message
        assert error.details["error"] == "CHECK constraint failed"

    def test_unknown_index(self):
        error = UnknownIndexError("movements", "by-color")
        assert isinstance(error, StorageError)
        assert "by-color" in error.message


class TestBackupErrors:
    def test_malformed(self):
        error = MalformedBackupError("missing 'products' array")
        assert isinstance(error, BackupError)
        assert error.details["reason"] == "missing 'products' array"

    def test_too_large_is_malformed(self):
        error = BackupTooLargeError(size=200, max_size=100)
        assert isinstance(error, MalformedBackupError)
        assert error.code == "BACKUP_TOO_LARGE"
        assert error.details["size"] == 200
        assert error.details["max_size"] == 100

    def test_future_schema(self):
        error = FutureSchemaError(backup_version=4, current_version=3)
        assert isinstance(error, BackupError)
        assert not isinstance(error, MalformedBackupError)
        assert error.code == "FUTURE_SCHEMA"
        assert "4" in error.message
