"""
Use case factory functions for dependency injection.

The transaction coordinator holds the per-product locks, so every caller in
the process must share one instance.
"""

from stockledger.application.use_cases import (
    ExportBackupUseCase,
    FinancialReportUseCase,
    ImportBackupUseCase,
    ManageProductsUseCase,
    TransactionCoordinator,
)

# Singleton instances
_transaction_coordinator: TransactionCoordinator | None = None
_products_use_case: ManageProductsUseCase | None = None


def get_transaction_coordinator() -> TransactionCoordinator:
    """Get or create the process-wide TransactionCoordinator."""
    global _transaction_coordinator
    if _transaction_coordinator is None:
        _transaction_coordinator = TransactionCoordinator()
    return _transaction_coordinator


def get_products_use_case() -> ManageProductsUseCase:
    """Get or create ManageProductsUseCase instance."""
    global _products_use_case
    if _products_use_case is None:
        _products_use_case = ManageProductsUseCase()
    return _products_use_case


def get_financial_report() -> FinancialReportUseCase:
    return FinancialReportUseCase()


def get_export_backup() -> ExportBackupUseCase:
    return ExportBackupUseCase()


def get_import_backup() -> ImportBackupUseCase:
    return ImportBackupUseCase()


def reset_services() -> None:
    """Reset all singleton instances (for testing)."""
    global _transaction_coordinator, _products_use_case
    _transaction_coordinator = None
    _products_use_case = None
