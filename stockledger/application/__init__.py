"""
Application layer - Use cases, DTOs, and service factories.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Implementing use cases that coordinate core services
3. Providing factory functions for dependency injection

Use cases are the only entry point for API handlers and the CLI.
"""

from stockledger.application.services import (
    get_export_backup,
    get_financial_report,
    get_import_backup,
    get_products_use_case,
    get_transaction_coordinator,
    reset_services,
)
from stockledger.application.use_cases import (
    BackupFile,
    ExportBackupUseCase,
    FinancialReportUseCase,
    ImportBackupUseCase,
    ImportResult,
    ManageProductsUseCase,
    TransactionCoordinator,
    TransactionResult,
)

__all__ = [
    # Use Cases
    "TransactionCoordinator",
    "TransactionResult",
    "ManageProductsUseCase",
    "FinancialReportUseCase",
    "ExportBackupUseCase",
    "BackupFile",
    "ImportBackupUseCase",
    "ImportResult",
    # Service factories
    "get_transaction_coordinator",
    "get_products_use_case",
    "get_financial_report",
    "get_export_backup",
    "get_import_backup",
    "reset_services",
]
