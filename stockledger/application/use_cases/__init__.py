"""Application use cases."""

from stockledger.application.use_cases.export_backup import (
    BackupFile,
    ExportBackupUseCase,
    backup_filename,
)
from stockledger.application.use_cases.financial_report import FinancialReportUseCase
from stockledger.application.use_cases.import_backup import ImportBackupUseCase, ImportResult
from stockledger.application.use_cases.manage_products import ManageProductsUseCase
from stockledger.application.use_cases.register_movement import (
    TransactionCoordinator,
    TransactionResult,
)

__all__ = [
    "TransactionCoordinator",
    "TransactionResult",
    "ManageProductsUseCase",
    "FinancialReportUseCase",
    "ExportBackupUseCase",
    "BackupFile",
    "backup_filename",
    "ImportBackupUseCase",
    "ImportResult",
]
