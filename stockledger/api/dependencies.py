"""
Dependency injection container for FastAPI.

Provides use case instances to route handlers. Tests swap them through
``app.dependency_overrides``.
"""

from stockledger.application.services import (
    get_export_backup,
    get_financial_report,
    get_import_backup,
    get_products_use_case,
    get_transaction_coordinator,
)
from stockledger.application.use_cases import (
    ExportBackupUseCase,
    FinancialReportUseCase,
    ImportBackupUseCase,
    ManageProductsUseCase,
    TransactionCoordinator,
)
from stockledger.config import Settings, get_settings
from stockledger.infrastructure.storage.sqlite import SQLiteEntityStore, get_entity_store


def get_app_settings() -> Settings:
    """Get application settings."""
    return get_settings()


async def get_store() -> SQLiteEntityStore:
    return await get_entity_store()


def get_coordinator() -> TransactionCoordinator:
    return get_transaction_coordinator()


def get_products() -> ManageProductsUseCase:
    return get_products_use_case()


def get_report() -> FinancialReportUseCase:
    return get_financial_report()


def get_export_use_case() -> ExportBackupUseCase:
    return get_export_backup()


def get_import_use_case() -> ImportBackupUseCase:
    return get_import_backup()
