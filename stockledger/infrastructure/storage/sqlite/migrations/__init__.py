"""Versioned schema migrations for the ledger database."""

from stockledger.infrastructure.storage.sqlite.migrations.migrator import (
    MigrationInfo,
    MigrationResult,
    SchemaMigrator,
    apply_migration,
    create_backup,
    discover_migrations,
    get_current_version,
    get_migration_status,
    initialize_database,
    latest_schema_version,
    restore_backup,
    run_migrations,
    verify_schema_integrity,
)

__all__ = [
    "MigrationInfo",
    "MigrationResult",
    "SchemaMigrator",
    "apply_migration",
    "create_backup",
    "discover_migrations",
    "get_current_version",
    "get_migration_status",
    "initialize_database",
    "latest_schema_version",
    "restore_backup",
    "run_migrations",
    "verify_schema_integrity",
]
