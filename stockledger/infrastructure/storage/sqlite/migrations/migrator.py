"""
Versioned schema upgrades for the ledger database.

Migration files live next to this module and are named ``vNNN_name.sql``.
Each one runs as a single transaction together with its bookkeeping row in
``schema_migrations``, so a crash never leaves a half-applied step behind.
The newest step number is also the backup format version (see
``core.services.snapshot.CURRENT_SCHEMA_VERSION``).
"""

import hashlib
import re
import shutil
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

import aiosqlite

from stockledger.config import get_logger, get_settings

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent

_FILENAME = re.compile(r"^v(\d{3})_([a-z0-9_]+)\.sql$")

# Columns the current code reads from each table
EXPECTED_COLUMNS: dict[str, tuple[str, ...]] = {
    "products": ("id", "name", "category", "quantity", "price", "average_cost", "notes"),
    "movements": (
        "id", "product_id", "type", "quantity", "unit_price", "unit_cost",
        "total_amount", "average_cost_at_time", "snapshot_name", "snapshot_category",
    ),
    "photos": ("id", "product_id", "blob", "thumbnail", "mime_type"),
    "schema_migrations": ("version", "name", "checksum"),
}


@dataclass(frozen=True)
class MigrationInfo:
    """One ``vNNN_name.sql`` file."""

    version: int
    name: str
    path: Path
    checksum: str

    @property
    def label(self) -> str:
        return f"v{self.version:03d}_{self.name}"

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = _FILENAME.match(path.name)
        if not match:
            raise ValueError(f"Invalid migration filename: {path.name}")
        digest = hashlib.sha256(path.read_bytes()).hexdigest()
        return cls(
            version=int(match.group(1)),
            name=match.group(2),
            path=path,
            checksum=digest[:16],
        )


@dataclass
class MigrationResult:
    version: int
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


def discover_migrations(directory: Path = MIGRATIONS_DIR) -> list[MigrationInfo]:
    """All well-named migration files, lowest version first."""
    found = []
    for path in directory.glob("v*.sql"):
        try:
            found.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("migration_file_ignored", path=str(path), error=str(e))
    return sorted(found, key=lambda m: m.version)


def latest_schema_version(directory: Path = MIGRATIONS_DIR) -> int:
    found = discover_migrations(directory)
    return found[-1].version if found else 0


async def _applied(conn: aiosqlite.Connection) -> dict[int, str]:
    try:
        cursor = await conn.execute("SELECT version, checksum FROM schema_migrations")
    except aiosqlite.OperationalError:
        # Brand-new file, bookkeeping table not created yet
        return {}
    return {int(version): checksum for version, checksum in await cursor.fetchall()}


async def get_current_version(conn: aiosqlite.Connection) -> int:
    """Highest applied step, 0 for an empty database."""
    applied = await _applied(conn)
    return max(applied, default=0)


async def apply_migration(conn: aiosqlite.Connection, migration: MigrationInfo) -> MigrationResult:
    """Run one step and record it, atomically."""
    started = time.perf_counter()
    script = (
        "BEGIN;\n"
        f"{migration.path.read_text(encoding='utf-8')}\n;\n"
        "INSERT INTO schema_migrations (version, name, checksum) "
        f"VALUES ({migration.version}, '{migration.name}', '{migration.checksum}');\n"
        "COMMIT;"
    )
    try:
        await conn.executescript(script)
    except aiosqlite.Error as e:
        if conn.in_transaction:
            await conn.rollback()
        logger.error("migration_failed", migration=migration.label, error=str(e))
        return MigrationResult(
            version=migration.version,
            name=migration.name,
            success=False,
            execution_time_ms=int((time.perf_counter() - started) * 1000),
            error=str(e),
        )

    elapsed = int((time.perf_counter() - started) * 1000)
    logger.info("migration_applied", migration=migration.label, execution_time_ms=elapsed)
    return MigrationResult(
        version=migration.version,
        name=migration.name,
        success=True,
        execution_time_ms=elapsed,
    )


def create_backup(db_path: Path) -> Path:
    """Copy the database file aside; restored if an upgrade blows up."""
    stamp = datetime.now(UTC).strftime("%Y%m%d_%H%M%S")
    backup_path = db_path.with_suffix(f".backup_{stamp}.db")
    shutil.copy2(db_path, backup_path)
    logger.info("database_file_copied", backup_path=str(backup_path))
    return backup_path


def restore_backup(db_path: Path, backup_path: Path) -> None:
    shutil.copy2(backup_path, db_path)
    logger.warning("database_file_restored", backup_path=str(backup_path))


class SchemaMigrator:
    """Brings one database file up to the newest shipped schema."""

    def __init__(self, db_path: Path, directory: Path = MIGRATIONS_DIR):
        self.db_path = Path(db_path)
        self.directory = directory

    async def _connect(self) -> aiosqlite.Connection:
        conn = await aiosqlite.connect(self.db_path)
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA foreign_keys=ON")
        return conn

    async def upgrade(self, backup: bool = True) -> list[MigrationResult]:
        """
        Apply every step newer than what the file already has.

        Stops at the first failing step. A step whose file changed after it
        was applied is reported and left alone; it is never re-run.
        """
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        steps = discover_migrations(self.directory)
        if not steps:
            logger.warning("no_migrations_found", directory=str(self.directory))
            return []

        backup_path = create_backup(self.db_path) if backup and self.db_path.exists() else None
        results: list[MigrationResult] = []
        try:
            conn = await self._connect()
            try:
                applied = await _applied(conn)
                for step in steps:
                    if step.version in applied:
                        if applied[step.version] != step.checksum:
                            logger.warning("migration_modified_after_apply", migration=step.label)
                        continue
                    result = await apply_migration(conn, step)
                    results.append(result)
                    if not result.success:
                        break
                version = await get_current_version(conn)
            finally:
                await conn.close()
        except Exception as e:
            logger.error("schema_upgrade_crashed", db_path=str(self.db_path), error=str(e))
            if backup_path is not None and backup_path.exists():
                restore_backup(self.db_path, backup_path)
            raise

        if backup_path is not None and all(r.success for r in results):
            backup_path.unlink()

        logger.info(
            "schema_upgraded" if results else "schema_up_to_date",
            db_path=str(self.db_path),
            schema_version=version,
            applied=len([r for r in results if r.success]),
        )
        return results

    async def status(self) -> dict:
        if not self.db_path.exists():
            return {
                "exists": False,
                "current_version": 0,
                "applied_migrations": [],
                "pending_migrations": [],
                "total_migrations": len(discover_migrations(self.directory)),
            }

        async with aiosqlite.connect(self.db_path) as conn:
            applied = await _applied(conn)
        steps = discover_migrations(self.directory)
        return {
            "exists": True,
            "current_version": max(applied, default=0),
            "applied_migrations": sorted(applied),
            "pending_migrations": [s.version for s in steps if s.version not in applied],
            "total_migrations": len(steps),
        }

    async def verify(self) -> list[dict]:
        """Structural and data checks, each reported as PASS or FAIL."""
        checks: list[dict] = []
        async with aiosqlite.connect(self.db_path) as conn:
            row = await (await conn.execute("PRAGMA integrity_check")).fetchone()
            checks.append({
                "check": "integrity",
                "status": "PASS" if row[0] == "ok" else "FAIL",
                "result": row[0],
            })

            orphans = await (await conn.execute("PRAGMA foreign_key_check")).fetchall()
            checks.append({
                "check": "foreign_keys",
                "status": "FAIL" if orphans else "PASS",
                "violations": len(orphans),
            })

            missing: dict[str, list[str]] = {}
            for table, columns in EXPECTED_COLUMNS.items():
                cursor = await conn.execute(f"PRAGMA table_info({table})")
                present = {r[1] for r in await cursor.fetchall()}
                absent = [c for c in columns if c not in present]
                if absent:
                    missing[table] = absent
            checks.append({
                "check": "columns",
                "status": "FAIL" if missing else "PASS",
                "missing": missing,
            })

            version = await get_current_version(conn)
            latest = latest_schema_version(self.directory)
            checks.append({
                "check": "schema_version",
                "status": "PASS" if version == latest else "FAIL",
                "current": version,
                "latest": latest,
            })

            if not missing:
                cursor = await conn.execute(
                    "SELECT COUNT(*) FROM products WHERE quantity < 0 OR average_cost < 0"
                )
                (bad_products,) = await cursor.fetchone()
                checks.append({
                    "check": "product_values",
                    "status": "FAIL" if bad_products else "PASS",
                    "invalid_rows": bad_products,
                })

        return checks


def _resolve(db_path: Path | None) -> Path:
    return Path(db_path) if db_path is not None else get_settings().storage.db_path


async def initialize_database(
    db_path: Path | None = None,
    create_backup_before: bool = True,
) -> list[MigrationResult]:
    """Upgrade the configured (or given) database file; see SchemaMigrator.upgrade."""
    return await SchemaMigrator(_resolve(db_path)).upgrade(backup=create_backup_before)


run_migrations = initialize_database


async def get_migration_status(db_path: Path | None = None) -> dict:
    return await SchemaMigrator(_resolve(db_path)).status()


async def verify_schema_integrity(db_path: Path | None = None) -> list[dict]:
    return await SchemaMigrator(_resolve(db_path)).verify()
