#!/usr/bin/env python3
"""
StockLedger management CLI.

Usage:
    python manage.py migrate              Apply pending database migrations
    python manage.py check                Verify schema and data integrity
    python manage.py serve               Start the API server
    python manage.py export [--output D]  Write a backup file into D
    python manage.py import FILE          Replace all data with a backup
    python manage.py summary              Print the financial summary
"""

import argparse
import asyncio
import subprocess
import sys
from pathlib import Path

from stockledger.config import configure_logging, get_settings
from stockledger.core.exceptions import LedgerError

ROOT_DIR = Path(__file__).resolve().parent


async def _with_database(coro_factory):
    """Run migrations, execute a coroutine, then close the pool."""
    from stockledger.infrastructure.storage.sqlite import close_pool
    from stockledger.infrastructure.storage.sqlite.migrations import run_migrations

    await run_migrations()
    try:
        return await coro_factory()
    finally:
        await close_pool()


def cmd_migrate(args: argparse.Namespace) -> None:
    """Apply pending migrations."""
    from stockledger.infrastructure.storage.sqlite.migrations import (
        get_migration_status,
        run_migrations,
    )

    async def run() -> None:
        results = await run_migrations(create_backup_before=not args.no_backup)
        for result in results:
            state = "SUCCESS" if result.success else "FAILED"
            print(f"[{state}] v{result.version:03d}: {result.name} ({result.execution_time_ms}ms)")
            if result.error:
                print(f"         Error: {result.error}")
        status = await get_migration_status()
        print(f"Schema version: {status['current_version']} of {status['total_migrations']}")
        if any(not r.success for r in results):
            sys.exit(1)

    asyncio.run(run())


def cmd_check(args: argparse.Namespace) -> None:
    """Run the schema integrity checks."""
    from stockledger.infrastructure.storage.sqlite.migrations import verify_schema_integrity

    checks = asyncio.run(verify_schema_integrity())
    for check in checks:
        print(f"[{check['status']}] {check['check']}")
        if check["status"] != "PASS":
            for key, value in check.items():
                if key not in ("check", "status"):
                    print(f"       {key}: {value}")
    if any(c["status"] != "PASS" for c in checks):
        sys.exit(1)


def cmd_serve(args: argparse.Namespace) -> None:
    """Start uvicorn in the foreground."""
    uvicorn_cmd = [
        sys.executable, "-m", "uvicorn",
        "stockledger.api.main:app",
        "--host", args.host,
        "--port", str(args.port),
    ]
    if args.reload:
        uvicorn_cmd.append("--reload")

    print(f"Starting server on {args.host}:{args.port}...")
    try:
        subprocess.run(uvicorn_cmd, cwd=str(ROOT_DIR), check=False)
    except KeyboardInterrupt:
        print("Server stopped.")


def cmd_export(args: argparse.Namespace) -> None:
    """Export a backup file."""
    from stockledger.application.use_cases import ExportBackupUseCase

    output = args.output or get_settings().backup.export_dir

    async def run() -> Path:
        backup = await ExportBackupUseCase().execute()
        return backup.write_to(output)

    path = asyncio.run(_with_database(run))
    print(f"Backup written to {path}")


def cmd_import(args: argparse.Namespace) -> None:
    """Import a backup file, replacing all data."""
    from stockledger.application.use_cases import ImportBackupUseCase

    path: Path = args.file
    if not path.is_file():
        print(f"File not found: {path}")
        sys.exit(1)

    if not args.yes:
        answer = input("This replaces ALL existing data. Continue? [y/N] ")
        if answer.strip().lower() not in ("y", "yes"):
            print("Aborted.")
            return

    async def run():
        return await ImportBackupUseCase().execute(path.read_bytes())

    result = asyncio.run(_with_database(run))
    print(
        f"Imported schema v{result.schema_version} exported at {result.exported_at}: "
        f"{result.products} products, {result.movements} movements, {result.photos} photos"
    )


def cmd_summary(args: argparse.Namespace) -> None:
    """Print the financial summary."""
    from stockledger.application.use_cases import FinancialReportUseCase

    async def run():
        report = FinancialReportUseCase()
        return await report.summary(), await report.low_stock(), await report.out_of_stock()

    summary, low, out = asyncio.run(_with_database(run))

    print(f"Revenue:            {summary.total_revenue:12.2f}")
    print(f"Cost of goods sold: {summary.sold_products_cost:12.2f}")
    print(f"Sales profit:       {summary.sales_profit:12.2f}  ({summary.profit_margin:.1f}%)")
    print(f"Inventory value:    {summary.inventory_value:12.2f}")
    print(f"Net profit:         {summary.net_profit:12.2f}")
    print(
        f"Movements: {summary.total_sales} sales, "
        f"{summary.total_productions} productions, "
        f"{summary.total_adjustments} adjustments"
    )
    if low:
        print("Low stock: " + ", ".join(f"{p.name} ({p.quantity})" for p in low))
    if out:
        print("Out of stock: " + ", ".join(p.name for p in out))


def main() -> None:
    parser = argparse.ArgumentParser(
        description="StockLedger management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG level")
    sub = parser.add_subparsers(dest="command", required=True)

    # migrate
    p_migrate = sub.add_parser("migrate", help="Apply pending database migrations")
    p_migrate.add_argument("--no-backup", action="store_true", help="Skip database file backup")
    p_migrate.set_defaults(func=cmd_migrate)

    # check
    p_check = sub.add_parser("check", help="Verify schema and data integrity")
    p_check.set_defaults(func=cmd_check)

    # serve
    settings = get_settings()
    p_serve = sub.add_parser("serve", help="Start the API server")
    p_serve.add_argument("--host", default=settings.api.host, help="Bind host")
    p_serve.add_argument("--port", type=int, default=settings.api.port, help="Bind port")
    p_serve.add_argument("--reload", action="store_true", help="Reload on code changes")
    p_serve.set_defaults(func=cmd_serve)

    # export
    p_export = sub.add_parser("export", help="Write a backup file")
    p_export.add_argument("--output", type=Path, help="Target directory")
    p_export.set_defaults(func=cmd_export)

    # import
    p_import = sub.add_parser("import", help="Replace all data with a backup file")
    p_import.add_argument("file", type=Path, help="Backup JSON file")
    p_import.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")
    p_import.set_defaults(func=cmd_import)

    # summary
    p_summary = sub.add_parser("summary", help="Print the financial summary")
    p_summary.set_defaults(func=cmd_summary)

    args = parser.parse_args()
    configure_logging(log_level="DEBUG" if args.verbose else None)
    try:
        args.func(args)
    except LedgerError as e:
        print(f"Error [{e.code}]: {e.message}")
        sys.exit(1)


if __name__ == "__main__":
    main()
