"""Export Backup Use Case - full dataset to a portable JSON snapshot."""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from stockledger.config import get_logger, get_settings
from stockledger.core.entities import utcnow
from stockledger.core.interfaces import Collection, IEntityStore
from stockledger.core.services.snapshot import dump_snapshot, encode_snapshot

logger = get_logger(__name__)


@dataclass
class BackupFile:
    """Serialized backup ready to be saved or downloaded."""

    filename: str
    content: bytes
    exported_at: datetime
    products: int = 0
    movements: int = 0
    photos: int = 0

    def write_to(self, directory: Path) -> Path:
        """Write the backup into directory and return the file path."""
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / self.filename
        path.write_bytes(self.content)
        logger.info("backup_written", path=str(path), size=len(self.content))
        return path


def backup_filename(exported_at: datetime, prefix: str | None = None) -> str:
    """e.g. stockledger-backup-20240501-103000.json"""
    prefix = prefix or get_settings().backup.file_prefix
    return f"{prefix}-{exported_at:%Y%m%d-%H%M%S}.json"


class ExportBackupUseCase:
    """Export products, movements and photos as one snapshot."""

    def __init__(self, store: IEntityStore | None = None):
        self._store = store

    async def _get_store(self) -> IEntityStore:
        if self._store is None:
            from stockledger.infrastructure.storage.sqlite import get_entity_store

            self._store = await get_entity_store()
        return self._store

    async def execute(self) -> BackupFile:
        """Read every collection in one transaction and serialize them."""
        store = await self._get_store()

        # A single transaction gives a consistent view across collections
        async with store.transaction() as session:
            products = await session.get_all(Collection.PRODUCTS)
            movements = await session.get_all(Collection.MOVEMENTS)
            photos = await session.get_all(Collection.PHOTOS)

        exported_at = utcnow()
        content = dump_snapshot(
            encode_snapshot(products, movements, photos, exported_at=exported_at)
        )

        logger.info(
            "backup_exported",
            products=len(products),
            movements=len(movements),
            photos=len(photos),
            size=len(content),
        )
        return BackupFile(
            filename=backup_filename(exported_at),
            content=content,
            exported_at=exported_at,
            products=len(products),
            movements=len(movements),
            photos=len(photos),
        )
