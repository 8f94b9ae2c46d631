"""Import Backup Use Case - replace the dataset with a snapshot."""

from dataclasses import dataclass

from stockledger.config import get_logger, get_settings
from stockledger.core.interfaces import Collection, IEntityStore
from stockledger.core.services.snapshot import parse_snapshot

logger = get_logger(__name__)


@dataclass
class ImportResult:
    """Counts of records restored from a backup."""

    schema_version: int
    exported_at: str
    products: int
    movements: int
    photos: int


class ImportBackupUseCase:
    """
    Restore a backup, replacing all existing data.

    The artifact is fully parsed and validated before storage is touched.
    Clearing and re-inserting happen in one transaction, so a failure at any
    point leaves the previous data in place.
    """

    def __init__(self, store: IEntityStore | None = None, max_bytes: int | None = None):
        self._store = store
        self.max_bytes = max_bytes or get_settings().backup.max_size_bytes

    async def _get_store(self) -> IEntityStore:
        if self._store is None:
            from stockledger.infrastructure.storage.sqlite import get_entity_store

            self._store = await get_entity_store()
        return self._store

    async def execute(self, raw: bytes | str) -> ImportResult:
        """
        Import a serialized backup.

        Raises:
            BackupTooLargeError: artifact exceeds the configured size limit.
            MalformedBackupError: artifact is not a valid snapshot.
            FutureSchemaError: artifact was written by a newer version.
            StorageError: the replacement could not be committed.
        """
        snapshot = parse_snapshot(raw, max_bytes=self.max_bytes)

        store = await self._get_store()
        async with store.transaction() as session:
            # Photos reference products, so they go first on clear and last on insert
            await session.clear(Collection.PHOTOS)
            await session.clear(Collection.MOVEMENTS)
            await session.clear(Collection.PRODUCTS)

            for product in snapshot.products:
                await session.put(Collection.PRODUCTS, product)
            for movement in snapshot.movements:
                await session.put(Collection.MOVEMENTS, movement)
            for photo in snapshot.photos:
                await session.put(Collection.PHOTOS, photo)

        logger.info(
            "backup_imported",
            schema_version=snapshot.schema_version,
            exported_at=snapshot.exported_at,
            products=len(snapshot.products),
            movements=len(snapshot.movements),
            photos=len(snapshot.photos),
        )
        return ImportResult(
            schema_version=snapshot.schema_version,
            exported_at=snapshot.exported_at,
            products=len(snapshot.products),
            movements=len(snapshot.movements),
            photos=len(snapshot.photos),
        )
