"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from stockledger.core.entities import Movement, MovementType, Photo, Product, ProductSnapshot
from stockledger.infrastructure.storage.sqlite import connection as conn_module
from stockledger.infrastructure.storage.sqlite.entity_store import SQLiteEntityStore
from stockledger.infrastructure.storage.sqlite.migrations import initialize_database


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
async def migrated_db(temp_db_path: Path) -> Path:
    """Temporary database with every migration applied."""
    await initialize_database(temp_db_path, create_backup_before=False)
    return temp_db_path


@pytest.fixture
def mock_settings(temp_db_path: Path):
    """Mock settings with temp database path."""
    mock = MagicMock()
    mock.storage.db_path = temp_db_path
    mock.storage.pool_size = 2
    mock.storage.busy_timeout = 5000
    return mock


@pytest.fixture
async def sqlite_store(migrated_db: Path, mock_settings) -> AsyncGenerator[SQLiteEntityStore, None]:
    """Entity store backed by a fresh migrated database."""
    conn_module._pool = None
    with patch.object(conn_module, "get_settings", return_value=mock_settings):
        try:
            yield SQLiteEntityStore()
        finally:
            await conn_module.close_pool()


@pytest.fixture
def sample_product() -> Product:
    """Create a sample product for testing."""
    now = datetime(2024, 5, 1, 10, 0, tzinfo=UTC)
    return Product(
        id="prod-1",
        name="Linen tablecloth",
        category="Tablecloths",
        quantity=10,
        price=100.0,
        average_cost=4.0,
        notes="Natural linen",
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def sample_movement(sample_product: Product) -> Movement:
    """A sale of 3 units of the sample product."""
    return Movement(
        id="mov-1",
        product_id=sample_product.id,
        type=MovementType.SALE,
        quantity=-3,
        unit_price=100.0,
        total_amount=300.0,
        average_cost_at_time=4.0,
        created_at=datetime(2024, 5, 2, 9, 30, tzinfo=UTC),
        product_snapshot=ProductSnapshot(
            name=sample_product.name,
            category=sample_product.category,
        ),
    )


@pytest.fixture
def sample_photo(sample_product: Product) -> Photo:
    """A small photo attached to the sample product."""
    return Photo(
        id="photo-1",
        product_id=sample_product.id,
        blob=b"\x89PNG\r\n\x1a\nfull-image",
        thumbnail=b"\x89PNG\r\n\x1a\nthumb",
        mime_type="image/png",
        size=2048,
        compressed_size=18,
        width=640,
        height=480,
        created_at=datetime(2024, 5, 1, 11, 0, tzinfo=UTC),
    )
