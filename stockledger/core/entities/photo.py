"""Photo attachment entity."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from stockledger.core.entities.product import ensure_utc, new_id, utcnow


class Photo(BaseModel):
    """Binary attachment owned by a product. Bytes are opaque to the ledger."""

    id: str = Field(default_factory=new_id)
    product_id: str
    blob: bytes
    thumbnail: bytes
    mime_type: str
    size: int = 0  # original file size in bytes
    compressed_size: int = 0
    width: int = 0
    height: int = 0
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @property
    def storage_size(self) -> int:
        """Bytes held for this photo (full image + thumbnail)."""
        return len(self.blob) + len(self.thumbnail)
