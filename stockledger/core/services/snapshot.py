"""
Backup snapshot codec.

Encodes the full dataset into a versioned, self-describing JSON envelope and
parses it back with strict validation. Parsing never touches storage; the
import use case only writes after a snapshot has been fully decoded.

Envelope layout::

    {
        "schemaVersion": 3,
        "exportedAt": "2024-05-01T10:00:00Z",
        "products": [...],
        "movements": [...],
        "photos": [...]
    }

Record keys are camelCase, datetimes ISO-8601 and photo payloads base64.
"""

import base64
import binascii
import json
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from stockledger.core.entities import Movement, Photo, Product, utcnow
from stockledger.core.exceptions import (
    BackupTooLargeError,
    FutureSchemaError,
    MalformedBackupError,
)

# Bumped together with the storage migrations; equals the latest migration number.
CURRENT_SCHEMA_VERSION = 3

DEFAULT_MAX_BACKUP_BYTES = 50 * 1024 * 1024

SECTIONS = ("products", "movements", "photos")


class ProductRecord(Product):
    """Product as it appears inside a snapshot."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MovementRecord(Movement):
    """Movement as it appears inside a snapshot."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PhotoRecord(BaseModel):
    """Photo metadata plus base64 payloads."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    product_id: str
    mime_type: str
    size: int = 0
    compressed_size: int = 0
    width: int = 0
    height: int = 0
    created_at: datetime
    blob_base64: str
    thumbnail_base64: str

    @classmethod
    def from_photo(cls, photo: Photo) -> "PhotoRecord":
        return cls(
            id=photo.id,
            product_id=photo.product_id,
            mime_type=photo.mime_type,
            size=photo.size,
            compressed_size=photo.compressed_size,
            width=photo.width,
            height=photo.height,
            created_at=photo.created_at,
            blob_base64=base64.b64encode(photo.blob).decode("ascii"),
            thumbnail_base64=base64.b64encode(photo.thumbnail).decode("ascii"),
        )

    def to_photo(self) -> Photo:
        return Photo(
            id=self.id,
            product_id=self.product_id,
            blob=base64.b64decode(self.blob_base64, validate=True),
            thumbnail=base64.b64decode(self.thumbnail_base64, validate=True),
            mime_type=self.mime_type,
            size=self.size,
            compressed_size=self.compressed_size,
            width=self.width,
            height=self.height,
            created_at=self.created_at,
        )


@dataclass
class Snapshot:
    """A decoded, validated backup."""

    schema_version: int
    exported_at: str
    products: list[Product] = field(default_factory=list)
    movements: list[Movement] = field(default_factory=list)
    photos: list[Photo] = field(default_factory=list)


# Encoding


def encode_snapshot(
    products: Sequence[Product],
    movements: Sequence[Movement],
    photos: Sequence[Photo],
    exported_at: datetime | None = None,
) -> dict[str, Any]:
    """Build the envelope dict for a dataset."""
    return {
        "schemaVersion": CURRENT_SCHEMA_VERSION,
        "exportedAt": (exported_at or utcnow()).isoformat(),
        "products": [
            ProductRecord.model_validate(p.model_dump()).model_dump(
                mode="json", by_alias=True
            )
            for p in products
        ],
        "movements": [
            MovementRecord.model_validate(m.model_dump()).model_dump(
                mode="json", by_alias=True
            )
            for m in movements
        ],
        "photos": [
            PhotoRecord.from_photo(p).model_dump(mode="json", by_alias=True)
            for p in photos
        ],
    }


def dump_snapshot(envelope: dict[str, Any]) -> bytes:
    """Serialize an envelope to UTF-8 JSON."""
    return json.dumps(envelope, ensure_ascii=False).encode("utf-8")


# Upcasting: each function lifts an envelope from version N to N + 1.


def _upcast_v1_to_v2(data: dict[str, Any]) -> dict[str, Any]:
    # v2 introduced pricing on products and the movements ledger
    for product in data.get("products") or []:
        if isinstance(product, dict):
            product.setdefault("price", 0)
            product.setdefault("averageCost", 0)
    data.setdefault("movements", [])
    return data


def _upcast_v2_to_v3(data: dict[str, Any]) -> dict[str, Any]:
    # v3 introduced photos
    data.setdefault("photos", [])
    return data


UPCASTERS: dict[int, Callable[[dict[str, Any]], dict[str, Any]]] = {
    1: _upcast_v1_to_v2,
    2: _upcast_v2_to_v3,
}


def _read_version(data: dict[str, Any]) -> int:
    # "dbVersion" is the key used by early exports
    version = data.get("schemaVersion", data.get("dbVersion"))
    if isinstance(version, bool) or not isinstance(version, int | float):
        raise MalformedBackupError("missing or non-numeric schemaVersion")
    if isinstance(version, float) and not version.is_integer():
        raise MalformedBackupError(f"schemaVersion must be an integer, got {version}")
    return int(version)


def upcast(data: dict[str, Any]) -> dict[str, Any]:
    """
    Bring an envelope up to CURRENT_SCHEMA_VERSION.

    Raises:
        FutureSchemaError: the envelope is newer than this installation.
        MalformedBackupError: the version is missing or unsupported.
    """
    version = _read_version(data)
    if version > CURRENT_SCHEMA_VERSION:
        raise FutureSchemaError(version, CURRENT_SCHEMA_VERSION)
    if version < 1:
        raise MalformedBackupError(f"unsupported schemaVersion {version}")

    while version < CURRENT_SCHEMA_VERSION:
        data = UPCASTERS[version](data)
        version += 1

    data["schemaVersion"] = version
    data.pop("dbVersion", None)
    return data


# Decoding


def _decode_records(
    items: list[Any], section: str, decode: Callable[[Any], Any]
) -> list[Any]:
    decoded = []
    for index, item in enumerate(items):
        try:
            decoded.append(decode(item))
        except (PydanticValidationError, binascii.Error, ValueError, TypeError) as e:
            raise MalformedBackupError(
                f"invalid {section} record at index {index}: {e}"
            ) from e

    seen: set[str] = set()
    for record in decoded:
        if record.id in seen:
            raise MalformedBackupError(f"duplicate {section} id '{record.id}'")
        seen.add(record.id)
    return decoded


def _to_product(item: Any) -> Product:
    return Product.model_validate(ProductRecord.model_validate(item).model_dump())


def _to_movement(item: Any) -> Movement:
    return Movement.model_validate(MovementRecord.model_validate(item).model_dump())


def _to_photo(item: Any) -> Photo:
    return PhotoRecord.model_validate(item).to_photo()


def parse_snapshot(
    raw: bytes | str,
    max_bytes: int = DEFAULT_MAX_BACKUP_BYTES,
) -> Snapshot:
    """
    Parse and validate a backup artifact.

    The size limit is enforced before the payload is parsed.

    Raises:
        BackupTooLargeError: payload exceeds max_bytes.
        MalformedBackupError: not JSON, not an object, missing sections, a
            record that does not validate, or an id repeated within a section.
        FutureSchemaError: written by a newer schema version.
    """
    payload = raw.encode("utf-8") if isinstance(raw, str) else raw
    if len(payload) > max_bytes:
        raise BackupTooLargeError(len(payload), max_bytes)

    try:
        data = json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedBackupError(f"not valid JSON ({e})") from e
    except RecursionError as e:
        raise MalformedBackupError("JSON nested too deeply") from e

    if not isinstance(data, dict):
        raise MalformedBackupError("expected a JSON object at the top level")

    data = upcast(data)

    for section in SECTIONS:
        if not isinstance(data.get(section), list):
            raise MalformedBackupError(f"missing '{section}' array")

    exported_at = data.get("exportedAt", data.get("createdAt"))
    if not isinstance(exported_at, str):
        exported_at = utcnow().isoformat()

    return Snapshot(
        schema_version=data["schemaVersion"],
        exported_at=exported_at,
        products=_decode_records(data["products"], "product", _to_product),
        movements=_decode_records(data["movements"], "movement", _to_movement),
        photos=_decode_records(data["photos"], "photo", _to_photo),
    )
