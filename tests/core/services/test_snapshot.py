"""Tests for the backup snapshot codec."""

import base64
import json
from datetime import UTC, datetime

import pytest

from stockledger.core.exceptions import (
    BackupTooLargeError,
    FutureSchemaError,
    MalformedBackupError,
)
from stockledger.core.services.snapshot import (
    CURRENT_SCHEMA_VERSION,
    dump_snapshot,
    encode_snapshot,
    parse_snapshot,
    upcast,
)

EXPORTED_AT = datetime(2024, 6, 1, 8, 0, tzinfo=UTC)


def _envelope(**overrides) -> dict:
    data = {
        "schemaVersion": CURRENT_SCHEMA_VERSION,
        "exportedAt": "2024-06-01T08:00:00+00:00",
        "products": [],
        "movements": [],
        "photos": [],
    }
    data.update(overrides)
    return data


class TestEncode:
    def test_envelope_keys(self, sample_product, sample_movement, sample_photo):
        envelope = encode_snapshot(
            [sample_product], [sample_movement], [sample_photo], exported_at=EXPORTED_AT
        )

        assert envelope["schemaVersion"] == CURRENT_SCHEMA_VERSION
        assert envelope["exportedAt"] == EXPORTED_AT.isoformat()

        product = envelope["products"][0]
        assert product["averageCost"] == 4.0
        assert "average_cost" not in product

        movement = envelope["movements"][0]
        assert movement["productId"] == sample_product.id
        assert movement["averageCostAtTime"] == 4.0
        assert movement["productSnapshot"] == {"name": "Linen tablecloth", "category": "Tablecloths"}
        assert movement["type"] == "sale"

        photo = envelope["photos"][0]
        assert base64.b64decode(photo["blobBase64"]) == sample_photo.blob
        assert photo["mimeType"] == "image/png"

    def test_dump_is_utf8_json(self, sample_product):
        product = sample_product.model_copy(update={"name": "Nappe brodée"})
        raw = dump_snapshot(encode_snapshot([product], [], []))
        assert "Nappe brodée" in raw.decode("utf-8")


class TestRoundTrip:
    def test_preserves_every_record(self, sample_product, sample_movement, sample_photo):
        raw = dump_snapshot(
            encode_snapshot([sample_product], [sample_movement], [sample_photo], exported_at=EXPORTED_AT)
        )

        snapshot = parse_snapshot(raw)

        assert snapshot.schema_version == CURRENT_SCHEMA_VERSION
        assert snapshot.exported_at == EXPORTED_AT.isoformat()
        assert snapshot.products == [sample_product]
        assert snapshot.movements == [sample_movement]
        assert snapshot.photos == [sample_photo]
        assert snapshot.photos[0].thumbnail == sample_photo.thumbnail

    def test_accepts_str(self):
        snapshot = parse_snapshot(json.dumps(_envelope()))
        assert snapshot.products == []


class TestUpcast:
    def test_v1_export(self):
        legacy = {
            "dbVersion": 1,
            "createdAt": "2023-11-20T10:00:00Z",
            "products": [
                {
                    "id": "old-1",
                    "name": "Old blanket",
                    "category": "Blankets",
                    "quantity": 3,
                    "createdAt": "2023-01-01T00:00:00Z",
                    "updatedAt": "2023-01-01T00:00:00Z",
                }
            ],
        }

        snapshot = parse_snapshot(json.dumps(legacy))

        assert snapshot.schema_version == CURRENT_SCHEMA_VERSION
        assert snapshot.exported_at == "2023-11-20T10:00:00Z"
        assert snapshot.products[0].price == 0.0
        assert snapshot.products[0].average_cost == 0.0
        assert snapshot.movements == []
        assert snapshot.photos == []

    def test_v2_gains_photos(self):
        data = _envelope(schemaVersion=2)
        del data["photos"]
        data = upcast(data)
        assert data["schemaVersion"] == CURRENT_SCHEMA_VERSION
        assert data["photos"] == []

    def test_current_version_untouched(self):
        data = _envelope()
        assert upcast(dict(data)) == data

    def test_future_version(self):
        with pytest.raises(FutureSchemaError) as exc_info:
            parse_snapshot(json.dumps(_envelope(schemaVersion=CURRENT_SCHEMA_VERSION + 1)))
        assert exc_info.value.details["backup_version"] == CURRENT_SCHEMA_VERSION + 1


class TestMalformed:
    @pytest.mark.parametrize(
        "raw",
        [
            b"not json at all",
            b"[1, 2, 3]",
            json.dumps(_envelope(schemaVersion=True)).encode(),
            json.dumps(_envelope(schemaVersion="3")).encode(),
            json.dumps(_envelope(schemaVersion=0)).encode(),
            json.dumps(_envelope(schemaVersion=2.5)).encode(),
            json.dumps({"products": []}).encode(),
        ],
    )
    def test_rejected(self, raw):
        with pytest.raises(MalformedBackupError):
            parse_snapshot(raw)

    def test_missing_section(self):
        data = _envelope()
        del data["movements"]
        with pytest.raises(MalformedBackupError, match="movements"):
            parse_snapshot(json.dumps(data))

    def test_bad_record_reports_index(self):
        data = _envelope(products=[{"id": "x", "category": "Bags"}])
        with pytest.raises(MalformedBackupError, match="index 0"):
            parse_snapshot(json.dumps(data))

    def test_negative_quantity_rejected(self):
        data = _envelope(
            products=[
                {
                    "id": "x",
                    "name": "Bag",
                    "category": "Bags",
                    "quantity": -4,
                    "createdAt": "2024-01-01T00:00:00Z",
                    "updatedAt": "2024-01-01T00:00:00Z",
                }
            ]
        )
        with pytest.raises(MalformedBackupError):
            parse_snapshot(json.dumps(data))

    def test_bad_base64(self):
        data = _envelope(
            photos=[
                {
                    "id": "ph",
                    "productId": "p",
                    "mimeType": "image/png",
                    "createdAt": "2024-01-01T00:00:00Z",
                    "blobBase64": "***not base64***",
                    "thumbnailBase64": "",
                }
            ]
        )
        with pytest.raises(MalformedBackupError, match="photo record at index 0"):
            parse_snapshot(json.dumps(data))

    def test_deeply_nested(self):
        with pytest.raises(MalformedBackupError, match="nested"):
            parse_snapshot("[" * 200_000 + "]" * 200_000)

    def test_duplicate_product_id(self, sample_product):
        renamed = sample_product.model_copy(update={"name": "Other"})
        raw = dump_snapshot(encode_snapshot([sample_product, renamed], [], []))

        with pytest.raises(MalformedBackupError, match=f"duplicate product id '{sample_product.id}'"):
            parse_snapshot(raw)

    def test_duplicate_movement_id(self, sample_product, sample_movement):
        raw = dump_snapshot(encode_snapshot([sample_product], [sample_movement, sample_movement], []))

        with pytest.raises(MalformedBackupError, match="duplicate movement id"):
            parse_snapshot(raw)

    def test_non_finite_cost_rejected(self, sample_product):
        envelope = encode_snapshot([sample_product], [], [])
        envelope["products"][0]["averageCost"] = float("nan")

        # json.dumps writes NaN, which json.loads accepts
        with pytest.raises(MalformedBackupError, match="product record at index 0"):
            parse_snapshot(json.dumps(envelope))


class TestSizeLimit:
    def test_too_large(self):
        raw = json.dumps(_envelope()).encode()
        with pytest.raises(BackupTooLargeError):
            parse_snapshot(raw, max_bytes=len(raw) - 1)

    def test_too_large_checked_before_parsing(self):
        with pytest.raises(BackupTooLargeError):
            parse_snapshot(b"x" * 100, max_bytes=10)

    def test_is_malformed(self):
        with pytest.raises(MalformedBackupError):
            parse_snapshot(b"{}" * 10, max_bytes=4)
