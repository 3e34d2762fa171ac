from datetime import datetime, timezone

from models.map_config import MapConfigRecord, normalize_record


def test_style_field_priority():
    record = normalize_record(
        {"name": "a", "style": "  ", "style_url": "https://x/1.json", "public_style_url": "p"}
    )
    assert record.style == "https://x/1.json"
    assert normalize_record({"name": "b", "public_style_url": "/p.json"}).style == "/p.json"
    assert normalize_record({"name": "c"}).style == ""


def test_legacy_columns_fold_into_metadata():
    record = normalize_record(
        {
            "name": "Kataster",
            "map_category": "overlay",
            "requires_api_key": "bev",
            "is_overlay": True,
        }
    )
    assert record.metadata == {"category": "overlay", "provider": "bev", "isOverlay": True}


def test_existing_metadata_wins_over_legacy_columns():
    record = normalize_record(
        {
            "name": "x",
            "map_category": "overlay",
            "requires_api_key": "maptiler",
            "metadata": {"category": "background", "provider": "clockwork"},
        }
    )
    assert record.metadata == {"category": "background", "provider": "clockwork"}


def test_timestamps_and_flags():
    record = normalize_record(
        {
            "name": "x",
            "updated_at": "2025-01-02T03:04:05Z",
            "created_at": "yesterday",
            "is_active": None,
            "is_public": False,
        }
    )
    assert record.updated_at == datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert record.created_at is None
    assert record.is_active is True
    assert record.is_public is False


def test_records_and_garbage_pass_through():
    record = MapConfigRecord(name="kept")
    assert normalize_record(record) is record
    assert normalize_record(None).name == ""
    assert normalize_record({"name": 7, "layers": ("a",)}).name == "7"
