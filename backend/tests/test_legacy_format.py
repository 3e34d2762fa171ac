from models.map_config import PublicMapConfig
from services.mapconfig.legacy_format import is_overlay, legacy_key, to_legacy_format


def _config(**fields):
    fields.setdefault("style", "https://maps.example.com/styles/x.json")
    return PublicMapConfig(**fields)


def test_overlay_flag_routes_to_overlay_bucket():
    legacy = to_legacy_format([_config(name="Kataster BEV", metadata={"isOverlay": True})])
    assert "KatasterBEV" in legacy.overlay_maps
    assert legacy.background_maps == {}


def test_overlay_category_and_known_names():
    assert is_overlay(_config(name="Parcels", metadata={"category": "overlay"}))
    assert is_overlay(_config(name="nzparcels"))
    assert not is_overlay(_config(name="Streets"))


def test_explicit_false_flag_still_allows_name_match():
    assert is_overlay(_config(name="flawi", metadata={"isOverlay": False}))


def test_key_aliases():
    assert legacy_key(_config(name="Global 2")) == "Global2"
    assert legacy_key(_config(name="streets-world", label="Global")) == "Global"
    assert legacy_key(_config(name="Basemap DE-Light!")) == "BasemapDELight"


def test_entry_defaults():
    legacy = to_legacy_format([_config(name="Plain")])
    entry = legacy.background_maps["Plain"]
    assert entry.label == "Plain"
    assert entry.type == "vtc"
    assert entry.flag == "🌐"
    assert entry.country == "Global"
    assert entry.layers is None


def test_later_records_overwrite_same_key():
    legacy = to_legacy_format(
        [
            _config(name="Global", style="https://a.example.com/1.json"),
            _config(name="Global", style="https://a.example.com/2.json"),
        ]
    )
    assert len(legacy.background_maps) == 1
    assert legacy.background_maps["Global"].style == "https://a.example.com/2.json"


def test_serialized_shape_uses_client_field_names():
    legacy = to_legacy_format(
        [_config(name="Global", layers=[{"id": "roads"}]), _config(name="gefahr")]
    )
    dumped = legacy.model_dump(mode="json", by_alias=True, exclude_none=True)
    assert set(dumped) == {"backgroundMaps", "overlayMaps"}
    assert dumped["backgroundMaps"]["Global"]["layers"] == [{"id": "roads"}]
    assert "layers" not in dumped["overlayMaps"]["gefahr"]
