"""
Tests for /api/styles/{name}.json resolution.
"""

import json

import pytest
from conftest import BASE_URL

from models.map_config import normalize_record
from services.mapconfig.style_documents import (
    InvalidStyleName,
    generate_raster_style,
    known_raster_config,
    list_static_styles,
    parse_style_filename,
)


def test_parse_style_filename():
    assert parse_style_filename("Global.json") == "Global"
    assert parse_style_filename("basemap-ortho") == "basemap-ortho"
    for bad in ("", "   ", ".json", "../etc.json", "a/b.json", "a\\b.json"):
        with pytest.raises(InvalidStyleName):
            parse_style_filename(bad)


def test_list_static_styles(styles_dir, tmp_path):
    assert list_static_styles(styles_dir) == ["kataster-bev"]
    assert list_static_styles(tmp_path / "missing") == []


def test_generate_raster_style():
    style = generate_raster_style(known_raster_config("Basemap Ortho"))
    assert style["version"] == 8
    assert style["sources"]["raster-tiles"]["maxzoom"] == 19
    assert style["layers"][0]["source"] == "raster-tiles"
    assert style["metadata"]["generator"] == "mapconfig-service"


def test_static_style_is_served(api_client):
    response = api_client.get("/api/styles/kataster-bev.json")
    assert response.status_code == 200
    assert response.json()["name"] == "Kataster BEV"
    assert response.headers["cache-control"] == "public, max-age=3600"


def test_record_with_external_style_redirects(api_client):
    response = api_client.get("/api/styles/Global.json", follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"] == f"{BASE_URL}/api/proxy/style/maptiler-streets-v2"


def test_record_with_local_style_file(api_client, styles_dir):
    (styles_dir / "basemap de.json").write_text(json.dumps({"version": 8, "name": "DE"}))
    response = api_client.get("/api/styles/basemap-de.json")
    assert response.status_code == 200
    assert response.json()["name"] == "DE"


def test_record_with_tiles_generates_raster_style(api_client, fake_store):
    fake_store.records.append(
        normalize_record(
            {
                "name": "Ortho Tirol",
                "type": "wmts",
                "metadata": {
                    "tiles": "https://wmts.example.at/ortho/{z}/{y}/{x}.jpeg",
                    "attribution": "© Land Tirol",
                    "maxzoom": 20,
                },
            }
        )
    )
    response = api_client.get("/api/styles/ortho_tirol.json")

    assert response.status_code == 200
    source = response.json()["sources"]["raster-tiles"]
    assert source["tiles"] == ["https://wmts.example.at/ortho/{z}/{y}/{x}.jpeg"]
    assert source["maxzoom"] == 20


def test_record_without_style_does_not_redirect_to_itself(api_client, fake_store):
    fake_store.records.append(normalize_record({"name": "Empty Map"}))
    response = api_client.get("/api/styles/Empty Map.json", follow_redirects=False)
    assert response.status_code == 404


def test_known_raster_map_without_record(api_client):
    response = api_client.get("/api/styles/germany-topplusopen.json")
    assert response.status_code == 200
    assert response.json()["name"] == "Germany TopPlusOpen"


def test_unknown_style(api_client):
    response = api_client.get("/api/styles/nowhere.json")
    assert response.status_code == 404
    assert response.json() == {
        "error": "Style not found",
        "message": "No style configuration found for: nowhere",
    }


def test_malformed_style_name(api_client):
    response = api_client.get("/api/styles/..json")
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid filename format"}


def test_datastore_failure(api_client, fake_store):
    fake_store.fail.add("find")
    response = api_client.get("/api/styles/Global.json")
    assert response.status_code == 500
    assert response.json()["error"] == "Internal server error"


def test_cadastral_record_without_local_copy_redirects_upstream(
    api_client, service_context, styles_dir
):
    (styles_dir / "kataster-bev.json").unlink()
    service_context.static_styles = []

    response = api_client.get("/api/styles/Kataster BEV.json", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == (
        "https://kataster.bev.gv.at/styles/kataster/style.json"
    )


def test_external_style_under_styles_path_redirects(api_client, fake_store):
    fake_store.records.append(
        normalize_record(
            {"name": "Liberty", "style": "https://tiles.openfreemap.org/styles/liberty"}
        )
    )
    response = api_client.get("/api/styles/Liberty.json", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == "https://tiles.openfreemap.org/styles/liberty"
