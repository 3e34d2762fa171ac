import sys
from pathlib import Path

# Add the backend root directory to Python path first
backend_root = Path(__file__).parent.parent
sys.path.insert(0, str(backend_root))

"""
Pytest configuration and fixtures for map configuration tests.
"""

import copy  # noqa: E402
import json  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.exc import SQLAlchemyError  # noqa: E402

from models.layer_group import LayerGroupOverlayRecord, LayerGroupRecord  # noqa: E402
from models.map_config import normalize_record  # noqa: E402
from services.context import ServiceContext  # noqa: E402
from services.database.map_config_store import style_name_candidates  # noqa: E402
from services.mapconfig.providers import ProviderCredentials  # noqa: E402
from services.mapconfig.sanitizer import ConfigSanitizer  # noqa: E402
from services.rate_limiter import RateLimiter  # noqa: E402

BASE_URL = "https://maps.example.com"
MAPTILER_KEY = "MT-SERVER-KEY"
CLOCKWORK_KEY = "CW-SERVER-KEY"
ANDROID_TOKEN = "android-app-token"

GROUP_ID = "7d1f6a3e-3c1b-4a36-9a59-2f4f0f0e8b11"

RAW_RECORDS = [
    {
        "id": "b0a4c2de-6d55-4b77-9a7a-7e0e3f1c0001",
        "name": "Global",
        "label": "Global",
        "country": "Global",
        "flag": "🌐",
        "type": "vtc",
        "style": "https://api.maptiler.com/maps/streets-v2/style.json?key=ABC123",
        "metadata": {
            "provider": "maptiler",
            "attribution": "© MapTiler © OpenStreetMap contributors",
            "api_keys": {"maptiler": "ABC123"},
            "internal_urls": ["https://internal.example.com/admin"],
        },
        "layers": [{"id": "roads"}, {"id": "staging", "private": True}],
        "updated_at": "2025-06-01T10:00:00Z",
    },
    {
        "id": "b0a4c2de-6d55-4b77-9a7a-7e0e3f1c0002",
        "name": "Global 2",
        "label": "Streets",
        "country": "Global",
        "type": "vtc",
        "style_url": "https://maps.clockworkmicro.com/streets/v1/style?x-api-key=OLDKEY&lang=de",
        "requires_api_key": "clockwork",
    },
    {
        "id": "b0a4c2de-6d55-4b77-9a7a-7e0e3f1c0003",
        "name": "Kataster BEV",
        "label": "Kataster",
        "country": "Austria",
        "flag": "🇦🇹",
        "type": "vtc",
        "style": "https://kataster.bev.gv.at/styles/kataster/style.json",
        "metadata": {"isOverlay": True, "credentials": "secret"},
    },
    {
        "id": "b0a4c2de-6d55-4b77-9a7a-7e0e3f1c0004",
        "name": "Basemap DE",
        "label": "Basemap Deutschland",
        "country": "Germany",
        "flag": "🇩🇪",
        "type": "vtc",
        "style": "/styles/basemap de.json",
        "map_category": "background",
    },
]


class FakeMapConfigStore:
    """In-memory stand-in for MapConfigStore.

    Operations named in ``fail`` raise SQLAlchemyError.
    """

    def __init__(self, records=(), groups=(), overlays=(), fail=()):
        self.records = [normalize_record(record) for record in records]
        self.groups = list(groups)
        self.overlays = list(overlays)
        self.fail = set(fail)

    def _maybe_fail(self, operation):
        if operation in self.fail:
            raise SQLAlchemyError(f"{operation} failed")

    async def list_public_configs(self):
        self._maybe_fail("configs")
        return [record for record in self.records if record.is_active and record.is_public]

    async def find_by_name(self, name):
        self._maybe_fail("find")
        candidates = style_name_candidates(name)
        for record in self.records:
            if record.is_active and record.name.lower() in candidates:
                return record
        return None

    async def list_layer_groups(self, group_id=None):
        self._maybe_fail("groups")
        return [g for g in self.groups if group_id is None or str(g.id) == str(group_id)]

    async def list_group_overlays(self, group_ids):
        self._maybe_fail("overlays")
        wanted = {str(group_id) for group_id in group_ids}
        return [o for o in self.overlays if str(o.layer_group_id) in wanted]


@pytest.fixture
def raw_records():
    """Fresh copies of the raw rows, safe to mutate."""
    return copy.deepcopy(RAW_RECORDS)


@pytest.fixture
def credentials():
    return ProviderCredentials({"maptiler": MAPTILER_KEY, "clockwork": CLOCKWORK_KEY})


@pytest.fixture
def styles_dir(tmp_path):
    directory = tmp_path / "styles"
    directory.mkdir()
    (directory / "kataster-bev.json").write_text(
        json.dumps({"version": 8, "name": "Kataster BEV", "sources": {}, "layers": []}),
        encoding="utf-8",
    )
    return directory


@pytest.fixture
def sanitizer(credentials):
    return ConfigSanitizer(
        credentials=credentials, base_url=BASE_URL, static_styles=["kataster-bev"]
    )


@pytest.fixture
def layer_group(raw_records):
    group = LayerGroupRecord(
        id=GROUP_ID,
        name="Austria Cadastre",
        description="Streets with cadastral overlay",
        display_order=1,
        tags=["austria"],
        basemap=normalize_record(raw_records[0]),
    )
    overlays = [
        LayerGroupOverlayRecord(
            layer_group_id=GROUP_ID,
            overlay=normalize_record(raw_records[2]),
            display_order=2,
            opacity=0.7,
        ),
        LayerGroupOverlayRecord(
            layer_group_id=GROUP_ID,
            overlay=normalize_record(raw_records[3]),
            display_order=1,
            is_visible_default=False,
        ),
    ]
    return group, overlays


@pytest.fixture
def fake_store(raw_records, layer_group):
    group, overlays = layer_group
    return FakeMapConfigStore(records=raw_records, groups=[group], overlays=overlays)


@pytest.fixture
def service_context(credentials, styles_dir):
    return ServiceContext(
        credentials=credentials,
        app_tokens={"android": ANDROID_TOKEN},
        rate_limiter=RateLimiter(limit=100, window_seconds=60),
        styles_dir=styles_dir,
        public_base_url=BASE_URL,
        static_styles=["kataster-bev"],
        proxy_timeout=5,
    )


@pytest.fixture
def api_client(service_context, fake_store):
    """TestClient for the full app with the datastore replaced by ``fake_store``."""
    import main
    from api.deps import get_map_config_store

    original_context = main.app.state.context
    main.app.state.context = service_context
    main.app.dependency_overrides[get_map_config_store] = lambda: fake_store
    try:
        yield TestClient(main.app)
    finally:
        main.app.dependency_overrides.clear()
        main.app.state.context = original_context
