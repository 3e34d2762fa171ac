import pytest

from services.mapconfig.providers import (
    Provider,
    ProviderCredentials,
    detect_provider,
    host_belongs_to,
    resolve_provider,
)


@pytest.mark.parametrize(
    "url,provider",
    [
        ("https://api.maptiler.com/maps/streets-v2/style.json?key=ABC123", Provider.MAPTILER),
        ("https://maps.clockworkmicro.com/streets/v1/style", Provider.CLOCKWORK),
        ("https://kataster.bev.gv.at/styles/kataster/style.json", Provider.BEV),
        ("https://API.MAPTILER.COM/maps/ocean/style.json", Provider.MAPTILER),
    ],
)
def test_detect_provider_by_host(url, provider):
    assert detect_provider(url) is provider


@pytest.mark.parametrize(
    "url",
    [
        None,
        "",
        "/styles/local.json",
        "not a url",
        "https://example.com/maps/maptiler.com/style.json",
        "http://[::1",
    ],
)
def test_detect_provider_returns_none(url):
    assert detect_provider(url) is None


def test_resolve_provider_hints():
    assert resolve_provider("MapTiler") is Provider.MAPTILER
    assert resolve_provider("clockworkmicro") is Provider.CLOCKWORK
    assert resolve_provider(" kataster ") is Provider.BEV
    assert resolve_provider(Provider.BEV) is Provider.BEV
    assert resolve_provider("osm") is None
    assert resolve_provider(True) is None


def test_credentials_report_configuration_without_values():
    credentials = ProviderCredentials({"maptiler": "secret", "bev": "", "unknown": "x"})
    assert credentials.get(Provider.MAPTILER) == "secret"
    assert credentials.get(Provider.BEV) is None
    assert credentials.get(None) is None
    assert credentials.configured() == {"maptiler": True, "clockwork": False, "bev": False}


def test_credentials_from_env(monkeypatch):
    monkeypatch.setenv("CLOCKWORK_API_KEY", "cw")
    monkeypatch.delenv("MAPTILER_API_KEY", raising=False)
    credentials = ProviderCredentials.from_env()
    assert credentials.get(Provider.CLOCKWORK) == "cw"
    assert credentials.get(Provider.MAPTILER) is None


@pytest.mark.parametrize(
    "host,provider,expected",
    [
        ("api.maptiler.com", Provider.MAPTILER, True),
        ("maptiler.com", Provider.MAPTILER, True),
        ("API.MapTiler.com.", Provider.MAPTILER, True),
        ("api.maptiler.com.evil.example", Provider.MAPTILER, False),
        ("evilmaptiler.com", Provider.MAPTILER, False),
        ("maps.clockworkmicro.com", Provider.CLOCKWORK, True),
        ("api.maptiler.com", Provider.CLOCKWORK, False),
        ("kataster.bev.gv.at", Provider.BEV, True),
        (None, Provider.MAPTILER, False),
        ("api.maptiler.com", None, False),
    ],
)
def test_host_belongs_to_registered_domain(host, provider, expected):
    assert host_belongs_to(host, provider) is expected
