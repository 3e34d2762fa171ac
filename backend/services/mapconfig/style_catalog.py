"""Static tables of proxied provider styles and known raster maps."""

from dataclasses import dataclass
from typing import Dict, Optional

from services.mapconfig.providers import Provider


@dataclass(frozen=True)
class ProxiedStyle:
    """An upstream style served through ``/api/proxy/style/{style_id}``."""

    style_id: str
    url: str
    provider: Optional[Provider]
    name: str


STYLE_PROXIES: Dict[str, ProxiedStyle] = {
    entry.style_id: entry
    for entry in (
        ProxiedStyle(
            "maptiler-streets-v2",
            "https://api.maptiler.com/maps/streets-v2/style.json",
            Provider.MAPTILER,
            "MapTiler Streets v2",
        ),
        ProxiedStyle(
            "maptiler-landscape",
            "https://api.maptiler.com/maps/landscape/style.json",
            Provider.MAPTILER,
            "MapTiler Landscape",
        ),
        ProxiedStyle(
            "maptiler-ocean",
            "https://api.maptiler.com/maps/ocean/style.json",
            Provider.MAPTILER,
            "MapTiler Ocean",
        ),
        ProxiedStyle(
            "maptiler-outdoor-v2",
            "https://api.maptiler.com/maps/outdoor-v2/style.json",
            Provider.MAPTILER,
            "MapTiler Outdoor v2",
        ),
        ProxiedStyle(
            "maptiler-dataviz",
            "https://api.maptiler.com/maps/dataviz/style.json",
            Provider.MAPTILER,
            "MapTiler Dataviz",
        ),
        ProxiedStyle(
            "clockwork-streets",
            "https://maps.clockworkmicro.com/streets/v1/style",
            Provider.CLOCKWORK,
            "Clockwork Streets",
        ),
        ProxiedStyle(
            "bev-kataster",
            "https://kataster.bev.gv.at/styles/kataster/style.json",
            Provider.BEV,
            "BEV Kataster",
        ),
        ProxiedStyle(
            "bev-kataster-light",
            "https://kataster.bev.gv.at/styles/kataster-light/style.json",
            Provider.BEV,
            "BEV Kataster Light",
        ),
        # basemap.de needs no key
        ProxiedStyle(
            "basemap-de-global",
            "https://sgx.geodatenzentrum.de/gdz_basemapworld_vektor/styles/bm_web_wld_col.json",
            None,
            "Basemap.de Global",
        ),
    )
}

# Proxy used for a provider when the record's URL is not a catalogued style.
DEFAULT_PROXY_STYLE: Dict[Provider, str] = {
    Provider.MAPTILER: "maptiler-streets-v2",
    Provider.CLOCKWORK: "clockwork-streets",
    Provider.BEV: "bev-kataster",
}

STYLE_PROXY_PATH = "/api/proxy/style/"

# Legacy map names that older clients still request as proxy style ids.
PROXY_STYLE_ALIASES: Dict[str, str] = {
    "Global": "maptiler-streets-v2",
    "Global2": "clockwork-streets",
    "Landscape": "maptiler-landscape",
    "Ocean": "maptiler-ocean",
    "Outdoor": "maptiler-outdoor-v2",
    "Dataviz": "maptiler-dataviz",
    "BasemapDEGlobal": "basemap-de-global",
    "Kataster": "bev-kataster",
    "Kataster BEV": "bev-kataster",
    "Kataster BEV2": "bev-kataster",
    "Kataster Light": "bev-kataster-light",
}


def find_proxied_style(style_id: Optional[str]) -> Optional[ProxiedStyle]:
    """Look up a proxied style by id or legacy alias."""
    if not style_id:
        return None
    entry = STYLE_PROXIES.get(style_id)
    if entry is None and style_id in PROXY_STYLE_ALIASES:
        entry = STYLE_PROXIES[PROXY_STYLE_ALIASES[style_id]]
    return entry


def proxy_style_id(url: Optional[str], provider: Provider) -> Optional[str]:
    """Pick the proxy style id for a keyless upstream URL."""
    if url:
        normalized = url.rstrip("/")
        for entry in STYLE_PROXIES.values():
            if entry.url == normalized:
                return entry.style_id
    return DEFAULT_PROXY_STYLE.get(provider)


# Raster/WMTS maps for which a style document is generated on demand.
RASTER_MAPS: Dict[str, Dict] = {
    "basemap-ortho": {
        "name": "Basemap Ortho",
        "tiles": [
            "https://maps1.wien.gv.at/basemap/bmaporthofoto30cm/normal/google3857/{z}/{y}/{x}.jpeg"
        ],
        "attribution": "© basemap.at",
        "maxzoom": 19,
    },
    "basemap-ortho-blue": {
        "name": "Basemap Ortho Blue",
        "tiles": [
            "https://maps1.wien.gv.at/basemap/bmaporthofoto30cm/normal/google3857/{z}/{y}/{x}.jpeg"
        ],
        "attribution": "© basemap.at",
        "maxzoom": 19,
    },
    "germany-topplusopen": {
        "name": "Germany TopPlusOpen",
        "tiles": [
            "https://sgx.geodatenzentrum.de/wmts_topplus_open/tile/1.0.0/web_scale/default/"
            "WEBMERCATOR/{z}/{y}/{x}.png"
        ],
        "attribution": "© BKG (GeoBasis-DE)",
        "maxzoom": 18,
    },
}
