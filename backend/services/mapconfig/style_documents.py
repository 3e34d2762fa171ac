"""Locally hosted and generated style documents."""

import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from models.map_config import MapConfigRecord
from services.mapconfig.style_catalog import RASTER_MAPS

logger = logging.getLogger(__name__)


class InvalidStyleName(ValueError):
    """Raised for style names that cannot map to a file safely."""


def parse_style_filename(filename: str) -> str:
    """Return the style name for a requested ``<name>.json`` filename.

    Raises:
        InvalidStyleName: empty names or names with path components
    """
    if not filename or not filename.strip():
        raise InvalidStyleName("Map name is required")
    if ".." in filename or "/" in filename or "\\" in filename or "\x00" in filename:
        raise InvalidStyleName("Invalid filename format")
    name = filename[: -len(".json")] if filename.lower().endswith(".json") else filename
    if not name.strip():
        raise InvalidStyleName("Map name is required")
    return name


def list_static_styles(styles_dir: Path) -> List[str]:
    """Names of the ``*.json`` documents in ``styles_dir`` (empty if missing)."""
    if not styles_dir.is_dir():
        logger.warning(f"Static styles directory not found: {styles_dir}")
        return []
    return sorted(path.stem for path in styles_dir.glob("*.json") if path.is_file())


def load_static_style(styles_dir: Path, name: str) -> Optional[str]:
    """Return the raw text of ``<name>.json`` in ``styles_dir``, if present."""
    path = styles_dir / f"{Path(name).name}.json"
    if not path.is_file():
        return None
    return path.read_text(encoding="utf-8")


def generate_raster_style(config: Mapping[str, Any]) -> Dict[str, Any]:
    """Build a MapLibre style wrapping a raster tile source."""
    minzoom = config.get("minzoom") or 0
    return {
        "version": 8,
        "name": config.get("name"),
        "metadata": {
            "mapbox:autocomposite": False,
            "mapbox:type": "default",
            "generated": datetime.now(timezone.utc).isoformat(),
            "generator": "mapconfig-service",
        },
        "sources": {
            "raster-tiles": {
                "type": "raster",
                "tiles": list(config.get("tiles") or []),
                "tileSize": config.get("tileSize") or 256,
                "minzoom": minzoom,
                "maxzoom": config.get("maxzoom") or 18,
                "attribution": config.get("attribution") or "",
            }
        },
        "layers": [
            {
                "id": "raster-layer",
                "type": "raster",
                "source": "raster-tiles",
                "minzoom": minzoom,
                "maxzoom": config.get("maxzoom") or 22,
                "paint": {"raster-opacity": 1, "raster-fade-duration": 0},
            }
        ],
    }


def known_raster_config(name: str) -> Optional[Dict[str, Any]]:
    return RASTER_MAPS.get(re.sub(r"[\s_]", "-", name).lower())


def record_raster_config(record: MapConfigRecord) -> Optional[Dict[str, Any]]:
    """Raster source settings for WMTS/XYZ records that list their tiles."""
    tiles = record.metadata.get("tiles")
    if not tiles:
        return None
    return {
        "name": record.label or record.name,
        "tiles": tiles if isinstance(tiles, list) else [tiles],
        "tileSize": record.metadata.get("tileSize"),
        "minzoom": record.metadata.get("minzoom"),
        "maxzoom": record.metadata.get("maxzoom"),
        "attribution": record.metadata.get("attribution"),
    }
