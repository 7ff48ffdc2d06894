"""
Stremio manifest and shared image/metadata constants.
"""

from typing import Any, Dict, Optional

ADDON_ID = "org.f1catchup.addon"
ADDON_VERSION = "1.0.0"
ADDON_NAME = "F1 Catchup"
CATALOG_ID = "f1-catchup-catalog"
SERIES_NAME = "Formula 1"
GENRES = ["Motorsport", "Racing", "Formula 1"]

IMAGE_POSTER_PATH = "/images/poster.png"
IMAGE_LOGO_PATH = "/images/logo.png"
IMAGE_BG_PATH = "/images/background.jpg"


def image_urls(origin: str) -> Dict[str, str]:
    """Poster, logo and background URLs served from the request origin."""
    origin = (origin or "").rstrip("/")
    return {
        "poster": origin + IMAGE_POSTER_PATH,
        "logo": origin + IMAGE_LOGO_PATH,
        "background": origin + IMAGE_BG_PATH,
    }


def build_manifest(origin: str, behavior_hints: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    images = image_urls(origin)
    return {
        "id": ADDON_ID,
        "version": ADDON_VERSION,
        "name": ADDON_NAME,
        "description": (
            "Formula 1 sessions by season: practice, qualifying, sprint and race, "
            "with streams found through TorBox search."
        ),
        "logo": images["logo"],
        "background": images["background"],
        "resources": ["catalog", "meta", "stream"],
        "types": ["series"],
        "catalogs": [{
            "type": "series",
            "id": CATALOG_ID,
            "name": SERIES_NAME,
            "extra": [{"name": "skip", "isRequired": False}],
        }],
        "idPrefixes": ["f1catchup:", "tvdb:"],
        "behaviorHints": behavior_hints or {"configurable": True, "configurationRequired": False},
    }
