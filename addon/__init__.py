"""
Stremio addon surface: configuration, manifest, handlers and router.
"""

from .config import AddonConfig, parse_testing_episodes
from .manifest import build_manifest, image_urls
from .handlers import AddonHandlers, create_handlers
from .router import AddonRouter, Response

__all__ = [
    "AddonConfig",
    "parse_testing_episodes",
    "build_manifest",
    "image_urls",
    "AddonHandlers",
    "create_handlers",
    "AddonRouter",
    "Response",
]
