"""
Request router: maps Stremio addon paths onto handlers.

Paths may carry a leading config segment holding the user's search API key:

    /manifest.json
    /<apiKey>/catalog/series/f1-catchup-catalog/skip=20.json
    /<apiKey>/meta/series/f1catchup:2024.json
    /<apiKey>/stream/series/f1catchup:2024:5:sprint.json
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qsl, unquote, urlsplit

from .handlers import AddonHandlers
from .manifest import CATALOG_ID, build_manifest

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

RESOURCES = ("catalog", "meta", "stream")


@dataclass
class Response:
    status: int
    body: Optional[Dict[str, Any]] = None
    headers: Dict[str, str] = field(default_factory=dict)


def json_response(body: Dict[str, Any], status: int = 200) -> Response:
    headers = {"Content-Type": "application/json", **CORS_HEADERS}
    return Response(status=status, body=body, headers=headers)


def not_found() -> Response:
    return json_response({"error": "Not found"}, 404)


def _strip_json(segment: str) -> str:
    return segment[:-len(".json")] if segment.endswith(".json") else segment


def parse_extra(segment: Optional[str]) -> Dict[str, str]:
    """``skip=20&genre=x`` style extra segment into a dict."""
    if not segment:
        return {}
    return dict(parse_qsl(_strip_json(segment)))


class AddonRouter:
    """Dispatches one request; never raises."""

    def __init__(self, handlers: AddonHandlers):
        self.handlers = handlers

    async def dispatch(self, method: str, path: str, origin: str) -> Response:
        if method.upper() == "OPTIONS":
            return Response(status=204, headers=dict(CORS_HEADERS))
        if method.upper() != "GET":
            return not_found()

        try:
            return await self._route(urlsplit(path).path, origin)
        except Exception as e:
            logger.exception(f"Request failed: {path}")
            return json_response({"error": "Internal server error", "message": str(e)}, 500)

    async def _route(self, path: str, origin: str) -> Response:
        parts: List[str] = [unquote(p) for p in path.split("/") if p]
        if not parts:
            return not_found()

        if parts[-1] == "manifest.json" and len(parts) <= 2:
            return json_response(build_manifest(origin))

        index = next((i for i, p in enumerate(parts) if p in RESOURCES), None)
        if index is None or index > 1 or len(parts) < index + 3:
            return not_found()

        # Anything before the resource is the config segment
        credential = parts[0] if index == 1 else None
        resource, content_type = parts[index], parts[index + 1]
        resource_id = _strip_json(parts[index + 2])
        extra = parse_extra(parts[index + 3] if len(parts) > index + 3 else None)

        if content_type != "series":
            return not_found()

        if resource == "catalog":
            if resource_id != CATALOG_ID:
                return not_found()
            try:
                skip = int(extra.get("skip", 0))
            except ValueError:
                skip = 0
            return json_response(await self.handlers.catalog_page(origin, skip))

        if resource == "meta":
            return json_response(await self.handlers.meta(resource_id, origin))

        return json_response(await self.handlers.streams(resource_id, credential))
