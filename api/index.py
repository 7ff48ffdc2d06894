"""F1 Catchup addon endpoint (serverless)."""
from http.server import BaseHTTPRequestHandler
import asyncio
import json
import logging

from addon import AddonConfig, AddonRouter, create_handlers
from cache import InMemoryCache

config = AddonConfig.from_env()
logging.basicConfig(
    level=getattr(logging, config.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Shared by warm invocations of the same instance
_cache = InMemoryCache()


def get_router() -> AddonRouter:
    return AddonRouter(create_handlers(config, cache=_cache))


class handler(BaseHTTPRequestHandler):
    def do_GET(self):
        self._dispatch("GET")

    def do_OPTIONS(self):
        self._dispatch("OPTIONS")

    def _origin(self) -> str:
        proto = self.headers.get("X-Forwarded-Proto", "https")
        host = self.headers.get("X-Forwarded-Host") or self.headers.get("Host", "")
        return f"{proto}://{host}"

    def _dispatch(self, method: str):
        try:
            response = asyncio.run(get_router().dispatch(method, self.path, self._origin()))
            status, headers, body = response.status, response.headers, response.body
        except Exception as e:
            logger.exception("Unhandled error")
            status = 500
            headers = {"Content-Type": "application/json", "Access-Control-Allow-Origin": "*"}
            body = {"error": "Internal server error", "message": str(e)}

        self.send_response(status)
        for name, value in headers.items():
            self.send_header(name, value)
        self.end_headers()
        if body is not None:
            self.wfile.write(json.dumps(body).encode())
