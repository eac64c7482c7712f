"""
Bouldering Web API

Architectural Intent:
- Lightweight HTTP server built on Python stdlib (http.server + asyncio)
- Thin presentation adapter: parses requests, authenticates, calls use cases
  from the container, and maps BoulderingError subclasses to status codes
- Hosts the Cloud Tasks worker endpoint that purges storage prefixes

API Surface:
    DELETE /api/tweets/{id}                  -> delete own tweet (Bearer auth)
    DELETE /api/tweets/{id}/media            -> body {"media_url": "..."} (Bearer auth)
    GET    /api/admin/event-handlers         -> registered handler counts
    POST   /internal/tasks/gcs-delete-prefix -> body {"prefix": "..."} (Cloud Tasks)
    GET    /internal/tasks/health            -> worker health

Threading Model:
    The stdlib HTTPServer is synchronous.  It runs in a background thread and
    each request drives its async use case with asyncio.run() on that thread.
    The event bus holds no loop-bound state, so handlers run on the request's
    own loop and the HTTP response waits for publish() to settle.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
import threading
from datetime import datetime, UTC
from http import HTTPStatus
from http.server import HTTPServer, BaseHTTPRequestHandler
from typing import Any, Awaitable, Callable, Optional
from urllib.parse import urlparse

from bouldering.composition_root import BoulderingContainer
from bouldering.domain.errors import AuthenticationError, BoulderingError
from bouldering.domain.ports.token_verifier_port import AuthenticatedUser
from bouldering.infrastructure.auth.firebase_verifier import extract_bearer_token

logger = logging.getLogger(__name__)

_TWEET_PATH_RE = re.compile(r"^/api/tweets/(\d+)$")
_TWEET_MEDIA_PATH_RE = re.compile(r"^/api/tweets/(\d+)/media$")

CLOUD_TASKS_USER_AGENT = "Google-Cloud-Tasks"

# (status, payload); payload None means an empty 204-style response.
Reply = tuple[HTTPStatus, Optional[dict[str, Any]]]


def _bad_request(message: str) -> BoulderingError:
    return BoulderingError(message, status_code=400, code="BAD_REQUEST")


class BoulderingRequestHandler(BaseHTTPRequestHandler):
    """HTTP request handler for the bouldering API.

    Attributes on the *server* instance (set by BoulderingWebApp):
        container: BoulderingContainer -- wired use cases and adapters
    """

    # Silence per-request log lines from BaseHTTPRequestHandler
    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        logger.debug("web: %s", format % args)

    @property
    def container(self) -> BoulderingContainer:
        return self.server.container  # type: ignore[attr-defined]

    # ---- routing -----------------------------------------------------------

    def do_GET(self) -> None:  # noqa: N802
        path = urlparse(self.path).path
        if path == "/internal/tasks/health":
            self._dispatch(self._task_health)
        elif path == "/api/admin/event-handlers":
            self._dispatch(self._event_handlers)
        else:
            self._send_json({"success": False, "error": "not found"}, HTTPStatus.NOT_FOUND)

    def do_POST(self) -> None:  # noqa: N802
        path = urlparse(self.path).path
        if path == "/internal/tasks/gcs-delete-prefix":
            self._dispatch(self._purge_prefix)
        else:
            self._send_json({"success": False, "error": "not found"}, HTTPStatus.NOT_FOUND)

    def do_DELETE(self) -> None:  # noqa: N802
        path = urlparse(self.path).path
        match = _TWEET_PATH_RE.match(path)
        if match:
            self._dispatch(self._delete_tweet, int(match.group(1)))
            return
        match = _TWEET_MEDIA_PATH_RE.match(path)
        if match:
            self._dispatch(self._delete_tweet_media, int(match.group(1)))
            return
        self._send_json({"success": False, "error": "not found"}, HTTPStatus.NOT_FOUND)

    def _dispatch(self, handler: Callable[..., Awaitable[Reply]], *args: Any) -> None:
        """Run an async endpoint and translate its outcome into a response."""
        try:
            status, payload = asyncio.run(handler(*args))
        except BoulderingError as e:
            if e.status_code >= 500:
                logger.error("Request error on %s %s: %s", self.command, self.path, e)
            body = {"success": False, "error": e.message}
            if e.code:
                body["code"] = e.code
            self._send_json(body, HTTPStatus(e.status_code))
            return
        except ValueError as e:
            self._send_json({"success": False, "error": str(e)}, HTTPStatus.BAD_REQUEST)
            return
        except Exception as e:
            logger.error(
                "Request error on %s %s: %s", self.command, self.path, e, exc_info=True
            )
            self._send_json(
                {"success": False, "error": "Internal server error"},
                HTTPStatus.INTERNAL_SERVER_ERROR,
            )
            return

        if payload is None:
            self.send_response(status)
            self.send_header("Content-Length", "0")
            self.end_headers()
        else:
            self._send_json(payload, status)

    # ---- endpoint implementations ------------------------------------------

    async def _delete_tweet(self, tweet_id: int) -> Reply:
        user = await self._authenticate()
        result = await self.container.delete_tweet.execute(tweet_id, user.uid)
        return HTTPStatus.OK, {
            "success": True,
            "tweet_id": result.tweet_id,
            "cleanup_scheduled": result.cleanup_scheduled,
        }

    async def _delete_tweet_media(self, tweet_id: int) -> Reply:
        user = await self._authenticate()
        body = self._read_json()
        media_url = body.get("media_url")
        if not media_url or not isinstance(media_url, str):
            raise _bad_request("media_url is required")
        result = await self.container.remove_tweet_media.execute(
            tweet_id, user.uid, media_url
        )
        return HTTPStatus.OK, {
            "success": True,
            "tweet_id": result.tweet_id,
            "media_url": result.media_url,
            "cleanup_scheduled": result.cleanup_scheduled,
        }

    async def _purge_prefix(self) -> Reply:
        self._verify_cloud_tasks()
        body = self._read_json()
        prefix = body.get("prefix")
        if not prefix or not isinstance(prefix, str):
            logger.warning("Invalid prefix in GCS delete task: %r", prefix)
            raise _bad_request("Valid prefix is required")

        result = await self.container.purge_storage_prefix.execute(prefix)
        if not result.succeeded:
            # A 5xx makes Cloud Tasks retry the prefix; deletion is idempotent.
            return HTTPStatus.INTERNAL_SERVER_ERROR, {
                "success": False,
                "prefix": prefix,
                "deleted_count": result.deleted_count,
                "errors": result.errors,
            }
        return HTTPStatus.NO_CONTENT, None

    async def _task_health(self) -> Reply:
        return HTTPStatus.OK, {
            "status": "healthy",
            "service": "internal-tasks-worker",
            "timestamp": datetime.now(UTC).isoformat(),
            "bucket_name": self.container.config.storage.bucket_name,
        }

    async def _event_handlers(self) -> Reply:
        return HTTPStatus.OK, {"event_handlers": self.container.event_bus.handler_info()}

    # ---- helpers -----------------------------------------------------------

    async def _authenticate(self) -> AuthenticatedUser:
        token = extract_bearer_token(self.headers.get("Authorization"))
        return await self.container.token_verifier.verify(token)

    def _verify_cloud_tasks(self) -> None:
        user_agent = self.headers.get("User-Agent", "")
        auth_header = self.headers.get("Authorization", "")
        if CLOUD_TASKS_USER_AGENT in user_agent or auth_header.startswith("Bearer "):
            return
        logger.warning(
            "Unauthorized access to internal tasks endpoint from %s (agent=%r)",
            self.client_address[0],
            user_agent,
        )
        raise AuthenticationError("Unauthorized - Cloud Tasks access only")

    def _read_json(self) -> dict[str, Any]:
        try:
            content_length = int(self.headers.get("Content-Length", 0))
            raw = self.rfile.read(content_length)
            body = json.loads(raw) if raw else {}
        except (json.JSONDecodeError, ValueError):
            raise _bad_request("invalid JSON body")
        if not isinstance(body, dict):
            raise _bad_request("JSON body must be an object")
        return body

    def _send_json(self, data: Any, status: HTTPStatus = HTTPStatus.OK) -> None:
        """Serialize *data* as JSON and send it as the HTTP response."""
        body = json.dumps(data, default=str).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)


class BoulderingWebApp:
    """Web server for the bouldering API.

    Usage::

        app = BoulderingWebApp(container)
        await app.start("0.0.0.0", 8080)
        # ... later ...
        app.stop()
    """

    def __init__(self, container: BoulderingContainer) -> None:
        self.container = container
        self._server: Optional[HTTPServer] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        assert self._server is not None
        return self._server.server_address[1]

    async def start(self, host: str = "127.0.0.1", port: int = 8080) -> None:
        """Start the web server in a background thread."""
        self._server = HTTPServer((host, port), BoulderingRequestHandler)
        self._server.container = self.container  # type: ignore[attr-defined]

        self._thread = threading.Thread(
            target=self._server.serve_forever,
            daemon=True,
            name="bouldering-web",
        )
        self._thread.start()
        logger.info("Bouldering API started on http://%s:%d", host, self.port)

    def stop(self) -> None:
        """Shut down the web server gracefully."""
        if self._server is not None:
            self._server.shutdown()
            self._server.server_close()
            logger.info("Bouldering API stopped")
        if self._thread is not None:
            self._thread.join(timeout=5)
