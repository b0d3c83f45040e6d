import json
import logging
import time
from typing import Any, Dict, Optional

import requests

from client.errors import (
    GatewayTimeoutError,
    HttpError,
    NetworkError,
    ServiceUnavailableError,
)

logger = logging.getLogger(__name__)

# API replies are small JSON documents; read them in small pieces so the
# deadline is checked while a slow body trickles in
CHUNK_SIZE = 1


class Gateway:
    """Calls the storefront API with a hard per-call deadline.

    The deadline covers connecting, waiting for headers and reading the
    body. Every failure is raised as a ``GatewayError`` subclass so callers
    never see ``requests`` exceptions. The underlying session keeps cookies
    between calls.
    """

    def __init__(self, api_base: str, session: Optional[requests.Session] = None, timeout: float = 7.0):
        self.api_base = api_base.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def call(
        self,
        endpoint: str,
        method: str = "POST",
        body: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
        error_message: str = "Request failed",
    ) -> Dict[str, Any]:
        url = f"{self.api_base}{endpoint}"
        timeout = timeout if timeout is not None else self.timeout
        deadline = time.monotonic() + timeout

        try:
            response = self.session.request(method, url, json=body, timeout=timeout, stream=True)
        except requests.Timeout as exc:
            logger.warning("%s %s timed out: %s", method, url, exc)
            raise GatewayTimeoutError() from exc
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise NetworkError() from exc

        try:
            content = _read_body(response, deadline)
        except requests.RequestException as exc:
            if time.monotonic() >= deadline:
                logger.warning("%s %s timed out while reading: %s", method, url, exc)
                raise GatewayTimeoutError() from exc
            logger.warning("%s %s failed while reading: %s", method, url, exc)
            raise NetworkError() from exc
        finally:
            response.close()

        if content is None:
            logger.warning("%s %s exceeded %.1fs", method, url, timeout)
            raise GatewayTimeoutError()

        if not 200 <= response.status_code < 300:
            message = _error_message(content) or error_message
            logger.info("%s %s returned %s: %s", method, url, response.status_code, message)
            if response.status_code == 503:
                raise ServiceUnavailableError(response.status_code, message)
            raise HttpError(response.status_code, message)

        try:
            return json.loads(content)
        except ValueError as exc:
            raise NetworkError("The server sent an unreadable response") from exc


def _read_body(response, deadline: float) -> Optional[bytes]:
    """Collect the body, or return None once the deadline has passed."""
    chunks = []
    if time.monotonic() >= deadline:
        return None
    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
        chunks.append(chunk)
        if time.monotonic() >= deadline:
            return None
    return b"".join(chunks)


def _error_message(content: bytes) -> Optional[str]:
    try:
        payload = json.loads(content)
    except ValueError:
        return None
    if isinstance(payload, dict):
        return payload.get("message")
    return None
