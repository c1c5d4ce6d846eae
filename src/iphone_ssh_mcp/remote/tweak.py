"""HTTP client for the agent tweak running on the device."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TweakResponse:
    ok: bool
    status: int
    data: Any
    raw: str
    error: Optional[str] = None


def _parse_body(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError:
        return raw


class TweakClient:
    """Send JSON requests to ``http://<host>:<port><endpoint>``.

    Network failures are reported in the response (``ok=False``, ``status=0``)
    rather than raised, so callers render them like any other failed request.
    """

    def __init__(
        self,
        host: str,
        port: int,
        timeout_ms: int,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = f"http://{host}:{port}"
        self.timeout = httpx.Timeout(timeout_ms / 1000)
        self._transport = transport

    def request(self, endpoint: str, method: str = "GET", body: Any = None) -> TweakResponse:
        content = None if body is None else json.dumps(body)
        logger.debug("tweak %s %s%s", method, self.base_url, endpoint)
        try:
            with httpx.Client(
                base_url=self.base_url, timeout=self.timeout, transport=self._transport
            ) as client:
                response = client.request(
                    method,
                    endpoint,
                    content=content,
                    headers={"content-type": "application/json"},
                )
        except httpx.HTTPError as exc:
            logger.warning("Tweak request %s %s failed: %s", method, endpoint, exc)
            return TweakResponse(ok=False, status=0, data=None, raw="", error=str(exc) or type(exc).__name__)

        raw = response.text
        return TweakResponse(
            ok=response.is_success,
            status=response.status_code,
            data=_parse_body(raw),
            raw=raw,
        )
