"""Host-based routing for the ClaimIQ marketing subdomain."""

from __future__ import annotations

import logging
from pathlib import Path

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import HTMLResponse, Response
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

CLAIM_IQ_PAGE = Path(__file__).resolve().parents[1] / "static" / "claim-iq" / "index.html"


def _strip_port(host: str) -> str:
    return host.split(":", 1)[0].strip().lower()


class ClaimIQHostMiddleware(BaseHTTPMiddleware):
    """Serve the bundled ClaimIQ page for its hosts; pass everything else on."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        hosts: list[str],
        page_path: Path = CLAIM_IQ_PAGE,
    ) -> None:
        super().__init__(app)
        self._hosts = {_strip_port(host) for host in hosts if host}
        self._page_path = page_path
        self._page: str | None = None

    def _load_page(self) -> str:
        if self._page is None:
            self._page = self._page_path.read_text(encoding="utf-8")
        return self._page

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        host = _strip_port(request.headers.get("host", ""))
        if host in self._hosts:
            logger.debug("Serving ClaimIQ page for host %s", host)
            return HTMLResponse(self._load_page(), status_code=200)
        return await call_next(request)
