from __future__ import annotations

import asyncio
import logging
import time
from urllib.parse import urljoin

import httpx

from .config import Settings
from .models import FetchError, FetchOutcome, FetchResult
from .urls import parse_url

logger = logging.getLogger(__name__)

_HEADER_ALLOW = {
    "content-type",
    "content-length",
    "last-modified",
    "x-robots-tag",
    "link",
    "server",
    "strict-transport-security",
}

_PAGE_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
_ROBOTS_ACCEPT = "text/plain,*/*;q=0.5"
_ROBOTS_MAX_BYTES = 64 * 1024


class Fetcher:
    """Retrieves one page (plus its robots.txt) for analysis.

    The client is created once by the application and shared by every request;
    nothing here holds per-request state.
    """

    def __init__(self, client: httpx.AsyncClient, settings: Settings):
        self._client = client
        self._settings = settings

    async def fetch(self, url: str) -> FetchOutcome:
        target = parse_url(url)
        started = time.perf_counter()
        chain: list[str] = []

        try:
            outcome = await asyncio.wait_for(
                self._fetch_page(target, chain, started),
                timeout=self._settings.timeout_s,
            )
        except asyncio.TimeoutError:
            logger.warning("Fetch of %s exceeded %.1fs deadline", target, self._settings.timeout_s)
            return FetchError(
                kind="timeout",
                requested_url=target,
                detail=f"No complete response within {self._settings.timeout_s:g}s.",
                redirect_chain=list(chain),
                elapsed_ms=_elapsed_ms(started),
            )

        if isinstance(outcome, FetchError):
            logger.warning("Fetch of %s failed (%s): %s", target, outcome.kind, outcome.detail)
            return outcome

        remaining = self._settings.timeout_s - (time.perf_counter() - started)
        robots_txt = None
        if remaining > 0:
            try:
                robots_txt = await asyncio.wait_for(self._fetch_robots(outcome.final_url), timeout=remaining)
            except asyncio.TimeoutError:
                logger.info("robots.txt for %s skipped: deadline reached", outcome.final_url)

        return outcome.model_copy(update={"robots_txt": robots_txt, "elapsed_ms": _elapsed_ms(started)})

    async def _fetch_page(self, url: str, chain: list[str], started: float) -> FetchOutcome:
        current = url
        for _ in range(self._settings.max_redirects + 1):
            try:
                async with self._client.stream(
                    "GET",
                    current,
                    headers=self._headers(_PAGE_ACCEPT),
                    follow_redirects=False,
                ) as res:
                    location = res.headers.get("location")
                    if res.is_redirect and location:
                        chain.append(current)
                        current = str(res.url.join(location))
                        continue

                    if not res.is_success:
                        return FetchError(
                            kind="http_error",
                            requested_url=url,
                            detail=f"HTTP {res.status_code}",
                            status=res.status_code,
                            redirect_chain=list(chain),
                            elapsed_ms=_elapsed_ms(started),
                        )

                    declared = (res.headers.get("content-length") or "").strip()
                    if declared.isdigit() and int(declared) > self._settings.hard_limit_bytes:
                        return FetchError(
                            kind="too_large",
                            requested_url=url,
                            detail=f"Declared body of {int(declared)} bytes exceeds {self._settings.hard_limit_bytes}.",
                            status=res.status_code,
                            redirect_chain=list(chain),
                            elapsed_ms=_elapsed_ms(started),
                        )

                    raw, truncated = await _read_capped(res, self._settings.max_body_bytes)
                    return FetchResult(
                        requested_url=url,
                        final_url=current,
                        status=res.status_code,
                        content_type=res.headers.get("content-type"),
                        body=_decode(raw, res.charset_encoding),
                        bytes_read=len(raw),
                        truncated=truncated,
                        redirect_chain=list(chain),
                        headers={k.lower(): v for k, v in res.headers.items() if k.lower() in _HEADER_ALLOW},
                    )
            except httpx.TimeoutException as e:
                return FetchError(
                    kind="timeout",
                    requested_url=url,
                    detail=f"Network timeout: {e.__class__.__name__}",
                    redirect_chain=list(chain),
                    elapsed_ms=_elapsed_ms(started),
                )
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                return FetchError(
                    kind="unreachable",
                    requested_url=url,
                    detail=f"{e.__class__.__name__}: {e}" if str(e) else e.__class__.__name__,
                    redirect_chain=list(chain),
                    elapsed_ms=_elapsed_ms(started),
                )

        return FetchError(
            kind="unreachable",
            requested_url=url,
            detail="Too many redirects.",
            redirect_chain=list(chain),
            elapsed_ms=_elapsed_ms(started),
        )

    async def _fetch_robots(self, page_url: str) -> str | None:
        robots_url = urljoin(page_url, "/robots.txt")
        try:
            async with self._client.stream(
                "GET",
                robots_url,
                headers=self._headers(_ROBOTS_ACCEPT),
                follow_redirects=True,
            ) as res:
                if not res.is_success:
                    return None
                content_type = (res.headers.get("content-type") or "").lower()
                if "html" in content_type:
                    # Soft-404 pages served as HTML are not robots rules.
                    return None
                declared = (res.headers.get("content-length") or "").strip()
                if declared.isdigit() and int(declared) > self._settings.hard_limit_bytes:
                    logger.info("robots.txt for %s skipped: declared %s bytes", robots_url, declared)
                    return None
                raw, truncated = await _read_capped(res, _ROBOTS_MAX_BYTES)
        except httpx.HTTPError as e:
            logger.info("robots.txt unavailable for %s: %s", robots_url, e.__class__.__name__)
            return None

        if truncated:
            logger.info("robots.txt for %s cut at %d bytes", robots_url, _ROBOTS_MAX_BYTES)
        return _decode(raw, res.charset_encoding)

    def _headers(self, accept: str) -> dict[str, str]:
        return {
            "user-agent": self._settings.user_agent,
            "accept": accept,
            "accept-language": "en-US,en;q=0.6",
        }


def _decode(raw: bytes, charset: str | None) -> str:
    try:
        return raw.decode(charset or "utf-8", errors="replace")
    except LookupError:
        return raw.decode("utf-8", errors="replace")


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


async def _read_capped(res: httpx.Response, limit: int) -> tuple[bytes, bool]:
    """Body bytes up to ``limit``; the flag is True when the rest was dropped."""
    chunks: list[bytes] = []
    size = 0
    async for chunk in res.aiter_bytes():
        remaining = limit - size
        if len(chunk) > remaining:
            chunks.append(chunk[:remaining])
            return b"".join(chunks), True
        chunks.append(chunk)
        size += len(chunk)
    return b"".join(chunks), False
