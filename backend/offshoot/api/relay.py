"""
Offshoot Relay Endpoint
Fetches a remote page on the caller's behalf; usable as a json-wrapped relay
(``{"contents": ...}``) at the head of the fetch chain.
"""
from typing import Optional
from urllib.parse import urlsplit

import httpx
from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse, Response
from loguru import logger

from offshoot.services.reliability import TimeoutError as RelayTimeoutError, timeout_manager
from offshoot.services.scraping.urls import is_blocked_host

router = APIRouter(tags=["Relay"])

RELAY_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
                  "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}

TEXTUAL_MARKERS = ("text", "html", "json", "xml")


def _error(status_code: int, error: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, **extra})


@router.get("/relay",
            summary="Page Relay",
            description="Fetch a public http(s) URL and return its contents")
async def relay(url: Optional[str] = Query(None, description="Target URL")) -> Response:
    if not url:
        return _error(400, "Missing url parameter", usage="GET /relay?url=https://example.com")

    try:
        parts = urlsplit(url)
        hostname = parts.hostname
    except ValueError:
        return _error(400, "Invalid URL format")

    if parts.scheme not in ("http", "https"):
        return _error(400, "Only HTTP/HTTPS URLs allowed")
    if is_blocked_host(hostname):
        return _error(403, "Internal URLs not allowed")

    try:
        async with httpx.AsyncClient(follow_redirects=True) as client:
            async with timeout_manager.timeout("relay_endpoint"):
                response = await client.get(url, headers=RELAY_HEADERS)
    except RelayTimeoutError:
        return _error(504, "Request timeout")
    except httpx.HTTPError as e:
        logger.error(f"Relay fetch failed for {url}: {e}")
        return _error(500, "Failed to fetch URL", message=str(e))

    content_type = response.headers.get("content-type", "text/html")
    if any(marker in content_type for marker in TEXTUAL_MARKERS):
        return JSONResponse(content={
            "contents": response.text,
            "status": {
                "url": url,
                "content_type": content_type,
                "http_code": response.status_code,
            },
        })

    return Response(content=response.content, media_type=content_type)
