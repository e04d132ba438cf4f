"""
URL helpers for harvested image candidates: validation, normalization,
decorative-asset filtering and CDN resolution upgrades.
"""
import html
import ipaddress
import re
from typing import Optional
from urllib.parse import urljoin, urlsplit

from offshoot.config import config

# Amazon size tokens such as ._AC_SX466_ or ._SL1500_
AMAZON_SIZE_RES = (
    re.compile(r"\._[A-Z]{2}\d*_?[A-Z]*\d*_"),
    re.compile(r"\._[A-Z]+_\d+_"),
)
# Shopify size suffixes such as _800x. or _800x600.
SHOPIFY_SIZE_RE = re.compile(r"_\d+x\d*\.")

_ARTIFACT_SPLIT_RE = re.compile(r"[\"'\s]")

BLOCKED_HOSTNAMES = {"localhost", "localhost.localdomain", "ip6-localhost"}


def is_valid_http_url(url: Optional[str]) -> bool:
    """True for a syntactically valid absolute http(s) URL."""
    if not isinstance(url, str) or not url or _ARTIFACT_SPLIT_RE.search(url):
        return False
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.hostname) and port != 0


def is_blocked_host(hostname: Optional[str]) -> bool:
    """True for loopback, private, link-local and otherwise internal targets."""
    if not hostname:
        return True
    hostname = hostname.lower().rstrip(".")
    if hostname in BLOCKED_HOSTNAMES or hostname.endswith(".localhost"):
        return True
    try:
        address = ipaddress.ip_address(hostname)
    except ValueError:
        return False
    return (address.is_private or address.is_loopback or address.is_link_local
            or address.is_reserved or address.is_unspecified or address.is_multicast)


def is_public_http_url(url: Optional[str]) -> bool:
    """Valid http(s) URL whose host is not an internal address."""
    return is_valid_http_url(url) and not is_blocked_host(urlsplit(url).hostname)


def has_image_extension(url: str) -> bool:
    """True when the URL path, ignoring query and fragment, ends in an image extension."""
    try:
        path = urlsplit(url).path.lower()
    except ValueError:
        return False
    return path.endswith(config.IMAGE_EXTENSIONS)


def is_decorative(url: str) -> bool:
    lowered = url.lower()
    return any(marker in lowered for marker in config.DECORATIVE_URL_MARKERS)


def is_product_image(url: str) -> bool:
    """Heuristic: not decorative, and ends in a recognized image extension."""
    return not is_decorative(url) and has_image_extension(url)


def clean_artifacts(raw: str) -> str:
    """Drop entity escapes and anything after a stray quote or space."""
    raw = html.unescape(raw.strip())
    return _ARTIFACT_SPLIT_RE.split(raw, maxsplit=1)[0]


def normalize_url(raw: str, page_url: str) -> str:
    """
    Make a harvested URL absolute.

    Protocol-relative URLs get https, root-relative and relative paths are
    resolved against the page; absolute URLs are left unchanged. Returns an
    empty string when the URL cannot be parsed.
    """
    url = clean_artifacts(raw)
    if not url:
        return url
    if url.startswith("//"):
        return f"https:{url}"
    try:
        if urlsplit(url).scheme:
            return url
        return urljoin(page_url, url)
    except ValueError:
        return ""


def upgrade_resolution(url: str) -> str:
    """Strip CDN size constraints so the largest rendition is requested."""
    lowered = url.lower()

    if "amazon" in lowered:
        for pattern in AMAZON_SIZE_RES:
            url = pattern.sub("", url, count=1)

    if "shopify" in lowered:
        url = SHOPIFY_SIZE_RE.sub(".", url, count=1)

    return url
