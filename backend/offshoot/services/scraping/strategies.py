"""
Independent image-URL extraction strategies over raw page markup.

Each strategy is a pure function ``(markup) -> list of raw URLs`` (ordered,
without duplicates). ``collect_candidates`` runs them in a fixed order and
merges their output into one ordered, deduplicated collection; a strategy
that fails contributes nothing and never aborts the others.
"""
import json
import re
from functools import lru_cache
from typing import Any, Callable, Dict, Iterable, List, Sequence

from bs4 import BeautifulSoup
from loguru import logger

from offshoot.config import config
from .urls import has_image_extension, is_product_image

Strategy = Callable[[str], List[str]]

JSON_LD_TYPE_RE = re.compile(r"application/ld\+json", re.I)
JSON_LD_IMAGE_KEYS = ("image", "images", "photo", "photos", "thumbnail")
OPEN_GRAPH_PROPERTIES = ("og:image", "og:image:url", "og:image:secure_url")
SRCSET_ATTRIBUTES = ("srcset", "data-srcset")


@lru_cache(maxsize=8)
def _parse(markup: str) -> BeautifulSoup:
    # Strategies only read the tree, so one parse is shared between them
    return BeautifulSoup(markup, "html.parser")


def _unique(urls: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(url for url in urls if url))


def dynamic_image_maps(markup: str) -> List[str]:
    """
    Keys of attribute-embedded JSON image maps (``data-a-dynamic-image``
    style), where each key is an image URL and each value its dimensions.
    """
    found = []
    for tag in _parse(markup).find_all(True):
        for name, value in tag.attrs.items():
            if "dynamic-image" not in name or not isinstance(value, str):
                continue
            try:
                image_map = json.loads(value.replace("&quot;", '"'))
            except ValueError:
                logger.debug(f"Skipping unparseable {name} attribute")
                continue
            if not isinstance(image_map, dict):
                continue
            for url in image_map:
                lowered = url.lower()
                if has_image_extension(url) and "sprite" not in lowered and "icon" not in lowered:
                    found.append(url)
    return _unique(found)


def open_graph_image(markup: str) -> List[str]:
    """``content`` of the social-preview image meta tags."""
    found = []
    for meta in _parse(markup).find_all("meta"):
        prop = (meta.get("property") or meta.get("name") or "").strip().lower()
        if prop in OPEN_GRAPH_PROPERTIES and meta.get("content"):
            found.append(meta["content"].strip())
    return _unique(found)


def _walk_json_ld(data: Any, found: List[str]) -> None:
    if isinstance(data, list):
        for item in data:
            _walk_json_ld(item, found)
        return
    if not isinstance(data, dict):
        return

    for key in JSON_LD_IMAGE_KEYS:
        value = data.get(key)
        if isinstance(value, str):
            found.append(value)
        elif isinstance(value, list):
            for item in value:
                if isinstance(item, str):
                    found.append(item)
                elif isinstance(item, dict) and isinstance(item.get("url"), str):
                    found.append(item["url"])
        elif isinstance(value, dict) and isinstance(value.get("url"), str):
            found.append(value["url"])

    for value in data.values():
        if isinstance(value, (dict, list)):
            _walk_json_ld(value, found)


def json_ld_images(markup: str) -> List[str]:
    """Image values from ``application/ld+json`` blocks, searched recursively."""
    found: List[str] = []
    for script in _parse(markup).find_all("script", attrs={"type": JSON_LD_TYPE_RE}):
        text = script.string or script.get_text()
        if not text or not text.strip():
            continue
        try:
            data = json.loads(text)
        except ValueError:
            logger.debug("Skipping malformed JSON-LD block")
            continue
        _walk_json_ld(data, found)
    return _unique(found)


def parse_srcset(srcset: str) -> List[str]:
    """URL part of each comma-separated srcset descriptor."""
    urls = []
    for part in srcset.split(","):
        pieces = part.strip().split()
        if pieces:
            urls.append(pieces[0])
    return urls


def srcset_images(markup: str) -> List[str]:
    """Product-looking URLs from responsive source-set attributes."""
    found = []
    soup = _parse(markup)
    for attribute in SRCSET_ATTRIBUTES:
        for tag in soup.find_all(attrs={attribute: True}):
            found.extend(url for url in parse_srcset(tag[attribute]) if is_product_image(url))
    return _unique(found)


def lazy_load_images(markup: str) -> List[str]:
    """Product-looking URLs from deferred-loading data attributes."""
    found = []
    soup = _parse(markup)
    for attribute in config.LAZY_IMAGE_ATTRIBUTES:
        for tag in soup.find_all(attrs={attribute: True}):
            value = tag[attribute]
            if isinstance(value, str) and is_product_image(value.strip()):
                found.append(value.strip())
    return _unique(found)


def img_tag_images(markup: str) -> List[str]:
    """Last resort: long absolute ``<img src>`` values that look like products."""
    found = []
    for img in _parse(markup).find_all("img", src=True):
        src = img["src"].strip()
        if (src.startswith(("http://", "https://"))
                and len(src) >= config.HARVEST_MIN_IMG_URL_LENGTH
                and is_product_image(src)):
            found.append(src)
    return _unique(found)


# Order matters: structured sources first, generic <img> tags last
STRATEGIES: Sequence[Strategy] = (
    dynamic_image_maps,
    open_graph_image,
    json_ld_images,
    srcset_images,
    lazy_load_images,
    img_tag_images,
)


def collect_candidates(markup: str, strategies: Sequence[Strategy] = STRATEGIES) -> List[str]:
    """Run every strategy and merge results in strategy order, dropping repeats."""
    merged: Dict[str, None] = {}
    for strategy in strategies:
        try:
            urls = strategy(markup)
        except Exception as e:
            logger.warning(f"Strategy {strategy.__name__} failed: {e}")
            continue
        logger.debug(f"Strategy {strategy.__name__} found {len(urls)} candidates")
        for url in urls:
            merged.setdefault(url, None)
    return list(merged)
