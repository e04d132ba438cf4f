"""
Relay descriptors: the ordered intermediaries used to fetch remote pages.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple
from urllib.parse import quote

from offshoot.config import config


class ResponseShape(str, Enum):
    RAW_TEXT = "raw-text"
    JSON_WRAPPED = "json-wrapped"


@dataclass(frozen=True)
class ProxyDescriptor:
    """
    One relay endpoint.

    endpoint_template either contains a ``{url}`` placeholder or is a prefix
    the percent-encoded target URL is appended to.
    """
    name: str
    endpoint_template: str
    response_shape: ResponseShape = ResponseShape.RAW_TEXT
    json_field: Optional[str] = None

    def __post_init__(self):
        # Accept plain strings from configuration
        object.__setattr__(self, "response_shape", ResponseShape(self.response_shape))
        if self.response_shape is ResponseShape.JSON_WRAPPED and not self.json_field:
            raise ValueError(f"Relay {self.name!r} is json-wrapped but has no json_field")

    @property
    def is_json(self) -> bool:
        return self.response_shape is ResponseShape.JSON_WRAPPED

    def build_url(self, target_url: str) -> str:
        encoded = quote(target_url, safe="")
        if "{url}" in self.endpoint_template:
            return self.endpoint_template.replace("{url}", encoded)
        return f"{self.endpoint_template}{encoded}"

    @classmethod
    def from_dict(cls, record: Dict[str, Any]) -> "ProxyDescriptor":
        return cls(
            name=record["name"],
            endpoint_template=record.get("endpoint_template") or record["endpointTemplate"],
            response_shape=record.get("response_shape") or record.get("responseShape", "raw-text"),
            json_field=record.get("json_field") or record.get("jsonField"),
        )


DEFAULT_RELAYS: Tuple[ProxyDescriptor, ...] = (
    ProxyDescriptor("allorigins", "https://api.allorigins.win/get?url={url}",
                    ResponseShape.JSON_WRAPPED, "contents"),
    ProxyDescriptor("corsproxy", "https://corsproxy.io/?{url}", ResponseShape.RAW_TEXT),
)


def build_relays(records: Optional[Iterable[Dict[str, Any]]] = None) -> Tuple[ProxyDescriptor, ...]:
    """Relay list from explicit records, OFFSHOOT_RELAYS, or the built-in defaults."""
    if records is None:
        records = config.relay_overrides()
    if records is None:
        return DEFAULT_RELAYS

    relays: List[ProxyDescriptor] = [ProxyDescriptor.from_dict(record) for record in records]
    if not relays:
        raise ValueError("Relay configuration is empty")
    return tuple(relays)
