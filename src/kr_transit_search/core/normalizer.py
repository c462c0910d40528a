"""Normalize raw provider responses into TransitStop records.

Both providers answer in JSON when asked to, but either may fall back to XML
(legacy ``<stationList>`` blocks for the bus registry, ``<item>`` blocks for the
subway registry). Every shape is first reduced to a list of flat field maps and
then projected through the same ordered fallback rules, so a field missing in
one schema variant is simply looked up under its alternate name.
"""

import json
import logging
from collections.abc import Mapping
from typing import Any

from bs4 import BeautifulSoup

from .models import Coordinate, StopKind, TransitStop

logger = logging.getLogger(__name__)

# Ordered fallback keys per canonical field; the first non-empty value wins.
BUS_FIELDS: dict[str, tuple[str, ...]] = {
    "id": ("stationId", "stId"),
    "name": ("stationNm", "stNm"),
    "x": ("tmX", "gpsX"),
    "y": ("tmY", "gpsY"),
    "auxiliary": ("arsId",),
    "geo_x": ("posX",),
    "geo_y": ("posY",),
}

SUBWAY_FIELDS: dict[str, tuple[str, ...]] = {
    "id": ("subwayStationId",),
    "name": ("subwayStationName",),
    "x": ("x",),
    "y": ("y",),
    "auxiliary": ("subwayRouteName",),
}

# Path to the item list inside each provider's JSON body
JSON_ITEM_PATHS: dict[StopKind, tuple[str, ...]] = {
    StopKind.BUS: ("msgBody", "itemList"),
    StopKind.SUBWAY: ("response", "body", "items", "item"),
}

# Repeated record elements in XML bodies (lower-case, html.parser folds case)
XML_BLOCK_TAGS: dict[StopKind, tuple[str, ...]] = {
    StopKind.BUS: ("stationlist", "itemlist"),
    StopKind.SUBWAY: ("item",),
}


def field_rules(provider: StopKind) -> dict[str, tuple[str, ...]]:
    return BUS_FIELDS if provider == StopKind.BUS else SUBWAY_FIELDS


def detect_format(raw: str, content_type: str | None = None) -> str:
    """Return "xml" or "json" for a response body.

    The body's first character decides; the Content-Type header only breaks
    ties for bodies that start with neither markup nor a JSON container.
    """
    head = raw.lstrip()[:1]
    if head == "<":
        return "xml"
    if head in ("{", "["):
        return "json"
    if content_type and "xml" in content_type.lower():
        return "xml"
    return "json"


def normalize(
    raw: str, provider: StopKind, content_type: str | None = None
) -> list[TransitStop]:
    """Convert a raw provider response into canonical stops.

    Args:
        raw: Response body as text
        provider: Which provider produced the body
        content_type: Optional Content-Type header used to pick the parser

    Returns:
        Stops in document order. Malformed input yields an empty list.
    """
    if not raw or not raw.strip():
        return []

    try:
        if detect_format(raw, content_type) == "xml":
            items = _xml_items(raw, provider)
            fold_case = True
        else:
            items = _json_items(raw, provider)
            fold_case = False
    except (ValueError, TypeError, AttributeError, RecursionError) as e:
        logger.debug(f"Could not parse {provider} response: {e}")
        return []

    rules = field_rules(provider)
    stops = []
    for item in items:
        stop = project(item, provider, rules, fold_case=fold_case)
        if stop is not None:
            stops.append(stop)
    return stops


def project(
    item: Mapping[str, Any],
    provider: StopKind,
    rules: dict[str, tuple[str, ...]] | None = None,
    fold_case: bool = False,
) -> TransitStop | None:
    """Project one flat field map onto a TransitStop.

    Returns None when the item has no usable id or name.
    """
    if not isinstance(item, Mapping):
        return None
    rules = rules or field_rules(provider)

    def resolve(field: str) -> str:
        keys = rules.get(field, ())
        if fold_case:
            keys = tuple(key.lower() for key in keys)
        return first_present(item, keys)

    stop_id = resolve("id")
    name = resolve("name")
    if not stop_id or not name:
        return None

    return TransitStop(
        kind=provider,
        id=stop_id,
        name=name,
        coordinate=Coordinate(x=resolve("x"), y=resolve("y")),
        auxiliary=resolve("auxiliary"),
        geodetic=Coordinate(x=resolve("geo_x"), y=resolve("geo_y")),
    )


def first_present(item: Mapping[str, Any], keys: tuple[str, ...]) -> str:
    """Return the first non-empty value among keys as text, else ""."""
    for key in keys:
        value = item.get(key)
        if value is None or isinstance(value, (dict, list, bool)):
            continue
        text = str(value)
        if text:
            return text
    return ""


def as_item_list(value: Any) -> list[Any]:
    """Treat a single object and an array of objects the same way."""
    if value is None or value == "":
        return []
    if isinstance(value, list):
        return value
    return [value]


def _json_items(raw: str, provider: StopKind) -> list[Any]:
    node: Any = json.loads(raw)
    _log_provider_status(node, provider)

    for key in JSON_ITEM_PATHS[provider]:
        if not isinstance(node, Mapping) or key not in node:
            logger.debug(f"{provider} response has no '{key}' element")
            return []
        node = node[key]
    return as_item_list(node)


def _xml_items(raw: str, provider: StopKind) -> list[dict[str, str]]:
    soup = BeautifulSoup(raw, "html.parser")

    blocks = []
    for tag_name in XML_BLOCK_TAGS[provider]:
        blocks = soup.find_all(tag_name)
        if blocks:
            break

    items = []
    for block in blocks:
        fields: dict[str, str] = {}
        for element in block.find_all(True):
            # Only leaf elements carry field values
            if element.find(True) is not None:
                continue
            name = element.name.lower()
            text = element.get_text().strip()
            if text and not fields.get(name):
                fields[name] = text
        items.append(fields)
    return items


def _log_provider_status(body: Any, provider: StopKind) -> None:
    """Warn when a provider reports an error code inside a 200 response."""
    if not isinstance(body, Mapping):
        return

    header = body.get("msgHeader")
    if isinstance(header, Mapping):
        code = str(header.get("headerCd", "0"))
        if code not in ("0", "4"):
            # 4 is "no results" on the bus registry
            logger.warning(
                f"{provider} provider returned headerCd={code}: {header.get('headerMsg', '')}"
            )
        return

    response = body.get("response")
    if isinstance(response, Mapping):
        header = response.get("header")
        if isinstance(header, Mapping):
            code = str(header.get("resultCode", "00"))
            if code not in ("00", "0"):
                logger.warning(
                    f"{provider} provider returned resultCode={code}: {header.get('resultMsg', '')}"
                )
