"""
Normalization helpers shared by the vendor adapters.

Vendor quirks are expressed as data: ordered tuples of key accessors and
lookup tables, walked by the small functions below. Nothing here raises on a
bad value; callers get None (or the default) and decide to skip the record.
"""

import json
import re
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Sequence, Tuple, Union

# An accessor is either a key or a path of keys into nested mappings/sequences
KeyPath = Union[str, int, Tuple[Union[str, int], ...]]
CoordinateAccessor = Callable[[Mapping[str, Any]], Tuple[Any, Any]]

LAT_BOUNDS = (-90.0, 90.0)
LON_BOUNDS = (-180.0, 180.0)

ROUND_THE_CLOCK = {"00:00-24:00", "0:00-24:00", "00:00-23:59", "0-24", "nonstop"}


def _dig(mapping: Any, path: KeyPath) -> Any:
    if not isinstance(path, tuple):
        path = (path,)
    node = mapping
    for key in path:
        if isinstance(node, Mapping):
            node = node.get(key)
        elif isinstance(node, (list, tuple)) and isinstance(key, int):
            node = node[key] if -len(node) <= key < len(node) else None
        else:
            return None
        if node is None:
            return None
    return node


def _is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def first_present(mapping: Mapping[str, Any], accessors: Iterable[KeyPath]) -> Any:
    """Value of the first accessor that yields a non-blank value, else None"""
    for accessor in accessors:
        value = _dig(mapping, accessor)
        if _is_present(value):
            return value
    return None


def pair(lat_path: KeyPath, lon_path: KeyPath) -> CoordinateAccessor:
    """Coordinate accessor reading latitude and longitude from two key paths"""
    def accessor(mapping: Mapping[str, Any]) -> Tuple[Any, Any]:
        return _dig(mapping, lat_path), _dig(mapping, lon_path)
    accessor.__name__ = f"pair({lat_path!r}, {lon_path!r})"
    return accessor


def first_coordinates(
    mapping: Mapping[str, Any],
    accessors: Sequence[CoordinateAccessor],
) -> Tuple[Optional[float], Optional[float]]:
    """
    Walk coordinate accessors in order.

    The first accessor where both values are present wins, even if they turn
    out to be unparseable or out of range: a later alias is a fallback for a
    missing field, not for a broken one.
    """
    for accessor in accessors:
        raw_lat, raw_lon = accessor(mapping)
        if _is_present(raw_lat) and _is_present(raw_lon):
            return parse_number(raw_lat), parse_number(raw_lon)
    return None, None


def parse_number(value: Any) -> Optional[float]:
    """Safely parse a float, accepting a comma as decimal separator"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(" ", "")
        if not text:
            return None
        if "," in text and "." not in text:
            text = text.replace(",", ".")
        try:
            number = float(text)
        except ValueError:
            return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return number


def is_valid_coordinate(lat: Optional[float], lon: Optional[float]) -> bool:
    """True iff lat in [-90, 90] and lon in [-180, 180]"""
    if lat is None or lon is None:
        return False
    return LAT_BOUNDS[0] <= lat <= LAT_BOUNDS[1] and LON_BOUNDS[0] <= lon <= LON_BOUNDS[1]


def normalize_choice(raw: Any, table: Mapping[str, str], default: str) -> str:
    """Map a raw vendor enumeration string through a lookup table"""
    if raw is None:
        return default
    key = str(raw).strip().lower()
    return table.get(key, default)


def clean_text(value: Any, max_len: int = 255) -> Optional[str]:
    """Collapse whitespace and trim; blank becomes None"""
    if value is None:
        return None
    if isinstance(value, (dict, list)):
        return None
    collapsed = re.sub(r"\s+", " ", str(value)).strip()
    if not collapsed:
        return None
    return collapsed[:max_len]


def normalize_country(value: Any, default: str) -> str:
    """ISO-2 upper-case country code, falling back to the vendor default"""
    text = clean_text(value)
    if text and len(text) == 2 and text.isalpha():
        return text.upper()
    return default


def is_round_the_clock(hours: Any) -> bool:
    """True when every opening-hours entry means open all day"""
    if isinstance(hours, Mapping):
        entries = list(hours.values())
    elif isinstance(hours, (list, tuple)):
        entries = list(hours)
    else:
        return False
    if not entries:
        return False
    for entry in entries:
        if isinstance(entry, Mapping):
            entry = "-".join(
                str(entry.get(k, "")).strip() for k in ("from", "to") if entry.get(k) is not None
            )
        if str(entry).strip().lower().replace(" ", "") not in ROUND_THE_CLOCK:
            return False
    return True


def encode_hours(hours: Any) -> Optional[str]:
    """Opening hours as an opaque string: JSON for structures, text otherwise"""
    if hours is None:
        return None
    if isinstance(hours, (dict, list)):
        if not hours:
            return None
        return json.dumps(hours, ensure_ascii=False)
    return clean_text(hours, max_len=4000)


def compact(services: Dict[str, Any]) -> Dict[str, Any]:
    """Drop None values from a services map"""
    return {k: v for k, v in services.items() if v is not None}
