"""
Sameday easybox parcel lockers (RO, HU, BG).

Expects JSON: a list of lockers, or an object with a "data" / "lockers" /
"items" list. Each item carries lockerId or id, name, address, city, county,
postalCode, and coordinates in one of several shapes.
See: https://cdn.sameday.ro/locker-plugin/techdoc.html
"""

import json
from typing import Any, Dict, List, Mapping, Tuple
from core.exceptions import ParseError
from ingestion.base import VendorAdapter
from ingestion.transformers.normalizer import (
    clean_text,
    compact,
    encode_hours,
    first_coordinates,
    first_present,
    is_valid_coordinate,
    normalize_country,
    pair,
)
from schemas.location import NormalizedLocation

ITEM_CONTAINER_KEYS = ("data", "lockers", "items")
ID_KEYS = ("lockerId", "id")
POSTCODE_KEYS = ("postalCode", "postcode")
COUNTRY_KEYS = ("countryCode", "country")
HOURS_KEYS = ("schedule", "openingHours")


def _geo_object(item: Mapping[str, Any]) -> Tuple[Any, Any]:
    geo = item.get("geo")
    if not isinstance(geo, dict):
        return None, None
    return (
        first_present(geo, ("lat", "latitude")),
        first_present(geo, ("lng", "lon", "longitude")),
    )


COORDINATES = (
    pair("lat", "lng"),
    pair("latitude", "longitude"),
    pair(("location", 0), ("location", 1)),
    _geo_object,
)


class SamedayAdapter(VendorAdapter):
    """Adapter for Sameday easybox lockers and pickup points"""

    vendor_label = "Sameday"
    default_country = "RO"

    def parse(self, raw: bytes) -> List[NormalizedLocation]:
        try:
            data = json.loads(raw)
        except (ValueError, UnicodeDecodeError) as e:
            raise ParseError(
                "Sameday JSON parse error",
                context={"bytes": len(raw)},
                original_exception=e
            )

        items = self._items(data)

        locations = []
        for item in items:
            if not isinstance(item, dict):
                continue
            record = self._parse_item(item)
            if record is not None:
                locations.append(record)

        self.logger.info(f"Parsed {len(locations)} Sameday easybox locations ({len(items)} items in feed)")
        return locations

    @staticmethod
    def _items(data: Any) -> List[Any]:
        if isinstance(data, list):
            return data
        if isinstance(data, dict):
            for key in ITEM_CONTAINER_KEYS:
                if isinstance(data.get(key), list):
                    return data[key]
            return []
        raise ParseError(
            "Sameday data is neither a list nor an object",
            context={"root_type": type(data).__name__}
        )

    def _parse_item(self, item: Dict[str, Any]):
        locker_id = first_present(item, ID_KEYS)
        if locker_id is None:
            self.skip("missing lockerId/id")
            return None

        lat, lon = first_coordinates(item, COORDINATES)
        if not is_valid_coordinate(lat, lon):
            self.skip("missing or invalid coordinates", id=locker_id, lat=lat, lon=lon)
            return None

        try:
            ooh_type = int(item.get("oohType") or 0)
        except (TypeError, ValueError):
            ooh_type = 0

        services = {
            "county": clean_text(item.get("county")),
        }

        return self.build_record(
            vendor_location_id=str(locker_id),
            name=clean_text(item.get("name")) or f"easybox {locker_id}",
            type="pickup_point" if ooh_type == 1 else "locker",
            status="active",
            lat=lat,
            lon=lon,
            address_line=clean_text(item.get("address"), max_len=500),
            city=clean_text(item.get("city"), max_len=200),
            postcode=clean_text(first_present(item, POSTCODE_KEYS), max_len=20),
            country=normalize_country(first_present(item, COUNTRY_KEYS), self.default_country),
            services=compact(services),
            opening_hours=encode_hours(first_present(item, HOURS_KEYS)),
        )
