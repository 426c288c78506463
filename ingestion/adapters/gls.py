"""
GLS delivery points feed.

Feed: https://map.gls-hungary.com/data/deliveryPoints/<country>.json, an
object whose "items" list holds parcel shops and parcel lockers. The same
adapter serves every GLS country; regional feeds are told apart by feed_key.
"""

import json
from typing import Any, Dict, List
from core.exceptions import ParseError
from ingestion.base import VendorAdapter
from ingestion.transformers.normalizer import (
    clean_text,
    compact,
    encode_hours,
    first_coordinates,
    first_present,
    is_round_the_clock,
    is_valid_coordinate,
    normalize_choice,
    normalize_country,
    pair,
)
from schemas.location import NormalizedLocation

ID_KEYS = ("id",)
COORDINATES = (
    pair(("location", 0), ("location", 1)),
    pair("lat", "lng"),
)
ADDRESS_KEYS = (("contact", "address"),)
CITY_KEYS = (("contact", "city"),)
POSTCODE_KEYS = (("contact", "postalCode"),)
COUNTRY_KEYS = (("contact", "countryCode"),)

TYPE_TABLE = {
    "parcel-locker": "locker",
    "parcel_locker": "locker",
    "parcel-shop": "parcel_shop",
    "parcel_shop": "parcel_shop",
}


class GlsAdapter(VendorAdapter):
    """Adapter for GLS parcel shops and lockers"""

    vendor_label = "GLS"
    default_country = "HU"

    def parse(self, raw: bytes) -> List[NormalizedLocation]:
        try:
            data = json.loads(raw)
        except (ValueError, UnicodeDecodeError) as e:
            raise ParseError(
                "GLS JSON parse error",
                context={"bytes": len(raw)},
                original_exception=e
            )

        if not isinstance(data, dict):
            raise ParseError(
                "GLS data is not an object",
                context={"root_type": type(data).__name__}
            )

        items = data.get("items")
        if not isinstance(items, list):
            self.logger.warning(
                f"GLS feed has no items list (keys: {sorted(data)[:10]}), treating as empty"
            )
            items = []

        locations = []
        for item in items:
            if not isinstance(item, dict):
                continue
            record = self._parse_item(item)
            if record is not None:
                locations.append(record)

        self.logger.info(f"Parsed {len(locations)} GLS locations ({len(items)} items in feed)")
        return locations

    def _parse_item(self, item: Dict[str, Any]):
        point_id = first_present(item, ID_KEYS)
        lat, lon = first_coordinates(item, COORDINATES)

        if point_id is None or lat is None or lon is None:
            self.skip(
                "missing id or location",
                id=point_id,
                has_location=isinstance(item.get("location"), list)
            )
            return None

        if not is_valid_coordinate(lat, lon):
            self.skip("invalid coordinates", id=point_id, lat=lat, lon=lon)
            return None

        hours = item.get("hours") if isinstance(item.get("hours"), (list, dict)) else None

        services = {
            "features": item["features"] if isinstance(item.get("features"), list) else None,
            "pickup_time": item.get("pickupTime"),
            "wheelchair_accessible": True if item.get("hasWheelchairAccess") else None,
            "locker_saturation": item.get("lockerSaturation"),
            "available_24_7": is_round_the_clock(hours) if hours else None,
        }

        return self.build_record(
            vendor_location_id=str(point_id),
            name=clean_text(item.get("name")) or f"GLS {point_id}",
            type=normalize_choice(item.get("type", "parcel-shop"), TYPE_TABLE, "locker"),
            status="active",
            lat=lat,
            lon=lon,
            address_line=clean_text(first_present(item, ADDRESS_KEYS), max_len=500),
            city=clean_text(first_present(item, CITY_KEYS), max_len=200),
            postcode=clean_text(first_present(item, POSTCODE_KEYS), max_len=20),
            country=normalize_country(first_present(item, COUNTRY_KEYS), self.default_country),
            services=compact(services),
            opening_hours=encode_hours(hours),
        )
