"""
Foxpost parcel locker feed (Hungary).

Feed: https://cdn.foxpost.hu/foxplus.json, a JSON list of automata with
place_id, geolat/geolng, apmType, open (per-day hours), service, etc.
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

ID_KEYS = ("place_id", "id")
COORDINATES = (
    pair("geolat", "geolng"),
    pair("latitude", "longitude"),
)
NAME_KEYS = ("name", "title")
TYPE_KEYS = ("apmType", "type")
ADDRESS_KEYS = ("address", "address_line")
POSTCODE_KEYS = ("zip", "postcode")
HOURS_KEYS = ("open", "opening_hours")

TYPE_TABLE = {
    "locker": "locker",
    "parcel_locker": "locker",
    "automata": "locker",
    "rollkon": "locker",
    "cleveron": "locker",
    "keba": "locker",
    "parcel_shop": "parcel_shop",
    "shop": "parcel_shop",
    "dropoff": "dropoff_point",
    "drop_off": "dropoff_point",
    "pickup": "pickup_point",
    "pick_up": "pickup_point",
}

STATUS_TABLE = {
    "active": "active",
    "available": "active",
    "inactive": "inactive",
    "unavailable": "inactive",
    "closed": "inactive",
    "out_of_service": "out_of_service",
    "maintenance": "out_of_service",
}


class FoxpostAdapter(VendorAdapter):
    """Adapter for the Foxpost automata list"""

    vendor_label = "Foxpost"
    default_country = "HU"

    def parse(self, raw: bytes) -> List[NormalizedLocation]:
        try:
            data = json.loads(raw)
        except (ValueError, UnicodeDecodeError) as e:
            raise ParseError(
                "Foxpost JSON parse error",
                context={"bytes": len(raw)},
                original_exception=e
            )

        if not isinstance(data, list):
            raise ParseError(
                "Foxpost data is not a list",
                context={"root_type": type(data).__name__}
            )

        locations = []
        for item in data:
            if not isinstance(item, dict):
                continue
            record = self._parse_item(item)
            if record is not None:
                locations.append(record)

        self.logger.info(f"Parsed {len(locations)} Foxpost locations ({len(data)} items in feed)")
        return locations

    def _parse_item(self, item: Dict[str, Any]):
        place_id = first_present(item, ID_KEYS)
        lat, lon = first_coordinates(item, COORDINATES)

        if place_id is None or lat is None or lon is None:
            self.skip(
                "missing place_id/id or coordinates",
                place_id=place_id,
                geolat=item.get("geolat"),
                geolng=item.get("geolng")
            )
            return None

        if not is_valid_coordinate(lat, lon):
            self.skip("invalid coordinates", place_id=place_id, lat=lat, lon=lon)
            return None

        hours = first_present(item, HOURS_KEYS)

        services = {
            "service": item["service"] if isinstance(item.get("service"), list) else None,
            "payment_options": item["paymentOptions"] if isinstance(item.get("paymentOptions"), list) else None,
            "card_payment": bool(item.get("cardPayment")),
            "indoor": (not item["isOutdoor"]) if item.get("isOutdoor") is not None else None,
            "variant": item.get("variant"),
            "available_24_7": is_round_the_clock(item.get("open")),
        }

        return self.build_record(
            vendor_location_id=str(place_id),
            name=clean_text(first_present(item, NAME_KEYS)) or f"Foxpost {place_id}",
            type=normalize_choice(first_present(item, TYPE_KEYS), TYPE_TABLE, "locker"),
            status=normalize_choice(item.get("status"), STATUS_TABLE, "active"),
            lat=lat,
            lon=lon,
            address_line=clean_text(first_present(item, ADDRESS_KEYS), max_len=500),
            city=clean_text(item.get("city"), max_len=200),
            postcode=clean_text(first_present(item, POSTCODE_KEYS), max_len=20),
            country=normalize_country(item.get("country"), self.default_country),
            services=compact(services),
            opening_hours=encode_hours(hours),
        )
