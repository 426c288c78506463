"""
Magyar Posta (MPL) parcel terminal feed.

Feed: http://httpmegosztas.posta.hu/PartnerExtra/Out/PostInfo_CS.xml

XML with <post> elements. Only posts flagged isPostPoint="1" are service
points worth importing; the rest are internal postal units. Coordinates use a
comma as decimal separator.
"""

import json
import xml.etree.ElementTree as ET
from typing import Callable, Iterator, List, Optional, Sequence
from core.exceptions import ParseError
from ingestion.base import VendorAdapter
from ingestion.transformers.normalizer import (
    clean_text,
    is_valid_coordinate,
    parse_number,
)
from schemas.location import NormalizedLocation

NodeAccessor = Callable[[ET.Element], Optional[str]]


def _local(tag) -> str:
    # "{namespace}post" -> "post"
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def _find(node: Optional[ET.Element], *path: str) -> Optional[ET.Element]:
    for name in path:
        if node is None:
            return None
        node = next((c for c in node if _local(c.tag) == name), None)
    return node


def child(*path: str) -> NodeAccessor:
    """Text of a (nested) child element"""
    def accessor(node: ET.Element) -> Optional[str]:
        found = _find(node, *path)
        return found.text if found is not None else None
    return accessor


def attr(name: str) -> NodeAccessor:
    """Value of an attribute on the node itself"""
    def accessor(node: ET.Element) -> Optional[str]:
        return node.get(name)
    return accessor


def first_text(node: ET.Element, accessors: Sequence[NodeAccessor]) -> Optional[str]:
    for accessor in accessors:
        value = accessor(node)
        if value is not None and value.strip():
            return value.strip()
    return None


ID = (child("ID"),)
LAT = (child("gpsData", "WGSLat"),)
LON = (child("gpsData", "WGSLon"),)
NAME = (child("name"),)
CITY = (child("city"),)
POSTCODE = (attr("zipCode"), child("zipCode"))
STREET_NAME = (child("street", "name"),)
STREET_TYPE = (child("street", "type"),)
HOUSE_NUMBER = (child("street", "houseNumber"),)
SERVICE_POINT_TYPE = (child("ServicePointType"),)
DAY = (child("day"),)
OPENS = (child("From1"), child("from"))
CLOSES = (child("To1"), child("to"))


class MplAdapter(VendorAdapter):
    """Adapter for Magyar Posta parcel terminals and post points"""

    vendor_label = "MPL"
    default_country = "HU"

    def parse(self, raw: bytes) -> List[NormalizedLocation]:
        try:
            root = ET.fromstring(raw)
        except ET.ParseError as e:
            raise ParseError(
                "MPL XML parse error",
                context={"bytes": len(raw)},
                original_exception=e
            )

        locations = []
        seen = 0
        for post in self._posts(root):
            seen += 1
            # Entity discriminator: only real service points are imported
            if (post.get("isPostPoint") or "0").strip() != "1":
                continue
            record = self._parse_post(post)
            if record is not None:
                locations.append(record)

        self.logger.info(f"Parsed {len(locations)} MPL locations ({seen} post nodes in feed)")
        return locations

    @staticmethod
    def _posts(root: ET.Element) -> Iterator[ET.Element]:
        for node in root.iter():
            if _local(node.tag) == "post":
                yield node

    def _parse_post(self, post: ET.Element):
        post_id = first_text(post, ID)
        if post_id is None:
            self.skip("missing ID")
            return None

        lat_text = first_text(post, LAT)
        lon_text = first_text(post, LON)
        if lat_text is None or lon_text is None:
            self.skip("missing coordinates", id=post_id)
            return None

        lat = parse_number(lat_text)
        lon = parse_number(lon_text)
        if not is_valid_coordinate(lat, lon):
            self.skip("invalid coordinates", id=post_id, lat=lat_text, lon=lon_text)
            return None

        city = clean_text(first_text(post, CITY), max_len=200)
        postcode = clean_text(first_text(post, POSTCODE), max_len=20)

        return self.build_record(
            vendor_location_id=post_id,
            name=clean_text(first_text(post, NAME)) or f"MPL {post_id}",
            type="locker",
            status="active",
            lat=lat,
            lon=lon,
            address_line=self._address(post, postcode, city),
            city=city,
            postcode=postcode,
            country=self.default_country,
            services={"service_point_type": first_text(post, SERVICE_POINT_TYPE) or "CS"},
            opening_hours=self._working_hours(post),
        )

    @staticmethod
    def _address(post: ET.Element, postcode: Optional[str], city: Optional[str]) -> Optional[str]:
        street = " ".join(
            part for part in (
                first_text(post, STREET_NAME),
                first_text(post, STREET_TYPE),
                first_text(post, HOUSE_NUMBER),
            ) if part
        )
        locality = " ".join(part for part in (postcode, city) if part)
        if street and city:
            return clean_text(f"{street}, {locality}", max_len=500)
        if not street and city:
            return clean_text(locality, max_len=500)
        return clean_text(street, max_len=500)

    @staticmethod
    def _working_hours(post: ET.Element) -> Optional[str]:
        working_hours = _find(post, "workingHours")
        if working_hours is None:
            return None

        hours = {}
        for days in working_hours:
            if _local(days.tag) != "days":
                continue
            day = first_text(days, DAY)
            if not day:
                continue
            opens = first_text(days, OPENS) or ""
            closes = first_text(days, CLOSES) or ""
            hours[day] = f"{opens}-{closes}" if opens or closes else ""

        return json.dumps(hours, ensure_ascii=False) if hours else None
