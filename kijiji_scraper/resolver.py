"""
Field resolution: run each field's strategy cascade over a listing page.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .document import ListingDocument
from .errors import ExtractionFieldError
from .models import Listing, NA
from .strategies import (
    Strategy,
    date_posted,
    label_value,
    microdata,
    price_selectors,
    schema_enum,
    selector_cascade,
    seller_from_headings,
    text_pattern,
    title_part,
)
from .utils import clean_text

logger = logging.getLogger(__name__)

# Set by the capture pipeline, never by strategies
SYSTEM_FIELDS = ("id", "url", "date_saved")


@dataclass
class FieldStrategy:
    """Ordered strategies for one Listing field; the first non-empty result wins."""
    field: str
    strategies: List[Strategy]


def _vehicle_field(field_name: str, label_regex: str, *itemprops: str, **kwargs) -> FieldStrategy:
    return FieldStrategy(field_name, [
        microdata(field_name, *itemprops, **kwargs),
        label_value(field_name),
        text_pattern(field_name, label_regex),
    ])


# Title must come first: year/make/model fall back to decomposing it.
DEFAULT_FIELD_STRATEGIES: List[FieldStrategy] = [
    FieldStrategy("title", [
        selector_cascade("selector:title", ['h1[itemprop="name"]', 'h1[class*="title"]', "h1"]),
        selector_cascade("meta:title", ['meta[property="og:title"]'], attr="content"),
    ]),
    FieldStrategy("price", [
        price_selectors,
        text_pattern("price", r"price|asking price"),
    ]),
    FieldStrategy("location", [
        selector_cascade("selector:location", [
            "address",
            '[itemprop="address"]',
            '[class*="location"]',
            'svg[aria-label="Location"] + span',
        ]),
        text_pattern("location", r"location"),
    ]),
    FieldStrategy("date_posted", [
        date_posted,
        text_pattern("date_posted", r"date posted|posted|listed"),
    ]),
    FieldStrategy("seller_name", [
        selector_cascade("selector:seller_name", [
            '[class*="profile-name"]',
            '[class*="seller-name"]',
            'div[class*="profile"] h3',
            'a[href*="/u/"] span',
        ]),
        seller_from_headings,
        text_pattern("seller_name", r"seller|posted by|dealer"),
    ]),
    FieldStrategy("year", [
        microdata("year", "vehicleModelDate", "modelDate", "productionDate"),
        label_value("year"),
        text_pattern("year", r"year"),
        title_part("year"),
    ]),
    FieldStrategy("make", [
        microdata("make", "brand", "manufacturer"),
        label_value("make"),
        text_pattern("make", r"make"),
        title_part("make"),
    ]),
    FieldStrategy("model", [
        microdata("model", "model"),
        label_value("model"),
        text_pattern("model", r"model"),
        title_part("model"),
    ]),
    _vehicle_field("mileage", r"kilometres|kilometers|mileage|odometer", "mileageFromOdometer"),
    _vehicle_field("transmission", r"transmission", "vehicleTransmission"),
    _vehicle_field("body_type", r"body type|body style", "bodyType"),
    _vehicle_field("colour", r"colour|color|exterior colou?r", "color"),
    _vehicle_field("drivetrain", r"drivetrain|drive train", "driveWheelConfiguration"),
    _vehicle_field(
        "condition", r"condition", "itemCondition",
        normalize=lambda v: schema_enum(clean_text(v)),
    ),
    _vehicle_field("seats", r"seats|seating capacity", "vehicleSeatingCapacity", "seatingCapacity"),
    _vehicle_field("fuel", r"fuel type|fuel", "fuelType"),
]


class FieldResolver:
    """
    Resolve a complete Listing from a ListingDocument.

    Never raises for a field: a failing strategy is logged and the cascade
    moves on; fields nothing resolves keep the NA sentinel.
    """

    def __init__(self, strategies: Optional[Sequence[FieldStrategy]] = None):
        self.strategies = list(strategies if strategies is not None else DEFAULT_FIELD_STRATEGIES)
        known = set(Listing.field_names())
        for fs in self.strategies:
            if fs.field not in known:
                raise ValueError(f"Unknown listing field: {fs.field}")

    def resolve_field(self, doc: ListingDocument, fs: FieldStrategy) -> str:
        for strategy in fs.strategies:
            try:
                value = strategy(doc)
            except Exception as e:
                err = ExtractionFieldError(fs.field, strategy.name, e)
                logger.warning(str(err))
                continue
            if value:
                logger.debug(f"Found {fs.field} via {strategy.name}: {value}")
                return value
        return NA

    def resolve(self, doc: ListingDocument) -> Listing:
        listing = Listing()
        if doc.url:
            listing.url = doc.url
        for fs in self.strategies:
            value = self.resolve_field(doc, fs)
            setattr(listing, fs.field, value)
            if value != NA:
                doc.resolved[fs.field] = value

        missing = [f for f in listing.unresolved() if f not in SYSTEM_FIELDS]
        logger.info(f">>> Extracted '{listing.title}' ({len(missing)} fields unresolved)")
        return listing


def resolve_listing(html: str, url: str = "", resolver: Optional[FieldResolver] = None) -> Listing:
    """Parse raw HTML and resolve it with the default strategies."""
    doc = ListingDocument.from_html(html, url=url)
    return (resolver or FieldResolver()).resolve(doc)
