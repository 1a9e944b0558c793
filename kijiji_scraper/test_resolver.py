"""
Tests for field resolution, strategies and title decomposition.
"""
import logging
from datetime import datetime, timedelta, timezone

import pytest

from kijiji_scraper.document import ListingDocument
from kijiji_scraper.models import Listing, NA
from kijiji_scraper.resolver import FieldResolver, FieldStrategy, resolve_listing
from kijiji_scraper.strategies import Strategy, classify_label, schema_enum
from kijiji_scraper.title import BODY_STYLE_STOPLIST, decompose_title
from kijiji_scraper.utils import format_price, relative_date


URL = "https://www.kijiji.ca/v-cars-trucks/city-of-halifax/2018-honda-civic/1687654321"

CIVIC_HTML = """
<html><head><title>Kijiji</title><script>var x = "Price: $1";</script></head>
<body>
  <h1 class="title-2323565163">2018 Honda Civic LX Sedan</h1>
  <span class="currentPrice-441857624">$15,995</span>
</body></html>
"""

COROLLA_HTML = """
<html><body>
  <h1 itemprop="name">2016 Toyota Corolla LE</h1>
  <span itemprop="price" content="12500">$12,500.00</span>
  <address>  Halifax,
     NS B3H 1A1 </address>
  <time datetime="2020-01-01T10:00:00Z">January 1, 2020</time>
  <div class="profile-name-x">Atlantic Auto</div>
  <ul class="itemAttributeList">
    <dl class="attribute-1"><dt>Make</dt><dd>Toyota</dd></dl>
    <dl class="attribute-2"><dt>Model</dt><dd>Corolla</dd></dl>
    <dl class="attribute-3"><dt>Year</dt><dd>2016</dd></dl>
    <dl class="attribute-4"><dt>Kilometres</dt><dd>98,000</dd></dl>
    <dl class="attribute-5"><dt>Transmission</dt><dd>Automatic</dd></dl>
    <dl class="attribute-6"><dt>Body Type</dt><dd>Sedan</dd></dl>
    <dl class="attribute-7"><dt>Colour</dt><dd>Silver</dd></dl>
    <dl class="attribute-8"><dt>Drivetrain</dt><dd>Front-wheel drive (FWD)</dd></dl>
    <dl class="attribute-9"><dt>Fuel Type</dt><dd>Gas</dd></dl>
  </ul>
  <table>
    <tr><td>Condition</td><td>Used</td></tr>
    <tr><td>Seats</td><td>5</td></tr>
  </table>
</body></html>
"""


def test_title_only_listing_example():
    """Year/make/model come from the title when no attributes exist."""
    listing = resolve_listing(CIVIC_HTML, url=URL)
    assert listing.title == "2018 Honda Civic LX Sedan"
    assert listing.year == "2018"
    assert listing.make == "Honda"
    assert listing.model == "Civic LX"
    assert listing.price == "$15,995"
    assert listing.url == URL
    assert listing.location == NA
    assert listing.mileage == NA
    assert listing.seller_name == NA


def test_labelled_attributes_win_over_title():
    listing = resolve_listing(COROLLA_HTML, url=URL)
    assert listing.make == "Toyota"
    assert listing.model == "Corolla"
    assert listing.year == "2016"
    assert listing.mileage == "98,000"
    assert listing.transmission == "Automatic"
    assert listing.body_type == "Sedan"
    assert listing.colour == "Silver"
    assert listing.drivetrain == "Front-wheel drive (FWD)"
    assert listing.fuel == "Gas"
    assert listing.condition == "Used"
    assert listing.seats == "5"


def test_selector_fields():
    listing = resolve_listing(COROLLA_HTML, url=URL)
    assert listing.title == "2016 Toyota Corolla LE"
    assert listing.price == "$12,500"
    assert listing.location == "Halifax, NS B3H 1A1"
    assert listing.seller_name == "Atlantic Auto"
    # older than a week renders as a date
    assert listing.date_posted.endswith("/2020")


def test_unlabelled_document_is_all_sentinel():
    """Every field is present; nothing recognizable means N/A everywhere."""
    listing = resolve_listing("<html><body><p>Hello world</p></body></html>")
    row = listing.to_row()
    assert set(row) == set(Listing.field_names())
    assert all(v is not None for v in row.values())
    assert all(v == NA for v in row.values())


def test_price_prefers_numeric_content_attribute():
    html = '<span itemprop="price" content="15995">Call for price</span>'
    assert resolve_listing(html).price == "$15,995"


def test_price_non_numeric_content_uses_text():
    html = '<span itemprop="price" content="contact">$9,000</span>'
    assert resolve_listing(html).price == "$9,000"


def test_first_label_match_wins():
    html = """
    <table>
      <tr><td>Kilometres</td><td>50,000 km</td></tr>
      <tr><td>Mileage</td><td>60,000 km</td></tr>
    </table>
    """
    assert resolve_listing(html).mileage == "50,000 km"


def test_icon_caption_pairs():
    html = '<ul><li><svg aria-label="Transmission"></svg><span>Manual</span></li></ul>'
    assert resolve_listing(html).transmission == "Manual"


def test_free_text_fallback():
    html = """
    <div>
      <p>Kilometres</p><p>45,000 km</p>
      <p>Condition: Used</p>
    </div>
    """
    listing = resolve_listing(html)
    assert listing.mileage == "45,000 km"
    assert listing.condition == "Used"


def test_free_text_ignores_script_text():
    html = "<html><head><script>Price: $1</script></head><body><p>nothing</p></body></html>"
    assert resolve_listing(html).price == NA


def test_microdata_condition_enum():
    html = '<link itemprop="itemCondition" content="https://schema.org/UsedCondition">'
    assert resolve_listing(html).condition == "Used"


def test_seller_heading_scan():
    html = """
    <div>
      <h3>Contact Seller</h3>
      <div>Message</div>
      <div>Call</div>
      <div>Jane Smith</div>
    </div>
    """
    assert resolve_listing(html).seller_name == "Jane Smith"


def test_relative_date_from_datetime_attribute():
    stamp = (datetime.now(timezone.utc) - timedelta(days=3, hours=1)).isoformat()
    html = f'<time itemprop="datePosted" datetime="{stamp}">whenever</time>'
    assert resolve_listing(html).date_posted == "3 days ago"


def test_date_display_text_used_verbatim():
    html = '<span class="datePosted-383942873">Posted 2 hours ago</span>'
    assert resolve_listing(html).date_posted == "Posted 2 hours ago"


def test_relative_date_rendering():
    now = datetime(2024, 1, 20, 12, 0, tzinfo=timezone.utc)
    assert relative_date("2024-01-20T08:00:00Z", now=now) == "Today"
    assert relative_date("2024-01-19T08:00:00Z", now=now) == "Yesterday"
    assert relative_date("2024-01-15T08:00:00Z", now=now) == "5 days ago"
    assert relative_date("2024-01-10T12:00:00Z", now=now) == "1/10/2024"
    assert relative_date("not a date", now=now) is None


def test_failing_strategy_is_logged_and_skipped(caplog):
    """A strategy that raises never escapes the resolver."""
    def boom(doc):
        raise RuntimeError("broken markup")

    resolver = FieldResolver([
        FieldStrategy("title", [Strategy("boom", boom), Strategy("fixed", lambda doc: "Fallback title")]),
        FieldStrategy("price", [Strategy("boom", boom)]),
    ])
    caplog.set_level(logging.WARNING)
    listing = resolver.resolve(ListingDocument.from_html("<p>x</p>"))

    assert listing.title == "Fallback title"
    assert listing.price == NA
    assert "broken markup" in caplog.text


def test_unknown_field_rejected():
    with pytest.raises(ValueError):
        FieldResolver([FieldStrategy("horsepower", [])])


def test_classify_label():
    assert classify_label("kilometres") == "mileage"
    assert classify_label("fuel type") == "fuel"
    assert classify_label("body type") == "body_type"
    assert classify_label("exterior colour") == "colour"
    assert classify_label("warranty") is None


def test_schema_enum():
    assert schema_enum("https://schema.org/NewCondition") == "New"
    assert schema_enum("Used") == "Used"


def test_format_price():
    assert format_price("15995") == "$15,995"
    assert format_price("15995.50") == "$15,995.5"
    assert format_price("1234567") == "$1,234,567"
    assert format_price("free") is None
    assert format_price("nan") is None
    assert format_price("inf") is None


def test_price_non_finite_content_uses_text():
    html = '<span itemprop="price" content="NaN">$7,500</span>'
    assert resolve_listing(html).price == "$7,500"


def test_control_characters_dropped_from_text():
    listing = resolve_listing("<h1>2018 Honda&#1; Civic</h1>")
    assert listing.title == "2018 Honda Civic"
    assert listing.make == "Honda"


@pytest.mark.parametrize("title,expected", [
    ("2018 Honda Civic LX Sedan", ("2018", "Honda", "Civic LX")),
    ("2015 Ford F-150 XLT Truck", ("2015", "Ford", "F-150 XLT")),
    ("For sale: 1999 Jeep Wrangler", ("1999", "Jeep", "Wrangler")),
    ("2020 Toyota SUV", ("2020", "Toyota", None)),
    ("2019", ("2019", None, None)),
    ("Honda Civic low km", (None, None, None)),
    ("", (None, None, None)),
])
def test_decompose_title(title, expected):
    parts = decompose_title(title)
    assert (parts.year, parts.make, parts.model) == expected


@pytest.mark.parametrize("title", [
    "2012 Mazda 3 Hatchback",
    "2021 Kia Sorento SUV AWD",
    "2007 Chevrolet Silverado truck",
    "2010 BMW 335i Coupe",
    "2016 Hyundai Sedan",
])
def test_decompose_title_properties(title):
    parts = decompose_title(title)
    assert parts.make
    assert parts.model is None or parts.model.lower() not in BODY_STYLE_STOPLIST
    if parts.model:
        assert not any(w.lower() in BODY_STYLE_STOPLIST for w in parts.model.split())


def test_title_decomposition_without_year_leaves_sentinel():
    listing = resolve_listing("<h1>Honda Civic for sale</h1>")
    assert listing.title == "Honda Civic for sale"
    assert (listing.year, listing.make, listing.model) == (NA, NA, NA)
