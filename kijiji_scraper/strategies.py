"""
Field extraction strategies.

Every strategy is a named callable `(ListingDocument) -> str | None`;
None means "not found here, try the next one". Factories below build the
three kinds the resolver chains together: selector cascades, label/value
pairing and free-text label patterns.
"""
import re
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence, Tuple

from .document import ListingDocument
from .title import decompose_title
from .utils import clean_text, format_price, relative_date


@dataclass(frozen=True)
class Strategy:
    name: str
    func: Callable[[ListingDocument], Optional[str]]

    def __call__(self, doc: ListingDocument) -> Optional[str]:
        return self.func(doc)


# Label keywords per field. A label belongs to the first field whose keyword it contains.
LABEL_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("mileage", ("kilometre", "kilometer", "mileage", "odometer")),
    ("make", ("make",)),
    ("model", ("model",)),
    ("year", ("year",)),
    ("transmission", ("transmission",)),
    ("fuel", ("fuel",)),
    ("drivetrain", ("drivetrain", "drive train", "drive type")),
    ("colour", ("colour", "color")),
    ("condition", ("condition",)),
    ("seats", ("seat",)),
    ("body_type", ("body type", "body style", "type")),
)

SELLER_HEADING_WORDS = ("seller", "contact")
SELLER_REJECT_WORDS = ("message", "call", "email")
SELLER_NAME_RE = re.compile(r"^[A-Za-z\s.\-']+$")
SELLER_SIBLING_LIMIT = 5


def classify_label(label: str) -> Optional[str]:
    """Map a normalized label to a field name, or None if unrecognized."""
    for field_name, keywords in LABEL_KEYWORDS:
        if any(k in label for k in keywords):
            return field_name
    return None


def labelled_values(doc: ListingDocument) -> Dict[str, str]:
    """First value seen for each field among the document's label/value pairs."""
    def build():
        found: Dict[str, str] = {}
        for label, value in doc.label_pairs:
            field_name = classify_label(label)
            if field_name and field_name not in found:
                found[field_name] = value
        return found
    return doc.memo("labelled_values", build)


def schema_enum(value: str) -> str:
    """'https://schema.org/UsedCondition' -> 'Used'."""
    tail = value.rstrip("/").rsplit("/", 1)[-1]
    if tail.endswith("Condition") and len(tail) > len("Condition"):
        tail = tail[: -len("Condition")]
    return tail


# Strategy factories

def selector_cascade(
    name: str,
    selectors: Sequence[str],
    attr: Optional[str] = None,
    render_attr: Optional[Callable[[str], Optional[str]]] = None,
    normalize: Callable[[str], str] = clean_text,
) -> Strategy:
    """
    Try CSS selectors in order; the first non-empty matching element wins.

    When `attr` is present on the element its value is preferred over the
    text content. `render_attr` may reformat it and returns None to reject
    it (e.g. a non-numeric price), in which case the text is used.
    """
    def run(doc: ListingDocument) -> Optional[str]:
        for selector in selectors:
            for el in doc.select(selector):
                value = ""
                raw = el.get(attr) if attr else None
                if raw:
                    value = render_attr(raw) if render_attr else raw
                value = value or doc.text_of(el)
                if value:
                    return normalize(value) or None
        return None
    return Strategy(name, run)


def label_value(field_name: str) -> Strategy:
    def run(doc: ListingDocument) -> Optional[str]:
        return labelled_values(doc).get(field_name)
    return Strategy(f"label:{field_name}", run)


def text_pattern(field_name: str, label: str) -> Strategy:
    """
    Scan visible text lines for `Label: value` or a label line followed by
    the value line. `label` is a regex alternation, matched case-insensitively.
    """
    same_line = re.compile(rf"^(?:{label})\s*[:\-]\s*(.+)$", re.I)
    label_only = re.compile(rf"^(?:{label})\s*:?$", re.I)

    def run(doc: ListingDocument) -> Optional[str]:
        lines = doc.visible_lines
        for i, line in enumerate(lines):
            m = same_line.match(line)
            if m:
                return clean_text(m.group(1)) or None
            if label_only.match(line) and i + 1 < len(lines):
                return lines[i + 1]
        return None
    return Strategy(f"text:{field_name}", run)


def title_part(part: str) -> Strategy:
    """Year, make or model decomposed from the already resolved title."""
    def run(doc: ListingDocument) -> Optional[str]:
        return getattr(decompose_title(doc.resolved.get("title")), part)
    return Strategy(f"title:{part}", run)


def microdata(field_name: str, *props: str, normalize: Callable[[str], str] = clean_text) -> Strategy:
    """Best-effort schema.org microdata read (`itemprop`, `content` preferred)."""
    selectors = [f'[itemprop="{p}"]' for p in props]
    return selector_cascade(f"microdata:{field_name}", selectors, attr="content", normalize=normalize)


# Special-purpose strategies

DATE_SELECTORS = ('time[itemprop="datePosted"]', '[class*="datePosted"]', "time")


def _date_posted(doc: ListingDocument) -> Optional[str]:
    for selector in DATE_SELECTORS:
        el = doc.select_first(selector)
        if el is None:
            continue
        stamp = el.get("datetime")
        if stamp:
            rendered = relative_date(stamp)
            if rendered:
                return rendered
        text = doc.text_of(el)
        if text:
            return text
    return None


def _looks_like_name(text: str) -> bool:
    lowered = text.lower()
    return (
        2 < len(text) < 50
        and not any(w in lowered for w in SELLER_REJECT_WORDS)
        and bool(SELLER_NAME_RE.match(text))
    )


def _seller_from_headings(doc: ListingDocument) -> Optional[str]:
    for heading in doc.select("h2, h3, h4"):
        heading_text = doc.text_of(heading).lower()
        if not any(w in heading_text for w in SELLER_HEADING_WORDS):
            continue
        sibling = heading.find_next_sibling()
        for _ in range(SELLER_SIBLING_LIMIT):
            if sibling is None:
                break
            text = doc.text_of(sibling)
            if text and _looks_like_name(text):
                return text
            sibling = sibling.find_next_sibling()
    return None


date_posted = Strategy("selector:date_posted", _date_posted)
seller_from_headings = Strategy("headings:seller_name", _seller_from_headings)

price_selectors = selector_cascade(
    "selector:price",
    ['[itemprop="price"]', '[class*="currentPrice"]', '[class*="price-amount"]', 'span[class*="price"]'],
    attr="content",
    render_attr=format_price,
)
