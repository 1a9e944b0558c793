"""
Materialized listing page: a parsed element tree plus cached text indexes.
"""
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from bs4 import BeautifulSoup
from bs4.element import NavigableString, Tag

from .utils import clean_text


# Text under these elements is never visible on the page.
INVISIBLE_TAGS = {"script", "style", "noscript", "template", "head"}

# Containers holding label/value sub-elements
ATTRIBUTE_CONTAINERS = (
    'dl[class*="attribute"], li[class*="attribute"], div[class*="attribute-list"] > div'
)
CONTAINER_LABELS = 'dt, [class*="label"], span:first-child'
CONTAINER_VALUES = 'dd, [class*="value"], span:last-child'
ICON_LABELS = 'svg[aria-label], [role="img"][aria-label], img[alt]'


def normalize_label(text: str) -> str:
    """Lowercase, collapse whitespace and drop a trailing colon."""
    return clean_text(text).lower().rstrip(":").strip()


class ListingDocument:
    """
    A listing page as handed over by the page source.

    Wraps a BeautifulSoup tree and lazily builds the indexes that field
    strategies share: visible text lines and ordered (label, value) pairs.
    Values resolved so far are kept in `resolved` so later strategies can
    build on earlier fields.
    """

    def __init__(self, soup: BeautifulSoup, url: str = ""):
        self.soup = soup
        self.url = url
        self.resolved: Dict[str, str] = {}
        self._memo: Dict[str, Any] = {}

    @classmethod
    def from_html(cls, html: str, url: str = "") -> "ListingDocument":
        return cls(BeautifulSoup(html or "", "lxml"), url=url)

    def memo(self, key: str, factory: Callable[[], Any]) -> Any:
        """Compute a per-document value once."""
        if key not in self._memo:
            self._memo[key] = factory()
        return self._memo[key]

    # Element queries

    def select(self, selector: str) -> List[Tag]:
        return self.soup.select(selector)

    def select_first(self, selector: str) -> Optional[Tag]:
        return self.soup.select_one(selector)

    @staticmethod
    def text_of(el: Optional[Tag]) -> str:
        if el is None:
            return ""
        return clean_text(el.get_text(" "))

    # Shared indexes

    @property
    def visible_lines(self) -> List[str]:
        return self.memo("visible_lines", self._build_visible_lines)

    @property
    def label_pairs(self) -> List[Tuple[str, str]]:
        return self.memo("label_pairs", self._build_label_pairs)

    def _build_visible_lines(self) -> List[str]:
        lines = []
        for node in self.soup.find_all(string=True):
            # comments, doctypes and script bodies are NavigableString subclasses
            if type(node) is not NavigableString:
                continue
            if any(p.name in INVISIBLE_TAGS for p in node.parents if p.name):
                continue
            for part in str(node).splitlines():
                text = clean_text(part)
                if text:
                    lines.append(text)
        return lines

    def _build_label_pairs(self) -> List[Tuple[str, str]]:
        pairs = []
        for label_el, value_el in self._iter_label_elements():
            label = normalize_label(self.text_of(label_el) if isinstance(label_el, Tag) else label_el)
            value = self.text_of(value_el)
            if label and value:
                pairs.append((label, value))
        return pairs

    def _iter_label_elements(self) -> Iterator[Tuple[Any, Tag]]:
        # Attribute lists: labels and values matched by position
        for container in self.soup.select(ATTRIBUTE_CONTAINERS):
            labels = container.select(CONTAINER_LABELS)
            values = container.select(CONTAINER_VALUES)
            for label, value in zip(labels, values):
                yield label, value

        # Plain definition lists
        for dt in self.soup.select("dl dt"):
            dd = dt.find_next_sibling("dd")
            if dd is not None:
                yield dt, dd

        # Two-cell table rows
        for row in self.soup.select("tr"):
            cells = row.find_all(["td", "th"], recursive=False)
            if len(cells) >= 2:
                yield cells[0], cells[1]

        # Icon followed by a caption
        for icon in self.soup.select(ICON_LABELS):
            caption = icon.find_next_sibling()
            label = icon.get("aria-label") or icon.get("alt") or ""
            if caption is not None and label:
                yield label, caption
