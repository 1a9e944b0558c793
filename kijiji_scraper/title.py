"""
Year/make/model decomposition of free-text listing titles.
"""
import re
from dataclasses import dataclass
from typing import Optional


YEAR_RE = re.compile(r"\b(?:19|20)\d{2}\b")

# Body-style words dropped from the model part of a title.
BODY_STYLE_STOPLIST = {"sedan", "suv", "truck", "coupe", "hatchback"}


@dataclass(frozen=True)
class TitleParts:
    year: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None


def decompose_title(title: Optional[str]) -> TitleParts:
    """
    Split "2018 Honda Civic LX Sedan" into year=2018, make=Honda, model="Civic LX".

    The first 1900-2099 token is the year, the next word the make, and the
    remaining words minus body-style words the model. Parts that cannot be
    found are None.
    """
    if not title:
        return TitleParts()

    m = YEAR_RE.search(title)
    if not m:
        return TitleParts()

    parts = title[m.end():].split()
    if not parts:
        return TitleParts(year=m.group(0))

    model_parts = [p for p in parts[1:] if p.lower() not in BODY_STYLE_STOPLIST]
    return TitleParts(
        year=m.group(0),
        make=parts[0],
        model=" ".join(model_parts) or None,
    )
