"""
Data models for the Kijiji vehicle capture.
"""
from dataclasses import dataclass, fields, asdict
from typing import Dict, List


# Placeholder for any field no strategy could resolve.
NA = "N/A"


@dataclass
class Listing:
    """A captured Kijiji vehicle listing. Every field is a string; unresolved is NA."""

    # System-assigned
    id: str = NA
    url: str = NA
    date_saved: str = NA

    # Basic listing info
    title: str = NA
    price: str = NA
    location: str = NA
    date_posted: str = NA
    seller_name: str = NA

    # Vehicle-specific fields
    year: str = NA
    make: str = NA
    model: str = NA
    mileage: str = NA
    transmission: str = NA
    body_type: str = NA
    colour: str = NA
    drivetrain: str = NA

    # Extended fields, filled when the page exposes them
    condition: str = NA
    seats: str = NA
    fuel: str = NA

    @classmethod
    def field_names(cls) -> List[str]:
        return [f.name for f in fields(cls)]

    def to_row(self) -> Dict[str, str]:
        """Column mapping used by the record store."""
        return asdict(self)

    @classmethod
    def from_row(cls, row: Dict) -> "Listing":
        """Build a Listing from a store row; missing or NULL columns become NA."""
        known = set(cls.field_names())
        values = {k: (v if v is not None else NA) for k, v in row.items() if k in known}
        return cls(**values)

    def unresolved(self) -> List[str]:
        """Names of fields still holding the sentinel."""
        return [name for name, value in self.to_row().items() if value == NA]
