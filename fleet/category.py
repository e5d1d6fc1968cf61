"""Closed set of maintenance categories and their display labels."""

from enum import Enum


class Category(Enum):
    """Classification of a maintenance action."""

    OIL_CHANGE = "oil_change"
    TIRES = "tires"
    BRAKES = "brakes"
    FILTERS = "filters"
    FLUIDS = "fluids"
    ELECTRICAL = "electrical"
    ENGINE = "engine"
    TRANSMISSION = "transmission"
    SUSPENSION = "suspension"
    BODY = "body"
    INSPECTION = "inspection"
    OTHER = "other"

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]

    @classmethod
    def lookup(cls, value) -> "Category":
        """Find a category by id, falling back to OTHER for unknown ids."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


CATEGORY_LABELS = {
    Category.OIL_CHANGE: "Oil Change",
    Category.TIRES: "Tires",
    Category.BRAKES: "Brakes",
    Category.FILTERS: "Filters",
    Category.FLUIDS: "Fluids",
    Category.ELECTRICAL: "Electrical",
    Category.ENGINE: "Engine",
    Category.TRANSMISSION: "Transmission",
    Category.SUSPENSION: "Suspension",
    Category.BODY: "Body/Exterior",
    Category.INSPECTION: "Inspection",
    Category.OTHER: "Other",
}
