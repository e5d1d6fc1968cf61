"""Truck class for fleet vehicle identification and odometer state."""

from typing import Optional


class Truck:
    """A fleet vehicle with its current odometer reading."""

    def __init__(
        self,
        id,
        truck_number: str,
        current_mileage: Optional[int] = 0,
        make: Optional[str] = None,
        model: Optional[str] = None,
        year: Optional[int] = None,
        vin: Optional[str] = None,
        notes: Optional[str] = None,
    ):
        self.id = id
        self.truck_number = truck_number
        self.current_mileage = current_mileage or 0
        self.make = make
        self.model = model
        self.year = year
        self.vin = vin
        self.notes = notes

    @property
    def name(self) -> str:
        """Human-readable truck name, e.g. 'T-101 (2019 Freightliner Cascadia)'."""
        details = " ".join(str(p) for p in (self.year, self.make, self.model) if p)
        return f"{self.truck_number} ({details})" if details else self.truck_number

    def raise_mileage(self, miles: Optional[int]) -> bool:
        """Bump current mileage to `miles` if higher. Returns True if changed."""
        if miles and miles > self.current_mileage:
            self.current_mileage = miles
            return True
        return False
