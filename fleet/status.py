"""Status enum for due-service urgency levels."""

from enum import Enum


class Status(Enum):
    """Due-service status categories. Lower value = more urgent."""

    OVERDUE = 0
    SOON = 1
    UNKNOWN = 2  # No service history for the category
    OK = 3  # Within bounds, never emitted by the evaluator

    @property
    def label(self) -> str:
        """Lowercase status name used in output ("overdue", "soon", ...)."""
        return self.name.lower()
