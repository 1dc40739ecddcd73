"""Errors raised while sequencing a journey."""

from __future__ import annotations


class SequencingError(ValueError):
    """Base class for journeys that cannot be sequenced or synthesized."""


class NoPickupError(SequencingError):
    def __init__(self, message: str = "Cannot create a journey with no pickup stops.") -> None:
        super().__init__(message)


class UnknownBookingError(SequencingError):
    def __init__(self, stop_id: str, booking_id: str) -> None:
        super().__init__(f"Could not find parent booking '{booking_id}' for stop ID: {stop_id}")
        self.stop_id = stop_id
        self.booking_id = booking_id


class UnpublishedIdentifierError(SequencingError):
    """The journey still relies on placeholder identifiers and cannot be published."""

    def __init__(self, stop_ids: list[str]) -> None:
        super().__init__(
            "Cannot publish a journey before the dispatch API has assigned identifiers to stops: "
            + ", ".join(stop_ids)
        )
        self.stop_ids = stop_ids
