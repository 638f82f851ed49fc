"""Exception types surfaced by the analytics core."""

from __future__ import annotations


class PitchTrackingError(Exception):
    """Base class for analytics errors."""


class InsufficientDataError(PitchTrackingError):
    """A sample or history window is too short to compute from."""

    def __init__(self, message: str, *, available: int = 0, required: int = 0) -> None:
        super().__init__(message)
        self.available = available
        self.required = required


class PlayerNotFoundError(PitchTrackingError, LookupError):
    """A mandatory player profile lookup failed."""

    def __init__(self, player_id: str) -> None:
        super().__init__(f"Player not found: {player_id}")
        self.player_id = player_id
