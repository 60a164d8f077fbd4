"""Error taxonomy for the page replacement simulator."""

from __future__ import annotations


class PageReplacementError(Exception):
    """Base class for every error raised by the simulator."""


class InvalidInput(PageReplacementError, ValueError):
    """Reference sequence or frame count rejected before simulating."""


class UnknownAlgorithm(PageReplacementError, ValueError):
    """The requested algorithm token names no known policy."""

    def __init__(self, token: object) -> None:
        self.token = token
        super().__init__(f"Unknown algorithm: {token!r}")


class CommentaryUnavailable(PageReplacementError):
    """The commentary service failed or answered with a non-success status."""
