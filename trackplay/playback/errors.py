"""
Errors raised while loading a track for playback.

All of them are terminal for an engine: they end up recorded in its
`Failure` rather than propagating out of `load()`.
"""

from __future__ import annotations

from typing import Any


class PlaybackError(Exception):
    """Base class; `message` is the human-readable reason."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class EmptyBufferError(PlaybackError):
    """The data feed returned zero bytes."""


class FeedParseError(PlaybackError):
    """The buffer could not be decoded, or held no valid fixes."""


class NoDataFeedError(PlaybackError):
    """No data feed is configured."""


class FeedLoadError(PlaybackError):
    """The data feed failed to fetch; `cause` is the original exception."""

    def __init__(self, message: str, cause: BaseException) -> None:
        super().__init__(message)
        self.cause = cause
        self.__cause__ = cause


class UnexpectedStateError(PlaybackError):
    """`load()` was called from a state other than INITIAL."""

    def __init__(self, state: Any) -> None:
        super().__init__(f"Unexpected stream state: {state}")
        self.state = state
