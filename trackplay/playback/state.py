# trackplay/playback/state.py

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from trackplay.playback.errors import PlaybackError


class StreamState(str, Enum):
    """Lifecycle of a playback engine."""
    INITIAL = "INITIAL"
    READY = "READY"
    TRACKING = "TRACKING"
    PAUSED = "PAUSED"
    STOPPED = "STOPPED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (StreamState.STOPPED, StreamState.FAILED)

    @property
    def is_active(self) -> bool:
        return self in (StreamState.TRACKING, StreamState.PAUSED)


@dataclass(frozen=True)
class Failure:
    """
    Why an engine entered FAILED.

    Parameters
    ----------
    message : str
        Human-readable reason.
    error : PlaybackError
        The taxonomy error; `FeedLoadError.cause` holds the transport error.
    """
    message: str
    error: PlaybackError
