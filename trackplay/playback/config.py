# trackplay/playback/config.py

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

DEFAULT_FEED_URL = "https://dev.skif.pro/coordinates.json"


@dataclass
class PlaybackConfig:
    """
    Configuration for track playback.

    Attributes
    ----------
    replay_factor
        Fraction of each recorded gap actually waited before emitting
        (0.05 replays at 20x real time, 0 disables pacing).
    feed_url
        HTTP(S) address of the coordinates feed.
    feed_path
        Local coordinates file; takes precedence over `feed_url`.
    http_timeout
        Total timeout (s) for one feed fetch.
    """
    replay_factor:  float          = 0.05
    feed_url:       Optional[str]  = DEFAULT_FEED_URL
    feed_path:      Optional[str]  = None
    http_timeout:   float          = 30.0

    def __post_init__(self) -> None:
        if not math.isfinite(self.replay_factor) or self.replay_factor < 0:
            raise ValueError(f"replay_factor must be finite and >= 0, got {self.replay_factor}")

    @property
    def speedup(self) -> float:
        """Replay speed relative to real time."""
        return math.inf if self.replay_factor == 0 else 1 / self.replay_factor

    @classmethod
    def accelerated(cls):
        """Preset for 20x replay of the remote feed (default)."""
        return cls()

    @classmethod
    def realtime(cls):
        """Preset replaying the recorded gaps as they were."""
        return cls(replay_factor=1.0)

    @classmethod
    def instant(cls):
        """Preset emitting every fix without waiting."""
        return cls(replay_factor=0.0)

    @classmethod
    def local(cls, path: str, replay_factor: float = 0.05):
        """Preset reading the feed from a local file."""
        return cls(replay_factor=replay_factor, feed_url=None, feed_path=path)
