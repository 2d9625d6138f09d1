"""
Replay a recorded track as a paced, pausable stream of fixes.

The engine is a small state machine:

    INITIAL --load()--> READY --start()--> TRACKING <--start()--> PAUSED
       |                                      |
       +--load() fails--> FAILED              +--end of track / stop()--> STOPPED

`start()` from READY or STOPPED spawns one emission task that walks the
track from its second fix, sleeping a scaled fraction of each recorded gap
before publishing the next fix with its computed speed. The task only
suspends at that sleep and at the pause gate, and it checks the state after
each suspension, so `stop()` takes effect at the next checkpoint.
"""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, Awaitable, Callable, Optional

from trackplay.feeds.loader import DataFeed, feed_from_config
from trackplay.model.fix import Fix, distance_meters, elapsed_seconds
from trackplay.parsers.feed import parse_feed
from trackplay.playback.config import PlaybackConfig
from trackplay.playback.errors import (
    EmptyBufferError,
    FeedLoadError,
    FeedParseError,
    NoDataFeedError,
    PlaybackError,
    UnexpectedStateError,
)
from trackplay.playback.gate import PauseGate
from trackplay.playback.state import Failure, StreamState
from trackplay.utils.geo import speed_kmh
from trackplay.utils.log import get_logger

logger = get_logger(__name__)

FixListener = Callable[[Fix], None]
StateListener = Callable[[StreamState], None]


class PlaybackEngine:
    """
    Stateful player for one track at a time.

    Parameters
    ----------
    feed : DataFeed, optional
        Where `load()` fetches the raw buffer from. None makes `load()` fail
        with `NoDataFeedError`.
    cfg : PlaybackConfig, optional
        Replay settings; defaults to `PlaybackConfig.accelerated()`.
    sleep : callable, optional
        Coroutine used for pacing, `asyncio.sleep` by default.
    """

    def __init__(
        self,
        feed: Optional[DataFeed],
        cfg: Optional[PlaybackConfig] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.feed = feed
        self.cfg = cfg or PlaybackConfig.accelerated()
        self._sleep = sleep

        self._state = StreamState.INITIAL
        self._failure: Optional[Failure] = None
        self._track: tuple[Fix, ...] = ()
        self._current_fix: Optional[Fix] = None

        self._gate = PauseGate()
        self._generation = 0
        self._loading = False
        self._task: Optional[asyncio.Task[None]] = None

        self._fix_listeners: list[FixListener] = []
        self._state_listeners: list[StateListener] = []

    @classmethod
    def from_config(cls, cfg: PlaybackConfig) -> PlaybackEngine:
        """Engine reading from the feed the config names."""
        return cls(feed_from_config(cfg), cfg)

    # ------------------------------------------------------------------
    # observable state

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def failure(self) -> Optional[Failure]:
        """Why the engine failed; None unless the state is FAILED."""
        return self._failure

    @property
    def track(self) -> tuple[Fix, ...]:
        return self._track

    @property
    def current_fix(self) -> Optional[Fix]:
        """Most recently published fix."""
        return self._current_fix

    def subscribe_fix(self, callback: FixListener) -> Callable[[], None]:
        """Call `callback(fix)` on every published fix. Returns an unsubscribe function."""
        return self._subscribe(self._fix_listeners, callback)

    def subscribe_state(self, callback: StateListener) -> Callable[[], None]:
        """Call `callback(state)` on every state change. Returns an unsubscribe function."""
        return self._subscribe(self._state_listeners, callback)

    @staticmethod
    def _subscribe(listeners: list, callback: Callable) -> Callable[[], None]:
        listeners.append(callback)

        def unsubscribe() -> None:
            if callback in listeners:
                listeners.remove(callback)

        return unsubscribe

    async def updates(self) -> AsyncIterator[Fix]:
        """
        Yield each fix published from now on, until the engine next reaches
        STOPPED or FAILED (or is reset).
        """
        queue: asyncio.Queue[Optional[Fix]] = asyncio.Queue()

        def on_state(state: StreamState) -> None:
            if state.is_terminal or state is StreamState.INITIAL:
                queue.put_nowait(None)

        unsubscribe_fix = self.subscribe_fix(queue.put_nowait)
        unsubscribe_state = self.subscribe_state(on_state)
        try:
            if self._state.is_terminal:
                return
            while (fix := await queue.get()) is not None:
                yield fix
        finally:
            unsubscribe_fix()
            unsubscribe_state()

    async def join(self) -> None:
        """Wait for the current emission task, if any, to finish."""
        if self._task is not None:
            await self._task

    # ------------------------------------------------------------------
    # controls

    async def load(self) -> StreamState:
        """
        Fetch and parse the track. Valid only from INITIAL.

        Returns the resulting state: READY on success, FAILED otherwise
        (see `failure`).
        """
        if self._state is not StreamState.INITIAL or self._loading:
            self._fail(UnexpectedStateError(self._state))
            return self._state
        if self.feed is None:
            self._fail(NoDataFeedError("Tracking data feed not found"))
            return self._state

        generation = self._generation
        self._loading = True
        logger.info("Loading track from %s", self.feed.endpoint)
        try:
            buffer = await self.feed.fetch()
        except Exception as e:
            if self._owns_load(generation):
                self._fail(FeedLoadError("Data feed failed to load tracking data", e))
            return self._state
        finally:
            if self._generation == generation:
                self._loading = False

        if not self._owns_load(generation):
            logger.info("Discarding feed buffer, engine left INITIAL during fetch")
            return self._state
        if not buffer:
            self._fail(EmptyBufferError("Data buffer is empty"))
            return self._state
        try:
            fixes = parse_feed(buffer)
        except FeedParseError as e:
            self._fail(e)
            return self._state

        self._track = tuple(fixes)
        logger.info("Loaded %d fixes from %s", len(self._track), self.feed.endpoint)
        self._publish(self._track[0])
        self._set_state(StreamState.READY)
        return self._state

    def start(self) -> None:
        """
        Toggle playback: begin from READY/STOPPED, pause while TRACKING,
        resume while PAUSED. Ignored in INITIAL and FAILED.

        Must be called from a running event loop.
        """
        match self._state:
            case StreamState.INITIAL | StreamState.FAILED:
                return
            case StreamState.TRACKING:
                self._set_state(StreamState.PAUSED)
            case StreamState.PAUSED:
                self._set_state(StreamState.TRACKING)
                self._gate.release()
            case StreamState.READY | StreamState.STOPPED:
                if not self._track:
                    logger.warning("start() ignored, no track loaded")
                    return
                self._generation += 1
                self._set_state(StreamState.TRACKING)
                self._task = asyncio.get_running_loop().create_task(
                    self._run(self._generation)
                )
                self._task.add_done_callback(self._on_task_done)

    def stop(self) -> None:
        """Stop playback; the emission task exits at its next checkpoint."""
        self._set_state(StreamState.STOPPED)

    def reset(self) -> None:
        """Drop the track and any failure, returning to INITIAL."""
        self._generation += 1
        self._loading = False
        self._track = ()
        self._current_fix = None
        self._task = None
        self._set_state(StreamState.INITIAL)

    # ------------------------------------------------------------------
    # emission loop

    async def _run(self, generation: int) -> None:
        async for fix in self._stream(generation):
            self._publish(fix)

    async def _stream(self, generation: int) -> AsyncIterator[Fix]:
        track = self._track
        speed = track[0].speed
        cursor = 1
        while True:
            if cursor >= len(track):
                if self._emitting(generation):
                    self._set_state(StreamState.STOPPED)
                return

            prev, cur = track[cursor - 1], track[cursor]
            duration = elapsed_seconds(prev, cur)
            # non-positive gaps keep the last speed
            if duration > 0:
                speed = speed_kmh(distance_meters(prev, cur), duration)

            if self._state is StreamState.PAUSED and generation == self._generation:
                await self._gate.wait()
            if not self._emitting(generation):
                return

            await self._sleep(max(duration, 0.0) * self.cfg.replay_factor)
            if not self._emitting(generation):
                return

            cursor += 1
            yield cur.with_speed(speed)

    @staticmethod
    def _on_task_done(task: asyncio.Task[None]) -> None:
        # a restart drops the previous task unjoined; its error surfaces here
        if task.cancelled() or task.exception() is None:
            return
        logger.error("Emission loop failed", exc_info=task.exception())

    def _emitting(self, generation: int) -> bool:
        return generation == self._generation and self._state.is_active

    def _owns_load(self, generation: int) -> bool:
        return generation == self._generation and self._state is StreamState.INITIAL

    # ------------------------------------------------------------------
    # state plumbing

    def _publish(self, fix: Fix) -> None:
        self._current_fix = fix
        logger.debug("Fix %s (%.6f, %.6f) %.1f km/h",
                     fix.timestamp.isoformat(), fix.latitude, fix.longitude, fix.speed)
        for callback in list(self._fix_listeners):
            callback(fix)

    def _fail(self, error: PlaybackError) -> None:
        if isinstance(error, FeedLoadError):
            logger.error("%s: %r", error.message, error.cause)
        else:
            logger.error("%s", error.message)
        self._set_state(StreamState.FAILED, Failure(error.message, error))

    def _set_state(self, state: StreamState, failure: Optional[Failure] = None) -> None:
        previous = self._state
        self._state = state
        self._failure = failure
        if not state.is_active:
            # wake a paused loop so it can observe the new state and exit
            self._gate.release()
        if state is previous and failure is None:
            return
        logger.info("Stream state %s -> %s", previous.value, state.value)
        for callback in list(self._state_listeners):
            callback(state)
