"""
Pytest configuration and fixtures for trackplay tests.
"""

import asyncio
import json
import sys
from pathlib import Path

import pytest

# Add the repository root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))


def feed_bytes(records) -> bytes:
    """Encode raw `[timestamp, longitude, latitude]` records as a feed buffer."""
    return json.dumps(records).encode("utf-8")


class RecordingSleep:
    """Pacing stand-in that records each delay and yields once to the loop."""

    def __init__(self):
        self.calls = []

    async def __call__(self, delay):
        self.calls.append(delay)
        await asyncio.sleep(0)


class GatedSleep:
    """Pacing stand-in that blocks every delay until `event` is set."""

    def __init__(self):
        self.calls = []
        self.event = asyncio.Event()

    async def __call__(self, delay):
        self.calls.append(delay)
        await self.event.wait()


class BrokenFeed:
    """Data feed whose fetch always raises."""

    endpoint = "broken://feed"

    def __init__(self, exc):
        self.exc = exc

    async def fetch(self):
        raise self.exc


@pytest.fixture
def reference_record():
    """Red Square, Moscow, in raw feed order: longitude before latitude."""
    return ["2022-09-20T12:34:56", 37.6173, 55.7558]


@pytest.fixture
def stationary_records():
    """Three fixes at t=0s, 10s, 40s, all at the same spot."""
    return [
        ["2022-09-20T10:00:00", 37.6173, 55.7558],
        ["2022-09-20T10:00:10", 37.6173, 55.7558],
        ["2022-09-20T10:00:40", 37.6173, 55.7558],
    ]


@pytest.fixture
def moving_records():
    """Northbound fixes 0.001 deg of latitude (~111 m) apart, 10 s apart."""
    return [
        ["2022-09-20T10:00:00", 37.6173, 55.7558],
        ["2022-09-20T10:00:10", 37.6173, 55.7568],
        ["2022-09-20T10:00:20", 37.6173, 55.7578],
    ]


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def gated_sleep():
    return GatedSleep()
