"""
Pydantic schemas to validate feed input and playback output.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

# A decoded feed is an array of arrays; per-record checks happen in Fix.from_raw.
RawFeed = TypeAdapter(list[list[Any]])


class FixRecord(BaseModel):
    """
    Normalized record for a single emitted fix.
    """
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    speed: float = Field(default=0.0, ge=0.0)  # km/h
