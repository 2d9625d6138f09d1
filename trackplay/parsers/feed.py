"""
Feed parser: decode a raw JSON coordinates buffer into an ordered list of fixes.

The feed is a JSON array of `[timestamp, longitude, latitude]` records.
"""

from pydantic import ValidationError

from trackplay.model.fix import Fix
from trackplay.playback.errors import FeedParseError
from trackplay.utils.log import get_logger
from trackplay.utils.validate import RawFeed

logger = get_logger(__name__)


def parse_feed(buffer: bytes) -> list[Fix]:
    """
    Parse a feed buffer, dropping malformed records.

    Parameters
    ----------
    buffer : bytes
        Raw JSON bytes as fetched from the data feed.

    Returns
    -------
    list[Fix]
        Parsed fixes, in feed order.

    Raises
    ------
    FeedParseError
        If the buffer is not an array of arrays, or no record survives.
    """
    try:
        records = RawFeed.validate_json(buffer)
    except ValidationError as e:
        raise FeedParseError(
            "Data buffer is corrupted or has invalid data format"
        ) from e

    fixes = [fix for fix in map(Fix.from_raw, records) if fix is not None]
    dropped = len(records) - len(fixes)
    if dropped:
        logger.warning("Dropped %d of %d malformed feed records", dropped, len(records))

    if not fixes:
        raise FeedParseError("Data buffer holds no valid tracking points")
    return fixes
