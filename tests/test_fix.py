"""
Unit tests for the fix model and geo helpers.
"""

import math
from datetime import datetime, timedelta, timezone

import pytest

from trackplay.model.fix import Fix, distance_meters, elapsed_seconds, parse_timestamp
from trackplay.utils.geo import haversine, speed_kmh


class TestFromRaw:
    """Test building fixes from raw feed records."""

    def test_reference_fix_reads_longitude_before_latitude(self, reference_record):
        """Index 1 is longitude and index 2 is latitude."""
        fix = Fix.from_raw(reference_record)

        assert fix is not None
        assert fix.latitude == 55.7558
        assert fix.longitude == 37.6173
        assert fix.coordinate == (55.7558, 37.6173)
        assert fix.timestamp == datetime(2022, 9, 20, 12, 34, 56, tzinfo=timezone.utc)
        assert fix.speed == 0.0

    def test_naive_timestamp_is_utc(self):
        fix = Fix.from_raw(["2022-09-20T12:00:00", 0, 0])
        assert fix.timestamp.tzinfo is timezone.utc

    def test_explicit_offsets_and_fractions(self):
        """Zulu suffix, numeric offsets and fractional seconds all parse."""
        zulu = parse_timestamp("2022-09-20T12:00:00Z")
        offset = parse_timestamp("2022-09-20T15:00:00+03:00")
        fraction = parse_timestamp("2022-09-20T12:00:00.250")

        assert zulu == offset
        assert fraction - zulu == timedelta(milliseconds=250)

    def test_integer_coordinates_are_accepted(self):
        fix = Fix.from_raw(["2022-09-20T12:00:00", 10, -20])
        assert fix.latitude == -20.0
        assert isinstance(fix.latitude, float)

    @pytest.mark.parametrize("record", [
        [],
        ["2022-09-20T12:00:00", 37.6],
        ["2022-09-20T12:00:00", 37.6, 55.7, 0],
        "2022-09-20T12:00:00,37.6,55.7",
        None,
    ])
    def test_wrong_shape_is_rejected(self, record):
        assert Fix.from_raw(record) is None

    @pytest.mark.parametrize("timestamp", [
        1663668000,
        None,
        "",
        "yesterday",
        "2022-09-20",
        "2022-09-20 12:00:00",
        "20220920T120000",
        "2022-13-20T12:00:00",
        "2022-02-30T12:00:00",
    ])
    def test_bad_timestamp_is_rejected(self, timestamp):
        assert Fix.from_raw([timestamp, 37.6, 55.7]) is None

    @pytest.mark.parametrize("longitude, latitude", [
        ("37.6", 55.7),
        (37.6, None),
        (True, 55.7),
        (math.nan, 55.7),
        (37.6, math.inf),
        (181.0, 55.7),
        (37.6, -90.5),
        (10**400, 55.7),
        (37.6, -10**400),
    ])
    def test_bad_coordinates_are_rejected(self, longitude, latitude):
        assert Fix.from_raw(["2022-09-20T12:00:00", longitude, latitude]) is None

    def test_parsing_is_deterministic(self, reference_record):
        assert Fix.from_raw(reference_record) == Fix.from_raw(list(reference_record))


class TestDerivedOperators:
    """Test elapsed time, distance and speed between fixes."""

    def test_elapsed_seconds_can_be_negative(self):
        t0 = datetime(2022, 9, 20, 10, 0, tzinfo=timezone.utc)
        a = Fix(t0, 55.0, 37.0)
        b = Fix(t0 + timedelta(seconds=12.5), 55.0, 37.0)

        assert elapsed_seconds(a, b) == 12.5
        assert elapsed_seconds(b, a) == -12.5
        assert elapsed_seconds(a, a) == 0.0

    def test_distance_matches_haversine(self, moving_records):
        a, b = (Fix.from_raw(r) for r in moving_records[:2])

        assert distance_meters(a, b) == haversine(a.coordinate, b.coordinate)
        # 0.001 deg of latitude is about 111.2 m
        assert distance_meters(a, b) == pytest.approx(111.19, abs=0.05)

    def test_same_location_is_zero_distance(self, stationary_records):
        a, b = (Fix.from_raw(r) for r in stationary_records[:2])
        assert distance_meters(a, b) == 0.0

    def test_antipodal_distance_is_half_circumference(self):
        assert haversine((0.0, 0.0), (0.0, 180.0)) == pytest.approx(math.pi * 6371000.0)

    def test_speed_kmh_converts_metres_per_second(self):
        assert speed_kmh(100.0, 10.0) == pytest.approx(36.0)

    def test_with_speed_returns_copy(self, reference_record):
        fix = Fix.from_raw(reference_record)
        fast = fix.with_speed(42.0)

        assert fast.speed == 42.0
        assert fix.speed == 0.0
        assert fast.coordinate == fix.coordinate

    def test_to_record(self, reference_record):
        record = Fix.from_raw(reference_record).with_speed(12.5).to_record()

        assert record.latitude == 55.7558
        assert record.longitude == 37.6173
        assert record.speed == 12.5
        assert record.timestamp.year == 2022
