"""Tests for the TCX track parser."""

import os
import sys
import xml.etree.ElementTree as ET
from datetime import timezone

import pytest

# Add package root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from tcx_hiit.tcx_parser import (
    ParseError, parse, parse_heart_rate, parse_timestamp, field_text, local_name
)
from create_test_data import build_tcx, iso_time, session_tcx, trackpoint


class TestParse:
    """Test parsing of well-formed documents."""

    def test_canonical_garmin_document(self):
        """Namespaced Garmin TCX parses into ordered samples."""
        samples = parse(session_tcx([100, 110, 120]))

        assert [s.heart_rate for s in samples] == [100, 110, 120]
        assert [s.elapsed_seconds for s in samples] == [0, 1, 2]
        assert samples[0].timestamp.tzinfo is not None

    def test_first_sample_starts_at_zero(self):
        tcx = build_tcx([
            trackpoint(iso_time(30), '120'),
            trackpoint(iso_time(35), '125'),
        ])
        samples = parse(tcx)

        assert samples[0].elapsed_seconds == 0
        assert samples[1].elapsed_seconds == 5

    def test_bytes_input(self):
        samples = parse(session_tcx([100, 101]).encode('utf-8'))
        assert len(samples) == 2

    def test_byte_order_mark(self):
        samples = parse('\ufeff' + session_tcx([100, 101]))
        assert len(samples) == 2

    def test_out_of_order_trackpoints_are_sorted(self):
        """Output is sorted and the earliest sample sits at zero."""
        tcx = build_tcx([
            trackpoint(iso_time(10), '130'),
            trackpoint(iso_time(0), '100'),
            trackpoint(iso_time(20), '140'),
            trackpoint(iso_time(5), '110'),
        ])
        samples = parse(tcx)

        elapsed = [s.elapsed_seconds for s in samples]
        assert elapsed == sorted(elapsed)
        assert elapsed[0] == 0
        assert [s.heart_rate for s in samples] == [100, 110, 130, 140]

    def test_elapsed_seconds_are_floored(self):
        tcx = build_tcx([
            trackpoint(iso_time(0), '100'),
            trackpoint(iso_time(1.9), '101'),
            trackpoint(iso_time(3.5), '102'),
        ])
        samples = parse(tcx)

        assert [s.elapsed_seconds for s in samples] == [0, 1, 3]

    def test_naive_timestamps_read_as_utc(self):
        tcx = build_tcx([
            trackpoint('2024-05-01T07:00:00', '100'),
            trackpoint('2024-05-01T07:00:04', '101'),
        ])
        samples = parse(tcx)

        assert samples[0].timestamp.tzinfo is not None
        assert samples[0].timestamp.utcoffset() == timezone.utc.utcoffset(None)
        assert samples[1].elapsed_seconds == 4

    def test_timezone_offsets_are_honoured(self):
        tcx = build_tcx([
            trackpoint('2024-05-01T07:00:00Z', '100'),
            trackpoint('2024-05-01T09:00:10+02:00', '101'),
        ])
        samples = parse(tcx)

        assert samples[1].elapsed_seconds == 10


class TestTolerantLookup:
    """Test the ordered tag and attribute strategies."""

    def test_lowercase_tags_without_namespace(self):
        tcx = (
            '<trainingcenterdatabase><track>'
            '<trackpoint><time>2024-05-01T07:00:00Z</time>'
            '<heartratebpm><value>120</value></heartratebpm></trackpoint>'
            '<trackpoint><time>2024-05-01T07:00:02Z</time>'
            '<heartratebpm><value>125</value></heartratebpm></trackpoint>'
            '</track></trainingcenterdatabase>'
        )
        samples = parse(tcx)

        assert [(s.elapsed_seconds, s.heart_rate) for s in samples] == [(0, 120), (2, 125)]

    def test_mixed_case_tags(self):
        tcx = (
            '<Doc>'
            '<TRACKPOINT><TIME>2024-05-01T07:00:00Z</TIME>'
            '<HEARTRATEBPM><VALUE>141</VALUE></HEARTRATEBPM></TRACKPOINT>'
            '</Doc>'
        )
        samples = parse(tcx)

        assert samples[0].heart_rate == 141

    def test_value_attributes(self):
        """Fields without text fall back to their 'value' attribute."""
        tcx = (
            '<Doc>'
            '<Trackpoint><Time value="2024-05-01T07:00:00Z"/><hr value="133"/></Trackpoint>'
            '<Trackpoint><Time value="2024-05-01T07:00:03Z"/><hr value="135"/></Trackpoint>'
            '</Doc>'
        )
        samples = parse(tcx)

        assert [(s.elapsed_seconds, s.heart_rate) for s in samples] == [(0, 133), (3, 135)]

    def test_plain_heart_rate_element(self):
        tcx = (
            '<Doc><Trackpoint><Time>2024-05-01T07:00:00Z</Time>'
            '<HeartRate>150</HeartRate></Trackpoint></Doc>'
        )
        assert parse(tcx)[0].heart_rate == 150

    def test_heart_rate_bpm_value_wins_over_later_strategies(self):
        tcx = (
            '<Doc><Trackpoint><Time>2024-05-01T07:00:00Z</Time>'
            '<HeartRate>99</HeartRate>'
            '<HeartRateBpm><Value>150</Value></HeartRateBpm></Trackpoint></Doc>'
        )
        assert parse(tcx)[0].heart_rate == 150

    def test_decimal_heart_rate_is_truncated(self):
        tcx = build_tcx([trackpoint(iso_time(0), '150.7')])
        assert parse(tcx)[0].heart_rate == 150


class TestDropout:
    """Malformed trackpoints are skipped without error."""

    def test_missing_heart_rate_is_skipped(self):
        tcx = build_tcx([
            trackpoint(iso_time(0), '100'),
            trackpoint(iso_time(1), None),
            trackpoint(iso_time(2), '102'),
        ])
        samples = parse(tcx)

        assert [s.heart_rate for s in samples] == [100, 102]
        assert [s.elapsed_seconds for s in samples] == [0, 2]

    def test_missing_time_is_skipped(self):
        tcx = build_tcx([
            trackpoint(None, '90'),
            trackpoint(iso_time(0), '100'),
        ])
        samples = parse(tcx)

        assert [s.heart_rate for s in samples] == [100]

    @pytest.mark.parametrize('heart_rate', ['0', '220', '250', '-5', 'abc', ''])
    def test_out_of_range_or_unreadable_heart_rate(self, heart_rate):
        tcx = build_tcx([
            trackpoint(iso_time(0), heart_rate),
            trackpoint(iso_time(1), '120'),
        ])
        samples = parse(tcx)

        assert [s.heart_rate for s in samples] == [120]
        assert samples[0].elapsed_seconds == 0

    def test_unparseable_time_is_skipped(self):
        tcx = build_tcx([
            trackpoint('not a time', '100'),
            trackpoint(iso_time(0), '120'),
        ])
        assert [s.heart_rate for s in parse(tcx)] == [120]

    @pytest.mark.parametrize('time_text', ['now', 'today', 'Now', ' TODAY ', 'May'])
    def test_relative_or_partial_time_is_skipped(self, time_text):
        tcx = build_tcx([
            trackpoint(time_text, '100'),
            trackpoint(iso_time(0), '120'),
            trackpoint(iso_time(4), '125'),
        ])
        samples = parse(tcx)

        assert [s.heart_rate for s in samples] == [120, 125]
        assert [s.elapsed_seconds for s in samples] == [0, 4]

    def test_physiological_bounds_are_exclusive(self):
        tcx = build_tcx([
            trackpoint(iso_time(0), '1'),
            trackpoint(iso_time(1), '219'),
        ])
        assert [s.heart_rate for s in parse(tcx)] == [1, 219]


class TestParseErrors:
    """Test terminal parse failures."""

    def test_malformed_markup(self):
        with pytest.raises(ParseError) as excinfo:
            parse('<TrainingCenterDatabase><Trackpoint></TrainingCenterDatabase>')
        assert excinfo.value.reason == 'malformed markup'

    def test_empty_document(self):
        with pytest.raises(ParseError) as excinfo:
            parse('')
        assert excinfo.value.reason == 'malformed markup'

    def test_no_trackpoints(self):
        with pytest.raises(ParseError) as excinfo:
            parse(build_tcx([]))
        assert excinfo.value.reason == 'no trackpoints found'

    def test_no_valid_heart_rate(self):
        tcx = build_tcx([
            trackpoint(iso_time(0), None),
            trackpoint(iso_time(1), '300'),
        ])
        with pytest.raises(ParseError) as excinfo:
            parse(tcx)
        assert excinfo.value.reason == 'no valid heart-rate data'

    def test_parse_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            parse('not xml at all')


class TestFieldHelpers:
    """Test the small field readers."""

    def test_parse_heart_rate(self):
        assert parse_heart_rate('148 bpm') == 148
        assert parse_heart_rate('  97') == 97
        assert parse_heart_rate('bpm 148') is None

    def test_parse_timestamp(self):
        assert parse_timestamp('2024-05-01T07:00:00.000Z').year == 2024
        assert parse_timestamp('garbage') is None

    @pytest.mark.parametrize('text', ['now', 'today', 'May'])
    def test_parse_timestamp_rejects_non_absolute_times(self, text):
        assert parse_timestamp(text) is None

    def test_field_text_prefers_text_over_attribute(self):
        element = ET.fromstring('<Value value="1">150</Value>')
        assert field_text(element) == '150'

    def test_field_text_empty(self):
        assert field_text(ET.fromstring('<Value/>')) is None

    def test_local_name_strips_namespace(self):
        element = ET.fromstring('<Trackpoint xmlns="urn:x"/>')
        assert local_name(element) == 'Trackpoint'
