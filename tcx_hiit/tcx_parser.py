"""Track parser for TCX activity files.

Turns the raw markup of a TCX file into an ordered list of heart-rate
samples. Producers disagree on tag casing and nesting, so every lookup is an
ordered list of strategies; the first strategy that finds something wins.
"""

import logging
import math
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterator, List, Optional, Tuple, Union

import pandas as pd

from .config import Config

logger = logging.getLogger(__name__)

Element = ET.Element
ElementFinder = Callable[[Element], Optional[Element]]

_INT_PREFIX = re.compile(r'^\s*([+-]?\d+)')

# pandas resolves these against the clock even with an explicit format
_RELATIVE_TIMES = {'now', 'today'}


class ParseError(ValueError):
    """Raised when a TCX document cannot yield any heart-rate samples."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


@dataclass(frozen=True)
class Sample:
    """A single heart-rate reading."""
    elapsed_seconds: int
    heart_rate: int
    timestamp: datetime


def local_name(element: Element) -> str:
    """Return the tag of an element without its namespace."""
    tag = element.tag
    if not isinstance(tag, str):
        return ''
    return tag.rsplit('}', 1)[-1]


def _matches(element: Element, name: str, ignore_case: bool) -> bool:
    tag = local_name(element)
    if ignore_case:
        return tag.lower() == name.lower()
    return tag == name


def _descendants(element: Element) -> Iterator[Element]:
    for node in element.iter():
        if node is not element:
            yield node


def find_descendant(name: str, ignore_case: bool = False) -> ElementFinder:
    """Strategy: first descendant with the given local name."""
    def finder(element: Element) -> Optional[Element]:
        for node in _descendants(element):
            if _matches(node, name, ignore_case):
                return node
        return None
    return finder


def find_nested(outer: str, inner: str, ignore_case: bool = False) -> ElementFinder:
    """Strategy: first `inner` descendant of an `outer` descendant."""
    find_inner = find_descendant(inner, ignore_case)

    def finder(element: Element) -> Optional[Element]:
        for node in _descendants(element):
            if _matches(node, outer, ignore_case):
                found = find_inner(node)
                if found is not None:
                    return found
        return None
    return finder


def find_all(name: str, ignore_case: bool = False) -> Callable[[Element], List[Element]]:
    """Selector: every element (root included) with the given local name."""
    def selector(root: Element) -> List[Element]:
        return [node for node in root.iter() if _matches(node, name, ignore_case)]
    return selector


TRACKPOINT_SELECTORS = [
    find_all('Trackpoint'),
    find_all('trackpoint'),
    find_all('Trackpoint', ignore_case=True),
]

TIME_FINDERS: List[ElementFinder] = [
    find_descendant('Time'),
    find_descendant('time'),
    find_descendant('Time', ignore_case=True),
]

HEART_RATE_FINDERS: List[ElementFinder] = [
    find_nested('HeartRateBpm', 'Value'),
    find_nested('HeartRateBpm', 'value'),
    find_nested('heartratebpm', 'value'),
    find_nested('HeartRateBpm', 'Value', ignore_case=True),
    find_descendant('hr'),
    find_descendant('HeartRate'),
]


def first_match(element: Element, finders: List[ElementFinder]) -> Optional[Element]:
    """Try each finder in order and return the first element found."""
    for finder in finders:
        found = finder(element)
        if found is not None:
            return found
    return None


def field_text(element: Element) -> Optional[str]:
    """Text content of an element, or its 'value' attribute when empty."""
    text = ''.join(element.itertext()).strip()
    if text:
        return text
    value = element.get('value')
    if value is not None and value.strip():
        return value.strip()
    return None


def parse_timestamp(text: str) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp; naive values are read as UTC.

    Relative words ('now', 'today') and partial dates such as 'May' are not
    absolute timestamps and give None.
    """
    if text.strip().lower() in _RELATIVE_TIMES:
        return None
    try:
        stamp = pd.to_datetime(text, utc=True, format='ISO8601')
    except (ValueError, OverflowError, TypeError):
        return None
    if pd.isna(stamp):
        return None
    return stamp.to_pydatetime()


def parse_heart_rate(text: str) -> Optional[int]:
    """Read the leading integer of a heart-rate field ('150.7' -> 150)."""
    match = _INT_PREFIX.match(text)
    if not match:
        return None
    return int(match.group(1))


def is_valid_heart_rate(heart_rate: int) -> bool:
    return 0 < heart_rate < Config.HR_UPPER_LIMIT


def find_trackpoints(root: Element) -> List[Element]:
    """Return trackpoints from the first selector that matches anything."""
    for selector in TRACKPOINT_SELECTORS:
        trackpoints = selector(root)
        if trackpoints:
            return trackpoints
    return []


def read_trackpoint(trackpoint: Element) -> Optional[Tuple[datetime, int]]:
    """Extract (timestamp, heart_rate) from a trackpoint, or None on dropout."""
    time_element = first_match(trackpoint, TIME_FINDERS)
    hr_element = first_match(trackpoint, HEART_RATE_FINDERS)
    if time_element is None or hr_element is None:
        return None

    time_text = field_text(time_element)
    hr_text = field_text(hr_element)
    if not time_text or not hr_text:
        return None

    timestamp = parse_timestamp(time_text)
    heart_rate = parse_heart_rate(hr_text)
    if timestamp is None or heart_rate is None or not is_valid_heart_rate(heart_rate):
        return None
    return timestamp, heart_rate


def parse(text: Union[str, bytes]) -> List[Sample]:
    """Parse TCX markup into heart-rate samples sorted by elapsed time.

    Args:
        text: Raw TCX document, as text or undecoded bytes

    Returns:
        Samples sorted by elapsed seconds; the earliest is at 0

    Raises:
        ParseError: if the markup is malformed, has no trackpoints, or
            has no trackpoint with both a usable time and heart rate
    """
    if isinstance(text, str):
        text = text.lstrip('\ufeff')
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        logger.debug(f"XML parser rejected document: {e}")
        raise ParseError("malformed markup") from e

    trackpoints = find_trackpoints(root)
    logger.debug(f"Found {len(trackpoints)} trackpoints")
    if not trackpoints:
        raise ParseError("no trackpoints found")

    readings = []
    for index, trackpoint in enumerate(trackpoints):
        reading = read_trackpoint(trackpoint)
        if reading is None:
            logger.debug(f"Skipping trackpoint {index}: missing or invalid time/heart rate")
            continue
        readings.append(reading)

    if not readings:
        raise ParseError("no valid heart-rate data")

    # Zero point is the first valid trackpoint in document order, unless an
    # out-of-order file has an earlier one; elapsed time never goes negative.
    start_time = readings[0][0]
    earliest = min(timestamp for timestamp, _ in readings)
    if earliest < start_time:
        logger.debug("Trackpoints out of order; rebasing on earliest timestamp")
        start_time = earliest

    samples = [
        Sample(
            elapsed_seconds=int(math.floor((timestamp - start_time).total_seconds())),
            heart_rate=heart_rate,
            timestamp=timestamp,
        )
        for timestamp, heart_rate in readings
    ]
    samples.sort(key=lambda sample: sample.elapsed_seconds)

    logger.info(f"Parsed {len(samples)} valid heart rate samples "
                f"from {len(trackpoints)} trackpoints")
    return samples
