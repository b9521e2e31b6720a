"""
TLE source loading and parsing.

This module reads raw Two-Line Element text from a local file or an
http(s) URL and turns it into ElementSet records. Both the 3-line
(name + 2 lines) and the bare 2-line formats are supported, and may be
mixed in one source with comment lines in between.
"""

from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union
import logging
import re

import requests

from .models import ElementSet

logger = logging.getLogger(__name__)

LINE1_MARKER = "1 "
LINE2_MARKER = "2 "


class TLESourceError(OSError):
    """Raised when the TLE source cannot be read."""


def _normalize_lines(raw_text: str) -> Tuple[str, ...]:
    """Split on LF or CRLF, strip every line and drop blank ones."""
    stripped = (line.strip() for line in re.split(r"\r?\n", raw_text))
    return tuple(line for line in stripped if line)


def _starts_with(lines: Sequence[str], index: int, marker: str) -> bool:
    # a line past the end never matches
    return index < len(lines) and lines[index].startswith(marker)


def _match_group(
    lines: Sequence[str], index: int, emitted: int
) -> Tuple[Optional[ElementSet], int]:
    """
    Try to match one element-set group starting at ``index``.

    Args:
        lines: Normalized, non-blank lines
        index: Position of the current line
        emitted: Number of element sets emitted so far

    Returns:
        Tuple of (element set or None, number of lines consumed)
    """
    if _starts_with(lines, index, LINE1_MARKER) and _starts_with(lines, index + 1, LINE2_MARKER):
        element_set = ElementSet(
            name=f"SAT {emitted + 1}",
            line1=lines[index],
            line2=lines[index + 1],
        )
        return element_set, 2

    if (
        not lines[index].startswith(LINE1_MARKER)
        and _starts_with(lines, index + 1, LINE1_MARKER)
        and _starts_with(lines, index + 2, LINE2_MARKER)
    ):
        element_set = ElementSet(
            name=lines[index],
            line1=lines[index + 1],
            line2=lines[index + 2],
        )
        return element_set, 3

    return None, 1


def parse_tle_text(raw_text: str) -> List[ElementSet]:
    """
    Parse raw TLE text into element sets.

    Lines that do not belong to a valid group are skipped silently.
    Checksums and column layout are not validated here.

    Args:
        raw_text: Text containing 2-line and/or 3-line TLE groups

    Returns:
        Element sets in source order (possibly empty)
    """
    lines = _normalize_lines(raw_text)
    element_sets: List[ElementSet] = []
    skipped = 0

    index = 0
    while index < len(lines):
        element_set, consumed = _match_group(lines, index, len(element_sets))
        if element_set is None:
            skipped += 1
        else:
            element_sets.append(element_set)
        index += consumed

    if skipped:
        logger.debug(f"Skipped {skipped} line(s) not belonging to a TLE group")
    return element_sets


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def load_tle_text(source: Union[str, Path], timeout: float = 30.0) -> str:
    """
    Read raw TLE text from a file path or http(s) URL.

    Args:
        source: Local path or URL
        timeout: HTTP timeout in seconds

    Returns:
        The raw text

    Raises:
        TLESourceError: If the source is missing or unreadable
    """
    source_str = str(source)

    if _is_url(source_str):
        logger.info(f"Fetching TLE data from {source_str}")
        try:
            response = requests.get(source_str, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise TLESourceError(f"Failed to load {source_str}: {e}") from e
        return response.text

    tle_path = Path(source_str)
    if not tle_path.is_file():
        raise TLESourceError(f"Failed to load {source_str}: file not found")

    try:
        return tle_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise TLESourceError(f"Failed to load {source_str}: {e}") from e


def load_element_sets(source: Union[str, Path]) -> List[ElementSet]:
    """
    Load and parse element sets from a TLE source.

    An empty result is logged but is not an error; only an unreadable
    source raises.
    """
    element_sets = parse_tle_text(load_tle_text(source))
    if element_sets:
        logger.info(f"Loaded {len(element_sets)} element set(s) from {source}")
    else:
        logger.warning(f"No valid TLEs found in {source}")
    return element_sets
