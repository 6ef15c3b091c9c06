"""Population / area lookup against the local cities CSV.

The file is scanned row by row and the scan stops at the first row whose
City, District or State matches the place name. Only the matching row is
ever parsed, so the lookup cost depends on where the match sits in the
file, never on the file size.
"""

import asyncio
import csv
import logging
from dataclasses import dataclass
from pathlib import Path

from errors import NoLocationDataError

logger = logging.getLogger(__name__)

# Checked in this order; the first field that matches wins.
MATCH_FIELDS = [("city", "City"), ("district", "District"), ("state", "State")]


@dataclass(frozen=True)
class LocationStats:
    population: int | float
    area: int | float
    matched_on: str
    name: str


def _to_number(raw: str | None) -> int | float:
    """Parse a numeric CSV cell, falling back to 0 for blanks and junk."""
    if raw is None:
        return 0
    try:
        value = float(raw.strip())
    except ValueError:
        return 0
    if value != value:  # NaN
        return 0
    return int(value) if value.is_integer() else value


def _match_row(row: dict, query: str) -> tuple[str, str] | None:
    for matched_on, column in MATCH_FIELDS:
        raw = row.get(column)
        if raw is not None and raw.strip().lower() == query:
            return matched_on, raw
    return None


def find_location_stats(name: str, path: str | Path) -> LocationStats:
    """Return stats for the first row matching ``name`` (case-insensitive)."""
    query = name.strip().lower()
    logger.info("Searching location stats for: %s", query)

    # strict=True makes a malformed row raise when (and only when) it is read
    try:
        with open(path, newline="", encoding="utf-8-sig") as fh:
            for row in csv.DictReader(fh, strict=True):
                match = _match_row(row, query)
                if match is None:
                    continue
                matched_on, matched_name = match
                return LocationStats(
                    population=_to_number(row.get("Population")),
                    area=_to_number(row.get("Area")),
                    matched_on=matched_on,
                    name=matched_name,
                )
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        logger.error("Location dataset read failed (%s): %s", path, exc)
        raise NoLocationDataError(f"Could not read location dataset: {exc}") from exc

    raise NoLocationDataError("No matching state, district, or city found")


async def lookup_location_stats(name: str, path: str | Path) -> LocationStats:
    """Async wrapper: the scan is blocking file I/O, so run it off the event loop."""
    return await asyncio.to_thread(find_location_stats, name, path)
