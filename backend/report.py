"""Assemble the city report from every data source.

The city is geocoded once; the resulting coordinates feed every other
source, and those sources are fetched concurrently. A failing section
either aborts the request (the default for everything except air quality)
or, if listed in config.DEGRADABLE_SECTIONS, is replaced by an empty
placeholder and marked "failed" in the ``sections`` manifest.
"""

import asyncio
import logging
from pathlib import Path

import httpx

import config
from air_quality import fetch_air_quality, no_data_reading
from dataset import lookup_location_stats
from errors import DeadlineExceededError, MissingParameterError
from sources import fetch_weather, fetch_wikipedia, geocode
from tally import empty_infrastructure, empty_water_bodies, fetch_infrastructure, fetch_water_bodies

logger = logging.getLogger(__name__)


def _placeholder(section: str):
    if section == "airQuality":
        return {"currentAQI": no_data_reading(), "history": []}
    if section == "infrastructure":
        return empty_infrastructure()
    if section == "waterBodies":
        return empty_water_bodies()
    return None


async def _collect_report(
    client: httpx.AsyncClient,
    city: str,
    dataset_path: str | Path,
    degradable: set[str],
) -> dict:
    place = await geocode(client, city)
    lat, lon = place.lat, place.lon

    fetchers = {
        "stats": lookup_location_stats(place.short_name, dataset_path),
        "weather": fetch_weather(client, place),
        "airQuality": fetch_air_quality(client, lat, lon),
        "infrastructure": fetch_infrastructure(client, lat, lon),
        "waterBodies": fetch_water_bodies(client, lat, lon),
        "wikipedia": fetch_wikipedia(client, place.query_name),
    }
    results = dict(zip(fetchers, await asyncio.gather(*fetchers.values(), return_exceptions=True)))

    sections: dict[str, str] = {}
    for section in config.SECTIONS:
        result = results[section]
        if not isinstance(result, Exception):
            sections[section] = "ok"
            continue
        if section not in degradable:
            logger.error("Section %s failed for %s: %s", section, city, result)
            raise result
        logger.warning("Section %s degraded for %s: %s", section, city, result)
        results[section] = _placeholder(section)
        sections[section] = "failed"

    stats = results["stats"]
    return {
        "city": {
            "name": city,
            "displayName": place.display_name,
            "lat": lat,
            "lon": lon,
        },
        "population": stats.population if stats else None,
        "area": stats.area if stats else None,
        "weather": results["weather"],
        "airQuality": results["airQuality"],
        "infrastructure": results["infrastructure"],
        "waterBodies": results["waterBodies"],
        "wikipedia": results["wikipedia"],
        "sections": sections,
    }


async def build_report(
    client: httpx.AsyncClient,
    city: str | None,
    dataset_path: str | Path | None = None,
    degradable: set[str] | None = None,
    deadline_s: float | None = None,
) -> dict:
    """Build the full report for ``city``.

    Raises MissingParameterError before any upstream call when the city is
    blank, DeadlineExceededError when the whole report overruns the deadline,
    and otherwise the error of the first non-degradable section that failed.
    """
    city = (city or "").strip()
    if not city:
        raise MissingParameterError("City is required")

    dataset_path = dataset_path or config.DATASET_PATH
    degradable = config.DEGRADABLE_SECTIONS if degradable is None else degradable
    if deadline_s is None:
        deadline_s = config.REQUEST_DEADLINE_S

    try:
        return await asyncio.wait_for(
            _collect_report(client, city, dataset_path, degradable),
            timeout=deadline_s,
        )
    except asyncio.TimeoutError as exc:
        raise DeadlineExceededError(f"Timed out after {deadline_s:.0f}s fetching data for {city}") from exc
