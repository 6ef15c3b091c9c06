"""Air-quality section: current AQI from WAQI plus hourly PM2.5 from Open-Meteo.

Neither provider is allowed to fail the report. Any error is logged and the
sub-section falls back to a well-formed "no data" value.
"""

import asyncio
import logging
from enum import Enum

import httpx

import config

logger = logging.getLogger(__name__)

POLLUTANTS = ["pm25", "pm10", "no2", "so2", "o3", "co"]


class AQICategory(str, Enum):
    GOOD = "Good"
    MODERATE = "Moderate"
    UNHEALTHY_FOR_SENSITIVE = "Unhealthy for Sensitive Groups"
    UNHEALTHY = "Unhealthy"
    VERY_UNHEALTHY = "Very Unhealthy"
    HAZARDOUS = "Hazardous"
    NO_DATA = "No data"


# Upper bounds (inclusive), in increasing severity.
AQI_THRESHOLDS: list[tuple[float, AQICategory]] = [
    (50, AQICategory.GOOD),
    (100, AQICategory.MODERATE),
    (150, AQICategory.UNHEALTHY_FOR_SENSITIVE),
    (200, AQICategory.UNHEALTHY),
    (300, AQICategory.VERY_UNHEALTHY),
]


def categorize_aqi(aqi: float | None) -> AQICategory:
    if aqi is None:
        return AQICategory.NO_DATA
    for upper, category in AQI_THRESHOLDS:
        if aqi <= upper:
            return category
    return AQICategory.HAZARDOUS


def _as_number(value) -> float | None:
    # WAQI reports "-" when a station has no reading
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def no_data_reading() -> dict:
    return {
        "aqi": None,
        "category": AQICategory.NO_DATA.value,
        "pollutants": {},
        "dominantPollutant": None,
        "time": None,
    }


async def fetch_current_aqi(client: httpx.AsyncClient, lat: float, lon: float) -> dict:
    if not config.WAQI_TOKEN:
        logger.warning("WAQI: no token configured, skipping current AQI")
        return no_data_reading()

    url = f"{config.WAQI_FEED_URL}/geo:{lat};{lon}/"
    try:
        resp = await client.get(url, params={"token": config.WAQI_TOKEN})
        data = resp.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.error("WAQI fetch error: %s", exc)
        return no_data_reading()

    if not isinstance(data, dict) or data.get("status") != "ok" or not isinstance(data.get("data"), dict):
        logger.warning("WAQI: no data for coordinates (%s, %s)", lat, lon)
        return no_data_reading()

    station = data["data"]
    iaqi = station.get("iaqi") or {}
    aqi = _as_number(station.get("aqi"))
    return {
        "aqi": aqi,
        "category": categorize_aqi(aqi).value,
        "pollutants": {p: _as_number((iaqi.get(p) or {}).get("v")) for p in POLLUTANTS},
        "dominantPollutant": station.get("dominentpol") or None,
        "time": (station.get("time") or {}).get("s") or None,
    }


async def fetch_aqi_history(client: httpx.AsyncClient, lat: float, lon: float) -> list[dict]:
    """Hourly PM2.5 samples, each tagged with a category.

    The category is computed on the raw PM2.5 concentration (ug/m3), not on a
    converted AQI value; the dashboard's history chart is built on that.
    """
    params = {"latitude": lat, "longitude": lon, "hourly": "pm2_5"}
    try:
        resp = await client.get(config.OPEN_METEO_AIR_QUALITY_URL, params=params)
        data = resp.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.error("AQI history fetch error: %s", exc)
        return []

    hourly = data.get("hourly") if isinstance(data, dict) else None
    if not hourly or not hourly.get("pm2_5"):
        return []

    times = hourly.get("time") or []
    history = []
    for idx, pm25 in enumerate(hourly["pm2_5"]):
        pm25 = _as_number(pm25)
        history.append({
            "timestamp": times[idx] if idx < len(times) else None,
            "pm25": pm25,
            "aqiCategory": categorize_aqi(pm25).value,
        })
    return history


async def fetch_air_quality(client: httpx.AsyncClient, lat: float, lon: float) -> dict:
    current, history = await asyncio.gather(
        fetch_current_aqi(client, lat, lon),
        fetch_aqi_history(client, lat, lon),
        return_exceptions=True,
    )
    # Neither sub-call may take the other down with it
    if isinstance(current, Exception):
        logger.error("Current AQI failed: %r", current)
        current = no_data_reading()
    if isinstance(history, Exception):
        logger.error("AQI history failed: %r", history)
        history = []
    logger.info("Air quality fetched: AQI %s, %d history points", current["aqi"], len(history))
    return {"currentAQI": current, "history": history}
