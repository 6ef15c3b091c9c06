"""Single-endpoint upstream adapters: geocoding, weather and Wikipedia."""

import logging
from dataclasses import dataclass
from urllib.parse import quote

import httpx

import config
from errors import NotFoundError, UpstreamTransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedPlace:
    """A geocoded city. Every downstream lookup uses this one (lat, lon)."""
    query_name: str
    display_name: str
    lat: float
    lon: float

    @property
    def short_name(self) -> str:
        """Leading segment of the display name, e.g. "Delhi" for "Delhi, India"."""
        return self.display_name.split(",")[0].strip()


async def safe_fetch(client: httpx.AsyncClient, url: str, params: dict | None = None):
    """GET ``url`` and decode JSON, raising UpstreamTransportError on any failure."""
    try:
        resp = await client.get(url, params=params)
    except httpx.HTTPError as exc:
        raise UpstreamTransportError(f"Fetch failed ({url}): {exc}") from exc
    if not resp.is_success:
        raise UpstreamTransportError(f"Fetch failed ({resp.status_code}): {resp.text}")
    try:
        return resp.json()
    except ValueError as exc:
        raise UpstreamTransportError(f"Fetch failed ({url}): invalid JSON") from exc


def expect_object(payload, source: str) -> dict:
    if not isinstance(payload, dict):
        raise UpstreamTransportError(f"Unexpected {source} response: {type(payload).__name__}")
    return payload


async def geocode(client: httpx.AsyncClient, city: str) -> ResolvedPlace:
    params = {
        "format": "json",
        "q": city,
        "countrycodes": config.COUNTRY_CODES,
        "limit": 1,
    }
    results = await safe_fetch(client, config.NOMINATIM_SEARCH_URL, params)
    if not results:
        raise NotFoundError("City not found")

    try:
        first = results[0]
        place = ResolvedPlace(
            query_name=city,
            display_name=first["display_name"],
            lat=float(first["lat"]),
            lon=float(first["lon"]),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise UpstreamTransportError(f"Unexpected geocoder response: {exc}") from exc

    logger.info("Fetching data for %s (%s, %s)", place.display_name, place.lat, place.lon)
    return place


async def fetch_weather(client: httpx.AsyncClient, place: ResolvedPlace) -> dict:
    """Current conditions plus the daily forecast, in the location's timezone."""
    params = {
        "latitude": place.lat,
        "longitude": place.lon,
        "current_weather": "true",
        "daily": "temperature_2m_max,temperature_2m_min,precipitation_sum",
        "timezone": "auto",
    }
    weather = expect_object(await safe_fetch(client, config.OPEN_METEO_FORECAST_URL, params), "weather")
    logger.info("Weather data fetched")
    return weather


async def fetch_wikipedia(client: httpx.AsyncClient, city: str) -> dict:
    url = f"{config.WIKIPEDIA_SUMMARY_URL}/{quote(city, safe='')}"
    summary = expect_object(await safe_fetch(client, url), "Wikipedia")
    logger.info("Wikipedia data fetched")
    return summary
