"""Tests for AQI categorisation and the degrading air-quality section."""

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import httpx
import pytest

import air_quality
import config
from air_quality import AQI_THRESHOLDS, AQICategory, categorize_aqi, fetch_air_quality
from upstream import AQ_HISTORY, WAQI_OK, json_response

SEVERITY = [
    AQICategory.GOOD,
    AQICategory.MODERATE,
    AQICategory.UNHEALTHY_FOR_SENSITIVE,
    AQICategory.UNHEALTHY,
    AQICategory.VERY_UNHEALTHY,
    AQICategory.HAZARDOUS,
]


@pytest.fixture(autouse=True)
def waqi_token(monkeypatch):
    monkeypatch.setattr(config, "WAQI_TOKEN", "test-token")


def _run(handler):
    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await fetch_air_quality(client, 28.6139, 77.209)
    return asyncio.run(go())


@pytest.mark.parametrize("value,expected", [
    (0, AQICategory.GOOD),
    (50, AQICategory.GOOD),
    (50.5, AQICategory.MODERATE),
    (100, AQICategory.MODERATE),
    (101, AQICategory.UNHEALTHY_FOR_SENSITIVE),
    (150, AQICategory.UNHEALTHY_FOR_SENSITIVE),
    (151, AQICategory.UNHEALTHY),
    (200, AQICategory.UNHEALTHY),
    (201, AQICategory.VERY_UNHEALTHY),
    (300, AQICategory.VERY_UNHEALTHY),
    (301, AQICategory.HAZARDOUS),
    (999, AQICategory.HAZARDOUS),
])
def test_category_boundaries(value, expected):
    assert categorize_aqi(value) is expected


def test_category_none_is_no_data():
    assert categorize_aqi(None) is AQICategory.NO_DATA


def test_category_is_monotonic():
    ranks = [SEVERITY.index(categorize_aqi(v)) for v in range(0, 500)]
    assert ranks == sorted(ranks)
    assert [upper for upper, _ in AQI_THRESHOLDS] == [50, 100, 150, 200, 300]


def test_both_providers_ok():
    def handler(request):
        if request.url.host == "api.waqi.info":
            assert request.url.params["token"] == "test-token"
            assert "geo:28.6139;77.209" in request.url.path
            return json_response(WAQI_OK)
        return json_response(AQ_HISTORY)

    section = _run(handler)
    current = section["currentAQI"]
    assert current["aqi"] == 168
    assert current["category"] == "Unhealthy"
    assert current["dominantPollutant"] == "pm25"
    assert current["pollutants"]["pm10"] == 92
    assert current["pollutants"]["so2"] is None
    assert current["time"] == "2026-10-19 10:00:00"

    history = section["history"]
    assert [p["timestamp"] for p in history] == AQ_HISTORY["hourly"]["time"]
    assert [p["aqiCategory"] for p in history] == ["Good", "Moderate", "No data"]


def test_current_aqi_transport_error_degrades():
    def handler(request):
        if request.url.host == "api.waqi.info":
            raise httpx.ConnectError("boom", request=request)
        return json_response(AQ_HISTORY)

    section = _run(handler)
    assert section["currentAQI"]["aqi"] is None
    assert section["currentAQI"]["category"] == "No data"
    assert section["currentAQI"]["pollutants"] == {}
    # history unaffected
    assert len(section["history"]) == 3


def test_current_aqi_error_status_degrades():
    def handler(request):
        if request.url.host == "api.waqi.info":
            return json_response({"status": "error", "data": "Invalid key"})
        return json_response(AQ_HISTORY)

    assert _run(handler)["currentAQI"]["category"] == "No data"


def test_current_aqi_dash_is_no_data():
    payload = {"status": "ok", "data": {"aqi": "-", "iaqi": {}, "time": {}}}

    def handler(request):
        if request.url.host == "api.waqi.info":
            return json_response(payload)
        return json_response(AQ_HISTORY)

    current = _run(handler)["currentAQI"]
    assert current["aqi"] is None
    assert current["category"] == "No data"


def test_history_failure_degrades_to_empty_list():
    def handler(request):
        if request.url.host == "api.waqi.info":
            return json_response(WAQI_OK)
        return httpx.Response(500, text="oops")

    section = _run(handler)
    assert section["history"] == []
    assert section["currentAQI"]["aqi"] == 168


def test_both_failing_still_well_formed():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    section = _run(handler)
    assert section == {"currentAQI": air_quality.no_data_reading(), "history": []}


def test_missing_token_skips_waqi(monkeypatch):
    monkeypatch.setattr(config, "WAQI_TOKEN", "")
    hosts = []

    def handler(request):
        hosts.append(request.url.host)
        return json_response(AQ_HISTORY)

    section = _run(handler)
    assert hosts == ["air-quality-api.open-meteo.com"]
    assert section["currentAQI"]["category"] == "No data"
