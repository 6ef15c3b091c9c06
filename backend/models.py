"""Pydantic models for API responses.

Field names are the JSON keys of the /api response, hence camelCase.
"""

from typing import Any

from pydantic import BaseModel


class CityModel(BaseModel):
    name: str
    displayName: str
    lat: float
    lon: float


class AQIReading(BaseModel):
    aqi: int | float | None = None
    category: str
    pollutants: dict[str, float | None]
    dominantPollutant: str | None = None
    time: str | None = None


class AQIHistoryPoint(BaseModel):
    timestamp: str | None
    pm25: float | None
    aqiCategory: str


class AirQualitySection(BaseModel):
    currentAQI: AQIReading
    history: list[AQIHistoryPoint]


class InfrastructureNames(BaseModel):
    hospitals: list[str]
    schools: list[str]
    colleges: list[str]
    railwayStations: list[str]
    metroStations: list[str]


class InfrastructureSection(BaseModel):
    hospitals: int
    schools: int
    colleges: int
    railwayStations: int
    metroStations: int
    names: InfrastructureNames


class NamedCount(BaseModel):
    count: int
    names: list[str]


class WaterBodiesSection(BaseModel):
    rivers: NamedCount
    otherWaterBodies: NamedCount


class CityReport(BaseModel):
    city: CityModel
    population: int | float | None
    area: int | float | None
    weather: dict[str, Any] | None
    airQuality: AirQualitySection
    infrastructure: InfrastructureSection
    waterBodies: WaterBodiesSection
    wikipedia: dict[str, Any] | None
    sections: dict[str, str]


class ErrorResponse(BaseModel):
    error: str
