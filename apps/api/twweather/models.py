from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# Wire format is camelCase; attributes stay snake_case.
_WIRE = ConfigDict(extra="forbid", alias_generator=to_camel, populate_by_name=True)


class ForecastInterval(BaseModel):
    model_config = _WIRE
    start_time: str
    end_time: str
    weather: str = ""
    rain: str = ""
    min_temp: str = ""
    max_temp: str = ""
    comfort: str = ""
    wind_speed: str = ""


class WeatherResult(BaseModel):
    model_config = _WIRE
    city: str
    city_code: str
    update_time: str
    forecasts: List[ForecastInterval]


class WeatherResponse(BaseModel):
    model_config = _WIRE
    success: bool = True
    data: WeatherResult


class ErrorResponse(BaseModel):
    model_config = ConfigDict(extra="allow")
    success: bool = False
    error: str
    code: Optional[str] = None
    message: str


class HealthResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")
    status: str
    timestamp: str


class DiscoveryResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")
    message: str
    usage: str
    example: str
    available_cities: Dict[str, str]
