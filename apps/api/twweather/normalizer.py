from __future__ import annotations

from typing import Any, Dict, List, Mapping, Tuple

from twweather.errors import MalformedUpstreamData
from twweather.models import ForecastInterval, WeatherResult

# CWA element tag -> (ForecastInterval field, suffix appended to the value)
ELEMENT_FIELDS: Mapping[str, Tuple[str, str]] = {
    "Wx": ("weather", ""),
    "PoP": ("rain", "%"),
    "MinT": ("min_temp", "°C"),
    "MaxT": ("max_temp", "°C"),
    "CI": ("comfort", ""),
    "WS": ("wind_speed", ""),
}


def _elements(location: Any) -> List[Dict[str, Any]]:
    if not isinstance(location, dict):
        raise MalformedUpstreamData("Location record is not an object")
    elements = location.get("weatherElement")
    if not isinstance(elements, list) or not elements:
        raise MalformedUpstreamData(
            f"Location {location.get('locationName')!r} has no weather elements"
        )
    for el in elements:
        if not isinstance(el, dict) or not isinstance(el.get("time"), list):
            raise MalformedUpstreamData("Weather element is missing its time series")
    return elements


def _parameter_name(entry: Any, tag: str, index: int) -> str:
    try:
        value = entry["parameter"]["parameterName"]
    except (KeyError, TypeError):
        raise MalformedUpstreamData(f"Element {tag} has no parameter at interval {index}")
    if value is None:
        raise MalformedUpstreamData(f"Element {tag} has a null parameter at interval {index}")
    return str(value)


def normalize(location: Any) -> List[ForecastInterval]:
    """Flatten one CWA location record into per-interval forecasts.

    Every element's time series must have the same length as the first one;
    interval ``i`` takes its time bounds from the first element and its values
    from the ``i``-th entry of every recognised element. Unknown element tags
    are skipped. Either the whole list is produced or MalformedUpstreamData is
    raised.
    """
    elements = _elements(location)
    n = len(elements[0]["time"])
    for el in elements[1:]:
        if len(el["time"]) != n:
            raise MalformedUpstreamData(
                f"Element {el.get('elementName')!r} has {len(el['time'])} intervals, expected {n}"
            )

    forecasts: List[ForecastInterval] = []
    for i in range(n):
        first = elements[0]["time"][i]
        if not isinstance(first, dict) or "startTime" not in first or "endTime" not in first:
            raise MalformedUpstreamData(f"Interval {i} has no start/end time")

        fields: Dict[str, str] = {}
        for el in elements:
            tag = el.get("elementName")
            target = ELEMENT_FIELDS.get(tag) if isinstance(tag, str) else None
            if target is None:
                continue
            field, suffix = target
            fields[field] = _parameter_name(el["time"][i], tag, i) + suffix

        forecasts.append(ForecastInterval(
            start_time=str(first["startTime"]),
            end_time=str(first["endTime"]),
            **fields,
        ))
    return forecasts


def build_result(location: Any, city_code: str, description: str) -> WeatherResult:
    forecasts = normalize(location)
    return WeatherResult(
        city=str(location.get("locationName") or ""),
        city_code=city_code,
        update_time=description,
        forecasts=forecasts,
    )
