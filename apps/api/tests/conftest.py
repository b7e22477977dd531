import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from twweather.config import Settings


def make_element(name: str, values: List[str], times: Optional[List[tuple]] = None) -> Dict[str, Any]:
    times = times or [
        (f"2026-10-{19 + k} 06:00:00", f"2026-10-{19 + k} 18:00:00")
        for k in range(len(values))
    ]
    return {
        "elementName": name,
        "time": [
            {"startTime": start, "endTime": end, "parameter": {"parameterName": value}}
            for (start, end), value in zip(times, values)
        ],
    }


def make_location(name: str = "臺北市", n: int = 3) -> Dict[str, Any]:
    return {
        "locationName": name,
        "weatherElement": [
            make_element("Wx", ["多雲", "晴時多雲", "陰短暫雨"][:n] + ["多雲"] * max(0, n - 3)),
            make_element("PoP", [str(10 * (k + 1)) for k in range(n)]),
            make_element("MinT", [str(20 + k) for k in range(n)]),
            make_element("CI", ["舒適"] * n),
            make_element("MaxT", [str(27 + k) for k in range(n)]),
        ],
    }


def make_payload(locations: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "success": "true",
        "records": {
            "datasetDescription": "三十六小時天氣預報",
            "location": locations,
        },
    }


class CwaStub:
    """Stands in for the CWA API behind ``httpx.MockTransport`` and records calls."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self._handler = handler
        self.requests: List[httpx.Request] = []

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._handler(request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


def json_response(status: int, body: Any) -> httpx.Response:
    return httpx.Response(
        status,
        content=json.dumps(body, ensure_ascii=False).encode("utf-8"),
        headers={"Content-Type": "application/json"},
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(cwa_api_key="CWA-TEST-KEY", cwa_base_url="https://cwa.test/api", timeout_seconds=2.0)


@pytest.fixture
def cwa_ok() -> CwaStub:
    def handler(request: httpx.Request) -> httpx.Response:
        name = request.url.params.get("locationName")
        return json_response(200, make_payload([make_location(name, 3)]))

    return CwaStub(handler)
