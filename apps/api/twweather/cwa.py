from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from twweather.errors import MalformedUpstreamData, UpstreamError, UpstreamUnreachable

logger = logging.getLogger(__name__)

# 36-hour county/city forecast dataset
FORECAST_DATASET_PATH = "/v1/rest/datastore/F-C0032-001"
USER_AGENT = "twweather/0.1 (+https://opendata.cwa.gov.tw)"


def _upstream_message(resp: httpx.Response) -> Optional[str]:
    try:
        body = resp.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return None


class CwaClient:
    """Thin async client for the CWA open data forecast endpoint.

    Makes exactly one GET per ``fetch_forecast`` call. When no shared
    ``http_client`` is supplied, a short-lived one is opened per call.
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str],
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._http = http_client

    async def _get(self, url: str, params: Dict[str, str]) -> httpx.Response:
        headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
        if self._http is not None:
            return await self._http.get(url, params=params, headers=headers, timeout=self.timeout)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.get(url, params=params, headers=headers)

    async def fetch_forecast(self, location_name: str) -> Dict[str, Any]:
        url = f"{self.base_url}{FORECAST_DATASET_PATH}"
        params = {"Authorization": self.api_key or "", "locationName": location_name}
        try:
            resp = await self._get(url, params)
        except httpx.TimeoutException as e:
            logger.warning("CWA request for %s timed out after %.1fs: %s", location_name, self.timeout, e)
            raise UpstreamUnreachable("連線至 CWA API 逾時，請稍後再試")
        except httpx.TransportError as e:
            logger.warning("CWA request for %s failed: %s", location_name, e)
            raise UpstreamUnreachable("無法連線至 CWA API，請稍後再試")

        if not resp.is_success:
            message = _upstream_message(resp)
            logger.warning("CWA returned %s for %s: %s", resp.status_code, location_name, message)
            raise UpstreamError(resp.status_code, message)

        try:
            payload = resp.json()
        except ValueError:
            raise MalformedUpstreamData(f"CWA response is not JSON (status {resp.status_code})")
        if not isinstance(payload, dict):
            raise MalformedUpstreamData("CWA response is not a JSON object")
        return payload


def extract_records(payload: Dict[str, Any]) -> Tuple[List[Any], str]:
    """Return ``(records.location, records.datasetDescription)`` from a CWA payload."""
    records = payload.get("records")
    if not isinstance(records, dict):
        raise MalformedUpstreamData("CWA response has no records block")
    locations = records.get("location")
    if locations is None:
        locations = []
    if not isinstance(locations, list):
        raise MalformedUpstreamData("CWA records.location is not a list")
    description = records.get("datasetDescription") or ""
    return locations, str(description)
