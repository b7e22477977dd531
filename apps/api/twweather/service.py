from __future__ import annotations

import logging

from twweather.cities import CityDirectory
from twweather.config import Settings
from twweather.cwa import CwaClient, extract_records
from twweather.errors import InvalidCityCode, NoDataForLocation, ServerMisconfigured
from twweather.models import WeatherResult
from twweather.normalizer import build_result

logger = logging.getLogger(__name__)


class WeatherQueryHandler:
    """Runs one city weather query: validate, fetch, normalize.

    Raises a ``WeatherError`` subclass on any failure; there are no partial
    results and no retries.
    """

    def __init__(self, settings: Settings, directory: CityDirectory, client: CwaClient):
        self.settings = settings
        self.directory = directory
        self.client = client

    async def handle(self, city_code: str) -> WeatherResult:
        # Validating
        location_name = self.directory.resolve(city_code)
        if location_name is None:
            logger.info("Rejected unknown city code %r", city_code)
            raise InvalidCityCode(city_code, self.directory.codes())

        # Fetching; never call out without a credential
        if not self.settings.cwa_api_key:
            logger.error("CWA_API_KEY is not configured; refusing weather query for %s", city_code)
            raise ServerMisconfigured("請在 .env 檔案中設定 CWA_API_KEY")
        payload = await self.client.fetch_forecast(location_name)

        # Normalizing
        locations, description = extract_records(payload)
        if not locations:
            logger.warning("CWA returned no locations for %s (%s)", location_name, city_code)
            raise NoDataForLocation(location_name)

        result = build_result(locations[0], city_code, description)
        logger.info(
            "Weather query ok city_code=%s location=%s intervals=%d",
            city_code, location_name, len(result.forecasts),
        )
        return result
