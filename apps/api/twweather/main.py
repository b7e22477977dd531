from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from twweather.cities import CityDirectory
from twweather.config import Settings
from twweather.cwa import CwaClient
from twweather.errors import WeatherError
from twweather.models import DiscoveryResponse, ErrorResponse, HealthResponse, WeatherResponse
from twweather.service import WeatherQueryHandler

APP_NAME = "Taiwan Weather API"
APP_VERSION = "0.1.0"

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """Build the API. ``http_client`` replaces the per-request upstream client (tests)."""
    settings = settings or Settings.from_env()
    directory = CityDirectory.for_set(settings.city_set)
    client = CwaClient(settings.cwa_base_url, settings.cwa_api_key, settings.timeout_seconds, http_client)

    app = FastAPI(title=APP_NAME, version=APP_VERSION)
    app.state.settings = settings
    app.state.directory = directory
    app.state.handler = WeatherQueryHandler(settings, directory, client)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---------- Error handlers ----------
    @app.exception_handler(WeatherError)
    async def weather_error_handler(request: Request, exc: WeatherError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            content = {"error": "找不到此路徑", "message": "請確認網址是否正確"}
        else:
            content = {"error": "請求錯誤", "message": str(exc.detail)}
        return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "伺服器錯誤", "message": str(exc)})

    # ---------- Endpoints ----------
    @app.get("/", response_model=DiscoveryResponse)
    def index(request: Request):
        base_url = f"{str(request.base_url).rstrip('/')}/api/weather/"
        codes = directory.codes()
        example_code = "taipei" if "taipei" in directory else codes[0]
        return DiscoveryResponse(
            message="歡迎使用全臺天氣預報 API",
            usage="請在網址後方加上城市代碼",
            example=f"{base_url}{example_code}",
            available_cities={code: f"{base_url}{code}" for code in codes},
        )

    @app.get("/api/health", response_model=HealthResponse)
    def health():
        now = datetime.now(timezone.utc)
        return HealthResponse(status="OK", timestamp=now.isoformat(timespec="milliseconds").replace("+00:00", "Z"))

    @app.get(
        "/api/weather/{city}",
        response_model=WeatherResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    async def city_weather(city: str, request: Request):
        result = await request.app.state.handler.handle(city)
        return WeatherResponse(data=result)

    return app


def run() -> None:
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app(settings)
    logger.info("%s starting on port %s, serving %d cities", APP_NAME, settings.port, len(app.state.directory))
    if not settings.cwa_api_key:
        logger.warning("CWA_API_KEY is not set; weather queries will fail until it is configured")
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
