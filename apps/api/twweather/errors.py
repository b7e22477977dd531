from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

UPSTREAM_FALLBACK_MESSAGE = "無法取得天氣資料"


class WeatherError(Exception):
    """Base class for failures that end a weather query.

    Each subclass fixes the HTTP status, a human-facing category label and a
    stable machine-readable code. The HTTP layer renders ``to_body()``.
    """

    status_code: int = 500
    label: str = "伺服器錯誤"
    code: str = "server_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_body(self) -> Dict[str, Any]:
        return {
            "success": False,
            "error": self.label,
            "code": self.code,
            "message": self.message,
        }


class InvalidCityCode(WeatherError):
    status_code = 400
    label = "參數錯誤"
    code = "invalid_city_code"

    def __init__(self, city_code: str, valid_codes: Sequence[str]):
        self.city_code = city_code
        self.valid_codes = tuple(valid_codes)
        examples = ", ".join(self.valid_codes[:3])
        super().__init__(f"不支援 '{city_code}'。請使用正確的城市代碼 (例如: {examples}...)")

    def to_body(self) -> Dict[str, Any]:
        body = super().to_body()
        body["availableCities"] = list(self.valid_codes)
        return body


class ServerMisconfigured(WeatherError):
    status_code = 500
    label = "伺服器設定錯誤"
    code = "server_misconfigured"


class UpstreamUnreachable(WeatherError):
    status_code = 500
    label = "伺服器錯誤"
    code = "upstream_unreachable"


class UpstreamError(WeatherError):
    label = "CWA API 錯誤"
    code = "upstream_error"

    def __init__(self, status_code: int, message: Optional[str] = None):
        # Upstream status is passed through as our own.
        self.status_code = status_code
        super().__init__(message or UPSTREAM_FALLBACK_MESSAGE)


class NoDataForLocation(WeatherError):
    status_code = 404
    label = "查無資料"
    code = "no_data_for_location"

    def __init__(self, location_name: str):
        self.location_name = location_name
        super().__init__(f"無法取得 {location_name} 的天氣資料，請確認 CWA API 來源是否正常。")


class MalformedUpstreamData(WeatherError):
    status_code = 500
    label = "資料格式錯誤"
    code = "malformed_upstream"
