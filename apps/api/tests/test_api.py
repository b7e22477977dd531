from dataclasses import replace

import httpx
from fastapi.testclient import TestClient

from conftest import CwaStub, json_response, make_payload
from twweather.main import create_app


def _client(settings, stub, **kwargs):
    return TestClient(create_app(settings, stub.client()), **kwargs)


def test_weather_success(settings, cwa_ok):
    resp = _client(settings, cwa_ok).get("/api/weather/taipei")
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    data = body["data"]
    assert data["city"] == "臺北市"
    assert data["cityCode"] == "taipei"
    assert data["updateTime"] == "三十六小時天氣預報"
    assert len(data["forecasts"]) == 3
    first = data["forecasts"][0]
    assert first["rain"] == "10%"
    assert first["minTemp"] == "20°C"
    assert first["maxTemp"] == "27°C"
    assert first["windSpeed"] == ""
    assert cwa_ok.call_count == 1


def test_unknown_city_is_400_with_examples(settings, cwa_ok):
    resp = _client(settings, cwa_ok).get("/api/weather/atlantis")
    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["code"] == "invalid_city_code"
    assert body["error"] == "參數錯誤"
    assert "atlantis" in body["message"]
    assert "taipei" in body["message"]
    assert "hualien" in body["availableCities"]
    assert cwa_ok.call_count == 0


def test_missing_key_is_500_without_outbound_call(settings, cwa_ok):
    resp = _client(replace(settings, cwa_api_key=None), cwa_ok).get("/api/weather/taipei")
    assert resp.status_code == 500
    body = resp.json()
    assert body["code"] == "server_misconfigured"
    assert "CWA_API_KEY" in body["message"]
    assert cwa_ok.call_count == 0


def test_no_locations_is_404_naming_city(settings):
    stub = CwaStub(lambda r: json_response(200, make_payload([])))
    resp = _client(settings, stub).get("/api/weather/hualien")
    assert resp.status_code == 404
    body = resp.json()
    assert body["code"] == "no_data_for_location"
    assert "花蓮縣" in body["message"]


def test_upstream_error_status_passes_through(settings):
    stub = CwaStub(lambda r: json_response(401, {"message": "Invalid Authorization"}))
    resp = _client(settings, stub).get("/api/weather/taipei")
    assert resp.status_code == 401
    body = resp.json()
    assert body["error"] == "CWA API 錯誤"
    assert body["message"] == "Invalid Authorization"


def test_unreachable_upstream_is_500(settings):
    def boom(request):
        raise httpx.ConnectError("no route to host", request=request)

    resp = _client(settings, CwaStub(boom)).get("/api/weather/taipei")
    assert resp.status_code == 500
    assert resp.json()["code"] == "upstream_unreachable"


def test_malformed_upstream_is_500(settings):
    stub = CwaStub(lambda r: json_response(200, {"records": {"location": [{"locationName": "臺北市"}]}}))
    resp = _client(settings, stub).get("/api/weather/taipei")
    assert resp.status_code == 500
    assert resp.json()["code"] == "malformed_upstream"


def test_unexpected_error_is_generic_500(settings, cwa_ok, monkeypatch):
    app = create_app(settings, cwa_ok.client())

    async def explode(city_code):
        raise RuntimeError("kaboom")

    monkeypatch.setattr(app.state.handler, "handle", explode)
    resp = TestClient(app, raise_server_exceptions=False).get("/api/weather/taipei")
    assert resp.status_code == 500
    assert resp.json() == {"error": "伺服器錯誤", "message": "kaboom"}


def test_unknown_path_is_404(settings, cwa_ok):
    resp = _client(settings, cwa_ok).get("/api/nowhere")
    assert resp.status_code == 404
    assert resp.json() == {"error": "找不到此路徑", "message": "請確認網址是否正確"}


def test_discovery_lists_every_code(settings, cwa_ok):
    resp = _client(settings, cwa_ok).get("/")
    assert resp.status_code == 200
    body = resp.json()
    assert body["example"] == "http://testserver/api/weather/taipei"
    cities = body["available_cities"]
    assert len(cities) == 22
    assert cities["penghu"] == "http://testserver/api/weather/penghu"


def test_discovery_follows_city_set(settings, cwa_ok):
    resp = _client(replace(settings, city_set="municipalities"), cwa_ok).get("/")
    assert sorted(resp.json()["available_cities"]) == sorted(
        ["taipei", "new_taipei", "taoyuan", "taichung", "tainan", "kaohsiung"]
    )


def test_health(settings, cwa_ok):
    resp = _client(settings, cwa_ok).get("/api/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "OK"
    assert body["timestamp"].endswith("Z")


def test_cors_allows_any_origin_by_default(settings, cwa_ok):
    resp = _client(settings, cwa_ok).get("/api/health", headers={"Origin": "https://example.org"})
    assert resp.headers["access-control-allow-origin"] == "*"
