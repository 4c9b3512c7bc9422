from datetime import datetime, timedelta, timezone
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from app import api, web
from app.main import create_app
from datastore.sample_store import MockSampleContainer
from models.records import Sample, format_timestamp
from services.aggregator import Aggregator, aggregate
from services.telemetry import TelemetryService


class UnavailableStore(MockSampleContainer):
    def query_range(self, device, start, end):
        raise ConnectionError("cosmos endpoint refused connection")

    def latest(self, device):
        raise ConnectionError("cosmos endpoint refused connection")


@pytest.fixture
def store() -> MockSampleContainer:
    return MockSampleContainer(name="test")


def _client_for(store: MockSampleContainer) -> Iterator[TestClient]:
    service = TelemetryService(store=store, aggregator=Aggregator())
    app = create_app()
    app.dependency_overrides[api.get_service] = lambda: service
    app.dependency_overrides[web.get_service] = lambda: service
    with TestClient(app) as client:
        yield client


@pytest.fixture
def api_client(store: MockSampleContainer) -> Iterator[TestClient]:
    yield from _client_for(store)


@pytest.fixture
def failing_client() -> Iterator[TestClient]:
    yield from _client_for(UnavailableStore(name="down"))


def _minutes_ago(minutes: float, **values) -> Sample:
    moment = datetime.now(timezone.utc) - timedelta(minutes=minutes)
    return Sample(device="d1", time=format_timestamp(moment), **values)


def test_hourly_total_matches_aggregate(api_client: TestClient, store) -> None:
    samples = [
        _minutes_ago(1, flow1=60, flow2=0, temp_c3=50, temp_c4=40),
        _minutes_ago(2, flow1=20, flow2=15, temp_c3=48.5, temp_c4=41.2),
        _minutes_ago(3, flow1=None, flow2=30, temp_c3=None, temp_c4=5),
    ]
    store.put_samples(samples)
    store.put_sample(_minutes_ago(90, flow1=999, temp_c3=99))

    response = api_client.get("/api/data/hourly-total/d1")

    assert response.status_code == 200
    assert response.json() == {"hourlyTotal": round(aggregate(samples), 2)}


def test_five_minutes_total_rounds_to_two_decimals(api_client: TestClient, store) -> None:
    store.put_sample(_minutes_ago(1, flow1=7, flow2=0, temp_c3=13, temp_c4=10))

    response = api_client.get("/api/data/five-minutes-total/d1")

    assert response.status_code == 200
    # 7 L/min over 3 K is 1.4651 kW.
    assert response.json() == {"fiveMinutesTotal": 1.47}


def test_calendar_totals(api_client: TestClient, store) -> None:
    now = datetime.now(timezone.utc)
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    today_sample = Sample(
        device="d1", time=format_timestamp(midnight), flow1=60, temp_c3=10
    )
    yesterday_sample = Sample(
        device="d1", time=format_timestamp(now - timedelta(days=1)), flow1=60, temp_c3=20
    )
    store.put_samples([today_sample, yesterday_sample])

    assert api_client.get("/api/data/today-total/d1").json() == {"todayTotal": 41.86}
    assert api_client.get("/api/data/daily-total/d1").json() == {"dailyTotal": 41.86}
    assert api_client.get("/api/data/yesterday-total/d1").json() == {"yesterdayTotal": 83.72}


def test_monthly_total(api_client: TestClient, store) -> None:
    store.put_samples(
        [
            Sample(device="d1", time="2024-02-01T00:00:00.000Z", flow1=60, temp_c3=10),
            Sample(device="d1", time="2024-02-29T23:59:59.999Z", flow1=60, temp_c3=10),
            Sample(device="d1", time="2024-03-01T00:00:00.000Z", flow1=60, temp_c3=10),
        ]
    )

    response = api_client.get("/api/data/monthly-total/d1/2024/2")

    assert response.status_code == 200
    assert response.json() == {"monthlyTotal": 83.72}


def test_monthly_total_rejects_invalid_month(api_client: TestClient) -> None:
    response = api_client.get("/api/data/monthly-total/d1/2024/13")

    assert response.status_code == 422
    assert "Month" in response.json()["error"]


def test_monthly_total_rejects_non_numeric_path(api_client: TestClient) -> None:
    response = api_client.get("/api/data/monthly-total/d1/2024/feb")

    assert response.status_code == 422
    assert set(response.json()) == {"error"}


def test_latest_sample_is_coalesced(api_client: TestClient, store) -> None:
    store.put_sample(_minutes_ago(5, flow1=10, flow2=10, temp_c3=30, temp_c4=20))
    latest = _minutes_ago(1, flow1=12.5, temp_c3=41)
    store.put_sample(latest)

    response = api_client.get("/api/data/d1")

    assert response.status_code == 200
    assert response.json() == {
        "device": "d1",
        "time": latest.time,
        "Flow1": 12.5,
        "Flow2": 0,
        "tempC1": 0,
        "tempC2": 0,
        "tempC3": 41,
        "tempC4": 0,
    }


def test_latest_sample_missing_device_returns_404(api_client: TestClient) -> None:
    response = api_client.get("/api/data/nobody")

    assert response.status_code == 404
    assert response.json() == {"error": "No data found for deviceId: nobody"}


def test_totals_for_unknown_device_are_zero(api_client: TestClient) -> None:
    response = api_client.get("/api/data/hourly-total/nobody")

    assert response.status_code == 200
    assert response.json() == {"hourlyTotal": 0}


def test_series_returns_samples_oldest_first(api_client: TestClient, store) -> None:
    store.put_sample(_minutes_ago(1, temp_c1=21))
    store.put_sample(_minutes_ago(20, temp_c1=19))
    store.put_sample(_minutes_ago(120, temp_c1=15))

    response = api_client.get("/api/data/series/d1", params={"minutes": 30})

    assert response.status_code == 200
    assert [item["tempC1"] for item in response.json()["samples"]] == [19, 21]


def test_store_failure_returns_generic_500(failing_client: TestClient) -> None:
    for path in ("/api/data/d1", "/api/data/hourly-total/d1"):
        response = failing_client.get(path)

        assert response.status_code == 500
        body = response.json()
        assert set(body) == {"error"}
        assert "cosmos" not in body["error"]


def test_non_numeric_reading_returns_500(api_client: TestClient, store) -> None:
    store.put_sample(_minutes_ago(1, flow1="broken", temp_c3=10))

    response = api_client.get("/api/data/five-minutes-total/d1")

    assert response.status_code == 500
    assert response.json() == {
        "error": "Failed to compute heat transfer for the requested window."
    }


def test_dashboard_renders_latest_reading(api_client: TestClient, store) -> None:
    store.put_sample(_minutes_ago(1, flow1=60, flow2=0, temp_c3=50, temp_c4=40))

    response = api_client.get("/ui/d1")

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "41.86" in response.text
    assert 'data-device-id="d1"' in response.text


def test_dashboard_defaults_to_configured_device(api_client: TestClient) -> None:
    response = api_client.get("/ui")

    assert response.status_code == 200
    assert 'data-device-id="hainetukaishu"' in response.text
    assert "No samples recorded yet." in response.text


def test_health_endpoints(api_client: TestClient) -> None:
    assert api_client.get("/health").json() == {"status": "ok"}
    assert api_client.get("/").json()["status"] == "ok"


def test_cors_headers_are_sent(api_client: TestClient) -> None:
    response = api_client.get("/health", headers={"Origin": "http://example.com"})

    assert response.headers["access-control-allow-origin"] == "*"


class ExplodingService(TelemetryService):
    def fetch_latest(self, device_id: str) -> Sample:
        raise RuntimeError("secret connection string leaked")


def test_month_out_of_range_after_utc_conversion_returns_json_422(store) -> None:
    service = TelemetryService(store=store, aggregator=Aggregator(), timezone_name="Asia/Tokyo")
    app = create_app()
    app.dependency_overrides[api.get_service] = lambda: service

    with TestClient(app) as client:
        response = client.get("/api/data/monthly-total/d1/1/1")

    assert response.status_code == 422
    assert response.headers["content-type"].startswith("application/json")
    assert set(response.json()) == {"error"}


def test_unexpected_errors_return_generic_json_500(store) -> None:
    service = ExplodingService(store=store, aggregator=Aggregator())
    app = create_app()
    app.dependency_overrides[api.get_service] = lambda: service

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/api/data/d1")

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("application/json")
    assert response.json() == {"error": "Telemetry request failed."}


def test_reading_uses_server_side_formula(api_client: TestClient, store) -> None:
    store.put_sample(_minutes_ago(1, flow1="60", flow2="0", temp_c3="50", temp_c4="40"))

    response = api_client.get("/api/data/reading/d1")

    assert response.status_code == 200
    body = response.json()
    assert body["flowRateLpm"] == 60
    assert body["deltaT"] == 10
    assert body["heatTransfer"] == 41.86
    assert api_client.get("/api/data/d1").json()["Flow1"] == "60"


def test_reading_for_missing_device_returns_404(api_client: TestClient) -> None:
    response = api_client.get("/api/data/reading/nobody")

    assert response.status_code == 404
    assert response.json() == {"error": "No data found for deviceId: nobody"}


def test_dashboard_assets_are_served(api_client: TestClient) -> None:
    script = api_client.get("/static/dashboard.js")

    assert script.status_code == 200
    assert "/api/data/reading/" in script.text
    assert api_client.get("/static/dashboard.css").status_code == 200
