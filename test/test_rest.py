# test/test_rest.py
import asyncio
import os

import pytest
import requests

from seriesview.core import AccessError
from seriesview.io.load import load_selections
from seriesview.io.rest import RestClient, RestMeasurementStore, RestSeriesCatalog


class FakeResponse:
    def __init__(self, payload, status=200):
        self._payload = payload
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    def __init__(self, routes):
        self.routes = routes
        self.calls = []

    def get(self, url, headers=None, timeout=None):
        self.calls.append((url, headers, timeout))
        route = self.routes.get(url)
        if route is None:
            raise requests.ConnectionError(f"no route to {url}")
        return route

    def close(self):
        pass


SERIES = [
    {"id": 1, "name": "Kitchen", "minValue": 0, "maxValue": 40, "color": "#FF0000", "icon": "🍳"},
    {"id": 2, "name": "Garage", "minValue": -10, "maxValue": 10, "color": "#0000FF", "icon": "🚗"},
]
KITCHEN = [
    {"id": 11, "seriesId": 1, "value": 21.0, "timestamp": "2024-06-01T10:00:00Z"},
    {"id": 10, "seriesId": 1, "value": 20.5, "timestamp": "2024-06-01T09:00:00Z"},
]
BASE = "http://api.test/api"


def _client(routes, **kwargs):
    session = FakeSession(routes)
    return RestClient(BASE + "/", session=session, **kwargs), session


def test_catalog_parses_series_and_sends_token():
    client, session = _client({f"{BASE}/series": FakeResponse(SERIES)}, token="abc", timeout=3)

    series = RestSeriesCatalog(client).fetch_series()

    assert [s.name for s in series] == ["Kitchen", "Garage"]
    url, headers, timeout = session.calls[0]
    assert url == f"{BASE}/series"
    assert headers["Authorization"] == "Bearer abc"
    assert timeout == 3.0


def test_no_token_means_no_authorization_header():
    client, session = _client({f"{BASE}/series": FakeResponse([])})
    RestSeriesCatalog(client).fetch_series()
    assert "Authorization" not in session.calls[0][1]


def test_store_hits_per_series_and_bulk_endpoints():
    routes = {
        f"{BASE}/measurements/series/1": FakeResponse(KITCHEN),
        f"{BASE}/measurements": FakeResponse(KITCHEN),
    }
    client, _ = _client(routes)
    store = RestMeasurementStore(client)

    assert [m.id for m in store.fetch_measurements(1)] == [11, 10]
    assert len(store.fetch_measurements()) == 2


def test_http_errors_become_access_errors():
    client, _ = _client({f"{BASE}/series": FakeResponse({"error": "nope"}, status=500)})
    with pytest.raises(AccessError):
        RestSeriesCatalog(client).fetch_series()


def test_invalid_json_and_shapes_become_access_errors():
    client, _ = _client(
        {
            f"{BASE}/series": FakeResponse(ValueError("bad json")),
            f"{BASE}/measurements": FakeResponse({"not": "a list"}),
            f"{BASE}/measurements/series/1": FakeResponse([{"id": 1, "seriesId": 1}]),
        }
    )
    with pytest.raises(AccessError):
        RestSeriesCatalog(client).fetch_series()
    with pytest.raises(AccessError):
        RestMeasurementStore(client).fetch_measurements()
    with pytest.raises(AccessError):
        RestMeasurementStore(client).fetch_measurements(1)


def test_load_over_rest_degrades_unreachable_series():
    routes = {
        f"{BASE}/series": FakeResponse(SERIES),
        f"{BASE}/measurements/series/1": FakeResponse(KITCHEN),
    }
    client, _ = _client(routes)

    selections = asyncio.run(load_selections(RestSeriesCatalog(client), RestMeasurementStore(client)))

    assert [m.id for m in selections[0].measurements] == [10, 11]
    assert selections[1].measurements.n == 0


@pytest.mark.integration
def test_live_api_catalog():
    url = os.environ.get("SERIESVIEW_API_URL")
    if not url:
        pytest.skip("SERIESVIEW_API_URL not set")

    client = RestClient(url, token=os.environ.get("SERIESVIEW_API_TOKEN"))
    try:
        series = asyncio.run(RestSeriesCatalog(client).list_series())
    finally:
        client.close()
    assert isinstance(series, list)
