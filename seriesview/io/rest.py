# seriesview/io/rest.py
from __future__ import annotations

import asyncio
import logging
from typing import Any, Hashable

import requests

from seriesview.core import AccessError, CoreError, Measurement, Series

logger = logging.getLogger(__name__)


class RestClient:
    """Thin blocking JSON client for the series / measurement HTTP API.

    Authentication is not handled here; an already issued bearer token is
    only forwarded.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = float(timeout)
        self._session = session if session is not None else requests.Session()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def get_json(self, path: str) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            resp = self._session.get(url, headers=self._headers(), timeout=self.timeout)
            resp.raise_for_status()
            return resp.json()
        except requests.RequestException as e:
            raise AccessError(f"GET {url} failed: {e}") from e
        except ValueError as e:
            # JSON decoding error
            raise AccessError(f"GET {url} returned invalid JSON") from e

    def close(self) -> None:
        self._session.close()


def _as_list(payload: Any, what: str) -> list[dict[str, Any]]:
    if not isinstance(payload, list):
        raise AccessError(f"Expected a JSON list of {what}, got {type(payload).__name__}")
    return payload


class RestSeriesCatalog:
    """SeriesCatalog over `GET {base}/series`."""

    def __init__(self, client: RestClient):
        self._client = client

    def fetch_series(self) -> list[Series]:
        payload = _as_list(self._client.get_json("series"), "series")
        try:
            return [Series.from_dict(item) for item in payload]
        except CoreError as e:
            raise AccessError(f"Invalid series payload: {e}") from e

    async def list_series(self) -> list[Series]:
        return await asyncio.to_thread(self.fetch_series)


class RestMeasurementStore:
    """MeasurementStore over `GET {base}/measurements[/series/{id}]`."""

    def __init__(self, client: RestClient):
        self._client = client

    def fetch_measurements(self, series_id: Hashable | None = None) -> list[Measurement]:
        path = "measurements" if series_id is None else f"measurements/series/{series_id}"
        payload = _as_list(self._client.get_json(path), "measurements")
        try:
            items = [Measurement.from_dict(item) for item in payload]
        except CoreError as e:
            raise AccessError(f"Invalid measurement payload: {e}") from e
        logger.debug("Fetched %d measurement(s) from %s", len(items), path)
        return items

    async def list_measurements(self, series_id: Hashable | None = None) -> list[Measurement]:
        return await asyncio.to_thread(self.fetch_measurements, series_id)
