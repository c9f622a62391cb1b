"""HTTP client for downloading published spreadsheet CSVs."""

import time

import requests
from loguru import logger

from ..exceptions import FetchError
from ..models.source_schema import SourceSchema


class SheetFetcher:
    """Downloads the CSV text behind a published sheet URL.

    A cache-busting query parameter is appended to every request so that
    intermediate caches never serve a stale export. Failures surface as
    FetchError; there is no retry beyond the caller's refresh interval.

    Attributes:
        timeout: Request timeout in seconds
    """

    def __init__(self, timeout: float = 30, session: requests.Session | None = None):
        self.timeout = timeout
        self._session = session or requests.Session()

    @staticmethod
    def with_cache_buster(url: str, timestamp_ms: int | None = None) -> str:
        stamp = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
        separator = "&" if "?" in url else "?"
        return f"{url}{separator}cacheBust={stamp}"

    def fetch_text(self, url: str) -> str:
        """GET the URL and return the body as text.

        Raises:
            FetchError: On network errors or a non-2xx response
        """
        request_url = self.with_cache_buster(url)
        logger.debug(f"Fetching {request_url}")

        try:
            response = self._session.get(request_url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Error fetching sheet data from {url}: {e}")
            raise FetchError(url, str(e)) from e

        if not response.ok:
            logger.error(
                f"Sheet request failed: {response.status_code} {response.reason}"
            )
            raise FetchError(url, response.reason or "HTTP error", response.status_code)

        response.encoding = response.encoding or "utf-8"
        return response.text

    def fetch_source(self, schema: SourceSchema) -> str:
        """Fetch the CSV for a configured source."""
        if not schema.url:
            raise FetchError("", f"No URL configured for source {schema.key!r}")
        return self.fetch_text(schema.url)
