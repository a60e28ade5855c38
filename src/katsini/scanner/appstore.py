from .base import BaseScanner, App
from ..config import DEFAULT_TIMEOUT_SECONDS
from ..dates import APPSTORE_FORMAT, normalize_date
from ..errors import AppNotFound, UpstreamError
from typing import Optional
import requests
import logging

logger = logging.getLogger(__name__)


class AppStoreScanner(BaseScanner):
    lookup_url = "https://itunes.apple.com/lookup"

    def __init__(self, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self.timeout = timeout

    def fetch(self, app_id: Optional[str] = None, bundle_id: Optional[str] = None, country: str = "") -> App:
        if not app_id and not bundle_id:
            raise ValueError("app_id or bundle_id is required")
        country = country or "us"
        params = {"bundleId": bundle_id} if bundle_id else {"id": app_id}
        params["country"] = country
        logger.info("Fetching Apple App Store app data for %s", params)

        try:
            r = requests.get(self.lookup_url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise UpstreamError(f"failed to get app: {e}") from e
        if r.status_code != 200:
            logger.info("iTunes lookup returned HTTP %d", r.status_code)
            raise AppNotFound()

        try:
            data = r.json()
        except ValueError as e:
            raise UpstreamError(f"invalid lookup response: {e}") from e

        if not isinstance(data, dict):
            raise UpstreamError(f"invalid lookup response: expected an object, got {type(data).__name__}")
        results = data.get("results") or []
        if not isinstance(results, list):
            raise UpstreamError("invalid lookup response: malformed results")
        if not data.get("resultCount") or not results:
            raise AppNotFound()

        item = results[0]
        if not isinstance(item, dict):
            raise UpstreamError("invalid lookup response: malformed result entry")
        return App(
            app_id=str(item.get("trackId", "")),
            bundle_id=str(item.get("bundleId") or ""),
            url=str(item.get("trackViewUrl") or ""),
            title=str(item.get("trackName") or ""),
            developer=str(item.get("artistName") or ""),
            version=str(item.get("version") or ""),
            updated=normalize_date(str(item.get("currentVersionReleaseDate") or ""), APPSTORE_FORMAT),
        )
