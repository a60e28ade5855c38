"""
Entry point for app lookups.

AppLookup validates identifiers before any network work, then dispatches to
the provider's scanner. AppGallery is the one provider with two strategies:
the page is scraped first, and the Connect API is tried only when the scrape
failed and both Huawei credentials are configured. If the API also fails the
scrape error is re-raised; the API error is only logged.
"""

from typing import Optional
import logging

from .config import Config
from .errors import KatsiniError, MissingIdentifier
from .scanner.appgallery import AppGalleryScanner
from .scanner.appgallery_api import AppGalleryAPIClient
from .scanner.appstore import AppStoreScanner
from .scanner.base import App
from .scanner.playstore import PlayStoreScanner

logger = logging.getLogger(__name__)

PARAMS = {
    "playstore": ("bundle_id", "lang", "country"),
    "appstore": ("app_id", "bundle_id", "country"),
    "appgallery": ("app_id",),
}


class AppLookup:
    def __init__(
        self,
        config: Config,
        playstore: Optional[PlayStoreScanner] = None,
        appstore: Optional[AppStoreScanner] = None,
        appgallery: Optional[AppGalleryScanner] = None,
        appgallery_api: Optional[AppGalleryAPIClient] = None,
    ):
        timeout = config.browser.timeout_seconds
        self.config = config
        self.playstore_scanner = playstore or PlayStoreScanner(config.browser)
        self.appstore_scanner = appstore or AppStoreScanner(timeout=timeout)
        self.appgallery_scanner = appgallery or AppGalleryScanner(config.browser)
        self.appgallery_api = appgallery_api or AppGalleryAPIClient(config.huawei, timeout=timeout)

    def playstore(self, bundle_id: str, lang: str = "", country: str = "") -> App:
        if not bundle_id:
            raise MissingIdentifier("Please provide an app bundleId")
        return self.playstore_scanner.fetch(bundle_id, lang=lang, country=country)

    def appstore(self, app_id: str = "", bundle_id: str = "", country: str = "") -> App:
        if not app_id and not bundle_id:
            raise MissingIdentifier("Please provide an app appId or bundleId")
        return self.appstore_scanner.fetch(app_id=app_id, bundle_id=bundle_id, country=country)

    def appgallery(self, app_id: str) -> App:
        if not app_id:
            raise MissingIdentifier("Please provide an app appId")
        try:
            return self.appgallery_scanner.fetch(app_id)
        except KatsiniError as scrape_error:
            if not self.config.huawei.configured:
                raise
            logger.info("Scraping AppGallery failed (%s); trying Connect API", scrape_error)
            try:
                return self.appgallery_api.fetch(app_id)
            except KatsiniError as api_error:
                logger.warning("Connect API fallback failed for appId %s: %s", app_id, api_error)
            raise

    def lookup(self, provider: str, **params) -> App:
        """Dispatch by provider name, as used by the CLI and batch files."""
        if not isinstance(provider, str) or provider not in PARAMS:
            raise MissingIdentifier(f"Unknown provider {provider!r}")
        unknown = set(params) - set(PARAMS[provider])
        if unknown:
            raise MissingIdentifier(f"Unexpected parameters for {provider}: {', '.join(sorted(unknown))}")
        return getattr(self, provider)(**params)

    def fields_for(self, provider: str):
        return {
            "playstore": self.playstore_scanner.fields,
            "appstore": self.appstore_scanner.fields,
            "appgallery": self.appgallery_scanner.fields,
        }[provider]
