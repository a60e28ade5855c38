"""
Tests for AppLookup: identifier validation and the AppGallery
scrape-then-API fallback.
"""

import logging
from unittest.mock import Mock, patch

import pytest

from katsini.errors import AuthFailed, ExtractionFailed, MissingIdentifier, PageLoadTimeout
from katsini.config import Config, HuaweiCredentials
from katsini.lookup import AppLookup
from katsini.scanner.appgallery import AppGalleryScanner
from katsini.scanner.appgallery_api import AppGalleryAPIClient
from katsini.scanner.appstore import AppStoreScanner
from katsini.scanner.base import App
from katsini.scanner.playstore import PlayStoreScanner

SCRAPED = App(app_id="106093011", bundle_id="com.upapplications.flutter_bird",
              url="https://appgallery.huawei.com/app/C106093011", title="Flutter Bird",
              developer="UpApplications", version="1.0.2", updated="14-09-2023")
FROM_API = App(app_id="106093011", bundle_id="com.upapplications.flutter_bird",
               url="https://appgallery.huawei.com/app/C106093011", title="Flutter Bird",
               version="1.0.2", updated="14-09-2023")


def _lookup(config):
    return AppLookup(
        config,
        playstore=Mock(spec=PlayStoreScanner),
        appstore=Mock(spec=AppStoreScanner),
        appgallery=Mock(spec=AppGalleryScanner),
        appgallery_api=Mock(spec=AppGalleryAPIClient),
    )


class TestFallback:

    def test_scrape_success_skips_api(self, config_with_credentials):
        lookup = _lookup(config_with_credentials)
        lookup.appgallery_scanner.fetch.return_value = SCRAPED
        assert lookup.appgallery("106093011") is SCRAPED
        lookup.appgallery_api.fetch.assert_not_called()

    def test_no_credentials_propagates_scrape_error(self, config):
        lookup = _lookup(config)
        scrape_error = PageLoadTimeout()
        lookup.appgallery_scanner.fetch.side_effect = scrape_error
        with pytest.raises(PageLoadTimeout) as excinfo:
            lookup.appgallery("106093011")
        assert excinfo.value is scrape_error
        lookup.appgallery_api.fetch.assert_not_called()

    def test_half_configured_credentials_disable_fallback(self, browser_config):
        lookup = _lookup(Config(browser=browser_config, huawei=HuaweiCredentials(client_id="client-123")))
        lookup.appgallery_scanner.fetch.side_effect = PageLoadTimeout()
        with pytest.raises(PageLoadTimeout):
            lookup.appgallery("106093011")
        lookup.appgallery_api.fetch.assert_not_called()

    def test_api_rescues_failed_scrape(self, config_with_credentials):
        lookup = _lookup(config_with_credentials)
        lookup.appgallery_scanner.fetch.side_effect = ExtractionFailed(LookupError("div.title"))
        lookup.appgallery_api.fetch.return_value = FROM_API
        assert lookup.appgallery("106093011") is FROM_API
        lookup.appgallery_api.fetch.assert_called_once_with("106093011")

    def test_both_fail_returns_scrape_error(self, config_with_credentials, caplog):
        lookup = _lookup(config_with_credentials)
        scrape_error = PageLoadTimeout()
        lookup.appgallery_scanner.fetch.side_effect = scrape_error
        lookup.appgallery_api.fetch.side_effect = AuthFailed("token request rejected: status code 401")

        with caplog.at_level(logging.WARNING, logger="katsini.lookup"):
            with pytest.raises(PageLoadTimeout) as excinfo:
                lookup.appgallery("106093011")

        assert excinfo.value is scrape_error
        assert lookup.appgallery_scanner.fetch.call_count == 1
        assert lookup.appgallery_api.fetch.call_count == 1
        assert "token request rejected" in caplog.text

    def test_malformed_api_body_returns_scrape_error(self, config_with_credentials):
        lookup = AppLookup(
            config_with_credentials,
            appgallery=Mock(spec=AppGalleryScanner),
            appgallery_api=AppGalleryAPIClient(config_with_credentials.huawei),
        )
        scrape_error = PageLoadTimeout()
        lookup.appgallery_scanner.fetch.side_effect = scrape_error
        token = Mock(status_code=200)
        token.json.return_value = {"access_token": "tok-abc"}
        app_info = Mock(status_code=200)
        app_info.json.return_value = [{"unexpected": "array"}]

        with patch("katsini.scanner.appgallery_api.requests.post", return_value=token), \
                patch("katsini.scanner.appgallery_api.requests.get", return_value=app_info):
            with pytest.raises(PageLoadTimeout) as excinfo:
                lookup.appgallery("106093011")
        assert excinfo.value is scrape_error


class TestValidation:

    def test_playstore_requires_bundle_id(self, config):
        lookup = _lookup(config)
        with pytest.raises(MissingIdentifier, match="bundleId"):
            lookup.playstore("")
        lookup.playstore_scanner.fetch.assert_not_called()

    def test_appstore_requires_either_id(self, config):
        lookup = _lookup(config)
        with pytest.raises(MissingIdentifier):
            lookup.appstore()
        lookup.appstore_scanner.fetch.assert_not_called()

    def test_appstore_accepts_bundle_id_alone(self, config):
        lookup = _lookup(config)
        lookup.appstore(bundle_id="com.rostamvpn")
        lookup.appstore_scanner.fetch.assert_called_once_with(app_id="", bundle_id="com.rostamvpn", country="")

    def test_appgallery_requires_app_id(self, config_with_credentials):
        lookup = _lookup(config_with_credentials)
        with pytest.raises(MissingIdentifier):
            lookup.appgallery("")
        lookup.appgallery_scanner.fetch.assert_not_called()
        lookup.appgallery_api.fetch.assert_not_called()


class TestDispatch:

    def test_lookup_by_name(self, config):
        lookup = _lookup(config)
        lookup.playstore_scanner.fetch.return_value = SCRAPED
        assert lookup.lookup("playstore", bundle_id="com.x", lang="de") is SCRAPED
        lookup.playstore_scanner.fetch.assert_called_once_with("com.x", lang="de", country="")

    def test_unknown_provider(self, config):
        with pytest.raises(MissingIdentifier):
            _lookup(config).lookup("fdroid", app_id="1")

    def test_unexpected_parameter(self, config):
        lookup = _lookup(config)
        with pytest.raises(MissingIdentifier, match="lang"):
            lookup.lookup("appgallery", app_id="1", lang="en")
        lookup.appgallery_scanner.fetch.assert_not_called()

    @pytest.mark.parametrize("provider", [None, 7, ["appstore"]])
    def test_non_string_provider(self, config, provider):
        with pytest.raises(MissingIdentifier):
            _lookup(config).lookup(provider, app_id="1")
