from .base import App, PageScanner
from .probes import TextProbe
from ..browser.policy import PLAYSTORE_POLICY
from ..dates import PLAYSTORE_FORMAT
from urllib.parse import urlencode
import logging

logger = logging.getLogger(__name__)

DETAILS_URL = "https://play.google.com/store/apps/details"

NOT_FOUND_TEXT = "We're sorry, the requested URL was not found on this server."

ABOUT_BUTTON = (
    'button[aria-label="See more information on About this app"], '
    'button[aria-label="See more information on About this game"]'
)
ABOUT_HEADING = '//div[contains(text(), "About this app") or contains(text(), "About this game")]'

XPATHS = {
    "title": ABOUT_HEADING + "/preceding-sibling::h5[1]",
    "version": '//div[contains(text(), "Version")]/following-sibling::div[1]',
    "updated": '//div[contains(text(), "Updated")]/following-sibling::div[1]',
    "developer": '//div[contains(text(), "Offered by")]/following-sibling::div[1]',
}


def details_url(bundle_id: str, lang: str, country: str) -> str:
    return f"{DETAILS_URL}?{urlencode({'id': bundle_id, 'hl': lang, 'gl': country})}"


class PlayStoreScanner(PageScanner):
    fields = ("bundle_id", "url", "title", "version", "updated", "developer")
    block_policy = PLAYSTORE_POLICY
    date_format = PLAYSTORE_FORMAT
    default_probe = TextProbe(NOT_FOUND_TEXT)

    def read_fields(self, session):
        # version/updated/developer only render inside the "About this app" dialog
        session.wait_visible(ABOUT_BUTTON)
        session.click(ABOUT_BUTTON)
        session.wait_visible(ABOUT_HEADING)
        return {name: session.read_text(xpath) for name, xpath in XPATHS.items()}

    def fetch(self, bundle_id: str, lang: str = "", country: str = "") -> App:
        lang = lang or "en"
        country = country or "us"
        logger.info("Fetching Google Play Store app data for bundleId: %s, lang: %s, country: %s",
                    bundle_id, lang, country)
        url = details_url(bundle_id, lang, country)
        raw = self.scrape(url)
        return self.build(raw, bundle_id=bundle_id, url=url)
