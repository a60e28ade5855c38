from .base import App, PageScanner
from .probes import HeightProbe
from ..browser.policy import APPGALLERY_POLICY
from ..dates import APPGALLERY_FORMAT
import logging

logger = logging.getLogger(__name__)

APP_URL = "https://appgallery.huawei.com/app/C{app_id}"

HOME_CARD = "div.horizonhomecard"
COMPONENT_CONTAINER = "div.componentContainer"
TITLE = "div.center_info > div.title"
PACKAGE = "div[package]"

# missing apps render an almost empty container
MIN_CONTAINER_HEIGHT = 500

XPATHS = {
    "version": '//div[contains(text(), "Version")]/following-sibling::div[1]',
    "updated": '//div[contains(text(), "Updated")]/following-sibling::div[1]',
    "developer": '//div[contains(text(), "Developer")]/following-sibling::div[1]',
}


def app_url(app_id: str) -> str:
    return APP_URL.format(app_id=app_id)


class AppGalleryScanner(PageScanner):
    block_policy = APPGALLERY_POLICY
    date_format = APPGALLERY_FORMAT
    default_probe = HeightProbe(".componentContainer", MIN_CONTAINER_HEIGHT)

    def prepare(self, session):
        session.wait_visible(HOME_CARD)
        session.wait_visible(COMPONENT_CONTAINER)

    def read_fields(self, session):
        session.wait_visible(TITLE)
        raw = {"title": session.read_text(TITLE)}
        for name, xpath in XPATHS.items():
            raw[name] = session.read_text(xpath)
        raw["bundle_id"] = session.read_attribute(PACKAGE, "package")
        return raw

    def fetch(self, app_id: str) -> App:
        logger.info("Fetching Huawei AppGallery app data for appId: %s", app_id)
        url = app_url(app_id)
        raw = self.scrape(url)
        return self.build(raw, app_id=app_id, url=url)
