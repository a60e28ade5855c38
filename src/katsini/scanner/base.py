from typing import Any, Callable, Dict, Optional, Sequence
from dataclasses import asdict, dataclass
import logging

from ..browser.policy import ResourceBlockPolicy
from ..browser.session import BrowserSession
from ..config import BrowserConfig
from ..dates import normalize_date
from ..errors import AppNotFound

logger = logging.getLogger(__name__)

JSON_KEYS = {
    "app_id": "appId",
    "bundle_id": "bundleId",
    "url": "url",
    "title": "title",
    "version": "version",
    "updated": "updated",
    "developer": "developer",
}

ALL_FIELDS = tuple(JSON_KEYS)

@dataclass(frozen=True)
class App:
    app_id: str = ""
    bundle_id: str = ""
    url: str = ""
    title: str = ""
    developer: str = ""
    version: str = ""
    updated: str = ""                   # DD-MM-YYYY

    def to_dict(self, fields: Sequence[str] = ALL_FIELDS) -> Dict[str, str]:
        values = asdict(self)
        return {JSON_KEYS[f]: values[f] for f in fields}


class BaseScanner:
    # fields this provider's callers get back, in JSON order
    fields: Sequence[str] = ALL_FIELDS

    def fetch(self, *args, **kwargs) -> App:
        raise NotImplementedError


MissingProbe = Callable[[BrowserSession], bool]
SessionFactory = Callable[..., BrowserSession]


class PageScanner(BaseScanner):
    """Scrape path shared by the browser-rendered stores.

    Subclasses supply the block policy, the not-found probe, the source date
    format and the two provider-specific steps: prepare() runs between
    navigation and the probe, read_fields() pulls the raw strings.
    """

    block_policy: ResourceBlockPolicy
    date_format: str
    default_probe: MissingProbe

    def __init__(
        self,
        browser: BrowserConfig,
        timeout: Optional[float] = None,
        session_factory: SessionFactory = BrowserSession,
        missing_probe: Optional[MissingProbe] = None,
    ):
        self.browser = browser
        self.timeout = timeout
        self.session_factory = session_factory
        self.missing_probe = missing_probe or type(self).default_probe

    def prepare(self, session: BrowserSession):
        pass

    def read_fields(self, session: BrowserSession) -> Dict[str, Any]:
        raise NotImplementedError

    def scrape(self, url: str) -> Dict[str, Any]:
        logger.debug("Scraping %s", url)
        with self.session_factory(self.browser, self.block_policy, self.timeout) as session:
            session.navigate(url)
            self.prepare(session)
            if self.missing_probe(session):
                raise AppNotFound()
            return self.read_fields(session)

    def build(self, raw: Dict[str, Any], **known) -> App:
        values = dict(raw, **known)
        values["updated"] = normalize_date(values.get("updated", ""), self.date_format)
        return App(**values)
