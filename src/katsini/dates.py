from datetime import datetime
import logging

from .errors import DateParseError

logger = logging.getLogger(__name__)

CANONICAL_FORMAT = "%d-%m-%Y"

PLAYSTORE_FORMAT = "%b %d, %Y"          # Jan 2, 2006
APPGALLERY_FORMAT = "%m/%d/%Y"          # 1/2/2006
APPSTORE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"  # 2006-01-02T15:04:05Z
CONNECT_API_FORMAT = "%Y-%m-%d %H:%M:%S"


def normalize_date(raw: str, source_format: str) -> str:
    """Parse a store date string and render it as DD-MM-YYYY.

    The whole string must match; time-of-day is dropped.
    """
    value = (raw or "").strip()
    try:
        parsed = datetime.strptime(value, source_format)
    except ValueError:
        logger.error("Error parsing date %r with %r", raw, source_format)
        raise DateParseError(raw, source_format) from None
    return parsed.strftime(CANONICAL_FORMAT)
