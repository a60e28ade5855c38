"""
Not-found probes: predicates over rendered page state that tell a missing
app apart from a page that is still loading or has changed layout.
"""

import json
import logging

logger = logging.getLogger(__name__)


class TextProbe:
    """True when the page body contains a fixed message."""

    def __init__(self, text: str):
        self.text = text

    def __call__(self, session) -> bool:
        found = bool(session.evaluate(f"document.body.innerText.includes({json.dumps(self.text)})"))
        if found:
            logger.info("Page reports missing app: %r", self.text)
        return found


class HeightProbe:
    """True when an element renders shorter than a threshold.

    Layout-based, so it breaks silently if the store redesigns the page.
    """

    def __init__(self, selector: str, min_height: int):
        self.selector = selector
        self.min_height = min_height

    def __call__(self, session) -> bool:
        script = f"document.querySelector({json.dumps(self.selector)}).offsetHeight"
        height = session.evaluate(script)
        logger.debug("%s offsetHeight=%s", self.selector, height)
        return height is not None and height < self.min_height
