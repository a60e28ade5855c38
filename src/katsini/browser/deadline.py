import time
from typing import Callable

from ..errors import PageLoadTimeout


class Deadline:
    """A single point in time after which every browser step fails."""

    def __init__(self, seconds: float, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self.seconds = seconds
        self.expires_at = clock() + seconds

    def remaining(self) -> float:
        return self.expires_at - self._clock()

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0

    def remaining_ms(self) -> float:
        """Milliseconds left, for Playwright's timeout arguments.

        Playwright treats a timeout of 0 as "wait forever", so an expired
        deadline raises instead of returning 0.
        """
        left = self.remaining() * 1000
        if left < 1:
            raise PageLoadTimeout()
        return left
