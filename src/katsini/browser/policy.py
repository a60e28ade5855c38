from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterable


class Decision(str, Enum):
    ALLOW = "allow"
    DENY = "deny"


# Page JavaScript and request interception itself depend on scripts loading.
ALWAYS_ALLOWED = frozenset({"script"})

COMMON_BLOCKED = frozenset({"image", "font", "media", "manifest", "other"})


@dataclass(frozen=True)
class ResourceBlockPolicy:
    """Denylist of Playwright resource types, bound to a session at creation."""
    denied: FrozenSet[str]

    @classmethod
    def of(cls, kinds: Iterable[str]) -> "ResourceBlockPolicy":
        return cls(denied=frozenset(k.lower() for k in kinds) - ALWAYS_ALLOWED)

    def classify(self, resource_type: str) -> Decision:
        kind = (resource_type or "").lower()
        if kind in ALWAYS_ALLOWED or kind not in self.denied:
            return Decision.ALLOW
        return Decision.DENY


PLAYSTORE_POLICY = ResourceBlockPolicy.of(COMMON_BLOCKED | {"stylesheet"})
APPGALLERY_POLICY = ResourceBlockPolicy.of(COMMON_BLOCKED)
