from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import os
import yaml
import logging

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0

@dataclass(frozen=True)
class BrowserConfig:
    host: Optional[str] = None
    port: Optional[int] = None
    headless: bool = True
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def remote_endpoint(self) -> Optional[str]:
        """CDP endpoint of a remote Chrome, or None to launch one locally."""
        if self.host and self.port:
            return f"http://{self.host}:{self.port}"
        return None

@dataclass(frozen=True)
class HuaweiCredentials:
    client_id: Optional[str] = None
    client_secret: Optional[str] = None

    @property
    def configured(self) -> bool:
        return bool(self.client_id) and bool(self.client_secret)

@dataclass(frozen=True)
class Config:
    browser: BrowserConfig = field(default_factory=BrowserConfig)
    huawei: HuaweiCredentials = field(default_factory=HuaweiCredentials)
    logging: Dict[str, Any] = field(default_factory=lambda: {"level": "INFO"})


def _read_yaml(path: Optional[str]) -> Dict[str, Any]:
    if not path:
        return {}
    if not os.path.exists(path):
        logger.debug("Config file %s not found; using environment only", path)
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_config(path: Optional[str] = None, environ: Optional[Dict[str, str]] = None) -> Config:
    """Build the process-wide Config from an optional YAML file plus environment."""
    env = os.environ if environ is None else environ
    data = _read_yaml(path)

    b = data.get("browser", {}) or {}
    port = env.get("CHROME_PORT") or b.get("port")
    browser = BrowserConfig(
        host=env.get("CHROME_HOST") or b.get("host"),
        port=int(port) if port else None,
        headless=bool(b.get("headless", True)),
        timeout_seconds=float(env.get("KATSINI_TIMEOUT") or b.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)),
    )

    h = data.get("huawei", {}) or {}
    huawei = HuaweiCredentials(
        client_id=env.get("HUAWEI_CLIENT_ID") or h.get("client_id"),
        client_secret=env.get("HUAWEI_CLIENT_SECRET") or h.get("client_secret"),
    )

    log_cfg = dict(data.get("logging", {"level": "INFO"}) or {})
    if env.get("KATSINI_LOG_LEVEL"):
        log_cfg["level"] = env["KATSINI_LOG_LEVEL"]
    log_cfg.setdefault("level", "INFO")

    return Config(browser=browser, huawei=huawei, logging=log_cfg)
