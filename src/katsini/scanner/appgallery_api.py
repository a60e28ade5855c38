"""
Huawei AppGallery Connect API client, used when the AppGallery page cannot
be scraped.

Authentication is a client-credentials grant: the configured client id and
secret are exchanged for a bearer token, which is used once for the
app-info call. Tokens are not cached; each fetch exchanges a fresh one.
"""

from .base import BaseScanner, App
from .appgallery import app_url
from ..browser.deadline import Deadline
from ..config import DEFAULT_TIMEOUT_SECONDS, HuaweiCredentials
from ..dates import CONNECT_API_FORMAT, normalize_date
from ..errors import AuthFailed, UpstreamError
from typing import Optional
import requests
import logging

logger = logging.getLogger(__name__)

TOKEN_URL = "https://connect-api-dre.cloud.huawei.com/api/oauth2/v1/token"
APP_INFO_URL = "https://connect-api.cloud.huawei.com/api/publish/v2/app-info"


class AppGalleryAPIClient(BaseScanner):
    def __init__(self, credentials: HuaweiCredentials, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self.credentials = credentials
        self.timeout = timeout

    def _budget(self, deadline: Deadline, what: str) -> float:
        left = deadline.remaining()
        if left <= 0:
            raise UpstreamError(f"{what}: deadline exceeded")
        return left

    def get_token(self, deadline: Optional[Deadline] = None) -> str:
        deadline = deadline or Deadline(self.timeout)
        payload = {
            "grant_type": "client_credentials",
            "client_id": self.credentials.client_id,
            "client_secret": self.credentials.client_secret,
        }
        try:
            r = requests.post(TOKEN_URL, json=payload, timeout=self._budget(deadline, "token request"))
        except requests.RequestException as e:
            raise AuthFailed(f"token request failed: {e}") from e
        if not 200 <= r.status_code < 300:
            logger.error("Token endpoint returned HTTP %d", r.status_code)
            raise AuthFailed(f"token request rejected: status code {r.status_code}")
        try:
            body = r.json()
        except ValueError as e:
            raise AuthFailed(f"invalid token response: {e}") from e
        token = body.get("access_token") if isinstance(body, dict) else None
        if not token or not isinstance(token, str):
            raise AuthFailed("token response has no access_token")
        return token

    def fetch(self, app_id: str) -> App:
        # token exchange and app-info share one budget
        deadline = Deadline(self.timeout)
        token = self.get_token(deadline)
        logger.info("Fetching Huawei AppGallery app data via Connect API for appId: %s", app_id)
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {token}",
            "client_id": self.credentials.client_id,
        }
        try:
            r = requests.get(APP_INFO_URL, params={"appId": app_id}, headers=headers,
                             timeout=self._budget(deadline, "app-info request"))
        except requests.RequestException as e:
            raise UpstreamError(f"app-info request failed: {e}") from e
        if not 200 <= r.status_code < 300:
            raise UpstreamError("app-info request failed", code=r.status_code)
        try:
            data = r.json()
        except ValueError as e:
            raise UpstreamError(f"invalid app-info response: {e}") from e
        if not isinstance(data, dict):
            raise UpstreamError(f"invalid app-info response: expected an object, got {type(data).__name__}")

        ret = data.get("ret") or {}
        if not isinstance(ret, dict):
            raise UpstreamError("invalid app-info response: malformed ret")
        code = ret.get("code", 0)
        if code:
            raise UpstreamError(ret.get("msg") or "app-info request failed", code=code)

        info = data.get("appInfo") or {}
        languages = data.get("languages") or []
        if not isinstance(info, dict) or not isinstance(languages, list):
            raise UpstreamError("invalid app-info response: malformed appInfo or languages")
        title = info.get("appName")
        if not title and languages and isinstance(languages[0], dict):
            title = languages[0].get("appName")
        if not title or not isinstance(title, str):
            raise UpstreamError("app-info response has no app name")

        return App(
            app_id=app_id,
            bundle_id=str(info.get("packageName") or app_id),
            url=app_url(app_id),
            title=title,
            developer=str(info.get("developerName") or ""),
            version=str(info.get("versionNumber") or ""),
            updated=normalize_date(str(info.get("updateTime") or ""), CONNECT_API_FORMAT),
        )
