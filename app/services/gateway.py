"""Mobbex API client. Read failures become empty results; nothing is retried."""
import json
import logging
from typing import Any
from urllib.error import URLError
from urllib.parse import urlencode
from urllib.request import Request as UrlRequest, urlopen

from app.core.config import Settings, settings

logger = logging.getLogger(__name__)


def get_installments_query(total: float | int | None = None, installments: list[str] | None = None) -> str:
    """
    total=..&installments[]=..&installments[]=..
    Plans use +uid:<uid> to include and -<reference> to exclude.
    """
    params: list[tuple[str, Any]] = []
    if total is not None and total != "":
        params.append(("total", total))
    for plan in installments or []:
        params.append(("installments[]", plan))
    return urlencode(params)


class MobbexApi:
    def __init__(self, api_key: str, access_token: str, base_url: str | None = None, timeout: int | None = None):
        self.api_key = api_key
        self.access_token = access_token
        self.base_url = (base_url or settings.mobbex_api_url).rstrip("/") + "/"
        self.timeout = timeout or settings.mobbex_timeout

    @classmethod
    def from_settings(cls, conf: Settings | None = None) -> "MobbexApi":
        conf = conf or settings
        return cls(conf.mobbex_api_key, conf.mobbex_access_token, conf.mobbex_api_url, conf.mobbex_timeout)

    def _headers(self) -> dict[str, str]:
        return {
            "cache-control": "no-cache",
            "content-type": "application/json",
            "x-api-key": self.api_key,
            "x-access-token": self.access_token,
        }

    def request(self, method: str, uri: str, body: dict | None = None) -> dict | None:
        """Parsed JSON response, or None on network / HTTP / JSON errors."""
        url = self.base_url + uri.lstrip("/")
        data = json.dumps(body).encode() if body is not None else None
        req = UrlRequest(url, data=data, method=method.upper(), headers=self._headers())
        logger.debug("Mobbex API > %s %s", method.upper(), uri)
        try:
            with urlopen(req, timeout=self.timeout) as resp:
                result = json.loads(resp.read().decode())
        except (URLError, OSError, ValueError) as e:
            # HTTPError (non-2xx) is a URLError subclass
            logger.warning("Mobbex API request failed: %s %s: %s", method.upper(), uri, e)
            return None
        if not isinstance(result, dict):
            logger.warning("Mobbex API unexpected response: %s %s", method.upper(), uri)
            return None
        return result

    def get_sources(self, total: float | int | None = None, installments: list[str] | None = None) -> list:
        query = get_installments_query(total, installments)
        response = self.request("GET", "sources" + (f"?{query}" if query else ""))
        return (response or {}).get("data") or []

    def get_sources_advanced(self, rule: str = "externalMatch") -> list:
        response = self.request("GET", f"sources/rules/{rule}/installments")
        return (response or {}).get("data") or []

    def capture(self, payment_id: str, total: float | int) -> dict | None:
        return self.request("POST", f"operations/{payment_id}/capture", {"total": total})
