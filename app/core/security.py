"""Mobbex token: shared secret derived from the configured credentials."""
import hashlib
import hmac
from urllib.parse import urlencode

from .config import MOBBEX_VERSION, PLATFORM_NAME, Settings, settings

TOKEN_SEPARATOR = "|"
WEBHOOK_PATH = "/mobbex/v1/webhook"
RETURN_PATH = "/mobbex/return"


def generate_token(api_key: str, access_token: str) -> str:
    raw = f"{api_key}{TOKEN_SEPARATOR}{access_token}"
    return hashlib.md5(raw.encode("utf-8")).hexdigest()


class TokenAuthenticator:
    """
    Derives and validates the token sent back by Mobbex on webhook and return URLs.
    Readiness is not checked here: callers must check settings.is_ready() first.
    """

    def __init__(self, conf: Settings | None = None):
        self.settings = conf or settings

    def generate(self) -> str:
        return generate_token(self.settings.mobbex_api_key, self.settings.mobbex_access_token)

    def validate(self, candidate: str | None) -> bool:
        if not candidate:
            return False
        return hmac.compare_digest(candidate.encode("utf-8"), self.generate().encode("utf-8"))


def get_api_endpoint(endpoint: str, order_id: int | str | None = None, conf: Settings | None = None) -> str:
    """
    URL handed to Mobbex when a checkout is created.
    endpoint: "mobbex_webhook" -> webhook route, anything else -> return route.
    """
    conf = conf or settings
    query = {
        "mobbex_token": TokenAuthenticator(conf).generate(),
        "platform": PLATFORM_NAME,
        "version": MOBBEX_VERSION,
    }
    if order_id:
        query["mobbex_order_id"] = str(order_id)
    base = (conf.site_url or "").rstrip("/")
    if endpoint == "mobbex_webhook":
        if conf.mobbex_debug_mode:
            query["XDEBUG_SESSION_START"] = "PHPSTORM"
        return f"{base}{WEBHOOK_PATH}?{urlencode(query)}"
    return f"{base}{RETURN_PATH}?{urlencode(query)}"
