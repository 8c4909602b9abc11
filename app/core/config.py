from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

# .env lives in the project root: app/core/config.py -> app/core -> app -> root
_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _ROOT / ".env"

MOBBEX_VERSION = "2.3.4"
PLATFORM_NAME = "mobbex-reconciler"

# Status buckets: bucket name -> order lifecycle label
STATUS_BUCKET_LABELS = {
    "approved": "processing",
    "pending": "pending",
    "in_review": "on-hold",
    "rejected": "failed",
    "refunded": "refunded",
    "expired": "cancelled",
}
UNKNOWN_STATUS_LABEL = "failed"


class Settings(BaseSettings):
    # Mobbex credentials (console > developers)
    mobbex_enabled: bool = False
    mobbex_api_key: str = ""
    mobbex_access_token: str = ""
    mobbex_api_url: str = "https://api.mobbex.com/p/"
    # {entity.uid} and {payment.id} are replaced per webhook
    mobbex_coupon_url: str = "https://mobbex.com/console/{entity.uid}/operations/?oid={payment.id}"
    mobbex_debug_mode: bool = False
    mobbex_timeout: int = 20
    # Status code buckets: comma separated gateway codes
    mobbex_status_approved: str = "200,210,300,301,302,303"
    mobbex_status_pending: str = "0,1,2,100,201"
    mobbex_status_in_review: str = "3,4"
    mobbex_status_rejected: str = "400,401,402,403,404,405,406,410,411,412,413,414,415,416,417,418,419"
    mobbex_status_refunded: str = "601,602,603,605,610"
    mobbex_status_expired: str = "500,501,502"
    # Public URL of this service (webhook / return URLs are built from it)
    site_url: str = "http://127.0.0.1:8000"
    # Storefront: shopper is redirected here after the return URL
    frontend_url: str = "http://127.0.0.1:3000"
    database_url: str = "sqlite:///./mobbex.db"
    admin_secret: str = ""             # X-Admin-Secret for capture / transaction history
    rate_limit_per_minute: int = 60
    environment: str = "development"

    model_config = {
        "env_file": _ENV_FILE if _ENV_FILE.is_file() else ".env",
        "extra": "ignore",
    }

    @field_validator("mobbex_api_key", "mobbex_access_token", mode="before")
    @classmethod
    def strip_credentials(cls, v: str | None) -> str:
        """Trailing spaces from copy/paste would change the derived token."""
        return (v or "").strip()

    def is_ready(self) -> bool:
        """Integration enabled and both credentials configured."""
        return bool(self.mobbex_enabled and self.mobbex_api_key and self.mobbex_access_token)


settings = Settings()


def _parse_codes(raw: str) -> set[int]:
    out: set[int] = set()
    for part in (raw or "").split(","):
        part = part.strip()
        if not part:
            continue
        try:
            out.add(int(part))
        except ValueError:
            continue
    return out


def get_status_codes(conf: Settings | None = None) -> dict[str, set[int]]:
    """
    Bucket name -> set of gateway status codes.
    Invalid entries in the comma separated lists are skipped.
    """
    conf = conf or settings
    return {
        "approved": _parse_codes(conf.mobbex_status_approved),
        "pending": _parse_codes(conf.mobbex_status_pending),
        "in_review": _parse_codes(conf.mobbex_status_in_review),
        "rejected": _parse_codes(conf.mobbex_status_rejected),
        "refunded": _parse_codes(conf.mobbex_status_refunded),
        "expired": _parse_codes(conf.mobbex_status_expired),
    }
