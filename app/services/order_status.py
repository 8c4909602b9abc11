"""Mobbex status code -> order lifecycle label."""
from app.core.config import STATUS_BUCKET_LABELS, UNKNOWN_STATUS_LABEL, Settings, get_status_codes


def _as_int(code) -> int | None:
    try:
        return int(code)
    except (TypeError, ValueError):
        return None


class OrderStatusMapper:
    """Bucket membership comes from configuration; this class only looks it up."""

    def __init__(self, conf: Settings | None = None):
        self.status_codes = get_status_codes(conf)

    def bucket_for(self, code) -> str | None:
        code = _as_int(code)
        if code is None:
            return None
        for bucket, codes in self.status_codes.items():
            if code in codes:
                return bucket
        return None

    def get_status_from_code(self, code) -> str:
        bucket = self.bucket_for(code)
        return STATUS_BUCKET_LABELS.get(bucket, UNKNOWN_STATUS_LABEL) if bucket else UNKNOWN_STATUS_LABEL

    def is_approved(self, code) -> bool:
        code = _as_int(code)
        return code is not None and code in self.status_codes["approved"]
