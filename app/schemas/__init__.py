from .mobbex import (
    CaptureRequest,
    CaptureResponse,
    PlatformInfo,
    TransactionItem,
    WebhookResponse,
)

__all__ = [
    "CaptureRequest",
    "CaptureResponse",
    "PlatformInfo",
    "TransactionItem",
    "WebhookResponse",
]
