from typing import Any

from pydantic import BaseModel


class PlatformInfo(BaseModel):
    name: str
    version: str
    ecommerce: dict[str, str] = {}


class WebhookResponse(BaseModel):
    """Always answered with HTTP 200; Mobbex must read `result`."""
    result: bool
    platform: PlatformInfo | None = None


class CaptureRequest(BaseModel):
    """Two-step payments: captures the authorized amount."""
    payment_id: str
    total: float


class CaptureResponse(BaseModel):
    result: bool
    payment_id: str
    total: float


class TransactionItem(BaseModel):
    id: int
    order_id: str
    payment_id: str
    parent: str
    status_code: int | None = None
    status_message: str
    source_name: str
    source_type: str
    total: float | None = None
    currency: str
    risk_analysis: str
    installment: dict[str, Any] = {}
    created: str
    stored_at: str
