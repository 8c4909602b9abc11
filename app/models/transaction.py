"""Mobbex webhook history: one row per delivery, never updated."""
import json
from datetime import datetime, timezone
from typing import Any

from sqlmodel import Field, SQLModel

# Numeric columns: the normalizer's "" sentinel is stored as NULL
_INT_COLUMNS = ("status_code", "installment_count")
_FLOAT_COLUMNS = ("installment_amount", "total")


def _loads(raw: str | None) -> Any:
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return None


def _to_number(value: Any, cast):
    if value == "" or value is None:
        return None
    try:
        return cast(value)
    except (TypeError, ValueError):
        return None


class MobbexTransaction(SQLModel, table=True):
    __tablename__ = "mobbex_transaction"

    id: int | None = Field(default=None, primary_key=True)
    # No unique constraint: duplicate deliveries are kept as separate rows
    order_id: str = Field(index=True)
    payment_id: str = Field(default="", index=True)
    checkout_uid: str = ""
    entity_uid: str = ""
    entity_name: str = ""
    parent: str = ""  # "yes" | "no" | "" (no payment id)
    operation_type: str = ""
    childs: str = ""  # JSON
    description: str = ""
    status_code: int | None = None
    status_message: str = ""
    source_name: str = ""
    source_type: str = ""
    source_reference: str = ""
    source_number: str = ""
    source_expiration: str = ""  # JSON
    source_installment: str = ""  # JSON
    installment_name: str = ""
    installment_amount: float | None = None
    installment_count: int | None = None
    source_url: str = ""  # JSON
    cardholder: str = ""  # JSON
    customer: str = ""  # JSON
    total: float | None = None
    currency: str = ""
    risk_analysis: str = ""
    data: str = ""  # Full webhook payload (JSON), kept for audit / replay
    created: str = ""
    updated: str = ""
    stored_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_webhook_data(cls, data: dict[str, Any]) -> "MobbexTransaction":
        values: dict[str, Any] = {}
        for key, value in data.items():
            if key not in cls.model_fields:
                continue
            if key in _INT_COLUMNS:
                values[key] = _to_number(value, int)
            elif key in _FLOAT_COLUMNS:
                values[key] = _to_number(value, float)
            elif value is None:
                values[key] = ""
            else:
                values[key] = str(value)
        return cls(**values)

    @property
    def is_parent(self) -> bool:
        return self.parent == "yes"

    def payload(self) -> dict:
        return _loads(self.data) or {}

    def child_list(self) -> list:
        return _loads(self.childs) or []

    def expiration(self) -> Any:
        return _loads(self.source_expiration)

    def installment(self) -> dict:
        return _loads(self.source_installment) or {}

    def cardholder_data(self) -> dict:
        return _loads(self.cardholder) or {}

    def source_url_data(self) -> Any:
        return _loads(self.source_url)

    def customer_data(self) -> dict:
        return _loads(self.customer) or {}
