"""Store orders mutated by Mobbex webhooks (WooCommerce order equivalents)."""
from datetime import datetime, timezone

from sqlmodel import Field, SQLModel


class ShopOrder(SQLModel, table=True):
    __tablename__ = "shop_order"

    id: int | None = Field(default=None, primary_key=True)
    status: str = Field(default="pending", index=True)  # pending | processing | on-hold | completed | cancelled | refunded | failed
    total: float = 0.0
    currency: str = "ARS"
    payment_method: str = "mobbex"
    payment_method_title: str = "Mobbex"
    transaction_id: str | None = Field(default=None, index=True)  # Mobbex payment id once paid
    paid_at: datetime | None = None
    meta: str = "{}"  # JSON object: mobbex_webhook, mobbex_payment_id, mbbx_updated ...
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime | None = None


class OrderNote(SQLModel, table=True):
    __tablename__ = "order_note"

    id: int | None = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="shop_order.id", index=True)
    note: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class OrderLineItem(SQLModel, table=True):
    __tablename__ = "order_line_item"

    id: int | None = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="shop_order.id", index=True)
    product_id: int | None = Field(default=None, index=True)
    name: str = ""
    quantity: int = 1
    total: float = 0.0


class OrderFeeItem(SQLModel, table=True):
    """Financing charge / discount added when Mobbex reports a different total."""

    __tablename__ = "order_fee_item"

    id: int | None = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="shop_order.id", index=True)
    name: str
    amount: float
    total: float
