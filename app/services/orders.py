"""Order repository: the store-side operations the Mobbex webhook needs."""
import json
import logging
from datetime import datetime, timezone
from typing import Any

from sqlmodel import Session, select

from app.models import OrderFeeItem, OrderLineItem, OrderNote, ShopOrder

logger = logging.getLogger(__name__)

# Statuses in which a payment can still be completed
NEEDS_PAYMENT_STATUSES = ("pending", "on-hold", "failed")


def _round(amount: float) -> float:
    return round(float(amount), 2)


class OrderRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, order_id: int | str) -> ShopOrder | None:
        try:
            return self.db.get(ShopOrder, int(order_id))
        except (TypeError, ValueError):
            return None

    # ---------- meta ----------
    def get_meta(self, order: ShopOrder, key: str, default: Any = None) -> Any:
        try:
            meta = json.loads(order.meta or "{}")
        except ValueError:
            meta = {}
        return meta.get(key, default)

    def update_meta(self, order: ShopOrder, key: str, value: Any) -> None:
        """Last write wins."""
        try:
            meta = json.loads(order.meta or "{}")
        except ValueError:
            meta = {}
        meta[key] = value
        order.meta = json.dumps(meta, ensure_ascii=False)

    # ---------- notes / items ----------
    def add_note(self, order: ShopOrder, note: str) -> None:
        self.db.add(OrderNote(order_id=order.id, note=note))

    def notes(self, order: ShopOrder) -> list[str]:
        stmt = select(OrderNote).where(OrderNote.order_id == order.id).order_by(OrderNote.id)
        return [n.note for n in self.db.exec(stmt).all()]

    def line_items(self, order: ShopOrder) -> list[OrderLineItem]:
        stmt = select(OrderLineItem).where(OrderLineItem.order_id == order.id).order_by(OrderLineItem.id)
        return list(self.db.exec(stmt).all())

    def fee_items(self, order: ShopOrder) -> list[OrderFeeItem]:
        stmt = select(OrderFeeItem).where(OrderFeeItem.order_id == order.id).order_by(OrderFeeItem.id)
        return list(self.db.exec(stmt).all())

    def add_fee(self, order: ShopOrder, name: str, amount: float) -> OrderFeeItem:
        item = OrderFeeItem(order_id=order.id, name=name, amount=_round(amount), total=_round(amount))
        self.db.add(item)
        self.db.flush()
        return item

    def calculate_totals(self, order: ShopOrder) -> float:
        """Order total = line items + fee items."""
        self.db.flush()
        total = sum(i.total for i in self.line_items(order)) + sum(f.total for f in self.fee_items(order))
        order.total = _round(total)
        return order.total

    # ---------- order fields ----------
    def set_payment_method_title(self, order: ShopOrder, title: str) -> None:
        order.payment_method_title = title

    def set_total(self, order: ShopOrder, total: float) -> None:
        order.total = _round(total)

    def update_status(self, order: ShopOrder, new_status: str, note: str = "") -> bool:
        """Moves the order to new_status and notes the transition. No note when the status is unchanged."""
        old = order.status
        if old == new_status:
            return False
        order.status = new_status
        self.add_note(order, f"{note} Estado del pedido cambiado de {old} a {new_status}.".strip())
        return True

    def payment_complete(self, order: ShopOrder, transaction_id: str) -> bool:
        """
        Marks the order as paid. Repeating it for the same transaction id is a no-op.
        Returns True when the order was changed.
        """
        if order.paid_at and order.transaction_id == transaction_id:
            logger.debug("Order %s already paid with %s", order.id, transaction_id)
            return False
        order.transaction_id = transaction_id
        order.paid_at = datetime.now(timezone.utc)
        if order.status in NEEDS_PAYMENT_STATUSES:
            order.status = "processing"
        return True

    def flush(self, order: ShopOrder) -> None:
        """Writes pending changes inside the current transaction."""
        order.updated_at = datetime.now(timezone.utc)
        self.db.add(order)
        self.db.flush()

    def save(self, order: ShopOrder) -> None:
        order.updated_at = datetime.now(timezone.utc)
        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)
