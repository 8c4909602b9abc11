"""
Mobbex webhook reconciliation.

RECEIVED -> AUTHENTICATED -> NORMALIZED -> PERSISTED -> (child: done | parent: MUTATING -> DONE)

Every delivery that passes authentication is stored, whatever its status.
Only parent payments touch the order. Nothing here raises to the caller:
failures come back as a ReconcileResult with a failure kind.

Known gaps, kept on purpose:
- the payment note is appended on every delivery (duplicate deliveries, duplicate notes);
- the order total is overwritten on every delivery, the fee line only once (mbbx_updated);
- no per-order lock: two concurrent deliveries can both pass the mbbx_updated check.
"""
import logging
from enum import Enum
from typing import Any, NamedTuple

from app.core.config import Settings, settings
from app.core.security import TokenAuthenticator
from app.models import ShopOrder
from app.services.hooks import WebhookHooks, webhook_hooks
from app.services.normalizer import extract_payload, format_webhook_data
from app.services.order_status import OrderStatusMapper
from app.services.orders import OrderRepository
from app.services.transactions import TransactionStore

logger = logging.getLogger(__name__)

# "void" operations never adjust the order total
VOID_STATUS_CODE = 605
TOTAL_ADJUSTED_FLAG = "mbbx_updated"


class ReconcileFailure(str, Enum):
    CONFIGURATION = "configuration"
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    LOOKUP = "lookup"
    INTERNAL = "internal"


class ReconcileResult(NamedTuple):
    success: bool
    failure: ReconcileFailure | None = None
    message: str = ""
    transaction_id: int | None = None
    parent: bool = False


def _amount(value: Any) -> float | None:
    if value == "" or value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class ReconciliationEngine:
    def __init__(
        self,
        orders: OrderRepository,
        transactions: TransactionStore,
        conf: Settings | None = None,
        mapper: OrderStatusMapper | None = None,
        hooks: WebhookHooks | None = None,
    ):
        self.orders = orders
        self.transactions = transactions
        self.settings = conf or settings
        self.authenticator = TokenAuthenticator(self.settings)
        self.mapper = mapper or OrderStatusMapper(self.settings)
        self.hooks = hooks or webhook_hooks

    def _fail(self, kind: ReconcileFailure, message: str, **extra) -> ReconcileResult:
        logger.warning("Mobbex webhook rejected (%s): %s", kind.value, message)
        return ReconcileResult(False, kind, message, **extra)

    def process(self, order_id: str | None, token: str | None, body: Any) -> ReconcileResult:
        try:
            payload = extract_payload(body)
            data = format_webhook_data(order_id, payload)
            logger.debug(
                "Mobbex Webhook Data: id=%s payment_id=%s status=%s",
                order_id, data["payment_id"], data["status_code"],
            )

            if data["status_code"] in ("", 0, None) or not order_id or not token:
                return self._fail(ReconcileFailure.VALIDATION, "Missing status, id, or token.")
            if not self.settings.is_ready():
                return self._fail(ReconcileFailure.CONFIGURATION, "Plugin is not ready.")
            if not self.authenticator.validate(token):
                return self._fail(ReconcileFailure.AUTHENTICATION, "Invalid mobbex token.")

            row = self.transactions.save(data)
            if not row.is_parent:
                logger.info("Mobbex child/empty webhook stored: order=%s payment_id=%s", order_id, data["payment_id"])
                return ReconcileResult(True, transaction_id=row.id, parent=False)

            order = self.orders.get(order_id)
            if not order:
                return self._fail(ReconcileFailure.LOOKUP, f"Order {order_id} not found.", transaction_id=row.id, parent=True)

            self.apply(order, data, payload)
            return ReconcileResult(True, transaction_id=row.id, parent=True)
        except Exception as e:
            logger.exception("Mobbex webhook processing error: order=%s", order_id)
            self.orders.db.rollback()
            return ReconcileResult(False, ReconcileFailure.INTERNAL, str(e))

    def apply(self, order: ShopOrder, data: dict[str, Any], payload: dict[str, Any]) -> None:
        """Order mutations for a parent webhook (steps run in this order)."""
        repo = self.orders
        payment_id = data["payment_id"]
        method = data["source_name"]

        repo.update_meta(order, "mobbex_webhook", payload)
        repo.update_meta(order, "mobbex_payment_id", payment_id)

        if data["entity_uid"]:
            coupon_url = (
                self.settings.mobbex_coupon_url
                .replace("{entity.uid}", str(data["entity_uid"]))
                .replace("{payment.id}", str(payment_id))
            )
            repo.update_meta(order, "mobbex_coupon_url", coupon_url)
            repo.add_note(order, f"URL al Cupón: {coupon_url}")

        note = f"ID de Operación Mobbex: {payment_id}. "
        if data["source_type"] == "card":
            card_info = f"{method} ( {data['source_number']} )"
            plan = f"{data['installment_name']}. {data['installment_count']} Cuota/s de {data['installment_amount']}"
            repo.update_meta(order, "mobbex_card_info", card_info)
            repo.update_meta(order, "mobbex_plan", plan)
            note += f"Pago realizado con {card_info}. {plan}. "
        else:
            note += f"Pago realizado con {method or 'Mobbex'}. "
        repo.add_note(order, note.strip())

        risk = data["risk_analysis"]
        if risk not in ("", None, 0, "0"):
            repo.add_note(order, f"El riesgo de la operación fue evaluado en: {risk}")
            repo.update_meta(order, "mobbex_risk_analysis", risk)

        if method:
            repo.set_payment_method_title(order, f"{method} a través de Mobbex")

        repo.flush(order)

        self.update_order_status(order, data)
        self.update_order_total(order, data)

        # Total paid: authoritative, even when the fee line was skipped
        notified_total = _amount(data["total"])
        if notified_total is not None:
            repo.set_total(order, notified_total)
        repo.flush(order)

        # Subscribers run before the commit: a failing one rolls every mutation back
        self.hooks.emit(data["order_id"], payload)
        repo.save(order)

    def update_order_status(self, order: ShopOrder, data: dict[str, Any]) -> None:
        code = data["status_code"]
        self.orders.update_status(order, self.mapper.get_status_from_code(code), str(data["status_message"] or ""))
        # Payment is completed only for approved codes
        if self.mapper.is_approved(code):
            self.orders.payment_complete(order, data["payment_id"])

    def update_order_total(self, order: ShopOrder, data: dict[str, Any]) -> bool:
        """Adds a fee/discount line for the difference. Returns True when a line was added."""
        repo = self.orders
        notified_total = _amount(data["total"])
        if notified_total is None:
            return False
        current = round(float(order.total or 0), 2)
        try:
            code = int(data["status_code"])
        except (TypeError, ValueError):
            code = None
        if (
            current == round(notified_total, 2)
            or code == VOID_STATUS_CODE
            or repo.get_meta(order, TOTAL_ADJUSTED_FLAG)
        ):
            return False

        diff = notified_total - current
        repo.add_fee(order, "Cargo financiero" if notified_total > current else "Descuento", diff)
        repo.calculate_totals(order)
        repo.update_meta(order, TOTAL_ADJUSTED_FLAG, 1)
        logger.info("Order %s total adjusted by %.2f", order.id, diff)
        return True
