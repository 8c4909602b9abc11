import json
import logging
from urllib.parse import quote

import fastapi
import sqlmodel
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse
from sqlmodel import Session

from app.api.deps import get_mobbex_api, get_reconciler, require_admin
from app.core.config import MOBBEX_VERSION, PLATFORM_NAME, settings
from app.core.database import get_db
from app.core.exceptions import CaptureValidationError, OperationFailedError, PluginNotReadyError
from app.core.rate_limit import limiter
from app.core.security import TokenAuthenticator
from app.models import SecurityLog
from app.schemas import CaptureRequest, CaptureResponse, TransactionItem, WebhookResponse
from app.services.capture import capture_payment
from app.services.normalizer import nest_form_fields
from app.services.gateway import MobbexApi
from app.services.orders import OrderRepository
from app.services.plans import PlanEligibilityResolver
from app.services.reconcile import ReconcileFailure, ReconciliationEngine
from app.services.transactions import TransactionStore

router = APIRouter(prefix="/mobbex", tags=["mobbex"])
log = logging.getLogger("mobbex")
_RATE_LIMIT = f"{settings.rate_limit_per_minute}/minute"

MSG_NOT_VALIDATED = "No se pudo validar la transacción. Contacte con el administrador de su sitio"
MSG_INVALID_TOKEN = "Token de seguridad inválido."
MSG_FAILED = "Transacción fallida. Reintente con otro método de pago."


def _client_ip(request: Request) -> str:
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    return request.client.host if request.client else ""


def _platform() -> dict:
    return {
        "name": PLATFORM_NAME,
        "version": MOBBEX_VERSION,
        "ecommerce": {"fastapi": fastapi.__version__, "sqlmodel": sqlmodel.__version__},
    }


async def _read_body(request: Request) -> dict:
    """JSON body, or a form-encoded body with bracketed keys rebuilt into nested dicts."""
    raw = await request.body()
    if raw:
        try:
            parsed = json.loads(raw)
            return parsed if isinstance(parsed, dict) else {}
        except ValueError:
            pass
    form = await request.form()
    return nest_form_fields(form.multi_items())


@router.post("/v1/webhook", response_model=WebhookResponse, response_model_exclude_none=True)
async def mobbex_webhook(
    request: Request,
    mobbex_order_id: str | None = None,
    mobbex_token: str | None = None,
    engine: ReconciliationEngine = Depends(get_reconciler),
    db: Session = Depends(get_db),
):
    """Mobbex payment notification. Always 200: Mobbex must check `result`."""
    try:
        body = await _read_body(request)
    except Exception as e:
        log.warning("Mobbex webhook body unreadable: %s", e)
        return {"result": False}
    log.debug("REST API > Request order=%s", mobbex_order_id)

    result = engine.process(mobbex_order_id, mobbex_token, body)
    if not result.success:
        if result.failure == ReconcileFailure.AUTHENTICATION:
            try:
                db.add(SecurityLog(event="invalid_token", ip=_client_ip(request) or None, endpoint=request.url.path, detail=f"order={mobbex_order_id}"))
                db.commit()
            except Exception as e:
                log.warning("SecurityLog invalid_token write failed: %s", e)
        return {"result": False}
    return {"result": True, "platform": _platform()}


def _redirect_to_cart_with_error(message: str) -> RedirectResponse:
    base = (settings.frontend_url or "").rstrip("/")
    return RedirectResponse(url=f"{base}/cart?error={quote(message)}", status_code=302)


@router.get("/return")
@limiter.limit(_RATE_LIMIT)
def mobbex_return_url(
    request: Request,
    status: str | None = None,
    mobbex_order_id: str | None = None,
    mobbex_token: str | None = None,
    db: Session = Depends(get_db),
):
    """Shopper lands here from the Mobbex checkout: order-received page or cart with an error."""
    if not status or not mobbex_order_id or not mobbex_token:
        return _redirect_to_cart_with_error(MSG_NOT_VALIDATED)
    if not settings.is_ready() or not TokenAuthenticator(settings).validate(mobbex_token):
        return _redirect_to_cart_with_error(MSG_INVALID_TOKEN)

    order = OrderRepository(db).get(mobbex_order_id)
    try:
        code = int(status)
    except ValueError:
        code = 0
    if not order or not (1 < code < 400):
        return _redirect_to_cart_with_error(MSG_FAILED)

    base = (settings.frontend_url or "").rstrip("/")
    return RedirectResponse(url=f"{base}/checkout/order-received/{order.id}", status_code=302)


@router.post("/capture", response_model=CaptureResponse)
def mobbex_capture(
    body: CaptureRequest,
    _=Depends(require_admin),
    api: MobbexApi = Depends(get_mobbex_api),
):
    """Captures an authorized (two-step) payment."""
    try:
        capture_payment(body.payment_id, body.total, api=api)
    except PluginNotReadyError as e:
        raise HTTPException(status_code=503, detail=e.message)
    except CaptureValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except OperationFailedError as e:
        raise HTTPException(status_code=502, detail=e.message)
    return {"result": True, "payment_id": body.payment_id, "total": body.total}


@router.get("/sources")
@limiter.limit(_RATE_LIMIT)
def mobbex_sources(
    request: Request,
    total: float | None = None,
    products: str | None = None,
    db: Session = Depends(get_db),
    api: MobbexApi = Depends(get_mobbex_api),
):
    """Payment methods for a total, filtered by the plans configured on the given products."""
    if not settings.is_ready():
        return {"installments": [], "sources": []}
    ids = [int(p) for p in (products or "").split(",") if p.strip().isdigit()]
    installments = PlanEligibilityResolver(db).get_installments(ids) if ids else []
    return {"installments": installments, "sources": api.get_sources(total, installments)}


@router.get("/sources/advanced")
@limiter.limit(_RATE_LIMIT)
def mobbex_sources_advanced(
    request: Request,
    rule: str = "externalMatch",
    api: MobbexApi = Depends(get_mobbex_api),
):
    if not settings.is_ready():
        return {"sources": []}
    return {"sources": api.get_sources_advanced(rule)}


@router.get("/orders/{order_id}/transactions", response_model=list[TransactionItem])
def mobbex_order_transactions(order_id: str, _=Depends(require_admin), db: Session = Depends(get_db)):
    """Webhook history of an order (every delivery, oldest first)."""
    rows = TransactionStore(db).for_order(order_id)
    return [
        TransactionItem(
            id=t.id,
            order_id=t.order_id,
            payment_id=t.payment_id,
            parent=t.parent,
            status_code=t.status_code,
            status_message=t.status_message,
            source_name=t.source_name,
            source_type=t.source_type,
            total=t.total,
            currency=t.currency,
            risk_analysis=t.risk_analysis,
            installment=t.installment(),
            created=t.created,
            stored_at=t.stored_at.isoformat(),
        )
        for t in rows
    ]
