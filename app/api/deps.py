import hmac

from fastapi import Depends, Header, HTTPException
from sqlmodel import Session

from app.core.config import settings
from app.core.database import get_db
from app.services.gateway import MobbexApi
from app.services.orders import OrderRepository
from app.services.reconcile import ReconciliationEngine
from app.services.transactions import TransactionStore


def require_admin(x_admin_secret: str | None = Header(None, alias="X-Admin-Secret")) -> None:
    """Header secret check (constant-time compare)."""
    expected = (settings.admin_secret or "").strip()
    if not expected:
        raise HTTPException(status_code=503, detail="Admin access not configured (ADMIN_SECRET missing).")
    if not hmac.compare_digest((x_admin_secret or "").encode("utf-8"), expected.encode("utf-8")):
        raise HTTPException(status_code=403, detail="Unauthorized.")


def get_mobbex_api() -> MobbexApi:
    return MobbexApi.from_settings(settings)


def get_reconciler(db: Session = Depends(get_db)) -> ReconciliationEngine:
    return ReconciliationEngine(OrderRepository(db), TransactionStore(db), settings)
