"""Capture of an 'authorized' (two-step) Mobbex payment."""
import logging

from app.core.config import Settings, settings
from app.core.exceptions import CaptureValidationError, OperationFailedError, PluginNotReadyError
from app.services.gateway import MobbexApi

logger = logging.getLogger(__name__)


def capture_payment(payment_id: str, total: float | int | str, api: MobbexApi | None = None, conf: Settings | None = None) -> bool:
    """
    Captures the held amount. Single attempt; retrying is up to the caller.
    Raises PluginNotReadyError, CaptureValidationError or OperationFailedError.
    """
    conf = conf or settings
    if not conf.is_ready():
        raise PluginNotReadyError("Plugin is not ready")
    if not payment_id or not total:
        raise CaptureValidationError("Empty Payment UID or params", {"payment_id": payment_id, "total": total})

    api = api or MobbexApi.from_settings(conf)
    response = api.capture(payment_id, total)
    if response and response.get("result"):
        logger.info("Mobbex capture ok: payment_id=%s total=%s", payment_id, total)
        return True
    logger.error("Mobbex capture failed: payment_id=%s response=%s", payment_id, response)
    raise OperationFailedError("An error occurred in the execution", {"payment_id": payment_id})
