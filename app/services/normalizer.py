"""
Mobbex webhook normalization.

Flattens the nested notification into a fixed-shape record. Missing fields
become "" so every record has the same keys; nested detail is kept as JSON
text instead of being decomposed.
"""
import json
import re
from typing import Any

CHILD_PREFIX = "CHD-"
_FORM_KEY = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])*)$")


def _listify(node: Any) -> Any:
    """Dicts keyed 0..n-1 become lists, as PHP-style form arrays are."""
    if not isinstance(node, dict):
        return node
    node = {k: _listify(v) for k, v in node.items()}
    if node and all(k.isdigit() for k in node) and sorted(int(k) for k in node) == list(range(len(node))):
        return [node[str(i)] for i in range(len(node))]
    return node


def nest_form_fields(items) -> dict:
    """
    Rebuilds a nested body from bracketed form keys:
    data[payment][status][code]=200 -> {"data": {"payment": {"status": {"code": "200"}}}}.
    Values stay strings. An empty bracket appends (childs[]=a&childs[]=b).
    """
    root: dict = {}
    for key, value in items:
        m = _FORM_KEY.match(key)
        if not m:
            root[key] = value
            continue
        parts = [m.group(1)] + re.findall(r"\[([^\[\]]*)\]", m.group(2))
        cur = root
        for part in parts[:-1]:
            if part == "":
                part = str(len(cur))
            nxt = cur.get(part)
            if not isinstance(nxt, dict):
                nxt = cur[part] = {}
            cur = nxt
        last = parts[-1]
        cur[str(len(cur)) if last == "" else last] = value
    return _listify(root)


def extract_payload(body: Any) -> dict:
    """Notification payload: body["data"] when present, otherwise the whole body."""
    if not isinstance(body, dict):
        return {}
    data = body.get("data")
    if isinstance(data, dict):
        return data
    return body


def is_parent_webhook(payment_id: str) -> bool:
    """Child (split / multivendor) payments carry the CHD- prefix."""
    return not str(payment_id).startswith(CHILD_PREFIX)


def _get(res: dict, *path: str) -> Any:
    """Nested lookup; None when any step is missing."""
    cur: Any = res
    for key in path:
        if not isinstance(cur, dict) or key not in cur or cur[key] is None:
            return None
        cur = cur[key]
    return cur


def _value(res: dict, *path: str) -> Any:
    v = _get(res, *path)
    return "" if v is None else v


def _dumps(res: dict, *path: str) -> str:
    v = _get(res, *path)
    return "" if v is None else json.dumps(v, ensure_ascii=False)


def format_webhook_data(order_id: int | str, res: dict) -> dict[str, Any]:
    res = res if isinstance(res, dict) else {}
    payment_id = _value(res, "payment", "id")
    if payment_id == "":
        parent = ""
    else:
        parent = "yes" if is_parent_webhook(payment_id) else "no"
    return {
        "order_id": "" if order_id is None else str(order_id),
        "parent": parent,
        "childs": _dumps(res, "childs"),
        "operation_type": _value(res, "payment", "operation", "type"),
        "payment_id": payment_id,
        "description": _value(res, "payment", "description"),
        "status_code": _value(res, "payment", "status", "code"),
        "status_message": _value(res, "payment", "status", "message"),
        "source_name": _value(res, "payment", "source", "name"),
        "source_type": _value(res, "payment", "source", "type"),
        "source_reference": _value(res, "payment", "source", "reference"),
        "source_number": _value(res, "payment", "source", "number"),
        "source_expiration": _dumps(res, "payment", "source", "expiration"),
        "source_installment": _dumps(res, "payment", "source", "installment"),
        "installment_name": _value(res, "payment", "source", "installment", "description"),
        "installment_amount": _value(res, "payment", "source", "installment", "amount"),
        "installment_count": _value(res, "payment", "source", "installment", "count"),
        "source_url": _dumps(res, "payment", "source", "url"),
        "cardholder": _dumps(res, "payment", "source", "cardholder"),
        "entity_name": _value(res, "entity", "name"),
        "entity_uid": _value(res, "entity", "uid"),
        "customer": _dumps(res, "customer"),
        "checkout_uid": _value(res, "checkout", "uid"),
        "total": _value(res, "payment", "total"),
        "currency": _value(res, "checkout", "currency"),
        "risk_analysis": _value(res, "payment", "riskAnalysis", "level"),
        "data": json.dumps(res, ensure_ascii=False) if res else "",
        "created": _value(res, "payment", "created"),
        "updated": _value(res, "payment", "updated"),
    }
