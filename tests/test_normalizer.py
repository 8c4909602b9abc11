"""Webhook payload normalization and the stored record."""
import json

from app.models import MobbexTransaction
from app.services.normalizer import extract_payload, format_webhook_data, is_parent_webhook, nest_form_fields


def test_card_payload_is_flattened(make_webhook):
    payload = make_webhook(total=300.0, risk_level=2)["data"]
    data = format_webhook_data(15, payload)

    assert data["order_id"] == "15"
    assert data["payment_id"] == "ABC-123"
    assert data["parent"] == "yes"
    assert data["status_code"] == 200
    assert data["status_message"] == "Pago aprobado"
    assert data["source_name"] == "Visa"
    assert data["source_type"] == "card"
    assert data["source_number"] == "4507 XXXX XXXX 0010"
    assert data["installment_name"] == "Ahora 3"
    assert data["installment_count"] == 3
    assert data["installment_amount"] == 100.0
    assert data["entity_uid"] == "ent-1"
    assert data["checkout_uid"] == "chk-1"
    assert data["currency"] == "ARS"
    assert data["total"] == 300.0
    assert data["risk_analysis"] == 2
    assert data["operation_type"] == "payment.v2"
    assert data["updated"] == "2026-10-01T10:05:00.000Z"
    # Nested detail is kept as JSON text
    assert json.loads(data["source_expiration"]) == {"month": "12", "year": "30"}
    assert json.loads(data["cardholder"])["name"] == "JUAN PEREZ"
    assert json.loads(data["data"]) == payload


def test_missing_fields_become_empty_string():
    data = format_webhook_data(1, {"payment": {"id": "P-1"}})
    for key in ("status_code", "source_name", "source_installment", "installment_count", "total", "risk_analysis", "childs", "entity_uid"):
        assert data[key] == ""
    assert data["parent"] == "yes"


def test_empty_payload_keeps_shape():
    data = format_webhook_data(None, {})
    assert data["parent"] == ""
    assert data["order_id"] == ""
    assert data["data"] == ""
    assert set(data) == set(format_webhook_data(1, {"payment": {"id": "X"}}))


def test_parent_classification():
    assert is_parent_webhook("ABC-123") is True
    assert is_parent_webhook("CHD-ABC-123") is False
    assert format_webhook_data(1, {"payment": {"id": "CHD-ABC-123"}})["parent"] == "no"


def test_extract_payload_prefers_data_key():
    assert extract_payload({"type": "checkout", "data": {"payment": {"id": "A"}}}) == {"payment": {"id": "A"}}
    assert extract_payload({"payment": {"id": "A"}}) == {"payment": {"id": "A"}}
    assert extract_payload(["not", "a", "dict"]) == {}


def test_stored_record_converts_sentinels_and_parses_lazily(make_webhook):
    payload = make_webhook()["data"]
    payload["childs"] = [{"id": "CHD-1"}]
    row = MobbexTransaction.from_webhook_data(format_webhook_data(3, payload))
    assert row.status_code == 200
    assert row.total == 100.0
    assert row.is_parent is True
    assert row.installment()["count"] == 3
    assert row.cardholder_data()["identification"] == "12345678"
    assert row.child_list() == [{"id": "CHD-1"}]
    assert row.customer_data()["email"] == "juan@example.com"
    assert row.payload() == payload

    empty = MobbexTransaction.from_webhook_data(format_webhook_data(3, {"payment": {"id": "X"}}))
    assert empty.status_code is None
    assert empty.total is None
    assert empty.installment() == {}
    assert empty.expiration() is None


def test_form_fields_are_nested():
    body = nest_form_fields([
        ("type", "checkout"),
        ("data[payment][id]", "ABC-123"),
        ("data[payment][status][code]", "200"),
        ("data[childs][0][id]", "CHD-1"),
        ("data[childs][1][id]", "CHD-2"),
        ("tags[]", "a"),
        ("tags[]", "b"),
    ])
    assert body == {
        "type": "checkout",
        "data": {
            "payment": {"id": "ABC-123", "status": {"code": "200"}},
            "childs": [{"id": "CHD-1"}, {"id": "CHD-2"}],
        },
        "tags": ["a", "b"],
    }
    data = format_webhook_data(7, extract_payload(body))
    assert data["payment_id"] == "ABC-123"
    assert data["status_code"] == "200"
    assert json.loads(data["childs"]) == [{"id": "CHD-1"}, {"id": "CHD-2"}]
