from propbook.models.audit import AuditLog
from propbook.utils.audit import log_audit, sanitize_payload_for_audit


def test_audit_log_masks_sensitive_fields(db_session):
    payload = {
        "amount_paid": "250.00",
        "email": "sensitive@example.com",
        "payment_details": {
            "card_holder": "Asha Menon",
            "card_number": "4111 1111 1111 1234",
            "expiry_date": "12/30",
            "cvv": "123",
            "upi_id": "asha@okbank",
            "razorpay_signature": "abcdef",
        },
        "history": [{"cvv": "999"}],
    }

    log_audit(
        db_session,
        actor="test",
        action="MASK_TEST",
        entity="Payment",
        entity_id=1,
        data=payload,
    )
    db_session.commit()

    entry = (
        db_session.query(AuditLog)
        .filter(AuditLog.action == "MASK_TEST")
        .order_by(AuditLog.id.desc())
        .first()
    )
    assert entry is not None
    assert entry.data_json["amount_paid"] == "250.00"
    assert entry.data_json["email"] == "***@example.com"
    details = entry.data_json["payment_details"]
    assert details["card_holder"] == "Asha Menon"
    assert details["card_number"] == "***1234"
    assert details["expiry_date"] == "***"
    assert details["cvv"] == "***"
    assert details["upi_id"] == "***@okbank"
    assert details["razorpay_signature"] == "***"
    assert entry.data_json["history"][0]["cvv"] == "***"


def test_sanitize_keeps_missing_values_and_does_not_mutate_input():
    payload = {"payment_details": {"card_number": None, "upi_id": "nodomain"}}

    sanitized = sanitize_payload_for_audit(payload)

    assert sanitized["payment_details"]["card_number"] is None
    assert sanitized["payment_details"]["upi_id"] == "***"
    assert payload["payment_details"]["upi_id"] == "nodomain"


def test_audit_entries_are_indexed_by_entity(db_session):
    from sqlalchemy import inspect

    indexes = {ix["name"]: ix["column_names"] for ix in inspect(db_session.get_bind()).get_indexes("audit_logs")}

    assert indexes["ix_audit_logs_entity"] == ["entity", "entity_id"]
