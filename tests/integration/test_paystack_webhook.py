import json

from storefront import config

WEBHOOK_URL = "/api/v1/paystack/webhook"


def _post(client, payload, sign, signature=None):
    raw = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
    headers = {"Content-Type": "application/json", "x-paystack-signature": signature if signature is not None else sign(raw)}
    return client.post(WEBHOOK_URL, content=raw, headers=headers)


def test_valid_webhook_creates_order(client, fake_db, paystack_keys, sign, make_transaction):
    r = _post(client, {"event": "charge.success", "data": make_transaction("REF123")}, sign)

    assert r.status_code == 200
    assert r.json() == {"status": "ok", "created": True}
    assert [o["paystack_reference"] for o in fake_db.rows("orders")] == ["REF123"]


def test_same_event_delivered_twice_creates_one_order(client, fake_db, paystack_keys, sign, make_transaction):
    payload = {"event": "charge.success", "data": make_transaction("REF123")}

    first = _post(client, payload, sign)
    second = _post(client, payload, sign)

    assert first.status_code == second.status_code == 200
    assert second.json() == {"status": "ok", "created": False}
    assert len(fake_db.rows("orders")) == 1


def test_tampered_body_is_rejected(client, fake_db, paystack_keys, sign, make_transaction):
    raw = json.dumps({"event": "charge.success", "data": make_transaction("REF123", amount=500000)}).encode()
    signature = sign(raw)
    tampered = raw.replace(b"500000", b"500001")

    r = _post(client, tampered, sign, signature=signature)

    assert r.status_code == 400
    assert fake_db.rows("orders") == []


def test_missing_signature_is_rejected(client, fake_db, paystack_keys, sign, make_transaction):
    r = _post(client, {"event": "charge.success", "data": make_transaction("REF9")}, sign, signature="")
    assert r.status_code == 400
    assert fake_db.rows("orders") == []


def test_invalid_json_with_valid_signature(client, fake_db, paystack_keys, sign):
    r = _post(client, b"not json at all", sign)
    assert r.status_code == 400


def test_other_events_are_acknowledged(client, fake_db, paystack_keys, sign):
    r = _post(client, {"event": "transfer.success", "data": {"reference": "TRF1"}}, sign)
    assert r.status_code == 200
    assert r.json() == {"status": "ignored"}


def test_lookup_failure_returns_500_for_retry(client, fake_db, paystack_keys, sign, make_transaction):
    fake_db.fail_tables.add("users")
    r = _post(client, {"event": "charge.success", "data": make_transaction("REF500")}, sign)

    assert r.status_code == 500
    assert fake_db.rows("orders") == []


def test_unknown_buyer_returns_500(client, fake_db, paystack_keys, sign, make_transaction):
    r = _post(client, {"event": "charge.success", "data": make_transaction("REF501", user_id="ghost")}, sign)
    assert r.status_code == 500


def test_missing_secret_is_misconfiguration(client, fake_db, monkeypatch, sign, make_transaction):
    monkeypatch.setattr(config, "PAYSTACK_WEBHOOK_SECRET", "")
    r = _post(client, {"event": "charge.success", "data": make_transaction("REF502")}, sign)
    assert r.status_code == 500
    assert fake_db.rows("orders") == []


def test_non_ascii_signature_header_is_rejected(client, fake_db, paystack_keys, sign, make_transaction):
    r = _post(client, {"event": "charge.success", "data": make_transaction("REF123")}, sign, signature=b"\xe9bad")

    assert r.status_code == 400
    assert fake_db.rows("orders") == []


def test_signed_event_with_non_object_data_is_rejected(client, fake_db, paystack_keys, sign):
    r = _post(client, {"event": "charge.success", "data": ["not", "an", "object"]}, sign)

    assert r.status_code == 400
    assert fake_db.rows("orders") == []
