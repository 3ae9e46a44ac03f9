import hashlib
import hmac

from storefront.payments.signature import compute_signature, verify_signature

SECRET = "sk_test_abc"
BODY = b'{"event":"charge.success","data":{"reference":"REF123"}}'


def test_compute_signature_is_hmac_sha512_hex():
    expected = hmac.new(SECRET.encode(), BODY, hashlib.sha512).hexdigest()
    assert compute_signature(BODY, SECRET) == expected
    assert len(expected) == 128


def test_verify_signature_accepts_exact_body():
    assert verify_signature(BODY, compute_signature(BODY, SECRET), SECRET) is True
    # En-tête en majuscules / espaces tolérés
    assert verify_signature(BODY, " " + compute_signature(BODY, SECRET).upper(), SECRET) is True


def test_verify_signature_rejects_single_byte_change():
    signature = compute_signature(BODY, SECRET)
    tampered = BODY.replace(b"REF123", b"REF124")
    assert verify_signature(tampered, signature, SECRET) is False


def test_verify_signature_rejects_missing_values_and_wrong_secret():
    signature = compute_signature(BODY, SECRET)
    assert verify_signature(BODY, None, SECRET) is False
    assert verify_signature(BODY, "", SECRET) is False
    assert verify_signature(BODY, signature, "") is False
    assert verify_signature(BODY, signature, "sk_test_other") is False


def test_verify_signature_non_ascii_header_is_false():
    signature = compute_signature(BODY, SECRET)
    assert verify_signature(BODY, "é" + signature[1:], SECRET) is False
    assert verify_signature(b"{}", "\xe9abc", "secret") is False
    assert verify_signature(BODY, "☃", SECRET) is False
