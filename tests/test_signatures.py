import hashlib
import hmac

from security.signatures import (
    compute_hmac_sha256,
    constant_time_compare,
    payment_signature,
    verify_payment_signature,
    verify_webhook_signature,
)

SECRET = "key_secret"


def test_payment_signature_matches_hmac_of_joined_ids():
    expected = hmac.new(SECRET.encode(), b"order_abc|pay_xyz", hashlib.sha256).hexdigest()
    assert payment_signature("order_abc", "pay_xyz", SECRET) == expected
    assert verify_payment_signature("order_abc", "pay_xyz", expected, SECRET)


def test_any_single_character_change_fails():
    sig = payment_signature("order_abc", "pay_xyz", SECRET)
    for i in range(len(sig)):
        replacement = "a" if sig[i] != "a" else "b"
        mutated = sig[:i] + replacement + sig[i + 1:]
        assert not verify_payment_signature("order_abc", "pay_xyz", mutated, SECRET)


def test_signature_bound_to_ids_and_secret():
    sig = payment_signature("order_abc", "pay_xyz", SECRET)
    assert not verify_payment_signature("order_abd", "pay_xyz", sig, SECRET)
    assert not verify_payment_signature("order_abc", "pay_xyy", sig, SECRET)
    assert not verify_payment_signature("order_abc", "pay_xyz", sig, "other")


def test_missing_secret_or_signature_never_verifies():
    sig = payment_signature("order_abc", "pay_xyz", SECRET)
    assert not verify_payment_signature("order_abc", "pay_xyz", sig, None)
    assert not verify_payment_signature("order_abc", "pay_xyz", None, SECRET)
    assert not verify_webhook_signature(b"{}", compute_hmac_sha256(SECRET, b"{}"), "")


def test_webhook_signature_covers_raw_bytes():
    body = b'{"event": "payment.captured"}'
    sig = compute_hmac_sha256(SECRET, body)
    assert verify_webhook_signature(body, sig, SECRET)
    assert not verify_webhook_signature(body + b" ", sig, SECRET)


def test_constant_time_compare():
    assert constant_time_compare("abc", "abc")
    assert not constant_time_compare("abc", "abd")
    assert not constant_time_compare("", "")
