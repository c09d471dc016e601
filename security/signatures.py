import hashlib
import hmac


def compute_hmac_sha256(secret: str, payload) -> str:
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def constant_time_compare(a, b) -> bool:
    if not a or not b:
        return False
    return hmac.compare_digest(str(a), str(b))


def payment_signature(order_id: str, payment_id: str, key_secret: str) -> str:
    """Checkout signature: HMAC-SHA256 hex of ``order_id|payment_id``."""
    return compute_hmac_sha256(key_secret, f"{order_id}|{payment_id}")


def verify_payment_signature(order_id, payment_id, signature, key_secret) -> bool:
    if not key_secret:
        return False
    return constant_time_compare(payment_signature(order_id, payment_id, key_secret), signature)


def verify_webhook_signature(raw_body: bytes, signature, webhook_secret) -> bool:
    if not webhook_secret:
        return False
    return constant_time_compare(compute_hmac_sha256(webhook_secret, raw_body), signature)
