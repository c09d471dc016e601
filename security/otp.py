import hashlib
import secrets
from datetime import datetime, timedelta

from flask import current_app, request

from models import db
from models.one_time_code import OneTimeCode
from utils.errors import ValidationError


def _hash_code(code: str) -> str:
    return hashlib.sha256(code.encode("utf-8")).hexdigest()


def _generate_code(length: int) -> str:
    return "".join(secrets.choice("0123456789") for _ in range(length))


def issue_code(email: str, purpose: str) -> str:
    """Replace any open code for (email, purpose) and return the new raw code. Caller commits."""
    OneTimeCode.query.filter_by(email=email, purpose=purpose, consumed_at=None).delete()

    code = _generate_code(current_app.config.get("OTP_LENGTH", 6))
    ttl = current_app.config.get("OTP_TTL_SECONDS", 300)
    db.session.add(OneTimeCode(
        email=email,
        purpose=purpose,
        code_hash=_hash_code(code),
        expires_at=datetime.utcnow() + timedelta(seconds=ttl),
        ip=request.headers.get("X-Forwarded-For", request.remote_addr),
    ))
    return code


def _open_code(email: str, purpose: str):
    return (
        OneTimeCode.query
        .filter_by(email=email, purpose=purpose, consumed_at=None)
        .order_by(OneTimeCode.created_at.desc())
        .first()
    )


def check_code(email: str, purpose: str, code: str) -> OneTimeCode:
    """Verify a submitted code, counting the attempt. Raises ValidationError on failure."""
    row = _open_code(email, purpose)
    if not row or row.expires_at < datetime.utcnow():
        raise ValidationError("OTP expired or not found")

    max_attempts = current_app.config.get("OTP_MAX_ATTEMPTS", 5)
    if row.attempts >= max_attempts:
        raise ValidationError("Too many attempts, request a new OTP")

    row.attempts += 1
    if not secrets.compare_digest(row.code_hash, _hash_code(str(code or "").strip())):
        db.session.commit()
        raise ValidationError("Invalid OTP")

    row.verified_at = datetime.utcnow()
    return row


def consume_verified(email: str, purpose: str) -> bool:
    """Consume a previously verified, unexpired code. Caller commits."""
    row = _open_code(email, purpose)
    if not row or not row.verified_at or row.expires_at < datetime.utcnow():
        return False
    row.consumed_at = datetime.utcnow()
    return True
