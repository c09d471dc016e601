from datetime import datetime, timedelta

import bcrypt
from flask import current_app, has_app_context
from jose import JWTError, jwt

MIN_PASSWORD_LENGTH = 8


class TokenError(Exception):
    pass


def hash_password(plain_password: str) -> str:
    if not isinstance(plain_password, str) or len(plain_password) == 0:
        raise ValueError("Password must be a non-empty string")

    # bcrypt expects bytes
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12) if has_app_context() else 12
    hashed = bcrypt.hashpw(plain_password.encode("utf-8"), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    if not plain_password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # malformed stored hash
        return False


def password_problems(password) -> list:
    problems = []
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        problems.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    return problems


def issue_token(user) -> str:
    cfg = current_app.config
    expires = datetime.utcnow() + timedelta(minutes=cfg["JWT_EXPIRES_MINUTES"])
    claims = {
        "sub": str(user.id),
        "is_admin": bool(user.is_admin),
        "exp": expires,
    }
    return jwt.encode(claims, cfg["JWT_SECRET_KEY"], algorithm=cfg["JWT_ALGORITHM"])


def decode_token(token: str) -> dict:
    cfg = current_app.config
    try:
        claims = jwt.decode(token, cfg["JWT_SECRET_KEY"], algorithms=[cfg["JWT_ALGORITHM"]])
    except JWTError as exc:
        raise TokenError("Invalid or expired token") from exc
    if not claims.get("sub"):
        raise TokenError("Invalid token")
    return claims
