from functools import wraps

from flask import g, request

from models import db
from models.user import User
from security.credentials import TokenError, decode_token
from utils.errors import AuthError, ForbiddenError


def _bearer_token():
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def load_current_user():
    """Resolve ``g.user`` from the bearer token; a bad token only matters on protected routes."""
    g.user = None
    g.token_error = None
    token = _bearer_token()
    if not token:
        return
    try:
        claims = decode_token(token)
    except TokenError as exc:
        g.token_error = str(exc)
        return
    try:
        user_id = int(claims.get("sub"))
    except (TypeError, ValueError):
        g.token_error = "Invalid token"
        return
    g.user = db.session.get(User, user_id)
    if g.user is None:
        g.token_error = "User not found"


def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if getattr(g, "user", None) is None:
            raise AuthError(getattr(g, "token_error", None) or "Authentication required")
        return fn(*args, **kwargs)
    return wrapper


def admin_required(fn):
    """
    Usage: @admin_required
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        user = getattr(g, "user", None)
        if user is None:
            raise AuthError(getattr(g, "token_error", None) or "Authentication required")
        if not user.is_admin:
            raise ForbiddenError("Admin access required")
        return fn(*args, **kwargs)
    return wrapper


def can_manage(user, owner_id) -> bool:
    return user is not None and (user.is_admin or user.id == owner_id)
