import logging

from flask import Blueprint, request, g

from models import db
from models.user import User
from security.access import login_required
from security.credentials import hash_password, verify_password, password_problems, issue_token
from security import otp
from services import notifications
from utils.audit import log_event
from utils.errors import AuthError, ConflictError, NotFoundError, ValidationError
from utils.responses import ok
from utils.validation import clean_str, is_valid_email, MOBILE_RE

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")

PROFILE_FIELDS = ("first_name", "last_name", "country", "state", "city")


def _email_from(data) -> str:
    email = (clean_str(data.get("email")) or "").lower()
    if not is_valid_email(email):
        raise ValidationError("Invalid email")
    return email


def _send_code(email, purpose):
    code = otp.issue_code(email, purpose)
    row = notifications.enqueue(f"otp_{purpose.lower()}", email, notifications.otp_email(code, purpose))
    db.session.commit()
    notifications.dispatch([row])


def _auth_payload(user):
    return {"token": issue_token(user), "user": user.to_dict()}


@auth_bp.post("/register/send-otp")
def register_send_otp():
    data = request.get_json(silent=True) or {}
    email = _email_from(data)
    if User.query.filter_by(email=email).first():
        raise ConflictError("Email already registered")
    _send_code(email, "REGISTER")
    return ok(message="OTP sent to email")


@auth_bp.post("/register/verify-otp")
def register_verify_otp():
    data = request.get_json(silent=True) or {}
    email = _email_from(data)
    otp.check_code(email, "REGISTER", data.get("otp"))
    db.session.commit()
    return ok(message="Email verified")


@auth_bp.post("/register")
def register():
    data = request.get_json(silent=True) or {}
    email = _email_from(data)
    first_name = clean_str(data.get("first_name"))
    last_name = clean_str(data.get("last_name"))
    password = data.get("password") or ""
    mobile = clean_str(data.get("mobile_number"))

    if not first_name or not last_name:
        raise ValidationError("first_name and last_name are required")
    problems = password_problems(password)
    if problems:
        raise ValidationError("Password does not meet policy", errors=problems)
    if mobile and not MOBILE_RE.match(mobile):
        raise ValidationError("mobile_number must be 10 digits")

    if User.query.filter_by(email=email).first():
        log_event("REGISTER_FAIL_EMAIL_EXISTS", details={"email": email})
        raise ConflictError("Email already registered")
    if not otp.consume_verified(email, "REGISTER"):
        raise ValidationError("Email not verified")

    user = User(
        email=email,
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        mobile_number=mobile,
        country=clean_str(data.get("country")),
        state=clean_str(data.get("state")),
        city=clean_str(data.get("city")),
    )
    db.session.add(user)
    db.session.commit()

    log_event("REGISTER_SUCCESS", user_id=user.id, entity="user", entity_id=user.id)
    logger.info("Registered user %s", user.id)
    return ok(_auth_payload(user), message="Registration successful", status=201)


@auth_bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    email = (clean_str(data.get("email")) or "").lower()
    password = data.get("password") or ""
    if not email or not password:
        raise ValidationError("Email and password are required")

    user = User.query.filter_by(email=email).first()
    if not user or not verify_password(password, user.password_hash):
        log_event("LOGIN_FAIL", details={"email": email})
        raise AuthError("Invalid credentials")

    log_event("LOGIN_SUCCESS", user_id=user.id)
    return ok(_auth_payload(user), message="Login successful")


@auth_bp.post("/send-otp")
def send_login_otp():
    data = request.get_json(silent=True) or {}
    email = _email_from(data)
    if not User.query.filter_by(email=email).first():
        raise NotFoundError("User not found")
    _send_code(email, "LOGIN")
    return ok(message="OTP sent to email")


@auth_bp.post("/verify-otp")
def verify_login_otp():
    data = request.get_json(silent=True) or {}
    email = _email_from(data)
    user = User.query.filter_by(email=email).first()
    if not user:
        raise NotFoundError("User not found")

    row = otp.check_code(email, "LOGIN", data.get("otp"))
    row.consumed_at = row.verified_at
    db.session.commit()

    log_event("LOGIN_OTP_SUCCESS", user_id=user.id)
    return ok(_auth_payload(user), message="Login successful")


@auth_bp.post("/forgot-password")
def forgot_password():
    data = request.get_json(silent=True) or {}
    email = _email_from(data)
    if User.query.filter_by(email=email).first():
        _send_code(email, "RESET_PASSWORD")
    # same answer either way so the endpoint cannot be used to probe accounts
    return ok(message="If the email is registered, an OTP has been sent")


@auth_bp.post("/reset-password")
def reset_password():
    data = request.get_json(silent=True) or {}
    email = _email_from(data)
    new_password = data.get("new_password") or ""
    problems = password_problems(new_password)
    if problems:
        raise ValidationError("Password does not meet policy", errors=problems)

    user = User.query.filter_by(email=email).first()
    if not user:
        raise ValidationError("OTP expired or not found")

    row = otp.check_code(email, "RESET_PASSWORD", data.get("otp"))
    row.consumed_at = row.verified_at
    user.password_hash = hash_password(new_password)
    db.session.commit()

    log_event("PASSWORD_RESET", user_id=user.id, entity="user", entity_id=user.id)
    return ok(message="Password reset successful")


@auth_bp.get("/me")
@login_required
def me():
    return ok(g.user.to_dict())


@auth_bp.put("/me")
@login_required
def update_profile():
    data = request.get_json(silent=True) or {}
    user = g.user

    for field in PROFILE_FIELDS:
        if field in data:
            value = clean_str(data.get(field))
            if value is None and field in ("first_name", "last_name"):
                raise ValidationError(f"{field} cannot be empty")
            setattr(user, field, value)

    if "mobile_number" in data:
        mobile = clean_str(data.get("mobile_number"))
        if mobile and not MOBILE_RE.match(mobile):
            raise ValidationError("mobile_number must be 10 digits")
        user.mobile_number = mobile

    db.session.commit()
    log_event("PROFILE_UPDATE", user_id=user.id, entity="user", entity_id=user.id)
    return ok(user.to_dict(), message="Profile updated")
