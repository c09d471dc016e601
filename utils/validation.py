import re

from utils.errors import ValidationError

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MOBILE_RE = re.compile(r"^[0-9]{10}$")


def is_valid_email(email) -> bool:
    return isinstance(email, str) and len(email) <= 255 and bool(EMAIL_RE.match(email))


def clean_str(value):
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    value = value.strip()
    return value or None


def require_fields(data: dict, *names):
    missing = [n for n in names if not clean_str(data.get(n))]
    if missing:
        raise ValidationError("Required fields are missing", errors={"missing": missing})


def require_choice(value, choices, field):
    if value not in choices:
        raise ValidationError(f"{field} must be one of: {', '.join(choices)}")
    return value


def optional_number(data: dict, field, cast=float):
    value = data.get(field)
    if value is None or value == "":
        return None
    try:
        return cast(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number")


def page_args(args, default_limit=10, max_limit=100):
    page = args.get("page", 1, type=int) or 1
    limit = args.get("limit", default_limit, type=int) or default_limit
    return max(page, 1), min(max(limit, 1), max_limit)


def paginate(query, page, limit):
    total = query.count()
    rows = query.offset((page - 1) * limit).limit(limit).all()
    pages = (total + limit - 1) // limit if limit else 0
    return rows, {"total": total, "page": page, "limit": limit, "pages": pages}
