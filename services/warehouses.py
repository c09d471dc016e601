import json
import os
import secrets
from datetime import date, datetime, timedelta

from flask import current_app
from werkzeug.utils import secure_filename

from models import db
from models.booking_inquiry import BookingInquiry
from models.payment import Payment
from models.records import ImageListError, normalize_images
from models.warehouse import (
    FLOOR_PLANS, LISTING_FOR, OWNERSHIP_TYPES, PLOT_STATUSES, WAREHOUSE_TYPES,
    Warehouse, WarehouseAnalytics,
)
from utils.errors import ConflictError, ValidationError
from utils.validation import clean_str, is_valid_email, optional_number

REQUIRED_FIELDS = (
    "name", "mobile_number", "email", "ownership_type", "address",
    "city", "state", "pin_code", "warehouse_type", "build_up_area",
)
TEXT_FIELDS = ("name", "mobile_number", "address", "city", "state", "description", "comments")
FLOAT_FIELDS = (
    "build_up_area", "total_plot_area", "total_parking_area",
    "plinth_height", "electricity_kva", "rent",
)
INT_FIELDS = ("pin_code", "dock_doors", "deposit")
CHOICE_FIELDS = {
    "ownership_type": OWNERSHIP_TYPES,
    "warehouse_type": WAREHOUSE_TYPES,
    "plot_status": PLOT_STATUSES,
    "listing_for": LISTING_FOR,
    "floor_plans": FLOOR_PLANS,
}
ALLOWED_IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "webp", "gif"}


def apply_fields(warehouse: Warehouse, data: dict, partial=False):
    """Validate ``data`` and copy it onto ``warehouse``."""
    if not partial:
        missing = [f for f in REQUIRED_FIELDS if clean_str(data.get(f)) is None]
        if missing:
            raise ValidationError("Required fields are missing", errors={"missing": missing})

    for field in TEXT_FIELDS:
        if field in data:
            value = clean_str(data.get(field))
            if value is None and field in REQUIRED_FIELDS:
                raise ValidationError(f"{field} cannot be empty")
            setattr(warehouse, field, value)

    if "email" in data:
        email = (clean_str(data.get("email")) or "").lower()
        if not is_valid_email(email):
            raise ValidationError("Invalid email")
        warehouse.email = email

    for field, choices in CHOICE_FIELDS.items():
        if field in data:
            value = clean_str(data.get(field))
            if value is None and field not in REQUIRED_FIELDS:
                setattr(warehouse, field, None)
                continue
            if value not in choices:
                raise ValidationError(f"{field} must be one of: {', '.join(choices)}")
            setattr(warehouse, field, value)

    for names, cast in ((FLOAT_FIELDS, float), (INT_FIELDS, int)):
        for field in names:
            if field in data:
                value = optional_number(data, field, cast)
                if value is None and field in REQUIRED_FIELDS:
                    raise ValidationError(f"{field} cannot be empty")
                setattr(warehouse, field, value)

    if warehouse.build_up_area is not None and warehouse.build_up_area <= 0:
        raise ValidationError("build_up_area must be positive")

    if "additional_details" in data:
        details = data.get("additional_details")
        if isinstance(details, str):
            # multipart forms carry it as a JSON string
            try:
                details = json.loads(details) if details.strip() else None
            except ValueError:
                raise ValidationError("additional_details must be valid JSON")
        if details is not None and not isinstance(details, dict):
            raise ValidationError("additional_details must be an object")
        warehouse.additional_details = details


def _allowed_image(filename):
    return "." in filename and filename.rsplit(".", 1)[1].lower() in ALLOWED_IMAGE_EXTENSIONS


def save_images(files):
    """Store uploaded image files and return their public paths."""
    names = []
    for storage in files:
        if not storage or not storage.filename:
            continue
        filename = secure_filename(storage.filename)
        if not _allowed_image(filename):
            raise ValidationError(f"Unsupported image type: {storage.filename}")
        names.append((storage, filename))

    folder = current_app.config["UPLOAD_FOLDER"]
    os.makedirs(folder, exist_ok=True)
    paths = []
    for storage, filename in names:
        stored = f"{datetime.utcnow():%Y%m%d%H%M%S}_{secrets.token_hex(4)}_{filename}"
        storage.save(os.path.join(folder, stored))
        paths.append(f"/uploads/{stored}")
    return paths


def discard_images(paths):
    folder = current_app.config["UPLOAD_FOLDER"]
    for path in paths:
        try:
            os.remove(os.path.join(folder, os.path.basename(path)))
        except FileNotFoundError:
            pass


def replace_images(warehouse: Warehouse, existing, files):
    """Set the listing's images. Returns the paths of newly stored files."""
    limit = current_app.config.get("MAX_IMAGES_PER_WAREHOUSE", 5)
    files = [f for f in files if f and f.filename]
    try:
        kept = normalize_images(existing, limit=limit)
    except ImageListError as exc:
        raise ValidationError(str(exc))
    if len(kept) + len(files) > limit:
        raise ValidationError(f"Maximum {limit} images allowed")
    saved = save_images(files)
    warehouse.image_paths = kept + saved
    return saved


def commit_listing(saved_images):
    """Commit the session; files stored for this request are removed if the commit fails."""
    try:
        db.session.commit()
    except Exception:
        discard_images(saved_images)
        raise


def visitor_key(request) -> str:
    return request.headers.get("X-Visitor-Id") or request.headers.get("X-Forwarded-For", request.remote_addr) or "anonymous"


def record_view(warehouse: Warehouse, key: str) -> WarehouseAnalytics:
    today = date.today()
    row = WarehouseAnalytics.query.filter_by(warehouse_id=warehouse.id, date=today).first()
    if not row:
        row = WarehouseAnalytics(warehouse_id=warehouse.id, date=today, views=0, unique_visitors=0, visitor_keys=[])
        db.session.add(row)
    row.record_visit(key)
    warehouse.views = (warehouse.views or 0) + 1
    db.session.commit()
    return row


def view_series(warehouse_ids, days=30):
    """Daily views for the last ``days`` days, oldest first, zero filled."""
    start = date.today() - timedelta(days=days - 1)
    rows = []
    if warehouse_ids:
        rows = (
            WarehouseAnalytics.query
            .filter(WarehouseAnalytics.warehouse_id.in_(warehouse_ids), WarehouseAnalytics.date >= start)
            .all()
        )
    by_day = {}
    for row in rows:
        views, visitors = by_day.get(row.date, (0, 0))
        by_day[row.date] = (views + row.views, visitors + row.unique_visitors)

    series = []
    for offset in range(days):
        day = start + timedelta(days=offset)
        views, visitors = by_day.get(day, (0, 0))
        series.append({"date": day.isoformat(), "views": views, "unique_visitors": visitors})
    return series


def delete_warehouse(warehouse: Warehouse):
    """Delete a listing and its analytics. Caller commits."""
    if Payment.query.filter_by(warehouse_id=warehouse.id).first():
        raise ConflictError("Warehouse has payment records and cannot be deleted")
    WarehouseAnalytics.query.filter_by(warehouse_id=warehouse.id).delete()
    BookingInquiry.query.filter_by(warehouse_id=warehouse.id).delete()
    db.session.delete(warehouse)
