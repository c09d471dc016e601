from flask import Blueprint
from sqlalchemy import text

from models import db
from utils.responses import ok

health_bp = Blueprint("health", __name__, url_prefix="/api")


@health_bp.get("/health")
def health():
    db.session.execute(text("SELECT 1"))
    return ok({"status": "ok", "database": "ok"})
