from flask import request, has_request_context
from models import db
from models.activity_log import ActivityLog

def log_event(action: str, user_id=None, entity=None, entity_id=None, details=None, commit=True):
    ip = None
    user_agent = None
    if has_request_context():
        ip = request.headers.get("X-Forwarded-For", request.remote_addr)
        user_agent = request.headers.get("User-Agent", "")

    row = ActivityLog(
        user_id=user_id,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        ip=ip,
        user_agent=user_agent[:255] if user_agent else None,
        details=details or None,
    )
    db.session.add(row)
    # inside a larger transaction the caller commits
    if commit:
        db.session.commit()
    return row
