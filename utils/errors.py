import logging

from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from models import db

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status_code = 400
    default_message = "Bad request"

    def __init__(self, message=None, errors=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.errors = errors


class ValidationError(ApiError):
    status_code = 400
    default_message = "Required fields are missing"


class VerificationError(ApiError):
    status_code = 400
    default_message = "Payment verification failed"


class AuthError(ApiError):
    status_code = 401
    default_message = "Authentication required"


class ForbiddenError(ApiError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(ApiError):
    status_code = 404
    default_message = "Not found"


class ConflictError(ApiError):
    status_code = 409
    default_message = "Conflict"


class PaymentGatewayError(ApiError):
    status_code = 500
    default_message = "Payment gateway error"


def error_response(message, status, errors=None):
    body = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return jsonify(body), status


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def _api_error(exc):
        db.session.rollback()
        if exc.status_code >= 500:
            logger.error("%s: %s", type(exc).__name__, exc.message)
        return error_response(exc.message, exc.status_code, exc.errors)

    @app.errorhandler(RequestEntityTooLarge)
    def _too_large(exc):
        return error_response("Request payload too large", 413)

    @app.errorhandler(HTTPException)
    def _http_error(exc):
        if exc.code == 404:
            return error_response("Route not found", 404)
        if exc.code == 405:
            return error_response("Method not allowed", 405)
        return error_response(exc.description or exc.name, exc.code or 500)

    @app.errorhandler(Exception)
    def _unhandled(exc):
        db.session.rollback()
        logger.exception("Unhandled error")
        message = "Internal server error"
        if current_app.config.get("APP_ENV") == "development":
            message = str(exc)
        return error_response(message, 500)
