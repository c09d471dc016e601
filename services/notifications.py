"""Outbound e-mail.

Messages are written to the ``email_outbox`` table as part of the caller's
transaction and handed to the mail transport only after that transaction
commits. Delivery is best effort: a failed send is recorded on the outbox row
and logged, never raised.
"""
import logging
from datetime import datetime

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from markupsafe import escape

from models import db
from models.email_outbox import EmailOutbox

logger = logging.getLogger(__name__)

BRAND = "Logic-i"


def _rupees(paise):
    return f"₹{(paise or 0) / 100:,.2f}"


def _layout(title, body_html):
    return (
        "<div style=\"font-family:Arial,sans-serif;max-width:600px;margin:0 auto\">"
        f"<h2 style=\"color:#1f3b73\">{escape(title)}</h2>"
        f"{body_html}"
        f"<p style=\"color:#888;font-size:12px\">{BRAND} Warehouse Solutions</p>"
        "</div>"
    )


def _rows(pairs):
    cells = "".join(
        f"<tr><td style=\"padding:4px 12px 4px 0\"><strong>{escape(label)}</strong></td>"
        f"<td>{escape(value) if value is not None else '-'}</td></tr>"
        for label, value in pairs
    )
    return f"<table>{cells}</table>"


# -------------------------
# templates: each returns (subject, html)
# -------------------------

def booking_customer_email(booking, warehouse):
    subject = f"Booking Confirmed - {booking.booking_number} | {BRAND}"
    body = (
        f"<p>Dear {escape(booking.full_name)},</p>"
        "<p>Your payment was received and your warehouse booking is confirmed.</p>"
        + _rows([
            ("Booking number", booking.booking_number),
            ("Warehouse", warehouse.name),
            ("Address", f"{warehouse.address}, {warehouse.city}"),
            ("Amount paid", _rupees(booking.amount_paid)),
            ("Payment date", booking.payment_date.strftime("%d %b %Y %H:%M")),
        ])
        + "<p>The warehouse owner will contact you shortly.</p>"
    )
    return subject, _layout("Booking Confirmed", body)


def booking_owner_email(booking, warehouse):
    subject = f"New Confirmed Booking - {booking.booking_number} | {BRAND}"
    body = (
        f"<p>A customer has paid to book <strong>{escape(warehouse.name)}</strong>.</p>"
        + _rows([
            ("Booking number", booking.booking_number),
            ("Customer", booking.full_name),
            ("Email", booking.email),
            ("Phone", booking.phone_number),
            ("Company", booking.company_name),
            ("Preferred contact", booking.preferred_contact_method),
            ("Preferred time", booking.preferred_contact_time),
            ("Preferred start date", booking.preferred_start_date),
            ("Message", booking.message),
            ("Amount paid", _rupees(booking.amount_paid)),
        ])
        + "<p>Please reach out to the customer within 24 hours.</p>"
    )
    return subject, _layout("New Confirmed Booking", body)


def inquiry_customer_email(inquiry, warehouse):
    subject = f"Warehouse Inquiry Received - We'll Contact You Soon | {BRAND}"
    body = (
        f"<p>Dear {escape(inquiry.full_name)},</p>"
        f"<p>Thank you for your interest in <strong>{escape(warehouse.name)}</strong>. "
        "Your payment was not completed, but we have saved your request.</p>"
        + _rows([
            ("Reference", inquiry.reference),
            ("Warehouse", warehouse.name),
            ("City", warehouse.city),
        ])
        + "<p>Our team will contact you soon to help you complete the booking.</p>"
    )
    return subject, _layout("Inquiry Received", body)


def inquiry_owner_email(inquiry, warehouse):
    subject = f"New High-Interest Inquiry - Payment Pending | {BRAND}"
    body = (
        f"<p>A customer started booking <strong>{escape(warehouse.name)}</strong> "
        "but did not complete the payment.</p>"
        + _rows([
            ("Reference", inquiry.reference),
            ("Customer", inquiry.full_name),
            ("Email", inquiry.email),
            ("Phone", inquiry.phone_number),
            ("Company", inquiry.company_name),
            ("Message", inquiry.message),
        ])
    )
    return subject, _layout("High-Interest Inquiry", body)


def otp_email(code, purpose):
    titles = {
        "REGISTER": "Verify your email",
        "LOGIN": "Your login code",
        "RESET_PASSWORD": "Your Password Reset OTP",
    }
    title = titles.get(purpose, "Your verification code")
    minutes = current_app.config.get("OTP_TTL_SECONDS", 300) // 60
    body = (
        f"<p>Your code is:</p><p style=\"font-size:28px;letter-spacing:6px\"><strong>{escape(code)}</strong></p>"
        f"<p>It expires in {minutes} minutes. If you did not request it, ignore this email.</p>"
    )
    return f"{title} | {BRAND}", _layout(title, body)


def warehouse_review_email(warehouse):
    approved = warehouse.approval_status == "approved"
    title = "Your warehouse has been approved" if approved else "Your warehouse was not approved"
    if approved:
        text = "<p>It is now visible to customers on the marketplace.</p>"
    else:
        text = f"<p>Reason: {escape(warehouse.rejection_reason or 'not specified')}</p>"
    body = f"<p>Listing: <strong>{escape(warehouse.name)}</strong></p>{text}"
    return f"{title} | {BRAND}", _layout(title, body)


# -------------------------
# outbox
# -------------------------

def enqueue(kind, to_email, template):
    """Add a message to the current transaction. Returns the outbox row (unsent)."""
    subject, html = template
    row = EmailOutbox(kind=kind, to_email=to_email, subject=subject, html=html, status="pending", attempts=0)
    db.session.add(row)
    return row


def _mailer():
    return current_app.extensions["mailer"]


def dispatch(rows):
    """Send already committed outbox rows. Never raises."""
    mailer = _mailer()
    sent = 0
    for row in rows:
        row.attempts = (row.attempts or 0) + 1
        try:
            ok, error = mailer.send(row.to_email, row.subject, row.html)
        except Exception as exc:  # transport bugs must not reach the request
            ok, error = False, str(exc)
        if ok:
            row.status = "sent"
            row.sent_at = datetime.utcnow()
            row.error = None
            sent += 1
        else:
            row.status = "failed"
            row.error = (error or "unknown error")[:255]
            logger.warning("Email %s to %s not sent: %s", row.kind, row.to_email, row.error)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Could not record email delivery status")
    return sent


def dispatch_pending(limit=100):
    rows = (
        EmailOutbox.query
        .filter_by(status="pending")
        .order_by(EmailOutbox.created_at.asc())
        .limit(limit)
        .all()
    )
    return dispatch(rows)
