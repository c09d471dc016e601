"""Razorpay adapter.

The app holds one gateway instance in ``app.extensions["payment_gateway"]``.
Both implementations expose ``create_order`` and ``fetch_payment`` and return
plain dicts shaped like the Razorpay API responses.
"""
import logging
import secrets
import time

from utils.errors import PaymentGatewayError

logger = logging.getLogger(__name__)


class RazorpayGateway:
    name = "razorpay"

    def __init__(self, key_id: str, key_secret: str):
        import razorpay

        self.key_id = key_id
        self._errors = (
            razorpay.errors.BadRequestError,
            razorpay.errors.ServerError,
            razorpay.errors.GatewayError,
            OSError,
        )
        self._client = razorpay.Client(auth=(key_id, key_secret))

    def create_order(self, amount: int, currency: str, receipt: str, notes=None) -> dict:
        try:
            return self._client.order.create(data={
                "amount": amount,
                "currency": currency,
                "receipt": receipt,
                "payment_capture": 1,
                "notes": notes or {},
            })
        except self._errors as exc:
            logger.error("Razorpay order creation failed for %s: %s", receipt, exc)
            raise PaymentGatewayError("Failed to create booking order") from exc

    def fetch_payment(self, payment_id: str) -> dict:
        try:
            return self._client.payment.fetch(payment_id)
        except self._errors as exc:
            logger.error("Razorpay payment fetch failed for %s: %s", payment_id, exc)
            raise PaymentGatewayError("Failed to fetch payment details") from exc


class StubGateway:
    """
    In-process stand-in used for local development and tests.

    Returns predictable order and payment payloads so the booking flow behaves
    as if Razorpay responded. Nothing leaves the process.
    """

    name = "stub"

    def __init__(self, key_id: str = "rzp_test_stub"):
        self.key_id = key_id
        self.orders = {}

    def create_order(self, amount: int, currency: str, receipt: str, notes=None) -> dict:
        order = {
            "id": f"order_test_{secrets.token_hex(7)}",
            "entity": "order",
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
            "status": "created",
            "notes": notes or {},
            "created_at": int(time.time()),
        }
        self.orders[order["id"]] = order
        return order

    def fetch_payment(self, payment_id: str) -> dict:
        return {
            "id": payment_id,
            "entity": "payment",
            "status": "captured",
            "method": "card",
            "captured": True,
        }


def build_gateway(config):
    key_id = config.get("RAZORPAY_KEY_ID")
    key_secret = config.get("RAZORPAY_KEY_SECRET")
    if config.get("PAYMENTS_USE_STUB") or not (key_id and key_secret):
        logger.warning("Razorpay keys not configured, using stub payment gateway")
        return StubGateway(key_id or "rzp_test_stub")
    return RazorpayGateway(key_id, key_secret)
