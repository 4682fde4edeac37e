import logging
import secrets
import string
from typing import Any, Dict

import razorpay
from razorpay.errors import SignatureVerificationError
from fastapi import Request

from canteen.configuration.settings import Configuration
from canteen.core.exceptions.app_exception import PaymentGatewayError

RECEIPT_MAX_LENGTH = 40
_RECEIPT_ALPHABET = string.ascii_lowercase + string.digits


def to_subunits(amount: float) -> int:
    """Rupees to paise."""
    return int(round(amount * 100))


def wallet_receipt(user_id: str) -> str:
    suffix = "".join(secrets.choice(_RECEIPT_ALPHABET) for _ in range(9))
    return f"wallet_{user_id}_{suffix}"[:RECEIPT_MAX_LENGTH]


class RazorpayGateway:
    def __init__(self, key_id: str, key_secret: str, currency: str = "INR"):
        self.key_id = key_id
        self.currency = currency
        self.client = razorpay.Client(auth=(key_id, key_secret))

    def create_order(self, amount: float, receipt: str) -> Dict[str, Any]:
        try:
            order = self.client.order.create({
                "amount": to_subunits(amount),
                "currency": self.currency,
                "receipt": receipt,
            })
        except Exception as e:
            logging.error(f"PAYMENT >>> Razorpay order creation failed: {e}")
            raise PaymentGatewayError(errors=str(e)) from e

        logging.info(f"PAYMENT >>> Razorpay order {order.get('id')} created for receipt {receipt}")
        return {
            "id": order["id"],
            "amount": order["amount"],
            "currency": order["currency"],
            "status": order.get("status"),
            "receipt": order.get("receipt", receipt),
        }

    def order_amount(self, order_id: str) -> float:
        """Amount of a gateway order, in rupees."""
        try:
            order = self.client.order.fetch(order_id)
        except Exception as e:
            logging.error(f"PAYMENT >>> Could not fetch Razorpay order {order_id}: {e}")
            raise PaymentGatewayError("Failed to fetch payment order", errors=str(e)) from e
        return order["amount"] / 100

    def verify_payment(self, order_id: str, payment_id: str, signature: str) -> bool:
        try:
            self.client.utility.verify_payment_signature({
                "razorpay_order_id": order_id,
                "razorpay_payment_id": payment_id,
                "razorpay_signature": signature,
            })
            return True
        except SignatureVerificationError:
            logging.warning(f"PAYMENT >>> Signature mismatch for payment {payment_id} on order {order_id}")
            return False


def build_gateway(configuration: Configuration) -> RazorpayGateway:
    if not (configuration.razorpay_key_id and configuration.razorpay_key_secret):
        logging.warning("PAYMENT >>> Razorpay keys not configured, wallet top-ups will fail")
    return RazorpayGateway(
        configuration.razorpay_key_id or "",
        configuration.razorpay_key_secret or "",
        currency=configuration.currency,
    )


def get_payment_gateway(request: Request) -> RazorpayGateway:
    return request.app.state.payment_gateway
