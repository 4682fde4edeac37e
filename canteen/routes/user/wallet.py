import logging
from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from canteen.auth.credentials import Principal
from canteen.auth.gate import require_user, reject_unsupported_methods
from canteen.configuration.settings import Configuration
from canteen.core.exceptions.app_exception import NotFound, ValidationError
from canteen.database.connection import get_session
from canteen.enums.notification_type import NotificationType
from canteen.enums.wallet_transaction_type import WalletTransactionType
from canteen.helpers.notification.notifications import notify
from canteen.helpers.order.formatters import format_currency
from canteen.integration.razorpay import RazorpayGateway, get_payment_gateway, wallet_receipt
from canteen.models.user.user import User
from canteen.models.wallet.wallet_transaction import WalletTransaction
from canteen.helpers.wallet.wallet import credit_wallet
from canteen.schemas.wallet.wallet import TopUpRequest, TopUpVerification, WalletTransactionRead

db_session = get_session

TRANSACTION_HISTORY_LIMIT = 50


class WalletRouter(APIRouter):
    def __init__(self, configuration: Configuration, *args, **kwargs):
        super().__init__(prefix="/api/user/wallet", tags=["Wallet"], *args, **kwargs)
        self.currency = configuration.currency
        self.currency_locale = configuration.currency_locale
        self.add_api_route("", self.get_wallet, methods=["GET"])
        self.add_api_route("", self.create_top_up, methods=["POST"])
        self.add_api_route("", self.verify_top_up, methods=["PUT"])
        reject_unsupported_methods(self, require_user)

    def get_wallet(self, current_user: Principal = Depends(require_user), session: Session = Depends(db_session)):
        user = session.get(User, current_user.user_id)
        transactions = session.exec(
            select(WalletTransaction)
            .where(WalletTransaction.user_id == current_user.user_id)
            .order_by(WalletTransaction.created_at.desc())
            .limit(TRANSACTION_HISTORY_LIMIT)
        ).all()

        return {
            "success": True,
            "wallet_balance": user.wallet_balance if user else 0,
            "transactions": [WalletTransactionRead.model_validate(t) for t in transactions],
        }

    def create_top_up(
        self,
        data: TopUpRequest,
        current_user: Principal = Depends(require_user),
        gateway: RazorpayGateway = Depends(get_payment_gateway),
    ):
        order = gateway.create_order(data.amount, wallet_receipt(current_user.user_id))
        return {
            "success": True,
            "order": {
                "id": order["id"],
                "amount": order["amount"],
                "currency": order["currency"],
            },
            "key_id": gateway.key_id,
        }

    def verify_top_up(
        self,
        data: TopUpVerification,
        current_user: Principal = Depends(require_user),
        session: Session = Depends(db_session),
        gateway: RazorpayGateway = Depends(get_payment_gateway),
    ):
        if not gateway.verify_payment(data.razorpay_order_id, data.razorpay_payment_id, data.razorpay_signature):
            raise ValidationError("Payment verification failed")

        if abs(gateway.order_amount(data.razorpay_order_id) - data.amount) > 0.005:
            raise ValidationError("Payment amount mismatch")

        already_credited = session.exec(
            select(WalletTransaction).where(WalletTransaction.razorpay_payment_id == data.razorpay_payment_id)
        ).first()
        if already_credited:
            raise ValidationError("Payment already processed")

        user = session.get(User, current_user.user_id)
        if not user:
            raise NotFound("User not found")

        credit_wallet(session, current_user.user_id, data.amount)
        session.add(WalletTransaction(
            user_id=current_user.user_id,
            amount=data.amount,
            type=WalletTransactionType.CREDIT,
            description="Wallet top-up via Razorpay",
            razorpay_payment_id=data.razorpay_payment_id,
            razorpay_order_id=data.razorpay_order_id,
        ))
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            raise ValidationError("Payment already processed")
        session.refresh(user)
        logging.info(f"WALLET >>> {current_user.email} topped up {data.amount} (payment {data.razorpay_payment_id})")

        notify(
            session,
            current_user.user_id,
            NotificationType.WALLET,
            "Wallet Topped Up",
            f"{format_currency(data.amount, self.currency, self.currency_locale)} has been added to your wallet",
        )

        return {
            "success": True,
            "wallet_balance": user.wallet_balance,
            "message": "Wallet topped up successfully",
        }
