from datetime import datetime, timezone
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select, update

from canteen.auth.credentials import Principal
from canteen.auth.gate import require_user, reject_unsupported_methods
from canteen.configuration.settings import Configuration
from canteen.core.exceptions.app_exception import NotFound, ValidationError
from canteen.database.connection import get_session
from canteen.enums.notification_type import NotificationType
from canteen.enums.wallet_transaction_type import WalletTransactionType
from canteen.helpers.notification.notifications import notify
from canteen.helpers.order.formatters import format_currency
from canteen.models.coupon.coupon import Coupon
from canteen.models.coupon.user_coupon import UserCoupon
from canteen.models.user.user import User
from canteen.models.wallet.wallet_transaction import WalletTransaction
from canteen.helpers.wallet.wallet import credit_wallet
from canteen.schemas.coupon.coupon import CouponRedeem

db_session = get_session


class CouponRedeemRouter(APIRouter):
    def __init__(self, configuration: Configuration, *args, **kwargs):
        super().__init__(prefix="/api/user/coupons", tags=["Coupons"], *args, **kwargs)
        self.currency = configuration.currency
        self.currency_locale = configuration.currency_locale
        self.add_api_route("/redeem", self.redeem_coupon, methods=["POST"])
        reject_unsupported_methods(self, require_user)

    def redeem_coupon(self, data: CouponRedeem, current_user: Principal = Depends(require_user), session: Session = Depends(db_session)):
        """Credits the coupon amount to the wallet, once per user."""
        coupon = session.exec(
            select(Coupon).where(Coupon.code == data.coupon_code, Coupon.is_active == True)
        ).first()
        if not coupon:
            raise NotFound("Invalid or expired coupon")

        if coupon.is_expired():
            raise ValidationError("Coupon has expired")

        user_coupon = session.exec(
            select(UserCoupon).where(UserCoupon.user_id == current_user.user_id, UserCoupon.coupon_id == coupon.id)
        ).first()
        if user_coupon and user_coupon.is_redeemed:
            raise ValidationError("Coupon already redeemed")

        user = session.get(User, current_user.user_id)
        if not user:
            raise NotFound("User not found")

        now = datetime.now(timezone.utc)
        if user_coupon is None:
            # Not pre-assigned: the (user_id, coupon_id) constraint allows one redemption row.
            session.add(UserCoupon(user_id=current_user.user_id, coupon_id=coupon.id, is_redeemed=True, redeemed_at=now))
        else:
            result = session.exec(
                update(UserCoupon)
                .where(UserCoupon.id == user_coupon.id, UserCoupon.is_redeemed == False)
                .values(is_redeemed=True, redeemed_at=now)
            )
            if result.rowcount != 1:
                session.rollback()
                raise ValidationError("Coupon already redeemed")

        credit_wallet(session, current_user.user_id, coupon.amount)
        session.add(WalletTransaction(
            user_id=current_user.user_id,
            amount=coupon.amount,
            type=WalletTransactionType.CREDIT,
            description=f"Coupon redeemed: {coupon.code}",
        ))
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            raise ValidationError("Coupon already redeemed")
        session.refresh(user)
        logging.info(f"COUPON >>> {coupon.code} redeemed by {current_user.email}")

        notify(
            session,
            current_user.user_id,
            NotificationType.COUPON,
            "Coupon Redeemed",
            f"{format_currency(coupon.amount, self.currency, self.currency_locale)} has been added to your wallet",
        )

        return {
            "success": True,
            "message": "Coupon redeemed successfully",
            "amount": coupon.amount,
            "wallet_balance": user.wallet_balance,
        }
