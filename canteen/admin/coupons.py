import logging
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from canteen.auth.credentials import Principal
from canteen.auth.gate import require_admin, reject_unsupported_methods
from canteen.configuration.settings import Configuration
from canteen.core.exceptions.app_exception import NotFound, ValidationError
from canteen.database.connection import get_session
from canteen.enums.notification_type import NotificationType
from canteen.helpers.notification.notifications import notify_many
from canteen.helpers.order.formatters import format_currency
from canteen.models.coupon.coupon import Coupon
from canteen.models.coupon.user_coupon import UserCoupon
from canteen.models.user.user import User
from canteen.schemas.coupon.coupon import CouponCreate, CouponRead, CouponUpdate

db_session = get_session

DUPLICATE_CODE_MESSAGE = "Coupon code already exists"


class AdminCouponRouter(APIRouter):
    def __init__(self, configuration: Configuration, *args, **kwargs):
        super().__init__(prefix="/api/admin/coupons", tags=["Admin"], *args, **kwargs)
        self.currency = configuration.currency
        self.currency_locale = configuration.currency_locale
        self.add_api_route("", self.get_all_coupons, methods=["GET"])
        self.add_api_route("", self.create_coupon, methods=["POST"])
        self.add_api_route("/{coupon_id}", self.update_coupon_by_id, methods=["PUT"])
        self.add_api_route("/{coupon_id}", self.delete_coupon_by_id, methods=["DELETE"])
        reject_unsupported_methods(self, require_admin)

    def get_all_coupons(self, current_user: Principal = Depends(require_admin), session: Session = Depends(db_session)):
        coupons = session.exec(select(Coupon).order_by(Coupon.created_at.desc())).all()
        return {"success": True, "coupons": [CouponRead.model_validate(c) for c in coupons]}

    def create_coupon(self, coupon_data: CouponCreate, current_user: Principal = Depends(require_admin), session: Session = Depends(db_session)):
        existing = session.exec(select(Coupon).where(Coupon.code == coupon_data.code)).first()
        if existing:
            raise ValidationError(DUPLICATE_CODE_MESSAGE)

        coupon = Coupon(
            code=coupon_data.code,
            amount=coupon_data.amount,
            description=coupon_data.description,
            valid_until=coupon_data.valid_until,
            is_active=True,
            created_by=current_user.user_id,
        )
        session.add(coupon)
        try:
            session.commit()
        except IntegrityError:
            # Lost the race to a concurrent create with the same code.
            session.rollback()
            raise ValidationError(DUPLICATE_CODE_MESSAGE)
        session.refresh(coupon)
        logging.info(f"COUPON >>> {coupon.code} created by {current_user.email}")

        user_ids = list(dict.fromkeys(coupon_data.user_ids))
        if user_ids:
            known_ids = session.exec(select(User.id).where(User.id.in_(user_ids))).all()
            for user_id in known_ids:
                session.add(UserCoupon(user_id=user_id, coupon_id=coupon.id, is_redeemed=False))
            session.commit()

            notify_many(
                session,
                known_ids,
                NotificationType.COUPON,
                "New Coupon Available",
                f"You've received a coupon: {coupon.code} worth "
                f"{format_currency(coupon.amount, self.currency, self.currency_locale)}",
            )

        return JSONResponse(
            status_code=status.HTTP_201_CREATED,
            content={"success": True, "coupon": CouponRead.model_validate(coupon).model_dump(mode="json")},
        )

    def update_coupon_by_id(
        self,
        coupon_id: str,
        coupon_data: CouponUpdate,
        current_user: Principal = Depends(require_admin),
        session: Session = Depends(db_session),
    ):
        coupon = session.get(Coupon, coupon_id)
        if not coupon:
            raise NotFound("Coupon not found")

        for key, value in coupon_data.model_dump(exclude_unset=True).items():
            setattr(coupon, key, value)

        session.add(coupon)
        session.commit()
        session.refresh(coupon)
        return {"success": True, "coupon": CouponRead.model_validate(coupon)}

    def delete_coupon_by_id(self, coupon_id: str, current_user: Principal = Depends(require_admin), session: Session = Depends(db_session)):
        coupon = session.get(Coupon, coupon_id)
        if not coupon:
            raise NotFound("Coupon not found")

        for user_coupon in session.exec(select(UserCoupon).where(UserCoupon.coupon_id == coupon_id)).all():
            session.delete(user_coupon)
        session.delete(coupon)
        session.commit()
        return {"success": True, "message": "Coupon deleted"}
