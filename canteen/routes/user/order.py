from datetime import datetime, timezone
import logging
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlmodel import Session, delete, select, update

from canteen.auth.credentials import Principal
from canteen.auth.gate import require_user, reject_unsupported_methods
from canteen.core.exceptions.app_exception import NotFound, ValidationError
from canteen.database.connection import get_session
from canteen.enums.delivery_type import DeliveryType
from canteen.enums.notification_type import NotificationType
from canteen.enums.order_status import OrderStatus, USER_CANCELLABLE_STATUSES
from canteen.enums.wallet_transaction_type import WalletTransactionType
from canteen.helpers.notification.notifications import notify
from canteen.helpers.wallet.wallet import credit_wallet, debit_wallet
from canteen.models.cart.cart_item import CartItem
from canteen.models.order.order import Order
from canteen.models.order.order_item import OrderItem
from canteen.models.product.product import Product
from canteen.models.wallet.wallet_transaction import WalletTransaction
from canteen.schemas.order.order import OrderAction, OrderCreate, OrderRead

db_session = get_session


class OrderRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(prefix="/api/user/orders", tags=["Orders"], *args, **kwargs)
        self.add_api_route("", self.list_orders, methods=["GET"])
        self.add_api_route("", self.create_order, methods=["POST"])
        self.add_api_route("/{order_id}", self.get_order, methods=["GET"])
        self.add_api_route("/{order_id}", self.cancel_order, methods=["PUT"])
        reject_unsupported_methods(self, require_user)

    def _own_order(self, session: Session, order_id: str, user_id: str) -> Order:
        order = session.exec(select(Order).where(Order.id == order_id, Order.user_id == user_id)).first()
        if not order:
            raise NotFound("Order not found")
        return order

    def list_orders(self, current_user: Principal = Depends(require_user), session: Session = Depends(db_session)):
        orders = session.exec(
            select(Order)
            .where(Order.user_id == current_user.user_id)
            .order_by(Order.created_at.desc())
        ).all()
        return {"success": True, "orders": [OrderRead.model_validate(order) for order in orders]}

    def get_order(self, order_id: str, current_user: Principal = Depends(require_user), session: Session = Depends(db_session)):
        order = self._own_order(session, order_id, current_user.user_id)
        return {"success": True, "order": OrderRead.model_validate(order)}

    def create_order(self, order_request: OrderCreate, current_user: Principal = Depends(require_user), session: Session = Depends(db_session)):
        # 1. Price every line from the catalog
        lines = []
        total = 0.0
        for line in order_request.cart_items:
            product = session.get(Product, line.product_id)
            if not product or not product.is_available:
                raise ValidationError(f"Product {line.product_id} is not available")
            lines.append((product, line.quantity))
            total += product.price * line.quantity

        wallet_amount = order_request.wallet_amount_used or 0.0
        if wallet_amount > total:
            raise ValidationError("Wallet amount exceeds order total")

        try:
            # 2. Pay from the wallet
            if wallet_amount > 0:
                if not debit_wallet(session, current_user.user_id, wallet_amount):
                    raise ValidationError("Insufficient wallet balance")

                session.add(WalletTransaction(
                    user_id=current_user.user_id,
                    amount=-wallet_amount,
                    type=WalletTransactionType.DEBIT,
                    description="Order payment",
                ))

            # 3. Order and its items
            order = Order(
                user_id=current_user.user_id,
                total_amount=total,
                wallet_amount_used=wallet_amount,
                razorpay_payment_id=order_request.razorpay_payment_id,
                status=OrderStatus.PENDING,
                delivery_type=DeliveryType(order_request.delivery_type),
                room_number=order_request.room_number,
                notes=order_request.notes,
            )
            session.add(order)
            session.flush()

            for product, quantity in lines:
                session.add(OrderItem(
                    order_id=order.id,
                    product_id=product.id,
                    quantity=quantity,
                    price_at_time=product.price,
                ))

            # 4. Empty the cart
            session.exec(delete(CartItem).where(CartItem.user_id == current_user.user_id))
            session.commit()
        except Exception:
            session.rollback()
            raise

        session.refresh(order)
        logging.info(f"ORDER >>> {order.id} placed by {current_user.email}: total {total}, wallet {wallet_amount}")

        notify(
            session,
            current_user.user_id,
            NotificationType.ORDER,
            "Order Placed",
            f"Your order #{order.code} has been placed successfully",
        )

        return JSONResponse(
            status_code=status.HTTP_201_CREATED,
            content={"success": True, "order": OrderRead.model_validate(order).model_dump(mode="json")},
        )

    def cancel_order(
        self,
        order_id: str,
        action_data: OrderAction,
        current_user: Principal = Depends(require_user),
        session: Session = Depends(db_session),
    ):
        if action_data.action != "cancel":
            raise ValidationError("Invalid action")

        order = self._own_order(session, order_id, current_user.user_id)
        if order.status not in USER_CANCELLABLE_STATUSES:
            raise ValidationError("Order cannot be cancelled")

        # Guarded on the current status so a concurrent accept/prepare cannot be overwritten.
        result = session.exec(
            update(Order)
            .where(Order.id == order.id, Order.status.in_(list(USER_CANCELLABLE_STATUSES)))
            .values(status=OrderStatus.CANCELLED, updated_at=datetime.now(timezone.utc))
        )
        if result.rowcount != 1:
            session.rollback()
            raise ValidationError("Order cannot be cancelled")

        if order.wallet_amount_used > 0:
            credit_wallet(session, current_user.user_id, order.wallet_amount_used)
            session.add(WalletTransaction(
                user_id=current_user.user_id,
                amount=order.wallet_amount_used,
                type=WalletTransactionType.CREDIT,
                description="Order cancellation refund",
            ))

        session.commit()
        session.refresh(order)
        logging.info(f"ORDER >>> {order.id} cancelled by {current_user.email}, refunded {order.wallet_amount_used}")

        notify(
            session,
            current_user.user_id,
            NotificationType.ORDER,
            "Order Cancelled",
            f"Your order #{order.code} has been cancelled",
        )

        return {"success": True, "order": OrderRead.model_validate(order)}
