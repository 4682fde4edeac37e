from datetime import datetime, timezone
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session, select

from canteen.auth.credentials import Principal
from canteen.auth.gate import require_canteen, reject_unsupported_methods
from canteen.configuration.settings import Configuration
from canteen.core.exceptions.app_exception import InvalidOrderTransition, NotFound, ValidationError
from canteen.database.connection import get_session
from canteen.enums.notification_type import NotificationType
from canteen.enums.order_status import OrderStatus, can_transition
from canteen.helpers.notification.notifications import notify
from canteen.models.order.order import Order
from canteen.schemas.order.order import CanteenOrderRead, OrderRead, OrderStatusUpdate

db_session = get_session


class CanteenOrderRouter(APIRouter):
    def __init__(self, configuration: Configuration, *args, **kwargs):
        super().__init__(prefix="/api/canteen/orders", tags=["Canteen"], *args, **kwargs)
        self.strict_transitions = configuration.strict_order_transitions
        self.add_api_route("", self.list_orders, methods=["GET"])
        self.add_api_route("/{order_id}", self.update_order_status, methods=["PUT"])
        reject_unsupported_methods(self, require_canteen)

    def list_orders(
        self,
        status: Optional[str] = Query(default=None),
        current_user: Principal = Depends(require_canteen),
        session: Session = Depends(db_session),
    ):
        query = select(Order).order_by(Order.created_at.desc())
        if status:
            if status not in OrderStatus.values():
                raise ValidationError("Invalid status filter")
            query = query.where(Order.status == OrderStatus(status))

        orders = session.exec(query).all()
        return {"success": True, "orders": [CanteenOrderRead.model_validate(order) for order in orders]}

    def update_order_status(
        self,
        order_id: str,
        status_data: OrderStatusUpdate,
        current_user: Principal = Depends(require_canteen),
        session: Session = Depends(db_session),
    ):
        order = session.get(Order, order_id)
        if not order:
            raise NotFound("Order not found")

        previous = order.status
        target = status_data.status
        if self.strict_transitions and not can_transition(previous, target):
            raise InvalidOrderTransition(previous.value, target.value)

        order.status = target
        order.updated_at = datetime.now(timezone.utc)
        session.add(order)
        session.commit()
        session.refresh(order)
        logging.info(f"ORDER >>> {order.id} moved from {previous.value} to {target.value} by {current_user.email}")

        # Committed separately; the status change stands even if this fails.
        notify(
            session,
            order.user_id,
            NotificationType.ORDER,
            "Order Status Updated",
            f"Your order #{order.code} is now {target.value}",
        )

        return {"success": True, "order": OrderRead.model_validate(order)}
