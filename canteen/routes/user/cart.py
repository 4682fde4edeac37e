from datetime import datetime, timezone
import logging
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, delete, select, update

from canteen.auth.credentials import Principal
from canteen.auth.gate import require_user, reject_unsupported_methods
from canteen.core.exceptions.app_exception import NotFound, ValidationError
from canteen.database.connection import get_session
from canteen.models.cart.cart_item import CartItem
from canteen.models.product.product import Product
from canteen.schemas.cart.cart_item import CartItemCreate, CartItemRead, CartItemUpdate

db_session = get_session


class CartRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(prefix="/api/user/cart", tags=["Cart"], *args, **kwargs)
        self.add_api_route("", self.get_cart, methods=["GET"])
        self.add_api_route("", self.add_item, methods=["POST"])
        self.add_api_route("", self.clear_cart, methods=["DELETE"])
        self.add_api_route("/{item_id}", self.update_item, methods=["PUT"])
        self.add_api_route("/{item_id}", self.remove_item, methods=["DELETE"])
        reject_unsupported_methods(self, require_user)

    def get_cart(self, current_user: Principal = Depends(require_user), session: Session = Depends(db_session)):
        items = session.exec(select(CartItem).where(CartItem.user_id == current_user.user_id)).all()
        return {"success": True, "cart": [CartItemRead.model_validate(item) for item in items]}

    def _increment(self, session: Session, user_id: str, product_id: str, quantity: int) -> CartItem:
        # Single statement, so concurrent adds of the same product both count.
        session.exec(
            update(CartItem)
            .where(CartItem.user_id == user_id, CartItem.product_id == product_id)
            .values(quantity=CartItem.quantity + quantity, updated_at=datetime.now(timezone.utc))
        )
        session.commit()
        item = session.exec(
            select(CartItem).where(CartItem.user_id == user_id, CartItem.product_id == product_id)
        ).one()
        session.refresh(item)
        return item

    def add_item(self, item_data: CartItemCreate, current_user: Principal = Depends(require_user), session: Session = Depends(db_session)):
        product = session.get(Product, item_data.product_id)
        if not product or not product.is_available:
            raise ValidationError("Product is not available")

        existing_item = session.exec(
            select(CartItem).where(
                CartItem.user_id == current_user.user_id,
                CartItem.product_id == item_data.product_id,
            )
        ).first()

        if existing_item:
            item = self._increment(session, current_user.user_id, item_data.product_id, item_data.quantity)
            return {"success": True, "cart_item": CartItemRead.model_validate(item)}

        new_item = CartItem(user_id=current_user.user_id, product_id=item_data.product_id, quantity=item_data.quantity)
        session.add(new_item)
        try:
            session.commit()
        except IntegrityError:
            # Another request inserted the row first; the unique constraint keeps one row.
            session.rollback()
            logging.info(f"CART >>> Concurrent insert for {current_user.user_id}/{item_data.product_id}, incrementing")
            item = self._increment(session, current_user.user_id, item_data.product_id, item_data.quantity)
            return {"success": True, "cart_item": CartItemRead.model_validate(item)}

        session.refresh(new_item)
        return JSONResponse(
            status_code=status.HTTP_201_CREATED,
            content={"success": True, "cart_item": CartItemRead.model_validate(new_item).model_dump(mode="json")},
        )

    def clear_cart(self, current_user: Principal = Depends(require_user), session: Session = Depends(db_session)):
        session.exec(delete(CartItem).where(CartItem.user_id == current_user.user_id))
        session.commit()
        return {"success": True, "message": "Cart cleared"}

    def update_item(
        self,
        item_id: str,
        update_data: CartItemUpdate,
        current_user: Principal = Depends(require_user),
        session: Session = Depends(db_session),
    ):
        item = session.exec(
            select(CartItem).where(CartItem.id == item_id, CartItem.user_id == current_user.user_id)
        ).first()
        if not item:
            raise NotFound("Cart item not found")

        item.quantity = update_data.quantity
        item.updated_at = datetime.now(timezone.utc)
        session.add(item)
        session.commit()
        session.refresh(item)
        return {"success": True, "cart_item": CartItemRead.model_validate(item)}

    def remove_item(self, item_id: str, current_user: Principal = Depends(require_user), session: Session = Depends(db_session)):
        session.exec(delete(CartItem).where(CartItem.id == item_id, CartItem.user_id == current_user.user_id))
        session.commit()
        return {"success": True, "message": "Item removed from cart"}
