from datetime import datetime, timezone
import logging
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, delete, select

from canteen.auth.credentials import Principal
from canteen.auth.gate import require_canteen_staff, reject_unsupported_methods
from canteen.core.exceptions.app_exception import NotFound, ValidationError
from canteen.database.connection import get_session
from canteen.models.cart.cart_item import CartItem
from canteen.models.product.product import Product
from canteen.schemas.product.product import ProductCreate, ProductRead, ProductUpdate

db_session = get_session


class CanteenProductRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(prefix="/api/canteen/products", tags=["Canteen"], *args, **kwargs)
        self.add_api_route("", self.list_products, methods=["GET"])
        self.add_api_route("", self.create_product, methods=["POST"])
        self.add_api_route("/{product_id}", self.update_product, methods=["PUT"])
        self.add_api_route("/{product_id}", self.delete_product, methods=["DELETE"])
        reject_unsupported_methods(self, require_canteen_staff)

    def list_products(self, current_user: Principal = Depends(require_canteen_staff), session: Session = Depends(db_session)):
        products = session.exec(select(Product).order_by(Product.created_at.desc())).all()
        return {"success": True, "products": [ProductRead.model_validate(p) for p in products]}

    def create_product(
        self,
        product_data: ProductCreate,
        current_user: Principal = Depends(require_canteen_staff),
        session: Session = Depends(db_session),
    ):
        product = Product(**product_data.model_dump(), is_available=True, created_by=current_user.user_id)
        session.add(product)
        session.commit()
        session.refresh(product)
        logging.info(f"PRODUCT >>> {product.name} created by {current_user.email}")

        return JSONResponse(
            status_code=status.HTTP_201_CREATED,
            content={"success": True, "product": ProductRead.model_validate(product).model_dump(mode="json")},
        )

    def update_product(
        self,
        product_id: str,
        product_data: ProductUpdate,
        current_user: Principal = Depends(require_canteen_staff),
        session: Session = Depends(db_session),
    ):
        product = session.get(Product, product_id)
        if not product:
            raise NotFound("Product not found")

        for key, value in product_data.model_dump(exclude_unset=True).items():
            if value is None and key in ("name", "price", "category", "is_available"):
                continue
            setattr(product, key, value)

        product.updated_at = datetime.now(timezone.utc)
        session.add(product)
        session.commit()
        session.refresh(product)
        return {"success": True, "product": ProductRead.model_validate(product)}

    def delete_product(self, product_id: str, current_user: Principal = Depends(require_canteen_staff), session: Session = Depends(db_session)):
        product = session.get(Product, product_id)
        if not product:
            raise NotFound("Product not found")

        session.exec(delete(CartItem).where(CartItem.product_id == product_id))
        session.delete(product)
        try:
            session.commit()
        except IntegrityError:
            # Still referenced by placed orders.
            session.rollback()
            raise ValidationError("Product has orders and cannot be deleted")
        logging.info(f"PRODUCT >>> {product_id} deleted by {current_user.email}")
        return {"success": True, "message": "Product deleted"}
