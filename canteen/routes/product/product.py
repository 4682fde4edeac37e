from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from canteen.core.exceptions.app_exception import NotFound
from canteen.database.connection import get_session
from canteen.models.product.product import Product
from canteen.schemas.product.product import ProductRead

db_session = get_session


class ProductRouter(APIRouter):
    """Public catalog, no authentication."""

    def __init__(self, *args, **kwargs):
        super().__init__(prefix="/api/products", tags=["Products"], *args, **kwargs)
        self.add_api_route("", self.list_products, methods=["GET"])
        self.add_api_route("/{product_id}", self.get_product, methods=["GET"])

    def list_products(self, session: Session = Depends(db_session)):
        products = session.exec(
            select(Product)
            .where(Product.is_available == True)
            .order_by(Product.created_at.desc())
        ).all()
        return {"success": True, "products": [ProductRead.model_validate(p) for p in products]}

    def get_product(self, product_id: str, session: Session = Depends(db_session)):
        product = session.get(Product, product_id)
        if not product:
            raise NotFound("Product not found")
        return {"success": True, "product": ProductRead.model_validate(product)}
