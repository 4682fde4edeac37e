from datetime import datetime, timezone
from typing import Optional, TYPE_CHECKING
from sqlalchemy import UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

from canteen.core.utils.identifiers import generate_id
from canteen.models.product.product import Product

if TYPE_CHECKING:
    from canteen.models.user.user import User


class CartItem(SQLModel, table=True):
    __tablename__ = "cart_items"
    # One row per product per user; adding again increments the quantity.
    __table_args__ = (UniqueConstraint("user_id", "product_id", name="uq_cart_items_user_product"),)

    id: str = Field(default_factory=generate_id, primary_key=True)

    user_id: str = Field(foreign_key="users.id", index=True)
    user: Optional["User"] = Relationship(back_populates="cart_items")

    product_id: str = Field(foreign_key="products.id")
    product: Optional[Product] = Relationship()

    quantity: int = Field(default=1, ge=1)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
