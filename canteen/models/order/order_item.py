from datetime import datetime, timezone
from typing import Optional, TYPE_CHECKING
from sqlmodel import Field, Relationship, SQLModel

from canteen.core.utils.identifiers import generate_id
from canteen.models.product.product import Product

if TYPE_CHECKING:
    from canteen.models.order.order import Order


class OrderItem(SQLModel, table=True):
    __tablename__ = "order_items"

    id: str = Field(default_factory=generate_id, primary_key=True)

    order_id: str = Field(foreign_key="orders.id", index=True)
    order: Optional["Order"] = Relationship(back_populates="items")

    product_id: str = Field(foreign_key="products.id")
    product: Optional[Product] = Relationship()

    quantity: int = Field(ge=1)
    price_at_time: float = Field(default=0.0)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
