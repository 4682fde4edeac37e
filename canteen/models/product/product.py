from datetime import datetime, timezone
from typing import Optional
from sqlmodel import Field, SQLModel

from canteen.core.utils.identifiers import generate_id


class Product(SQLModel, table=True):
    __tablename__ = "products"

    id: str = Field(default_factory=generate_id, primary_key=True)
    name: str
    description: Optional[str] = None
    price: float = Field(gt=0)
    image_url: Optional[str] = None
    category: str = Field(index=True)
    is_available: bool = Field(default=True)

    created_by: Optional[str] = Field(default=None, foreign_key="users.id")

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
