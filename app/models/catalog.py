"""Products and categories with Mobbex plan filters."""
from sqlmodel import Field, SQLModel


class ProductCategory(SQLModel, table=True):
    __tablename__ = "product_category"

    id: int | None = Field(default=None, primary_key=True)
    name: str = ""
    common_plans: str | None = None  # JSON list: plans excluded for this category
    advanced_plans: str | None = None  # JSON list: advanced plan uids enabled for this category
    ahora_plans: str | None = None  # Disabled "ahora" plans, e.g. "ahora_3,ahora_12"


class Product(SQLModel, table=True):
    __tablename__ = "product"

    id: int | None = Field(default=None, primary_key=True)
    name: str = ""
    price: float = 0.0
    category_ids: str | None = None  # e.g. "1,4"
    common_plans: str | None = None
    advanced_plans: str | None = None
    ahora_plans: str | None = None
