"""
Installment plan filters for Mobbex sources.

Common plans are opt-out: excluded if any product (or its categories) disables
them. Advanced plans are opt-in: included only when every product enables them.
"""
import json
from collections import Counter

from sqlmodel import Session

from app.models import Product, ProductCategory, ShopOrder
from app.services.orders import OrderRepository

AHORA_PLANS = ("ahora_3", "ahora_6", "ahora_12", "ahora_18")


def _json_list(raw: str | None) -> list[str]:
    """Stored plan lists; anything unreadable counts as empty."""
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except ValueError:
        return []
    return [str(v) for v in value] if isinstance(value, list) else []


def _csv(raw: str | None) -> list[str]:
    return [p.strip() for p in (raw or "").split(",") if p.strip()]


def _unique(items) -> list[str]:
    return list(dict.fromkeys(items))


class PlanEligibilityResolver:
    def __init__(self, db: Session):
        self.db = db

    def _categories(self, product: Product) -> list[ProductCategory]:
        out = []
        for cat_id in _csv(product.category_ids):
            try:
                cat = self.db.get(ProductCategory, int(cat_id))
            except ValueError:
                continue
            if cat:
                out.append(cat)
        return out

    def get_inactive_plans(self, product_id: int) -> list[str]:
        product = self.db.get(Product, product_id)
        if not product:
            return []
        categories = self._categories(product)
        inactive: list[str] = []
        for plan in AHORA_PLANS:
            if plan in _csv(product.ahora_plans) or any(plan in _csv(c.ahora_plans) for c in categories):
                inactive.append(plan)
        inactive += _json_list(product.common_plans)
        for cat in categories:
            inactive += _json_list(cat.common_plans)
        return _unique(inactive)

    def get_active_plans(self, product_id: int) -> list[str]:
        product = self.db.get(Product, product_id)
        if not product:
            return []
        active = _json_list(product.advanced_plans)
        for cat in self._categories(product):
            active += _json_list(cat.advanced_plans)
        return _unique(active)

    def get_installments(self, products: list[int | Product]) -> list[str]:
        """Plan filter sent to Mobbex: -<plan> excludes, +uid:<plan> includes."""
        ids = [p.id if isinstance(p, Product) else p for p in products]
        inactive: list[str] = []
        active: list[str] = []
        for product_id in ids:
            inactive += self.get_inactive_plans(product_id)
            active += self.get_active_plans(product_id)

        installments = [f"-{plan}" for plan in inactive]
        # Plans are deduped per product, so a count equal to the product count means "active on all"
        for plan, reps in Counter(active).items():
            if reps == len(ids):
                installments.append(f"+uid:{plan}")
        return _unique(installments)


def get_product_ids(db: Session, order: ShopOrder) -> list[int]:
    return [i.product_id for i in OrderRepository(db).line_items(order) if i.product_id is not None]


def get_category_ids(db: Session, order: ShopOrder) -> list[int]:
    categories: list[int] = []
    for product_id in get_product_ids(db, order):
        product = db.get(Product, product_id)
        if product:
            categories += [int(c) for c in _csv(product.category_ids) if c.isdigit()]
    return _unique(categories)
