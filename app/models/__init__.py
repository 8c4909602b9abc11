from .catalog import Product, ProductCategory
from .error_log import ErrorLog
from .order import OrderFeeItem, OrderLineItem, OrderNote, ShopOrder
from .security_log import SecurityLog
from .transaction import MobbexTransaction

__all__ = [
    "ErrorLog",
    "MobbexTransaction",
    "OrderFeeItem",
    "OrderLineItem",
    "OrderNote",
    "Product",
    "ProductCategory",
    "SecurityLog",
    "ShopOrder",
]
