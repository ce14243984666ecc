from .user import User
from .supplier import Supplier
from .category import Category
from .product import Product
from .order import Order, OrderDetail

__all__ = ["User", "Supplier", "Category", "Product", "Order", "OrderDetail"]
