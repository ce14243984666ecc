from stockroom.client.api import StockroomClient, ApiError, AuthenticationRequired
from stockroom.client.cart import OrderCart, CartError
from stockroom.client.loader import ListLoader

__all__ = ["StockroomClient", "ApiError", "AuthenticationRequired", "OrderCart", "CartError", "ListLoader"]
