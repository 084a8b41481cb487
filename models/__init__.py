from models.categories import Category
from models.products import Product
from models.cart_items import CartItem
from models.orders import Order
from models.order_items import OrderItem

__all__ = ["Category", "Product", "CartItem", "Order", "OrderItem"]
