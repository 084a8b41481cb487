import pytest
from decimal import Decimal
from models.products import Product
from schemas.order_schemas import CustomerInfo
from core.exceptions import AuthenticationRequired, NotFound
from services.cart_service import CartService
from services.order_service import OrderService


CUSTOMER = CustomerInfo(name="A", email="a@x.com", address="1 Main St")


def place(session, identity, *products_and_quantities):
    for product, quantity in products_and_quantities:
        CartService.add_to_cart(session, identity, product.id, quantity)
    return OrderService.place_order(session, identity, CUSTOMER)


def test_orders_newest_first_with_lines(session, alice, catalog):
    first = place(session, alice, (catalog["Yoga Mat"], 1))
    second = place(session, alice, (catalog["Wireless Headphones"], 2), (catalog["Desk Lamp"], 1))

    orders = OrderService.list_orders(session, alice)

    assert [o["id"] for o in orders] == [second["order_id"], first["order_id"]]
    assert [i["product_name"] for i in orders[0]["items"]] == ["Wireless Headphones", "Desk Lamp"]
    assert orders[0]["items"][0]["subtotal"] == Decimal("399.98")
    assert orders[1]["items"][0]["product_image_url"].startswith("https://")
    assert orders[0]["status"] == "pending"


def test_orders_are_private(session, alice, bob, headphones):
    receipt = place(session, alice, (headphones, 1))

    assert OrderService.list_orders(session, bob) == []
    with pytest.raises(NotFound):
        OrderService.get_order(session, bob, receipt["order_id"])


def test_get_order(session, alice, headphones):
    receipt = place(session, alice, (headphones, 2))

    order = OrderService.get_order(session, alice, receipt["order_id"])

    assert order["total"] == Decimal("399.98")
    assert len(order["items"]) == 1
    assert order["items"][0]["quantity"] == 2


def test_get_missing_order(session, alice, catalog):
    with pytest.raises(NotFound):
        OrderService.get_order(session, alice, 424242)


def test_history_requires_identity(session, catalog):
    with pytest.raises(AuthenticationRequired):
        OrderService.list_orders(session, None)


def test_deleted_product_keeps_history(session, alice, headphones):
    receipt = place(session, alice, (headphones, 2))

    session.query(Product).filter(Product.id == headphones.id).delete(synchronize_session=False)
    session.commit()
    session.expunge_all()

    order = OrderService.get_order(session, alice, receipt["order_id"])

    assert len(order["items"]) == 1
    line = order["items"][0]
    assert line["product_id"] is None
    assert line["product_name"] == ""
    assert line["product_image_url"] == ""
    assert line["quantity"] == 2
    assert line["price"] == Decimal("199.99")


def test_no_orders(session, alice, catalog):
    assert OrderService.list_orders(session, alice) == []


def test_order_lines_visible_only_through_own_order(session, alice, bob, catalog):
    from models.order_items import OrderItem
    from core.policy import scope

    receipt = place(session, alice, (catalog["Yoga Mat"], 1), (catalog["Desk Lamp"], 2))
    order_id = receipt["order_id"]

    assert scope(session.query(OrderItem), OrderItem, bob).all() == []
    assert scope(session.query(OrderItem), OrderItem, None).all() == []

    own = scope(session.query(OrderItem), OrderItem, alice).all()
    assert len(own) == 2
    assert {item.order_id for item in own} == {order_id}

    # asking for the lines of someone else's order by id still yields nothing
    assert OrderService._lines_for(session, bob, [order_id]) == {order_id: []}
    assert len(OrderService._lines_for(session, alice, [order_id])[order_id]) == 2
