from decimal import Decimal

CUSTOMER = {"name": "A", "email": "a@x.com", "address": "1 Main St"}


async def test_checkout_flow(client, alice_headers, headphones):
    await client.post("/cart/items", json={"product_id": headphones.id, "quantity": 2},
                      headers=alice_headers)

    response = await client.post("/orders/checkout", json=CUSTOMER, headers=alice_headers)

    assert response.status_code == 201
    receipt = response.json()
    assert receipt["status"] == "pending"
    assert Decimal(receipt["total"]) == Decimal("399.98")
    assert receipt["line_count"] == 1

    cart = await client.get("/cart", headers=alice_headers)
    assert cart.json()["items"] == []

    orders = await client.get("/orders", headers=alice_headers)
    assert orders.status_code == 200
    data = orders.json()
    assert len(data) == 1
    assert data[0]["id"] == receipt["order_id"]
    assert data[0]["customer_address"] == "1 Main St"
    assert data[0]["items"][0]["quantity"] == 2
    assert Decimal(data[0]["items"][0]["price"]) == Decimal("199.99")
    assert data[0]["items"][0]["product_name"] == "Wireless Headphones"


async def test_checkout_empty_cart(client, alice_headers, catalog):
    response = await client.post("/orders/checkout", json=CUSTOMER, headers=alice_headers)

    assert response.status_code == 422
    assert "cart is empty" in response.json()["detail"].lower()

    orders = await client.get("/orders", headers=alice_headers)
    assert orders.json() == []


async def test_checkout_requires_auth(client, catalog):
    response = await client.post("/orders/checkout", json=CUSTOMER)

    assert response.status_code == 401


async def test_checkout_blank_fields_rejected(client, alice_headers, headphones):
    await client.post("/cart/items", json={"product_id": headphones.id}, headers=alice_headers)

    response = await client.post("/orders/checkout", json={**CUSTOMER, "address": "   "},
                                 headers=alice_headers)

    assert response.status_code == 422


async def test_checkout_invalid_email(client, alice_headers, headphones):
    await client.post("/cart/items", json={"product_id": headphones.id}, headers=alice_headers)

    response = await client.post("/orders/checkout", json={**CUSTOMER, "email": "not-an-email"},
                                 headers=alice_headers)

    assert response.status_code == 422


async def test_checkout_over_stock(client, alice_headers, headphones):
    await client.post("/cart/items", json={"product_id": headphones.id, "quantity": 51},
                      headers=alice_headers)

    response = await client.post("/orders/checkout", json=CUSTOMER, headers=alice_headers)

    assert response.status_code == 409


async def test_order_of_other_user_is_not_found(client, alice_headers, bob_headers, headphones):
    await client.post("/cart/items", json={"product_id": headphones.id}, headers=alice_headers)
    placed = await client.post("/orders/checkout", json=CUSTOMER, headers=alice_headers)
    order_id = placed.json()["order_id"]

    own = await client.get(f"/orders/{order_id}", headers=alice_headers)
    assert own.status_code == 200

    other = await client.get(f"/orders/{order_id}", headers=bob_headers)
    assert other.status_code == 404

    listing = await client.get("/orders", headers=bob_headers)
    assert listing.json() == []
