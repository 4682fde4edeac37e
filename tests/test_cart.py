from sqlmodel import select

from canteen.models.cart.cart_item import CartItem


def test_add_new_item(client, user, auth_headers, product):
    response = client.post("/api/user/cart", headers=auth_headers(user), json={"product_id": product.id, "quantity": 2})

    assert response.status_code == 201
    item = response.json()["cart_item"]
    assert item["quantity"] == 2
    assert item["product_id"] == product.id


def test_adding_same_product_increments_one_row(client, session, user, auth_headers, product):
    headers = auth_headers(user)
    client.post("/api/user/cart", headers=headers, json={"product_id": product.id, "quantity": 2})

    response = client.post("/api/user/cart", headers=headers, json={"product_id": product.id, "quantity": 3})

    assert response.status_code == 200
    assert response.json()["cart_item"]["quantity"] == 5
    rows = session.exec(select(CartItem).where(CartItem.user_id == user.id)).all()
    assert len(rows) == 1


def test_unavailable_product_cannot_be_added(client, session, user, auth_headers, product):
    product.is_available = False
    session.add(product)
    session.commit()

    response = client.post("/api/user/cart", headers=auth_headers(user), json={"product_id": product.id, "quantity": 1})

    assert response.status_code == 400
    assert response.json()["message"] == "Product is not available"


def test_quantity_must_be_positive(client, user, auth_headers, product):
    response = client.post("/api/user/cart", headers=auth_headers(user), json={"product_id": product.id, "quantity": 0})

    assert response.status_code == 400


def test_get_cart_includes_product(client, user, auth_headers, product):
    headers = auth_headers(user)
    client.post("/api/user/cart", headers=headers, json={"product_id": product.id, "quantity": 1})

    cart = client.get("/api/user/cart", headers=headers).json()["cart"]

    assert len(cart) == 1
    assert cart[0]["product"]["name"] == "Masala Dosa"


def test_update_quantity(client, user, auth_headers, product):
    headers = auth_headers(user)
    item_id = client.post("/api/user/cart", headers=headers, json={"product_id": product.id, "quantity": 1}).json()["cart_item"]["id"]

    response = client.put(f"/api/user/cart/{item_id}", headers=headers, json={"quantity": 4})

    assert response.json()["cart_item"]["quantity"] == 4


def test_update_requires_valid_quantity(client, user, auth_headers, product):
    headers = auth_headers(user)
    item_id = client.post("/api/user/cart", headers=headers, json={"product_id": product.id, "quantity": 1}).json()["cart_item"]["id"]

    response = client.put(f"/api/user/cart/{item_id}", headers=headers, json={})

    assert response.status_code == 400
    assert response.json()["message"] == "Valid quantity is required"


def test_other_users_item_is_not_found(client, create_user, user, auth_headers, product):
    item_id = client.post(
        "/api/user/cart", headers=auth_headers(user), json={"product_id": product.id, "quantity": 1}
    ).json()["cart_item"]["id"]
    other = create_user("other@example.com")

    response = client.put(f"/api/user/cart/{item_id}", headers=auth_headers(other), json={"quantity": 9})

    assert response.status_code == 404


def test_remove_item_and_clear_cart(client, session, user, auth_headers, product, canteen_user):
    headers = auth_headers(user)
    item_id = client.post("/api/user/cart", headers=headers, json={"product_id": product.id, "quantity": 1}).json()["cart_item"]["id"]

    assert client.delete(f"/api/user/cart/{item_id}", headers=headers).json()["message"] == "Item removed from cart"

    client.post("/api/user/cart", headers=headers, json={"product_id": product.id, "quantity": 1})
    assert client.delete("/api/user/cart", headers=headers).json()["message"] == "Cart cleared"
    assert session.exec(select(CartItem)).all() == []
