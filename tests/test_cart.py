import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from storefront.main import create_app
from storefront.models.cart import CartItem
from storefront.repositories.cart_repo import CartRepository

from conftest import bearer


def add(client, headers, product_id, quantity=None):
    body = {"product_id": product_id}
    if quantity is not None:
        body["quantity"] = quantity
    return client.post("/api/cart/add", json=body, headers=headers)


def cart_of(client, headers) -> dict:
    resp = client.get("/api/cart", headers=headers)
    assert resp.status_code == 200
    return resp.json()


# ---- auth ----


def test_cart_requires_bearer_token(client):
    assert client.get("/api/cart").status_code == 401
    assert client.post("/api/cart/add", json={"product_id": 1}).status_code == 401
    assert client.get("/api/cart", headers=bearer("garbage")).status_code == 403


def test_empty_cart(client, alice):
    assert cart_of(client, alice) == {
        "items": [],
        "summary": {"total_items": 0, "total_amount": 0.0},
    }


# ---- add ----


def test_add_creates_row(client, alice):
    resp = add(client, alice, 1, 2)

    assert resp.status_code == 201
    assert resp.json()["cart_item_id"] is not None
    assert resp.json()["quantity"] == 2


def test_add_defaults_to_one_unit(client, alice):
    assert add(client, alice, 1).status_code == 201
    assert cart_of(client, alice)["items"][0]["quantity"] == 1


def test_repeated_add_merges_into_one_row(client, alice):
    first = add(client, alice, 5, 2)
    second = add(client, alice, 5, 3)

    assert first.status_code == 201
    assert second.status_code == 200
    assert second.json()["cart_item_id"] == first.json()["cart_item_id"]

    items = cart_of(client, alice)["items"]
    assert len(items) == 1
    assert items[0]["quantity"] == 5


def test_add_more_than_stock_is_rejected(client, alice, make_product):
    product_id = make_product(stock=10)

    resp = add(client, alice, product_id, 11)

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Only 10 units available"
    assert cart_of(client, alice)["items"] == []


def test_merge_over_stock_leaves_row_unchanged(client, alice, make_product):
    product_id = make_product(stock=10)
    assert add(client, alice, product_id, 8).status_code == 201

    resp = add(client, alice, product_id, 5)

    assert resp.status_code == 400
    assert resp.json()["detail"] == "You can only add 2 more units"
    assert cart_of(client, alice)["items"][0]["quantity"] == 8


def test_merge_up_to_exact_stock(client, alice, make_product):
    product_id = make_product(stock=10)
    add(client, alice, product_id, 8)

    resp = add(client, alice, product_id, 2)

    assert resp.status_code == 200
    assert resp.json()["quantity"] == 10


def test_add_unknown_product(client, alice):
    assert add(client, alice, 999, 1).status_code == 404


@pytest.mark.parametrize("quantity", [0, -2, "abc", 1.5, True, False])
def test_add_rejects_invalid_quantity(client, alice, quantity):
    assert add(client, alice, 1, quantity).status_code == 400


@pytest.mark.parametrize("product_id", [None, 0, "x", True])
def test_add_rejects_invalid_product_id(client, alice, product_id):
    body = {"quantity": 1}
    if product_id is not None:
        body["product_id"] = product_id
    assert client.post("/api/cart/add", json=body, headers=alice).status_code == 400


def test_add_accepts_numeric_string_quantity(client, alice):
    resp = add(client, alice, 1, "3")
    assert resp.status_code == 201
    assert resp.json()["quantity"] == 3


# ---- totals ----


def test_cart_totals(client, alice):
    add(client, alice, 1, 2)   # 15.99
    add(client, alice, 10, 1)  # 8.75

    cart = cart_of(client, alice)

    assert cart["summary"] == {"total_items": 3, "total_amount": 40.73}
    subtotals = {line["product_id"]: line["subtotal"] for line in cart["items"]}
    assert subtotals == {1: 31.98, 10: 8.75}
    line = next(i for i in cart["items"] if i["product_id"] == 10)
    assert line["name"] == "Rodillo Antigoteo"
    assert line["stock"] == 40


def test_cart_summary(client, alice):
    add(client, alice, 1, 2)
    add(client, alice, 10, 1)

    resp = client.get("/api/cart/summary", headers=alice)

    assert resp.json() == {"total_items": 2, "total_quantity": 3, "total_amount": 40.73}


def test_cart_summary_empty(client, alice):
    resp = client.get("/api/cart/summary", headers=alice)
    assert resp.json() == {"total_items": 0, "total_quantity": 0, "total_amount": 0.0}


def test_carts_are_per_user(client, alice, bob):
    add(client, alice, 1, 2)

    assert cart_of(client, bob)["items"] == []


# ---- update ----


def test_update_replaces_quantity(client, alice):
    item_id = add(client, alice, 1, 5).json()["cart_item_id"]

    resp = client.put(f"/api/cart/update/{item_id}", json={"quantity": 2}, headers=alice)

    assert resp.status_code == 200
    assert cart_of(client, alice)["items"][0]["quantity"] == 2


def test_update_over_stock(client, alice, make_product):
    product_id = make_product(stock=10)
    item_id = add(client, alice, product_id, 3).json()["cart_item_id"]

    resp = client.put(f"/api/cart/update/{item_id}", json={"quantity": 11}, headers=alice)

    assert resp.status_code == 400
    assert cart_of(client, alice)["items"][0]["quantity"] == 3


@pytest.mark.parametrize("quantity", [0, -1, "many", True])
def test_update_rejects_invalid_quantity(client, alice, quantity):
    item_id = add(client, alice, 1, 1).json()["cart_item_id"]
    resp = client.put(f"/api/cart/update/{item_id}", json={"quantity": quantity}, headers=alice)
    assert resp.status_code == 400


def test_update_other_users_item_is_not_found(client, alice, bob):
    item_id = add(client, alice, 1, 1).json()["cart_item_id"]

    resp = client.put(f"/api/cart/update/{item_id}", json={"quantity": 2}, headers=bob)

    assert resp.status_code == 404
    assert cart_of(client, alice)["items"][0]["quantity"] == 1


def test_update_unknown_item(client, alice):
    resp = client.put("/api/cart/update/999", json={"quantity": 1}, headers=alice)
    assert resp.status_code == 404


# ---- remove / clear ----


def test_remove_item(client, alice):
    item_id = add(client, alice, 1, 1).json()["cart_item_id"]

    resp = client.delete(f"/api/cart/remove/{item_id}", headers=alice)

    assert resp.status_code == 200
    assert "Pintura Acrílica Blanca" in resp.json()["message"]
    assert cart_of(client, alice)["items"] == []


def test_remove_other_users_item_is_not_found(client, alice, bob):
    item_id = add(client, alice, 1, 1).json()["cart_item_id"]

    assert client.delete(f"/api/cart/remove/{item_id}", headers=bob).status_code == 404
    assert len(cart_of(client, alice)["items"]) == 1


def test_remove_unknown_item(client, alice):
    assert client.delete("/api/cart/remove/999", headers=alice).status_code == 404


def test_clear_empty_cart_is_not_found(client, alice):
    assert client.delete("/api/cart/clear", headers=alice).status_code == 404


def test_clear_cart_reports_count(client, alice, bob):
    add(client, alice, 1, 1)
    add(client, alice, 2, 4)
    add(client, bob, 3, 1)

    resp = client.delete("/api/cart/clear", headers=alice)

    assert resp.status_code == 200
    assert resp.json()["removed_count"] == 2
    assert cart_of(client, alice)["items"] == []
    assert len(cart_of(client, bob)["items"]) == 1


# ---- validate ----


def test_validate_valid_cart(client, alice):
    add(client, alice, 1, 2)

    resp = client.post("/api/cart/validate", headers=alice)

    body = resp.json()
    assert body["is_valid"] is True
    assert body["invalid_items"] == []
    assert body["total_items"] == 1
    assert body["items"][0]["status"] == "valid"


def test_validate_flags_items_over_current_stock(client, alice, make_product, set_stock):
    scarce = make_product(name="Scarce", stock=10)
    add(client, alice, scarce, 8)
    add(client, alice, 1, 1)
    set_stock(scarce, 5)

    body = client.post("/api/cart/validate", headers=alice).json()

    assert body["is_valid"] is False
    assert body["invalid_count"] == 1
    assert body["invalid_items"][0]["product_id"] == scarce
    assert body["invalid_items"][0]["status"] == "insufficient_stock"
    assert len(body["items"]) == 2


# ---- stock is never touched ----


def test_cart_operations_never_change_stock(client, alice):
    before = {p["id"]: p["stock"] for p in client.get("/api/products").json()}

    item_id = add(client, alice, 1, 3).json()["cart_item_id"]
    add(client, alice, 1, 2)
    add(client, alice, 4, 1)
    client.put(f"/api/cart/update/{item_id}", json={"quantity": 7}, headers=alice)
    client.delete(f"/api/cart/remove/{item_id}", headers=alice)
    client.delete("/api/cart/clear", headers=alice)

    after = {p["id"]: p["stock"] for p in client.get("/api/products").json()}
    assert after == before


# ---- repository guarantees ----


def test_increment_is_conditional_on_stock(engine, make_product, alice, client):
    repo = CartRepository()
    product_id = make_product(stock=10)
    add(client, alice, product_id, 8)

    with Session(engine) as session:
        item = session.get(CartItem, 1)
        assert repo.increment_within_stock(session, item.id, 2) is True
        # a second increment, read against the same stale quantity, must not overshoot
        assert repo.increment_within_stock(session, item.id, 1) is False
        session.refresh(item)
        assert item.quantity == 10


def test_one_row_per_user_and_product(engine, client, alice):
    add(client, alice, 1, 1)
    with Session(engine) as session:
        duplicate = CartItem(user_id=1, product_id=1, quantity=1)
        with pytest.raises(IntegrityError):
            CartRepository().create(session, duplicate)


# ---- error handling ----


def test_unexpected_errors_are_generic_500(app):
    @app.get("/boom")
    def boom():
        raise RuntimeError("disk on fire")

    with TestClient(app, raise_server_exceptions=False) as c:
        resp = c.get("/boom")

    assert resp.status_code == 500
    assert resp.json() == {"detail": "Internal server error", "error": "disk on fire"}


def test_production_hides_error_message(settings):
    app = create_app(settings.model_copy(update={"ENVIRONMENT": "production"}))

    @app.get("/boom")
    def boom():
        raise RuntimeError("disk on fire")

    with TestClient(app, raise_server_exceptions=False) as c:
        resp = c.get("/boom")

    assert resp.status_code == 500
    assert resp.json() == {"detail": "Internal server error"}


def test_security_headers(client):
    resp = client.get("/api/health")
    assert resp.headers["X-Frame-Options"] == "DENY"
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
