import json

import pytest

from storefront.client.api import TOKEN_KEY, USER_KEY, StorefrontAPIError, StorefrontClient
from storefront.client.cart_mirror import JsonFileStorage, LocalCart


@pytest.fixture
def api(client):
    # TestClient is an httpx.Client bound to the app
    return StorefrontClient(http=client, cart=LocalCart())


@pytest.fixture
def storage(tmp_path):
    return JsonFileStorage(tmp_path / "local_storage.json")


def test_register_stores_session(api):
    data = api.register("painter", "painter@example.com", "secret123")

    assert api.is_authenticated
    assert api.user == data["user"]
    assert api.verify()["username"] == "painter"
    assert api.profile()["email"] == "painter@example.com"


def test_login_and_logout(api):
    api.register("painter", "painter@example.com", "secret123")
    api.logout()
    assert not api.is_authenticated

    api.login("secret123", username="painter")
    assert api.is_authenticated


def test_server_message_is_surfaced(api):
    api.register("painter", "painter@example.com", "secret123")
    api.logout()

    with pytest.raises(StorefrontAPIError) as excinfo:
        api.login("wrong-password", email="painter@example.com")

    assert excinfo.value.status_code == 401
    assert excinfo.value.message == "Invalid credentials"


def test_catalog_calls(api):
    assert len(api.products()) == 25
    assert api.product(1)["name"] == "Pintura Acrílica Blanca"
    assert [p["name"] for p in api.filter("Pinceles", 5, 10)] == [
        "Pincel Plano N°2",
        "Pincel Redondo N°6",
    ]
    assert api.search("barniz")[0]["name"] == "Barniz Brillante"
    assert api.price_range()["totalProducts"] == 25
    assert len(api.categories()) == 8


def test_cart_mutations_sync_local_mirror(api):
    api.register("painter", "painter@example.com", "secret123")

    api.add_to_cart(1, 2)
    api.add_to_cart(10)

    assert api.cart.quantity_of(1) == 2
    assert api.cart.quantity_of(10) == 1
    assert api.cart.total_price() == 40.73
    assert api.cart_summary()["total_amount"] == 40.73

    item_id = api.get_cart()["items"][-1]["cart_item_id"]
    api.update_cart_item(item_id, 4)
    assert api.cart.quantity_of(1) == 4

    api.remove_cart_item(item_id)
    assert not api.cart.contains(1)

    assert api.validate_cart()["is_valid"] is True
    api.clear_cart()
    assert api.cart.items == []


def test_stock_error_is_raised(api):
    api.register("painter", "painter@example.com", "secret123")

    with pytest.raises(StorefrontAPIError) as excinfo:
        api.add_to_cart(21, 13)  # Imprimante Anticorrosivo, stock 12

    assert excinfo.value.status_code == 400
    assert excinfo.value.message == "Only 12 units available"
    assert api.is_authenticated


def test_rejected_token_logs_out_locally(api):
    api.register("painter", "painter@example.com", "secret123")
    api.token = "expired-or-forged"

    with pytest.raises(StorefrontAPIError) as excinfo:
        api.get_cart()

    assert excinfo.value.status_code == 403
    assert not api.is_authenticated
    assert api.user is None


def test_session_is_persisted_and_restored(client, storage):
    first = StorefrontClient(http=client, storage=storage)
    data = first.register("painter", "painter@example.com", "secret123")

    raw = json.loads(storage.path.read_text(encoding="utf-8"))
    assert raw[TOKEN_KEY] == data["token"]
    assert raw[USER_KEY]["username"] == "painter"

    # a new client on the same storage picks the session up
    second = StorefrontClient(http=client, storage=storage)
    assert second.is_authenticated
    assert second.restore_session()["username"] == "painter"
    assert second.get_cart()["items"] == []


def test_restore_discards_rejected_session(client, storage):
    storage.set(TOKEN_KEY, "expired-or-forged")
    storage.set(USER_KEY, {"id": 1, "username": "ghost", "email": "ghost@example.com"})

    api = StorefrontClient(http=client, storage=storage)
    assert api.is_authenticated

    assert api.restore_session() is None
    assert not api.is_authenticated
    assert api.user is None
    raw = json.loads(storage.path.read_text(encoding="utf-8"))
    assert TOKEN_KEY not in raw
    assert USER_KEY not in raw


def test_restore_without_stored_session(client, storage):
    api = StorefrontClient(http=client, storage=storage)

    assert not api.is_authenticated
    assert api.restore_session() is None


def test_logout_clears_stored_session_but_keeps_cart(client, storage):
    api = StorefrontClient(http=client, storage=storage, cart=LocalCart(storage))
    api.register("painter", "painter@example.com", "secret123")
    api.add_to_cart(1, 2)

    api.logout()

    raw = json.loads(storage.path.read_text(encoding="utf-8"))
    assert TOKEN_KEY not in raw
    assert USER_KEY not in raw
    assert raw["cart"][0]["quantity"] == 2
    assert not StorefrontClient(http=client, storage=storage).is_authenticated
