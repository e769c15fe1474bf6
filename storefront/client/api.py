# storefront/client/api.py
"""
HTTP client for the storefront API.

Wraps every endpoint of ``/api/auth``, ``/api/products`` and ``/api/cart``.
Server error messages are surfaced verbatim through `StorefrontAPIError`.
An auth failure (401/403) on a call made with a token discards that token,
i.e. the client is logged out locally; it never re-logs in on its own.

When a `LocalCart` is attached, every cart mutation is followed by a
`pull_cart()` so the mirror always reflects the server cart.

With a `JsonFileStorage` attached, the token and user survive restarts
under the ``auth_token`` and ``auth_user`` keys; `restore_session()`
checks a stored token against the server before trusting it.
"""
import json
import logging
from typing import Any

import httpx

from storefront.client.cart_mirror import JsonFileStorage, LocalCart

logger = logging.getLogger(__name__)

TOKEN_KEY = "auth_token"
USER_KEY = "auth_user"


class StorefrontAPIError(Exception):
    """Non-2xx response from the storefront API."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class StorefrontClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        *,
        api_prefix: str = "/api",
        http: httpx.Client | None = None,
        token: str | None = None,
        cart: LocalCart | None = None,
        storage: JsonFileStorage | None = None,
        timeout: float = 10.0,
    ):
        self.http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self.api_prefix = api_prefix.rstrip("/")
        self.token = token
        self.cart = cart
        self.storage = storage
        self.user: dict[str, Any] | None = None
        if token is None:
            self._load_session()

    # ---- plumbing ----

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "StorefrontClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def _request(self, method: str, path: str, *, auth: bool = False, **kwargs) -> Any:
        headers = kwargs.pop("headers", {})
        if auth and self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        response = self.http.request(method, f"{self.api_prefix}{path}", headers=headers, **kwargs)

        if response.is_success:
            return response.json()

        try:
            message = response.json().get("detail", response.text)
        except ValueError:
            message = response.text

        if auth and response.status_code in (401, 403) and self.token is not None:
            logger.info("Token rejected (%s); logging out locally", response.status_code)
            self.logout()

        raise StorefrontAPIError(response.status_code, str(message))

    def _load_session(self) -> None:
        if self.storage is None:
            return
        try:
            self.token = self.storage.get(TOKEN_KEY)
            self.user = self.storage.get(USER_KEY)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Could not load session from %s: %s", self.storage.path, e)
            self.token = None
            self.user = None

    def _store_session(self, data: dict[str, Any]) -> dict[str, Any]:
        self.token = data["token"]
        self.user = data["user"]
        if self.storage is not None:
            self.storage.set(TOKEN_KEY, self.token)
            self.storage.set(USER_KEY, self.user)
        return data

    # ---- auth ----

    def register(self, username: str, email: str, password: str) -> dict[str, Any]:
        data = self._request(
            "POST",
            "/auth/register",
            json={"username": username, "email": email, "password": password},
        )
        return self._store_session(data)

    def login(
        self,
        password: str,
        *,
        email: str | None = None,
        username: str | None = None,
    ) -> dict[str, Any]:
        body = {"password": password}
        if email:
            body["email"] = email
        if username:
            body["username"] = username
        return self._store_session(self._request("POST", "/auth/login", json=body))

    def logout(self) -> None:
        """Forget the token (and its stored copy); nothing is sent to the server."""
        self.token = None
        self.user = None
        if self.storage is not None:
            self.storage.delete(TOKEN_KEY)
            self.storage.delete(USER_KEY)

    def restore_session(self) -> dict[str, Any] | None:
        """
        Check a stored session against the server.

        Returns the verified user, or None when there is no stored token
        or the server rejects it (the stale session is then discarded).
        """
        if self.token is None:
            self.logout()
            return None
        try:
            user = self.verify()
        except StorefrontAPIError as e:
            if e.status_code not in (401, 403):
                raise
            logger.info("Stored session rejected (%s)", e.status_code)
            self.logout()
            return None

        self.user = user
        if self.storage is not None:
            self.storage.set(USER_KEY, user)
        return user

    def profile(self) -> dict[str, Any]:
        return self._request("GET", "/auth/profile", auth=True)["user"]

    def verify(self) -> dict[str, Any]:
        return self._request("POST", "/auth/verify", auth=True)["user"]

    def refresh(self) -> dict[str, Any]:
        return self._store_session(self._request("POST", "/auth/refresh", auth=True))

    # ---- catalog ----

    def products(self) -> list[dict[str, Any]]:
        return self._request("GET", "/products")

    def product(self, product_id: int) -> dict[str, Any]:
        return self._request("GET", f"/products/{product_id}")

    def search(self, q: str) -> list[dict[str, Any]]:
        return self._request("GET", "/products/search", params={"q": q})

    def filter(
        self,
        category: str | None = None,
        min_price: float | None = None,
        max_price: float | None = None,
    ) -> list[dict[str, Any]]:
        params = {}
        if category:
            params["category"] = category
        if min_price is not None:
            params["minPrice"] = min_price
        if max_price is not None:
            params["maxPrice"] = max_price
        return self._request("GET", "/products/filter", params=params)

    def categories(self) -> list[dict[str, Any]]:
        return self._request("GET", "/products/categories")

    def price_range(self) -> dict[str, Any]:
        return self._request("GET", "/products/price-range")

    # ---- server cart ----

    def get_cart(self) -> dict[str, Any]:
        return self._request("GET", "/cart", auth=True)

    def pull_cart(self) -> dict[str, Any]:
        """Fetch the server cart and, if attached, sync the local mirror."""
        cart = self.get_cart()
        if self.cart is not None:
            self.cart.sync(cart["items"])
        return cart

    def _after_mutation(self, data: dict[str, Any]) -> dict[str, Any]:
        if self.cart is not None:
            self.pull_cart()
        return data

    def add_to_cart(self, product_id: int, quantity: int = 1) -> dict[str, Any]:
        data = self._request(
            "POST",
            "/cart/add",
            auth=True,
            json={"product_id": product_id, "quantity": quantity},
        )
        return self._after_mutation(data)

    def update_cart_item(self, cart_item_id: int, quantity: int) -> dict[str, Any]:
        data = self._request(
            "PUT", f"/cart/update/{cart_item_id}", auth=True, json={"quantity": quantity}
        )
        return self._after_mutation(data)

    def remove_cart_item(self, cart_item_id: int) -> dict[str, Any]:
        return self._after_mutation(
            self._request("DELETE", f"/cart/remove/{cart_item_id}", auth=True)
        )

    def clear_cart(self) -> dict[str, Any]:
        return self._after_mutation(self._request("DELETE", "/cart/clear", auth=True))

    def cart_summary(self) -> dict[str, Any]:
        return self._request("GET", "/cart/summary", auth=True)

    def validate_cart(self) -> dict[str, Any]:
        return self._request("POST", "/cart/validate", auth=True)
