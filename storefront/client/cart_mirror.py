# storefront/client/cart_mirror.py
"""
Local cart mirror for storefront clients.

The server cart (``/api/cart``) is the authoritative store. `LocalCart`
is an offline cache keyed by product id, persisted as JSON under the
``cart`` storage key, and refreshed from the server through `sync()`.
"""
import json
import logging
from pathlib import Path
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, ValidationError

logger = logging.getLogger(__name__)

STORAGE_KEY = "cart"


class MirrorItem(BaseModel):
    """One product in the local cart."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    price: float
    quantity: int
    category: str | None = None
    image_url: str | None = None


class JsonFileStorage:
    """
    Minimal key/value store backed by one JSON file, the way a browser's
    local storage is scoped to one profile. Concurrent writers are not
    coordinated: the last persist wins.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as fh:
            json.dump(data, fh, ensure_ascii=False, indent=2)

    def get(self, key: str, default: Any = None) -> Any:
        return self._read_all().get(key, default)

    def set(self, key: str, value: Any) -> None:
        try:
            data = self._read_all()
        except (OSError, json.JSONDecodeError):
            data = {}
        data[key] = value
        self._write_all(data)

    def delete(self, key: str) -> None:
        try:
            data = self._read_all()
        except (OSError, json.JSONDecodeError):
            data = {}
        if key not in data:
            return
        del data[key]
        self._write_all(data)


class LocalCart:
    """
    Client-side cart keyed by product id.

    - add(): merges into an existing entry or appends a new one;
      quantities are always >= 1
    - set_quantity() to 0 or below removes the entry
    - totals are recomputed on every read
    - every mutation is persisted immediately
    """

    def __init__(self, storage: JsonFileStorage | None = None, key: str = STORAGE_KEY):
        self.storage = storage
        self.key = key
        self._items: list[MirrorItem] = []
        self.load()

    # ---- persistence ----

    def load(self) -> None:
        if self.storage is None:
            return
        try:
            raw = self.storage.get(self.key, []) or []
            self._items = [MirrorItem.model_validate(entry) for entry in raw]
        except (OSError, json.JSONDecodeError, ValidationError, TypeError) as e:
            logger.error("Could not load cart from %s: %s", self.storage.path, e)
            self._items = []

    def _persist(self) -> None:
        if self.storage is not None:
            self.storage.set(self.key, [item.model_dump() for item in self._items])

    # ---- reads ----

    @property
    def items(self) -> list[MirrorItem]:
        return list(self._items)

    def _find(self, product_id: int) -> MirrorItem | None:
        for item in self._items:
            if item.id == product_id:
                return item
        return None

    def contains(self, product_id: int) -> bool:
        return self._find(product_id) is not None

    def quantity_of(self, product_id: int) -> int:
        item = self._find(product_id)
        return item.quantity if item else 0

    def total_items(self) -> int:
        return sum(item.quantity for item in self._items)

    def total_price(self) -> float:
        return round(sum(item.price * item.quantity for item in self._items), 2)

    # ---- mutations ----

    def add(self, product: dict[str, Any] | BaseModel, quantity: int = 1) -> MirrorItem:
        """
        Add `quantity` units of `product` (a product dict or model).

        Raises:
            ValueError: if quantity is not positive.
        """
        if quantity <= 0:
            raise ValueError(f"quantity must be positive, got {quantity}")
        data = product.model_dump() if isinstance(product, BaseModel) else dict(product)
        existing = self._find(data["id"])
        if existing:
            existing.quantity += quantity
            item = existing
        else:
            item = MirrorItem.model_validate({**data, "quantity": quantity})
            self._items.append(item)
        self._persist()
        return item

    def remove(self, product_id: int) -> None:
        self._items = [item for item in self._items if item.id != product_id]
        self._persist()

    def set_quantity(self, product_id: int, quantity: int) -> None:
        item = self._find(product_id)
        if item is not None:
            item.quantity = max(0, quantity)
        self._items = [item for item in self._items if item.quantity > 0]
        self._persist()

    def clear(self) -> None:
        self._items = []
        self._persist()

    def sync(self, server_lines: Iterable[dict[str, Any]]) -> None:
        """
        Replace the mirror with the server cart.

        `server_lines` are the `items` of ``GET /api/cart`` (keyed by
        `product_id`).
        """
        self._items = [
            MirrorItem(
                id=line["product_id"],
                name=line["name"],
                price=line["price"],
                quantity=line["quantity"],
                category=line.get("category"),
                image_url=line.get("image_url"),
            )
            for line in server_lines
        ]
        self._persist()
