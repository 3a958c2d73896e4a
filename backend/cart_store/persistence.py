"""
Cart persistence.

The ``carts`` map is stored as one JSON blob under the fixed key
``establishment-carts`` in a key-value slot. Two slots exist: in-memory
(tests, embedding) and a JSON file (the CLI).
"""

import json
from pathlib import Path
from typing import Any, Protocol

from shared.config.logging import get_logger

from .models import EstablishmentCart

logger = get_logger(__name__)

STORAGE_KEY = "establishment-carts"


class CartSlot(Protocol):
    def read(self, key: str) -> str | None: ...

    def write(self, key: str, value: str) -> None: ...


class MemorySlot:
    def __init__(self, initial: dict[str, str] | None = None):
        self.values: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self.values.get(key)

    def write(self, key: str, value: str) -> None:
        self.values[key] = value


class FileSlot:
    """
    Key-value slot backed by one JSON object on disk.

    The file is rewritten through a temporary sibling and an atomic
    rename.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def read(self, key: str) -> str | None:
        value = self._read_all().get(key)
        return value if isinstance(value, str) or value is None else json.dumps(value)

    def write(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except ValueError:
            logger.warning("Overwriting unreadable cart file", path=str(self.path))
            data = {}
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(self.path)


def serialize_carts(carts: dict[int, EstablishmentCart]) -> str:
    return json.dumps(
        {
            str(establishment_id): {
                "items": [
                    {"product": item.product.to_json(), "quantity": item.quantity}
                    for item in cart.items
                ],
                "total": str(cart.total),
            }
            for establishment_id, cart in carts.items()
        },
        ensure_ascii=False,
    )


class CartPersistence:
    """Reads and writes the serialized ``carts`` map through a slot."""

    def __init__(self, slot: CartSlot, key: str = STORAGE_KEY):
        self.slot = slot
        self.key = key

    def save(self, carts: dict[int, EstablishmentCart]) -> None:
        self.slot.write(self.key, serialize_carts(carts))

    def load(self) -> dict[str, Any] | None:
        """
        Raw persisted blob, or None when nothing was saved.

        Raises:
            ValueError: The slot holds something that is not a JSON object.
        """
        raw = self.slot.read(self.key)
        if raw is None:
            return None
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError("persisted carts are not a JSON object")
        return data
