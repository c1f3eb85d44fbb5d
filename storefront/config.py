"""Cart configuration loaded from environment variables."""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_STORAGE_KEY = "ecom-cart"
DEFAULT_PLACEHOLDER_IMAGE = "/placeholder-product.svg"
DEFAULT_STORAGE_PATH = str(Path.home() / ".storefront" / "storage.json")


def _get_env(key: str, default: Optional[str] = None) -> Optional[str]:
    value = os.environ.get(key)
    if value is None or not value.strip():
        return default
    return value.strip()


def _get_int(key: str, default: Optional[int] = None) -> Optional[int]:
    value = _get_env(key)
    if value is None:
        return default
    return int(value)


@dataclass(frozen=True)
class CartConfig:
    """Settings for cart behavior and persistence."""
    max_quantity_per_item: int = 99
    min_quantity_per_item: int = 1
    storage_key: str = DEFAULT_STORAGE_KEY
    storage_backend: str = "file"  # file | memory | redis
    storage_path: str = DEFAULT_STORAGE_PATH
    ttl_seconds: Optional[int] = None  # redis only; None keeps the cart until cleared
    placeholder_image: str = DEFAULT_PLACEHOLDER_IMAGE
    currency: str = "USD"

    @classmethod
    def from_env(cls) -> "CartConfig":
        """Build config from CART_* environment variables."""
        return cls(
            max_quantity_per_item=_get_int("CART_MAX_QUANTITY_PER_ITEM", 99),
            min_quantity_per_item=_get_int("CART_MIN_QUANTITY_PER_ITEM", 1),
            storage_key=_get_env("CART_STORAGE_KEY", DEFAULT_STORAGE_KEY),
            storage_backend=_get_env("CART_STORAGE_BACKEND", "file").lower(),
            storage_path=_get_env("CART_STORAGE_PATH", DEFAULT_STORAGE_PATH),
            ttl_seconds=_get_int("CART_TTL_SECONDS"),
            placeholder_image=_get_env("CART_PLACEHOLDER_IMAGE", DEFAULT_PLACEHOLDER_IMAGE),
            currency=_get_env("CART_CURRENCY", "USD").upper(),
        )

    def clamp_quantity(self, quantity: int) -> int:
        """Clamp a positive quantity into [min, max]."""
        return max(self.min_quantity_per_item, min(quantity, self.max_quantity_per_item))
