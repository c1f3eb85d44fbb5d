"""Cart persistence over a key-value backend.

Persistence is best-effort: load never raises and falls back to None,
save never raises and reports success as a bool.
"""
import json
from typing import Optional

from storefront.config import DEFAULT_STORAGE_KEY, CartConfig
from storefront.db import KeyValueStore
from storefront.errors import (
    ERROR_STORAGE_CORRUPTED,
    ERROR_STORAGE_DUPLICATE_ITEM,
    ERROR_STORAGE_INVALID_SHAPE,
    ERROR_STORAGE_QUANTITY_OUT_OF_RANGE,
    ERROR_STORAGE_READ_FAILED,
    ERROR_STORAGE_WRITE_FAILED,
)
from storefront.logging import get_logger, sanitize_string_for_logging

from .models import CartState

logger = get_logger(__name__)


def encode_cart(state: CartState) -> str:
    return json.dumps(state.to_dict())


def decode_cart(raw: str, config: Optional[CartConfig] = None) -> CartState:
    """
    Parse a stored payload.

    A payload whose lines break the cart rules (a quantity outside the
    configured bounds, two lines with the same identity key) is rejected
    as a whole, like any other malformed payload.

    Raises:
        json.JSONDecodeError, KeyError, TypeError, ValueError,
        ArithmeticError on malformed data
    """
    config = config or CartConfig()
    data = json.loads(raw)
    if not isinstance(data, dict) or not isinstance(data.get("items"), list):
        raise ValueError(ERROR_STORAGE_INVALID_SHAPE)
    if not all(isinstance(item, dict) for item in data["items"]):
        raise ValueError(ERROR_STORAGE_INVALID_SHAPE)

    state = CartState.from_dict(data)

    seen = set()
    for item in state.items:
        if not config.min_quantity_per_item <= item.quantity <= config.max_quantity_per_item:
            raise ValueError(f"{ERROR_STORAGE_QUANTITY_OUT_OF_RANGE}: {item.quantity}")
        if item.identity_key in seen:
            raise ValueError(f"{ERROR_STORAGE_DUPLICATE_ITEM}: {item.identity_key}")
        seen.add(item.identity_key)

    return state


class CartStorage:
    """Reads and writes the cart under one fixed, versionless key."""

    def __init__(
        self,
        backend: KeyValueStore,
        key: str = DEFAULT_STORAGE_KEY,
        config: Optional[CartConfig] = None,
    ):
        self.backend = backend
        self.key = key
        self.config = config or CartConfig()

    def load(self) -> Optional[CartState]:
        """Stored cart, or None when missing, unreadable or malformed."""
        try:
            raw = self.backend.get(self.key)
        except Exception as e:
            logger.error(f"{ERROR_STORAGE_READ_FAILED}: {sanitize_string_for_logging(str(e), 200)}")
            return None

        if not raw:
            return None

        try:
            return decode_cart(raw, self.config)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError, ArithmeticError) as e:
            # ArithmeticError: 1e400 parses to inf and int(inf) overflows
            logger.warning(f"{ERROR_STORAGE_CORRUPTED}: {sanitize_string_for_logging(str(e), 200)}")
            return None

    def save(self, state: CartState) -> bool:
        """Write the cart. Failures (quota, network, disk) are logged, not raised."""
        try:
            self.backend.set(self.key, encode_cart(state))
            return True
        except Exception as e:
            logger.error(f"{ERROR_STORAGE_WRITE_FAILED}: {sanitize_string_for_logging(str(e), 200)}")
            return False
