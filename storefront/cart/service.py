"""Cart store: the single authoritative cart state for a session."""
import threading
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Iterable, List, Optional, Union

from storefront.catalog import Product
from storefront.config import CartConfig
from storefront.db import get_key_value_store
from storefront.errors import (
    ERROR_LISTENER_FAILED,
    NOTICE_ITEM_NOT_IN_CART,
    NOTICE_NON_POSITIVE_QUANTITY,
    NOTICE_QUEUED_BEFORE_HYDRATION,
)
from storefront.logging import get_logger, sanitize_id_for_logging

from .identity import identity_key
from .models import CartState, LineItem, VariantChoice, utc_now_iso
from .pricing import line_total, recompute_aggregates, stored_unit_price, unit_price
from .storage import CartStorage

logger = get_logger(__name__)

ProductLike = Union[Product, dict]
ChoiceLike = Union[VariantChoice, dict]


class CartEventType(str, Enum):
    ITEM_ADDED = "item_added"
    ITEM_REMOVED = "item_removed"
    ITEM_UPDATED = "item_updated"
    CART_CLEARED = "cart_cleared"
    HYDRATED = "hydrated"


@dataclass(frozen=True)
class CartEvent:
    """What changed. Delivered to listeners together with the new state."""
    type: CartEventType
    product_id: Optional[str] = None
    product_name: Optional[str] = None
    quantity: int = 0


class HydrationState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"


Listener = Callable[[CartState, CartEvent], None]


def _as_product(product: ProductLike) -> Product:
    """Own copy of the product, detached from the caller's object."""
    if isinstance(product, Product):
        return product.model_copy(deep=True)
    return Product.model_validate(product)


def _as_choices(
    selected_variants: Optional[Iterable[ChoiceLike]],
    product: Optional[Product] = None,
) -> List[VariantChoice]:
    """
    Normalize choices to VariantChoice.

    When the product is known, blank display fields are filled from its
    catalog entry (axis name, option label).
    """
    choices = []
    for choice in selected_variants or []:
        if not isinstance(choice, VariantChoice):
            choice = VariantChoice.from_dict(choice)
        if product is not None and not (choice.name and choice.value):
            variant = product.find_variant(choice.variant_id)
            option = variant.find_option(choice.option_id) if variant else None
            choice = replace(
                choice,
                name=choice.name or (variant.name if variant else ""),
                value=choice.value or (option.label if option else ""),
            )
        choices.append(choice)
    return choices


class CartStore:
    """
    Holds the cart and applies every mutation to it.

    Features:
    - Identity-keyed line items: the same product and variant selection
      merge into one line
    - Quantities clamped to the configured per-item bounds
    - Write-through persistence after every mutation
    - Two-state hydration (UNINITIALIZED -> READY); mutations issued
      before hydration are queued and replayed once the stored cart is
      loaded, so they cannot overwrite it with an empty cart
    - subscribe/notify for UI consumers

    Invalid input never raises: non-positive quantities and operations on
    items that are not in the cart are no-ops, oversize quantities are
    clamped.
    """

    def __init__(self, storage: CartStorage, config: Optional[CartConfig] = None):
        self.storage = storage
        self.config = config or CartConfig()
        self._state = CartState.empty()
        self._hydration = HydrationState.UNINITIALIZED
        self._pending: List[tuple] = []
        self._listeners: List[Listener] = []
        self._lock = threading.RLock()

    # ---- reactive surface ----

    @property
    def cart(self) -> CartState:
        return self._state

    @property
    def is_hydrated(self) -> bool:
        return self._hydration is HydrationState.READY

    @property
    def hydration_state(self) -> HydrationState:
        return self._hydration

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: CartEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._state, event)
            except Exception:
                logger.exception(f"{ERROR_LISTENER_FAILED} on {event.type.value}")

    # ---- hydration ----

    def hydrate(self) -> CartState:
        """
        Load the stored cart once and mark the store READY.

        Later calls return the current state without touching storage.
        Queued mutations are replayed in the order they were issued.
        """
        with self._lock:
            if self.is_hydrated:
                return self._state

            loaded = self.storage.load()
            self._state = loaded if loaded is not None else CartState.empty()
            self._hydration = HydrationState.READY
            pending, self._pending = self._pending, []

            logger.info(
                f"Cart hydrated: {self._state.item_count} units in {len(self._state.items)} lines"
                f"{'' if loaded is not None else ' (fresh)'}"
            )
            self._notify(CartEvent(CartEventType.HYDRATED))

            for operation, args in pending:
                operation(*args)

            return self._state

    def _defer(self, operation: Callable, *args) -> bool:
        """Queue the call if not hydrated yet. True when queued."""
        with self._lock:
            if self.is_hydrated:
                return False
            logger.debug(f"{NOTICE_QUEUED_BEFORE_HYDRATION}: {operation.__name__}")
            self._pending.append((operation, args))
            return True

    def _commit(self, items: List[LineItem], event: CartEvent) -> None:
        totals = recompute_aggregates(items)
        self._state = CartState(
            items=items,
            item_count=totals.item_count,
            subtotal=totals.subtotal,
            last_updated=utc_now_iso(),
        )
        self.storage.save(self._state)
        self._notify(event)

    # ---- mutations ----

    def add_item(
        self,
        product: ProductLike,
        quantity: int,
        selected_variants: Optional[Iterable[ChoiceLike]] = None,
    ) -> None:
        """
        Add quantity units of a product configuration.

        An existing line with the same identity key grows instead of a
        new line being created; the resulting quantity is clamped to the
        per-item maximum and the excess is dropped.
        """
        if quantity <= 0:
            logger.debug(f"{NOTICE_NON_POSITIVE_QUANTITY}: add_item({quantity})")
            return

        # Catalog data is read now, even when the call is queued
        product = _as_product(product)
        choices = _as_choices(selected_variants, product)
        if self._defer(self.add_item, product, quantity, choices):
            return

        max_quantity = self.config.max_quantity_per_item

        with self._lock:
            items = list(self._state.items)
            key = identity_key(product.id, choices)
            price = unit_price(product.price, choices, product.variants)
            index = next((i for i, item in enumerate(items) if item.identity_key == key), None)

            if index is not None:
                new_quantity = min(items[index].quantity + quantity, max_quantity)
                items[index] = replace(
                    items[index],
                    quantity=new_quantity,
                    total_price=line_total(price, new_quantity),
                )
            else:
                new_quantity = min(quantity, max_quantity)
                items.append(
                    LineItem(
                        product_id=product.id,
                        product_name=product.name,
                        product_slug=product.slug,
                        product_image=product.primary_image(self.config.placeholder_image),
                        product_type=product.product_type,
                        base_price=product.price,
                        selected_variants=choices,
                        quantity=new_quantity,
                        total_price=line_total(price, new_quantity),
                    )
                )

            self._commit(
                items,
                CartEvent(CartEventType.ITEM_ADDED, product.id, product.name, new_quantity),
            )

    def remove_item(
        self,
        product_id: str,
        selected_variants: Optional[Iterable[ChoiceLike]] = None,
    ) -> None:
        """Remove the matching line. Removing an absent line does nothing."""
        choices = _as_choices(selected_variants)
        if self._defer(self.remove_item, product_id, choices):
            return

        key = identity_key(product_id, choices)
        with self._lock:
            existing = self._state.find(key)
            if existing is None:
                logger.debug(f"{NOTICE_ITEM_NOT_IN_CART}: {sanitize_id_for_logging(key)}")
                return
            items = [item for item in self._state.items if item.identity_key != key]
            self._commit(
                items,
                CartEvent(CartEventType.ITEM_REMOVED, existing.product_id, existing.product_name, 0),
            )

    def update_quantity(
        self,
        product_id: str,
        quantity: int,
        selected_variants: Optional[Iterable[ChoiceLike]] = None,
    ) -> None:
        """
        Set a line's quantity.

        quantity <= 0 removes the line. The new total uses the unit price
        already stored on the line (total / quantity), not the catalog's
        current price, so a price captured at add time stays stable.
        """
        if quantity <= 0:
            self.remove_item(product_id, selected_variants)
            return
        choices = _as_choices(selected_variants)
        if self._defer(self.update_quantity, product_id, quantity, choices):
            return

        key = identity_key(product_id, choices)
        with self._lock:
            items = list(self._state.items)
            index = next((i for i, item in enumerate(items) if item.identity_key == key), None)
            if index is None:
                logger.debug(f"{NOTICE_ITEM_NOT_IN_CART}: {sanitize_id_for_logging(key)}")
                return

            existing = items[index]
            new_quantity = self.config.clamp_quantity(quantity)
            items[index] = replace(
                existing,
                quantity=new_quantity,
                total_price=line_total(stored_unit_price(existing), new_quantity),
            )
            self._commit(
                items,
                CartEvent(CartEventType.ITEM_UPDATED, existing.product_id, existing.product_name, new_quantity),
            )

    def clear_cart(self) -> None:
        """Empty the cart and write the empty cart through."""
        if self._defer(self.clear_cart):
            return
        with self._lock:
            self._commit([], CartEvent(CartEventType.CART_CLEARED))

    # ---- queries ----

    def get_cart_item(
        self,
        product_id: str,
        selected_variants: Optional[Iterable[ChoiceLike]] = None,
    ) -> Optional[LineItem]:
        key = identity_key(product_id, _as_choices(selected_variants))
        return self._state.find(key)

    def is_in_cart(
        self,
        product_id: str,
        selected_variants: Optional[Iterable[ChoiceLike]] = None,
    ) -> bool:
        return self.get_cart_item(product_id, selected_variants) is not None

    def get_item_quantity(
        self,
        product_id: str,
        selected_variants: Optional[Iterable[ChoiceLike]] = None,
    ) -> int:
        item = self.get_cart_item(product_id, selected_variants)
        return item.quantity if item else 0


# Singleton instance
_cart_store: Optional[CartStore] = None


def get_cart_store(config: Optional[CartConfig] = None) -> CartStore:
    """Get the hydrated CartStore singleton."""
    global _cart_store
    if _cart_store is None:
        config = config or CartConfig.from_env()
        storage = CartStorage(get_key_value_store(config), key=config.storage_key, config=config)
        _cart_store = CartStore(storage, config)
        _cart_store.hydrate()
    return _cart_store


def reset_cart_store() -> None:
    """Drop the singleton (tests, logout)."""
    global _cart_store
    _cart_store = None
