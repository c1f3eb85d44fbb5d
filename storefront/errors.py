"""
Common Error Constants

Centralized log and error messages for the cart and its storage.
"""

# Storage errors
ERROR_STORAGE_READ_FAILED = "Failed to read cart from storage"
ERROR_STORAGE_WRITE_FAILED = "Failed to save cart to storage"
ERROR_STORAGE_CORRUPTED = "Corrupted cart data in storage"
ERROR_STORAGE_INVALID_SHAPE = "Stored cart is not an object with an items list"
ERROR_STORAGE_QUANTITY_OUT_OF_RANGE = "Stored cart item quantity out of range"
ERROR_STORAGE_DUPLICATE_ITEM = "Stored cart has duplicate line items"
ERROR_REDIS_NOT_CONFIGURED = "UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set"
ERROR_UNKNOWN_BACKEND = "Unknown cart storage backend"

# Cart operation notices (no-ops, never raised)
NOTICE_NON_POSITIVE_QUANTITY = "Ignoring non-positive quantity"
NOTICE_ITEM_NOT_IN_CART = "Item not in cart"
NOTICE_QUEUED_BEFORE_HYDRATION = "Cart not hydrated yet, queueing operation"

# Subscriber errors
ERROR_LISTENER_FAILED = "Cart listener raised"
