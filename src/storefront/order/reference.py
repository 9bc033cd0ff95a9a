"""Order reference generation.

The reference is shared with the payment gateway as its order id, so it must
be unique across the system. The millisecond timestamp keeps references
sortable and recognisable and the random suffix rules out collisions between
concurrent checkouts.
"""

import secrets
import time


def generate_order_reference(now_ms: int | None = None) -> str:
    millis = now_ms if now_ms is not None else time.time_ns() // 1_000_000
    return f"ORDER-{millis}-{secrets.token_hex(4)}"
