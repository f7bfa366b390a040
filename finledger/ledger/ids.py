"""Identifier generation."""

import time
from uuid import uuid4


def generate_id() -> str:
    """
    Millisecond timestamp plus a random suffix.

    Unique within a process lifetime even when called several times in
    the same millisecond. Ordering is only meaningful as a tie-breaker.
    """
    return f"{int(time.time() * 1000)}-{uuid4().hex[:10]}"
