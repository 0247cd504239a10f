"""
Unique identifier generation

Order and saga ids are opaque 128-bit random values rendered as hex.
Callers may inject any zero-argument callable returning a unique string.
"""

import uuid
from collections.abc import Callable

IdGenerator = Callable[[], str]


def generate_id() -> str:
    """32-character hex id from uuid4"""
    return uuid.uuid4().hex
