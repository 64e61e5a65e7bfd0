from __future__ import annotations

import uuid


def new_id() -> str:
    """Opaque unique identifier for every row (UUID4, 36 chars)."""
    return str(uuid.uuid4())
