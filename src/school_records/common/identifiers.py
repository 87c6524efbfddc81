from __future__ import annotations

import uuid


def new_id() -> str:
    """Opaque unique identifier for new records."""
    return str(uuid.uuid4())
