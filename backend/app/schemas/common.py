from __future__ import annotations

from typing import Any


def reject_null(value: Any, field_name: str) -> Any:
    """Partial updates may omit a field, but may not clear a required one."""
    if value is None:
        raise ValueError(f"{field_name} cannot be null")
    return value
