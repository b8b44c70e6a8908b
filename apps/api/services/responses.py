"""Response envelope helpers."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional


def envelope(data: Any = None, message: str = "", status: int = 200) -> Dict[str, Any]:
    """Wrap a payload in the `{status, data, message}` envelope."""
    return {"status": status, "data": data, "message": message}


def iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None
