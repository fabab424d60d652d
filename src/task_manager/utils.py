from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder


# PUBLIC_INTERFACE
def error_envelope(error: str, message: str, detail: Optional[Any] = None) -> Dict[str, Any]:
    """
    Build the standard error body used by every exception handler.

    Args:
        error: Error code (ValidationError, NotFound, InvalidState).
        message: Human readable message.
        detail: Optional context; encoded so it is always JSON serializable.

    Returns:
        Dict with keys: error, message, detail.
    """
    return {
        "error": error,
        "message": message,
        "detail": jsonable_encoder(detail),
    }
