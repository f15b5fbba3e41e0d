"""Shared path parameter checks."""
from fastapi import HTTPException


def require_id(value: str, label: str) -> str:
    """Reject blank ids with 400 before any lookup."""
    cleaned = value.strip()
    if not cleaned:
        raise HTTPException(status_code=400, detail=f"Invalid {label}")
    return cleaned
