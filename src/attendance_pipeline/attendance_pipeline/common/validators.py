from __future__ import annotations

from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} must not be empty")
    return value.strip()


def optional_text(value: Optional[str]) -> Optional[str]:
    """Strip free text; blank becomes None."""
    return (value or "").strip() or None


def require_score(value: float, field_name: str) -> float:
    try:
        score = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not 0.0 <= score <= 1.0:
        raise ValidationError(f"{field_name} must be between 0 and 1")
    return score
