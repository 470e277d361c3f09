"""Input rules shared by the server-side aggregate and the clients."""

from __future__ import annotations

from liveqa_app.core.errors import ValidationError


def clean_text(value: str | None, field_name: str, max_length: int) -> str:
    """Trim user input and enforce the non-empty and length rules."""
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(f"{field_name} must not be empty.")
    if len(cleaned) > max_length:
        raise ValidationError(f"{field_name} must be at most {max_length} characters.")
    return cleaned


def normalize_access_code(value: str | None, length: int) -> str:
    """Keep the digits of a typed access code and require exactly ``length`` of them."""
    digits = "".join(ch for ch in (value or "") if ch.isdigit())[:length]
    if len(digits) != length:
        raise ValidationError(f"Access code must be {length} digits.")
    return digits
