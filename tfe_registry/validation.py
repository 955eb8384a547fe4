"""
Identifier validation for registry paths.
Pure predicates plus the two-phase field check used by every registry operation.
"""

from __future__ import annotations

import re

from tfe_registry.errors import ValidationError

# Characters allowed in a single path-identifying segment.
_ID_PATTERN = re.compile(r"[a-zA-Z0-9\-._]+")


def valid_string(value: str | None) -> bool:
    """True when value is a non-empty string."""
    return isinstance(value, str) and value != ""


def valid_string_id(value: str | None) -> bool:
    """True when value is non-empty and safe to use as one URL path segment."""
    return valid_string(value) and _ID_PATTERN.fullmatch(value) is not None


def require_organization(organization: str | None) -> None:
    """Organization has a single failure reason: anything not ID-safe is invalid."""
    if not valid_string_id(organization):
        raise ValidationError("invalid value for organization")


def require_id(field: str, value: str | None) -> None:
    """
    Two-phase check for a required identifier.

    Raises:
        ValidationError: "<field> is required" when empty or missing,
            "invalid value for <field>" when present but not ID-safe.
    """
    if not valid_string(value):
        raise ValidationError(f"{field} is required")
    if not valid_string_id(value):
        raise ValidationError(f"invalid value for {field}")


def require_string(field: str, value: str | None) -> None:
    """Presence-only check for free-form fields (e.g. a VCS identifier)."""
    if not valid_string(value):
        raise ValidationError(f"{field} is required")
