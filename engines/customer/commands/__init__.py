"""
Shopdesk Customer Engine — Request Commands
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from core.errors import ValidationError


def _non_empty(value, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{name} must be a non-empty string.")
    return value.strip()


def _email(value) -> str:
    email = _non_empty(value, "email")
    if "@" not in email:
        raise ValidationError(f"email '{email}' not valid.")
    return email


@dataclass(frozen=True)
class CustomerCreateRequest:
    name: str
    email: str

    def __post_init__(self):
        object.__setattr__(self, "name", _non_empty(self.name, "name"))
        object.__setattr__(self, "email", _email(self.email))


@dataclass(frozen=True)
class CustomerUpdateRequest:
    """Only identity fields; the loyalty tier is not writable here."""

    customer_id: int
    name: Optional[str] = None
    email: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.customer_id, int) or self.customer_id <= 0:
            raise ValidationError("customer_id must be a positive integer.")
        if self.name is not None:
            object.__setattr__(self, "name", _non_empty(self.name, "name"))
        if self.email is not None:
            object.__setattr__(self, "email", _email(self.email))
