# offerte/errors.py
# Error taxonomy of the pricing engine. Every error names the scope and the
# field or condition that failed, so the UI can point at it.

from __future__ import annotations


class OfferteError(Exception):
    """Base class for all engine errors."""


class ValidationError(OfferteError):
    """Malformed or out-of-range scope input."""

    def __init__(self, message: str, *, scope: str | None = None, field: str | None = None):
        self.scope = scope
        self.field = field
        super().__init__(message)

    def __str__(self) -> str:
        message = super().__str__()
        where = ".".join(part for part in (self.scope, self.field) if part)
        return f"[{where}] {message}" if where else message


class UnresolvedFactorError(ValidationError):
    """A condition value has no correction factor at either tier."""

    def __init__(self, type: str, waarde: str, *, scope: str | None = None):
        self.type = type
        self.waarde = waarde
        super().__init__(
            f"no correction factor for {type}={waarde!r}",
            scope=scope,
            field=type,
        )


class ConfigurationError(OfferteError):
    """A rate, product or machine key was never configured for this user."""

    def __init__(self, message: str, *, scope: str | None = None, key: str | None = None):
        self.scope = scope
        self.key = key
        super().__init__(message)

    def __str__(self) -> str:
        message = super().__str__()
        return f"[{self.scope}] {message}" if self.scope else message


class StoreError(OfferteError):
    """Record-store failure (ambiguous lookup, missing record)."""


class StatusTransitionError(OfferteError):
    """A quote status change outside the allowed lifecycle."""


class NotFoundError(OfferteError):
    """No quote with this id or number."""
