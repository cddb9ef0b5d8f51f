from __future__ import annotations


class FoodmapError(Exception):
    """Base class for errors raised by the lookup engine."""


class ValidationError(FoodmapError):
    """Bad input shape or range. Surfaced to the caller, never retried."""


class DependencyUnavailable(FoodmapError):
    """Durable store or external source unreachable or timed out.

    Absorbed at the tier orchestrator and batch pipeline boundaries.
    """


class SourceError(DependencyUnavailable):
    """External place API failed, rate-limited us, or is not configured."""


class AuthorizationError(FoodmapError):
    """Administrative operation attempted without a valid admin credential."""

    def __init__(self, message: str = "Admin access required", *, anonymous: bool = False):
        super().__init__(message)
        self.anonymous = anonymous
