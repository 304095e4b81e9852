"""Exceptions raised by the billing core and the API layer."""

from __future__ import annotations

from typing import Optional


class BillingError(Exception):
    """Base class for every error the billing desk reports to the operator."""


class ValidationError(BillingError):
    """Local input problem; the network is never touched."""


class EmptySelectionError(ValidationError):
    """No batch was given a positive quantity."""


class ApiError(BillingError):
    """A request to the pharmacy API failed."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        server_message: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.server_message = server_message

    def user_message(self, fallback: str) -> str:
        """Prefer the server's own wording, else the per-operation fallback."""
        return self.server_message or fallback


class TransientApiError(ApiError):
    """Network or server failure; the same action can be retried."""


class NotFoundError(ApiError):
    """The requested record no longer exists."""


class PartialSideEffectFailure(BillingError):
    """A best-effort secondary call failed; the primary action continues."""
