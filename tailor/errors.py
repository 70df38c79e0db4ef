from __future__ import annotations


class TailorError(Exception):
    """Base class for errors raised by the service layer."""


class ValidationError(TailorError, ValueError):
    """Input rejected before anything is written."""


class NotFoundError(TailorError, LookupError):
    """A referenced row (job, sale, customer, item) does not exist."""
