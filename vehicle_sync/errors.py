"""
Exception types raised by the vehicle sync pipeline.
"""
from typing import Optional


class VehicleSyncError(Exception):
    """Base class for all vehicle sync errors."""


class InvalidInputError(VehicleSyncError, TypeError):
    """Raised when the matcher receives inputs of the wrong type (e.g. a non-string title)."""


class CMSRequestError(VehicleSyncError):
    """Raised when the CMS REST API answers with a non-OK status."""

    def __init__(self, status: Optional[int], message: str):
        self.status = status
        self.message = message
        super().__init__(f"CMS request failed: {status} {message}")


class InvalidPayloadError(VehicleSyncError):
    """Raised when a scraped vehicle payload cannot be sent to the CMS (e.g. it has no title)."""
