# biling/errors.py
from typing import Dict, Optional


class BilingError(Exception):
    """Base class for errors that map to a specific HTTP response."""

    status_code = 500
    reason = "internal_error"

    def __init__(self, message: str, reason: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if reason is not None:
            self.reason = reason

    @property
    def headers(self) -> Optional[Dict[str, str]]:
        return None


class NotFoundError(BilingError):
    status_code = 404
    reason = "not_found"


class InvalidValueError(BilingError):
    status_code = 400
    reason = "invalid_value"


class UnauthorizedError(BilingError):
    status_code = 401
    reason = "unauthorized"

    @property
    def headers(self) -> Optional[Dict[str, str]]:
        return {"WWW-Authenticate": "Bearer"}


class ForbiddenError(BilingError):
    status_code = 403
    reason = "forbidden"


class UpstreamError(BilingError):
    """Object storage (or another remote collaborator) failed."""

    status_code = 502
    reason = "upstream_error"
