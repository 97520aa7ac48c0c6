from __future__ import annotations
from typing import Any, Dict, Optional


class ServiceError(Exception):
    """
    Base class for failures a service reports to its caller.

    Every error carries a stable `kind` (used by API clients to pick what to
    render) and the HTTP status the action boundary maps it to.
    """
    kind = "service_error"
    status_code = 500

    def __init__(self, message: str = "", **extra: Any):
        super().__init__(message)
        self.message = message or self.__class__.__name__
        self.extra: Dict[str, Any] = extra

    def to_dict(self) -> Dict[str, Any]:
        out = {"ok": False, "error": self.kind, "detail": self.message}
        out.update(self.extra)
        return out


class Unauthenticated(ServiceError):
    kind = "unauthenticated"
    status_code = 401

    def __init__(self, message: str = "User not authenticated", **extra: Any):
        super().__init__(message, **extra)


class ValidationFailed(ServiceError):
    kind = "validation_failed"
    status_code = 400


class FileTooLarge(ValidationFailed):
    kind = "file_too_large"


class UnsupportedType(ValidationFailed):
    kind = "unsupported_type"


class NotFound(ServiceError):
    kind = "not_found"
    status_code = 404


class StorageUnavailable(ServiceError):
    kind = "storage_unavailable"
    status_code = 503


class BucketUnavailable(StorageUnavailable):
    kind = "bucket_unavailable"


class RemoteOperationFailed(ServiceError):
    kind = "remote_operation_failed"
    status_code = 502


class NeedsCredential(ServiceError):
    kind = "needs_credential"
    status_code = 503


class RepositoryError(Exception):
    """Raised by product repositories when the backing table call fails."""


class StorageProviderError(Exception):
    """
    Raised by storage gateways. `code` and `status` carry whatever structured
    information the provider returned (may be None).
    """

    def __init__(self, message: str, code: Optional[str] = None, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status
