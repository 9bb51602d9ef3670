"""
Exception hierarchy for the Basin Term Service

Request errors (bad coordinates, unknown models) are kept apart from service
errors (upstream basin-model provider failures) so the transport layer can map
them to distinct status codes.
"""
from typing import Iterable, Optional


class BasinServiceError(Exception):
    """Base exception for all basin term service errors"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidCoordinate(BasinServiceError):
    """Raised when a latitude/longitude is non-finite or out of range"""

    def __init__(self, latitude, longitude, reason: str):
        message = f"Invalid coordinate ({latitude}, {longitude}): {reason}"
        super().__init__(message)
        self.latitude = latitude
        self.longitude = longitude
        self.reason = reason


class UnknownModel(BasinServiceError):
    """Raised when a caller supplies a basin model id that does not exist"""

    def __init__(self, model_id: str, valid_ids: Optional[Iterable[str]] = None):
        message = f"Unknown basin model: {model_id!r}"
        if valid_ids:
            message += f" (expected one of: {', '.join(valid_ids)})"
        super().__init__(message)
        self.model_id = model_id


class UpstreamUnavailable(BasinServiceError):
    """Raised when the remote basin-model provider fails or times out"""

    def __init__(self, service: str, reason: str, timeout_seconds: Optional[float] = None):
        if timeout_seconds is not None:
            message = f"{service} timed out after {timeout_seconds}s: {reason}"
        else:
            message = f"{service} unavailable: {reason}"
        super().__init__(message)
        self.service = service
        self.reason = reason
        self.timeout_seconds = timeout_seconds

    @property
    def timed_out(self) -> bool:
        return self.timeout_seconds is not None


class BasinDataError(BasinServiceError):
    """Raised when a region or grid dataset cannot be loaded"""

    def __init__(self, path, reason: str):
        message = f"Basin data error in {path}: {reason}"
        super().__init__(message)
        self.path = str(path)
        self.reason = reason


class BasinConfigurationError(BasinServiceError):
    """Raised when service configuration is invalid"""

    def __init__(self, config_field: str, reason: str):
        message = f"Configuration error in {config_field}: {reason}"
        super().__init__(message)
        self.config_field = config_field
        self.reason = reason
