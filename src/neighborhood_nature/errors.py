"""Domain-specific errors for Neighborhood Nature."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class ErrorPayload:
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "success": False,
            "error_code": self.code,
            "error": self.message,
        }
        if self.details:
            payload["details"] = self.details
        return payload


def error_response(code: str, message: str, *, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return ErrorPayload(code, message, details).to_dict()


class NatureError(Exception):
    code = "NATURE_ERROR"
    status = 500

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_payload(self) -> Dict[str, Any]:
        return error_response(self.code, self.message, details=self.details)


class ValidationFailure(NatureError):
    code = "VALIDATION_ERROR"
    status = 400


class AmountOutOfRange(ValidationFailure):
    """A requested waypoint count fell outside the allowed range."""

    code = "AMOUNT_OUT_OF_RANGE"


class AmountTooSmall(AmountOutOfRange):
    code = "AMOUNT_TOO_SMALL"
    status = 400


class AmountTooLarge(AmountOutOfRange):
    code = "AMOUNT_TOO_LARGE"
    status = 413


class NotFoundError(NatureError):
    code = "NOT_FOUND"
    status = 404


class MethodNotAllowed(NatureError):
    code = "METHOD_NOT_ALLOWED"
    status = 405


class ObservationServiceUnavailable(NatureError):
    code = "UPSTREAM_UNAVAILABLE"
    status = 502


class TaggerUnavailable(NatureError):
    code = "TAGGER_UNAVAILABLE"
    status = 500


ERROR_STATUS: Dict[str, int] = {
    cls.code: cls.status
    for cls in (
        NatureError,
        ValidationFailure,
        AmountOutOfRange,
        AmountTooSmall,
        AmountTooLarge,
        NotFoundError,
        MethodNotAllowed,
        ObservationServiceUnavailable,
        TaggerUnavailable,
    )
}


def status_for(error_code: Optional[str]) -> int:
    """HTTP status for a structured error payload's ``error_code``."""
    return ERROR_STATUS.get(error_code or "", 500)


__all__ = [
    "ErrorPayload",
    "error_response",
    "status_for",
    "NatureError",
    "ValidationFailure",
    "AmountOutOfRange",
    "AmountTooSmall",
    "AmountTooLarge",
    "NotFoundError",
    "MethodNotAllowed",
    "ObservationServiceUnavailable",
    "TaggerUnavailable",
]
