# backend/trailblazers/core/exceptions.py
"""
Domain-specific exceptions for the TrailBlazers booking backend.

Every failure the booking flow can surface to a guest, guide or admin is one
of these. They carry a stable ``code`` and structured ``details`` and know
how to turn themselves into an HTTPException at the API layer.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when form or business validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST

    @property
    def field_errors(self) -> Dict[str, str]:
        return dict(self.details.get("fields", {}))


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = HTTP_422_UNPROCESSABLE


class UnauthorizedException(DomainException):
    """Raised when user is not authenticated."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenException(DomainException):
    """Raised when user lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Specific booking exceptions


class AvailabilityException(ValidationException):
    """Raised when the selected date or time is not bookable."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="AVAILABILITY_ERROR", details=details or {})


class HikeFullException(ConflictException):
    """Raised when a hike has no remaining seats."""

    def __init__(self, hike_id: str):
        super().__init__(
            message="This hike is fully booked. Please try our other hikes!",
            code="HIKE_FULL",
            details={"hike_id": hike_id},
        )


class CapacityExceededException(ConflictException):
    """Raised when a seat reservation would push a hike past its capacity."""

    def __init__(self, hike_id: str, requested: int):
        super().__init__(
            message="Not enough spots left on this hike for your group",
            code="CAPACITY_EXCEEDED",
            details={"hike_id": hike_id, "requested": requested},
        )


class CancellationWindowException(BusinessRuleException):
    """Raised when a cancellation is attempted inside the notice window."""

    def __init__(self, required_hours: int, provided_hours: float):
        super().__init__(
            message=f"Bookings cannot be cancelled within {required_hours} hours of the hike",
            code="CANCELLATION_WINDOW",
            details={
                "required_hours": required_hours,
                "provided_hours": round(provided_hours, 2),
            },
        )


class InvalidTransitionException(ConflictException):
    """Raised when the booking wizard is asked for a move its current step forbids."""

    def __init__(self, current_step: str, action: str):
        super().__init__(
            message=f"Cannot {action} from step {current_step}",
            code="INVALID_TRANSITION",
            details={"step": current_step, "action": action},
        )


class SignatureRequiredException(ValidationException):
    """Raised when a waiver is submitted without a signature."""

    def __init__(self) -> None:
        super().__init__(message="Please sign the waiver", code="SIGNATURE_REQUIRED")


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
