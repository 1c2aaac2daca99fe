"""Custom application exceptions."""

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception."""

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class ValidationError(AppException):
    """Validation error exception."""

    def __init__(self, detail: str = "Validation failed") -> None:
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


class ConfigurationError(AppException):
    """Requested processor is unknown or has no credentials in this deployment."""

    def __init__(self, detail: str = "Payment provider is not configured") -> None:
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)


class PaymentError(AppException):
    """Processor declined or could not complete an operation."""

    def __init__(self, detail: str = "Payment processing failed", error_code: str | None = None) -> None:
        self.error_code = error_code
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
