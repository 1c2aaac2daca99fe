"""Core utilities."""

from charitypay.core.exceptions import (
    AppException,
    ConfigurationError,
    PaymentError,
    ValidationError,
)

__all__ = [
    "AppException",
    "ConfigurationError",
    "PaymentError",
    "ValidationError",
]
