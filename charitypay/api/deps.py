"""API dependencies."""

from fastapi import Request

from charitypay.config import Settings
from charitypay.services.gateway_service import PaymentService


def get_payment_service(request: Request) -> PaymentService:
    """Payment service built once at application startup."""
    return request.app.state.payment_service


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
