"""FastAPI application entry point."""

from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from charitypay.api.v1.router import api_router
from charitypay.config import Settings, get_settings
from charitypay.core.exceptions import AppException
from charitypay.core.logging import configure_logging
from charitypay.core.middleware import RequestLoggingMiddleware
from charitypay.services.gateway_service import PaymentService


def create_application(
    settings: Settings | None = None,
    payment_service: PaymentService | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Donation payment gateway API",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
    )

    # Registry is read-only once built; handlers share it without locking
    app.state.settings = settings
    app.state.payment_service = payment_service or PaymentService.from_settings(settings)

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        """Render application errors, with the processor error code when known."""
        content = {"detail": exc.detail}
        if getattr(exc, "error_code", None):
            content["error_code"] = exc.error_code
        return JSONResponse(
            status_code=exc.status_code,
            content=content,
            headers=exc.headers,
        )

    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/health")
    async def health_check() -> dict:
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": settings.app_version,
            "environment": settings.environment,
            "payment_providers": app.state.payment_service.get_available_providers(),
            "timestamp": datetime.now(UTC).isoformat(),
        }

    return app


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "charitypay.main:create_application",
        factory=True,
        host=_settings.host,
        port=_settings.port,
        reload=_settings.debug,
    )
