"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from charitypay.api.v1 import payments, webhooks

api_router = APIRouter()

# Payments
api_router.include_router(payments.router, prefix="/payments", tags=["Payments"])

# Webhooks
api_router.include_router(webhooks.router, prefix="/webhooks", tags=["Webhooks"])
