"""API routes."""

from fastapi import APIRouter

from receptionist.api.routes import vapi_webhooks

api_router = APIRouter()

# Public webhook routes (authenticated by the shared Vapi secret)
api_router.include_router(vapi_webhooks.router, prefix="/vapi", tags=["vapi-webhooks"])
