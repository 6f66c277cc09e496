"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from receptionist.api.routes import api_router
from receptionist.domain.services.tool_handlers import build_tool_registry
from receptionist.infrastructure.vapi_client import VapiCallControl
from receptionist.logging_config import setup_logging
from receptionist.persistence.database import engine
from receptionist.settings import settings

# Setup logging
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    app.state.tool_registry = build_tool_registry()
    app.state.call_control = VapiCallControl()
    yield
    # Shutdown
    await engine.dispose()


# Create FastAPI app
app = FastAPI(
    title="Rental Receptionist API",
    description="Inbound call orchestration for a Vapi voice receptionist",
    version="0.1.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix=settings.api_v1_prefix)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
