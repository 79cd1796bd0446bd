"""
CRM Voice Service - Main Application Entry Point

Telephony back end of the dealership CRM: Twilio voice webhooks, IVR and
agent routing, softphone tokens, click-to-call and call event logging.
"""

import random
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from crm_voice import __version__
from crm_voice.core.config import settings
from crm_voice.core.logging import setup_logging, get_logger
from crm_voice.core.exceptions import (
    CrmVoiceException,
    AuthenticationError,
    WebhookValidationError
)
from crm_voice.db.repository import create_document_store
from crm_voice.services.telephony.twilio_service import TwilioService
from crm_voice.api.routes import calls, health, voice, webhooks

# Setup logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler for startup and shutdown events

    Shared clients are built here once and injected into handlers from
    ``app.state``.
    """
    logger.info("=" * 60)
    logger.info("Starting CRM Voice Service")
    logger.info(f"Version: {__version__}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Public Base URL: {settings.public_base_url}")
    logger.info(f"Business Phone: {settings.twilio_phone_number}")
    logger.info(f"Document Store: {settings.document_store_backend}")
    logger.info(f"Inbound Routing: {settings.inbound_routing_mode}")
    logger.info("=" * 60)

    store = create_document_store(settings)
    if await store.connect():
        logger.info("Document store connected")
    else:
        logger.error("Document store unavailable; routing will fall back to apology messages")

    app.state.document_store = store
    app.state.twilio_service = TwilioService(settings)
    app.state.agent_rng = random.Random(settings.agent_selection_seed)

    logger.info("All services initialized successfully")

    yield

    logger.info("Shutting down CRM Voice Service")
    await store.disconnect()
    logger.info("Shutdown complete")


app = FastAPI(
    title="CRM Voice API",
    description="""
    ## Dealership CRM Voice Service

    ### Twilio webhooks (signed with X-Twilio-Signature)

    - **/api/v1/webhooks/twilio/voice**: new call legs, returns TwiML
    - **/api/v1/webhooks/twilio/gather**: IVR menu input, returns TwiML
    - **/api/v1/webhooks/twilio/status**: call status events, returns JSON
    - **/api/v1/webhooks/twilio/after-call**: finished dial legs, returns JSON

    ### Staff endpoints (Bearer token)

    - **/api/v1/voice/token**: softphone access token
    - **/api/v1/calls/outbound**: click-to-call
    """,
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Custom Exception Handlers
@app.exception_handler(WebhookValidationError)
async def webhook_validation_exception_handler(request: Request, exc: WebhookValidationError):
    """Reject unsigned or forged webhooks with an empty 403"""
    logger.warning(f"WebhookValidationError on {request.url.path}: {exc.message}")
    return Response(status_code=exc.status_code)


@app.exception_handler(AuthenticationError)
async def auth_exception_handler(request: Request, exc: AuthenticationError):
    """Handle authentication errors"""
    logger.warning(f"AuthenticationError: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers={"WWW-Authenticate": "Bearer"}
    )


@app.exception_handler(CrmVoiceException)
async def crm_voice_exception_handler(request: Request, exc: CrmVoiceException):
    """Handle custom CRM voice exceptions"""
    logger.warning(f"CrmVoiceException: {exc.error_code} - {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred",
            "details": {"exception": str(exc)} if settings.debug else {}
        }
    )


# Include routers
app.include_router(health.router)
app.include_router(webhooks.router, prefix="/api/v1")
app.include_router(voice.router, prefix="/api/v1")
app.include_router(calls.router, prefix="/api/v1")


@app.get("/", include_in_schema=False)
async def root():
    return {
        "service": "CRM Voice",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "crm_voice.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.debug
    )
