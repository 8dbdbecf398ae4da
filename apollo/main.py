"""
Mutual-Insurance Protocol Service

FastAPI application entry point.

Run with: uvicorn apollo.main:app --reload
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from apollo.api import get_protocol, protocol_error_handler, routers, transfer_error_handler
from apollo.core.errors import ProtocolError
from apollo.ledger.tokens import TransferError
from apollo.settings import settings

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def bootstrap_protocol() -> None:
    """Initialize the protocol from settings if a bootstrap authority is configured."""
    if not settings.BOOTSTRAP_AUTHORITY:
        return
    protocol = get_protocol()
    if protocol.configs.is_initialized():
        return
    protocol.initialize(
        settings.BOOTSTRAP_AUTHORITY,
        settings.DENOMINATION_A,
        settings.DENOMINATION_B,
        settings.FAST_CLAIM_THRESHOLD,
    )
    logger.info(f"Protocol bootstrapped with authority {settings.BOOTSTRAP_AUTHORITY}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle management."""
    logger.info("Starting mutual-insurance protocol service")
    bootstrap_protocol()
    yield
    logger.info("Shutting down mutual-insurance protocol service")


# Create FastAPI application
app = FastAPI(
    title="Mutual-Insurance Protocol",
    description="""
    Authorization and state-transition core of a mutual-insurance protocol.

    ## Features

    - **Policies**: The authority defines premium and coverage templates
    - **Membership**: Users enroll by paying the first premium into the premium pool
    - **Staking**: Users stake the capital token into the capital pool
    - **Claims**: Claims at or below the fast-claim threshold are paid at once;
      larger claims enter NeedsReview for the authority to approve or deny
    - **Agents**: Claims awaiting review are evaluated and can be auto-adjudicated

    ## Caller identity

    Every state-changing request carries the caller identity in the `X-Caller` header.
    """,
    version="1.0.0",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(ProtocolError, protocol_error_handler)
app.add_exception_handler(TransferError, transfer_error_handler)

# Include routers
for router in routers:
    app.include_router(router)


@app.get("/", tags=["root"])
async def root():
    """Root endpoint with system info."""
    return {
        "system": "Mutual-Insurance Protocol",
        "version": "1.0.0",
        "status": "operational",
        "docs": "/docs"
    }


@app.get("/health", tags=["health"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
