# notegraph/main.py
import asyncio
import logging
import time
from contextlib import asynccontextmanager, suppress

import httpx
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from notegraph.api import router as api_router
from notegraph.core.config import settings
from notegraph.core.exceptions import (
    DataUnavailableException,
    GraphSessionNotFoundException,
    InternalConsistencyException,
    InvalidInputException,
    NoteNotFoundException,
)
from notegraph.core.limiter import limiter
from notegraph.db.client import SupabaseClient

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

MAX_RETRIES = 10
RETRY_DELAY = 3
INITIALIZATION_GRACE_PERIOD = 30
note_store_ready_event = asyncio.Event()
_started_at = time.time()

@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- Startup Logic ---
    startup_task = asyncio.create_task(_probe_note_store())

    try:
        await asyncio.wait_for(asyncio.shield(startup_task), timeout=INITIALIZATION_GRACE_PERIOD)
    except asyncio.TimeoutError:
        logger.warning(
            "Note store probe is taking longer than expected. "
            "Continuing startup while it finishes in the background."
        )
    except Exception as exc:
        logger.error("Note store probe raised an unexpected error: %s", exc)

    try:
        yield
    finally:
        # --- Shutdown Logic ---
        if startup_task and not startup_task.done():
            startup_task.cancel()
            with suppress(asyncio.CancelledError):
                await startup_task

        await SupabaseClient.close_client()
        logger.info("Closed note store client.")

async def _probe_note_store():
    """Check that the Supabase REST endpoint answers before reporting ready."""
    note_store_ready_event.clear()
    client = SupabaseClient.get_client()
    for attempt in range(MAX_RETRIES):
        try:
            logger.info("Probing note store (attempt %d/%d)...", attempt + 1, MAX_RETRIES)
            response = await client.get("/rest/v1/")
            if response.status_code >= 500:
                raise httpx.HTTPStatusError(
                    f"HTTP {response.status_code}", request=response.request, response=response
                )
            logger.info("Note store reachable.")
            note_store_ready_event.set()
            return
        except (httpx.TransportError, httpx.HTTPStatusError) as exc:
            if attempt + 1 == MAX_RETRIES:
                logger.error("Could not reach note store after %d attempts. Last error: %s", MAX_RETRIES, exc)
                raise
            backoff = RETRY_DELAY * (attempt + 1)
            logger.warning("Note store not ready (%s). Retrying in %d seconds...", exc, backoff)
            await asyncio.sleep(backoff)
        except asyncio.CancelledError:
            logger.info("Note store probe cancelled.")
            raise


app = FastAPI(
    title="Note Graph API",
    description="Builds, lays out and queries the wiki-link graph of a user's notes.",
    version="1.0.0",
    lifespan=lifespan
)

# Add Limiter to the application state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Exempt all OPTIONS requests from rate limiting to prevent CORS preflight issues
app.state.limiter.exempt_methods = ["OPTIONS"]

allowed_origins = [
    "http://localhost:8000",
    "http://localhost:8080",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["Content-Type", "X-User-ID"],
)

@app.exception_handler(DataUnavailableException)
async def data_unavailable_exception_handler(request: Request, exc: DataUnavailableException):
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"message": exc.message, "retryable": True},
    )

@app.exception_handler(GraphSessionNotFoundException)
async def graph_session_not_found_exception_handler(request: Request, exc: GraphSessionNotFoundException):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"message": exc.message},
    )

@app.exception_handler(NoteNotFoundException)
async def note_not_found_exception_handler(request: Request, exc: NoteNotFoundException):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"message": exc.message},
    )

@app.exception_handler(InvalidInputException)
async def invalid_input_exception_handler(request: Request, exc: InvalidInputException):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": exc.message},
    )

@app.exception_handler(InternalConsistencyException)
async def internal_consistency_exception_handler(request: Request, exc: InternalConsistencyException):
    logger.error("Graph consistency failure on %s: %s", request.url.path, exc.message)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": exc.message},
    )

app.include_router(api_router.router)

@app.get("/")
async def root():
    return {"message": "Welcome to the Note Graph API"}

@app.get("/healthz", tags=["Health"], status_code=status.HTTP_200_OK)
async def health_check():
    """Reports whether the note store has answered since startup."""
    return {
        "status": "ok",
        "note_store_ready": note_store_ready_event.is_set(),
        "open_graph_sessions": len(api_router.graph_sessions),
        "uptime_seconds": int(time.time() - _started_at),
    }
