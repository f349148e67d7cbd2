import json
import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Response, Request, Depends, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError as PydanticValidationError

from message_board.auth import CredentialStore, get_credential_store
from message_board.config import settings
from message_board.errors import AuthenticationFailure, StorageError, ValidationError
from message_board.logging_utils import setup_logging, RequestLoggingMiddleware, log_request_data
from message_board.metrics import (
    get_metrics,
    get_metrics_content_type,
    record_login_outcome,
    record_message_outcome,
)
from message_board.schemas import (
    ErrorResponse,
    HealthResponse,
    LoginRequest,
    MessageCreateRequest,
    MessageResponse,
)
from message_board.service import MessageService, get_message_service
from message_board.storage import init_db, check_db_health


# Setup structured JSON logging
setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    - Startup: Initialize database and create tables
    """
    init_db()
    yield


app = FastAPI(
    title="Message Board API",
    description="Post short text messages and read back the 10 most recent",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)

# Static cross-origin policy for browser clients
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


# =============================================================================
# Error Handlers
# =============================================================================

@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> Response:
    log_request_data(request, result="validation_error")
    return Response(status_code=status.HTTP_400_BAD_REQUEST)


@app.exception_handler(AuthenticationFailure)
async def authentication_failure_handler(request: Request, exc: AuthenticationFailure) -> Response:
    log_request_data(request, result="invalid_credentials")
    return PlainTextResponse("Invalid credentials", status_code=status.HTTP_401_UNAUTHORIZED)


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError) -> Response:
    logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}")
    log_request_data(request, result="error")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Storage unavailable"},
    )


async def read_json_body(request: Request) -> Any:
    """Read and decode the raw request body; raises ValueError if it is not JSON."""
    raw_body = await request.body()
    logger.debug(f"Request body size: {len(raw_body)} bytes")
    try:
        return json.loads(raw_body)
    except RecursionError as e:
        # Deeply nested arrays/objects exhaust the decoder's recursion limit
        raise ValueError("JSON body nested too deeply") from e


# =============================================================================
# Health Check Routes
# =============================================================================

@app.get("/health/live", response_model=HealthResponse)
async def health_live() -> HealthResponse:
    """
    Liveness probe - always returns 200 once the app is running.
    """
    return HealthResponse(status="ok")


@app.get("/health/ready", response_model=HealthResponse)
async def health_ready(response: Response) -> HealthResponse:
    """
    Readiness probe - returns 200 only if the DB is reachable and the
    messages table exists, otherwise 503 (Service Unavailable).
    """
    if not check_db_health():
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(
            status="not_ready",
            reason="Database not reachable or schema not applied"
        )

    return HealthResponse(status="ready")


# =============================================================================
# Login Route
# =============================================================================

@app.post(
    "/api/login",
    response_class=PlainTextResponse,
    responses={401: {"description": "Invalid credentials"}},
)
async def login(
    request: Request,
    credentials: CredentialStore = Depends(get_credential_store),
) -> PlainTextResponse:
    """
    Check a username/password pair against the credential table.

    Stateless: nothing is issued on success. A body that is not JSON, or
    lacks either field, is treated as a failed login.
    """
    logger.info("Login request received")

    try:
        login_data = LoginRequest.model_validate(await read_json_body(request))
    except (ValueError, PydanticValidationError) as e:
        logger.warning(f"Malformed login body: {e}")
        login_data = LoginRequest()

    log_request_data(request, username=login_data.username)

    if not credentials.verify(login_data.username, login_data.password):
        record_login_outcome("invalid_credentials")
        raise AuthenticationFailure(f"Login rejected for {login_data.username!r}")

    record_login_outcome("success")
    log_request_data(request, result="success")
    return PlainTextResponse("Login Successful")


# =============================================================================
# Message Routes
# =============================================================================

@app.post(
    "/api/messages",
    response_model=MessageResponse,
    responses={
        400: {"description": "Content missing, blank or longer than 250 characters"},
        500: {"model": ErrorResponse, "description": "Storage unavailable"},
    },
)
async def create_message(
    request: Request,
    service: MessageService = Depends(get_message_service),
) -> MessageResponse:
    """
    Post a new message.

    - content must be present, non-blank after trimming, and at most 250 characters
    - content is stored exactly as sent (untrimmed)
    - id and timestamp are assigned server-side
    """
    logger.info("Create message request received")

    try:
        payload = MessageCreateRequest.model_validate(await read_json_body(request))
    except (ValueError, PydanticValidationError) as e:
        logger.warning(f"Message rejected: {e}")
        record_message_outcome("validation_error")
        raise ValidationError(str(e)) from e

    try:
        message = service.post_message(payload.content)
    except StorageError:
        record_message_outcome("error")
        raise

    record_message_outcome("created")
    log_request_data(request, result="created", message_id=str(message.id))
    logger.info(f"Message created: id={message.id}")

    return MessageResponse.model_validate(message)


@app.get(
    "/api/messages",
    response_model=list[MessageResponse],
    responses={500: {"model": ErrorResponse, "description": "Storage unavailable"}},
)
async def list_messages(
    service: MessageService = Depends(get_message_service),
) -> list[MessageResponse]:
    """
    Return up to 10 messages, most recent first.
    """
    messages = service.list_recent_messages()
    logger.info(f"GET /api/messages: returned {len(messages)} messages")
    return [MessageResponse.model_validate(msg) for msg in messages]


# =============================================================================
# Metrics Route
# =============================================================================

@app.get("/metrics")
async def metrics() -> Response:
    """
    Expose Prometheus-style metrics.
    """
    return Response(
        content=get_metrics(),
        media_type=get_metrics_content_type()
    )
