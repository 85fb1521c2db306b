import logging
import os
import sys
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from uuid import uuid4

import uvicorn
from dotenv import find_dotenv, load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from bridge.api.sessions import router as sessions_router
from bridge.api.trillion import router as trillion_router
from bridge.container import build_container, load_settings
from bridge.errors import ConfigurationError, InvalidSignature, ValidationError
from bridge.schemas import ErrorResponse, HealthResponse, ServiceInfoResponse
from bridge.startup_self_check import run_startup_self_check

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

SERVICE_VERSION = "1.0.0"


def _load_env_file() -> None:
    load_dotenv(find_dotenv(usecwd=True))


@asynccontextmanager
async def lifespan(application: FastAPI):  # type: ignore[no-untyped-def]
    container = application.state.container
    if container is None:
        _load_env_file()
        container = build_container()
        application.state.container = container
    application.state.startup_self_check = run_startup_self_check(
        container.settings, logger=logger
    )
    application.state.started_at = datetime.now(UTC).isoformat()
    container.session_janitor.start()
    logger.info(
        "service_started port=%s webhook=/webhook/trillion test=/test/webhook "
        "health=/health sessions=/sessions",
        container.settings.port,
    )
    try:
        yield
    finally:
        await container.session_janitor.stop()
        aclose = getattr(container.provider_client, "aclose", None)
        if aclose is not None:
            await aclose()


app = FastAPI(title="YourGPT Webhook Service", version=SERVICE_VERSION, lifespan=lifespan)
app.state.container = None
app.include_router(trillion_router)
app.include_router(sessions_router)


@app.middleware("http")
async def attach_trace_id(request: Request, call_next):  # type: ignore[no-untyped-def]
    trace_id = request.headers.get("x-trace-id") or str(uuid4())
    request.state.trace_id = trace_id
    response = await call_next(request)
    response.headers["x-trace-id"] = trace_id
    return response


@app.exception_handler(InvalidSignature)
async def handle_invalid_signature(_request: Request, exc: InvalidSignature) -> JSONResponse:
    return JSONResponse(status_code=401, content={"error": str(exc)})


@app.exception_handler(ValidationError)
async def handle_validation_error(_request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content=ErrorResponse(error=str(exc)).to_payload())


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "unhandled_error method=%s path=%s trace_id=%s",
        request.method,
        request.url.path,
        getattr(request.state, "trace_id", None),
    )
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal server error",
            timestamp=datetime.now(UTC).isoformat(),
        ).to_payload(),
    )


app.add_exception_handler(Exception, handle_unexpected_error)


@app.get("/", response_model=ServiceInfoResponse)
def service_info() -> ServiceInfoResponse:
    startup = getattr(app.state, "startup_self_check", None)
    container = app.state.container
    return ServiceInfoResponse(
        message="Welcome to YourGPT Webhook Service",
        version=SERVICE_VERSION,
        signature_verification=container.signature_verifier.enabled,
        startup_issues=list(startup.issues) if startup is not None else [],
        timestamp=datetime.now(UTC).isoformat(),
    )


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(
        timestamp=datetime.now(UTC).isoformat(),
        active_sessions=app.state.container.session_store.size(),
    )


def run() -> None:
    _load_env_file()
    try:
        settings = load_settings()
    except ConfigurationError as exc:
        logger.error("startup_failed error=%s", exc)
        sys.exit(1)
    app.state.container = build_container(settings)
    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=settings.port)


if __name__ == "__main__":
    run()
