"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ballot_api.config import settings
from ballot_api.routers import candidates, results, votes
from ballot_api.utils.errors import AppError, InternalError, NotFoundError, ValidationError
from ballot_api.utils.web3_client import build_chain_context

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Bind the contract and owner credential for the app lifetime."""
    app.state.chain = build_chain_context(settings)
    logger.info(
        "Bound contract %s, owner %s",
        app.state.chain.contract.address,
        app.state.chain.signer.owner_address,
    )
    yield
    await app.state.chain.close()
    app.state.chain = None
    logger.info("Chain connection closed")


app = FastAPI(
    title=settings.app_name,
    description="Ballot contract coordination API",
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins_list,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _log_request(request: Request, status_code: int, started: float) -> float:
    """Log one finished request and return its elapsed time in ms."""
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "%s %s %d %.1fms",
        request.method,
        request.url.path,
        status_code,
        elapsed_ms,
    )
    threshold_ms = settings.slow_request_log_threshold_ms
    if threshold_ms > 0 and elapsed_ms >= threshold_ms:
        logger.warning(
            "Slow request %s %s %.1fms",
            request.method,
            request.url.path,
            elapsed_ms,
        )
    return elapsed_ms


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    """Log every request with its processing time and flag slow ones."""
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        # unhandled errors are rendered as 500 by the outer error middleware
        _log_request(request, 500, started)
        raise
    elapsed_ms = _log_request(request, response.status_code, started)
    response.headers["X-Process-Time-Ms"] = f"{elapsed_ms:.1f}"
    return response


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Convert domain exceptions into structured API responses."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.code)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    _: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Normalize FastAPI validation responses."""
    detail = exc.errors()
    message = "Invalid request"
    if detail:
        field = ".".join(str(part) for part in detail[0].get("loc", ())[1:])
        message = detail[0].get("msg", message)
        if field:
            message = f"{field}: {message}"
    api_error = ValidationError(message)
    return JSONResponse(status_code=api_error.status_code, content=api_error.to_dict())


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render routing errors in the API standard shape."""
    if exc.status_code == 404:
        api_error = NotFoundError("Endpoint")
        return JSONResponse(status_code=api_error.status_code, content=api_error.to_dict())
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail), "code": "HTTP_ERROR"},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(_: Request, exc: Exception) -> JSONResponse:
    """Catch unexpected errors without leaking internals."""
    logger.exception("Unhandled exception", exc_info=exc)
    api_error = InternalError()
    return JSONResponse(status_code=api_error.status_code, content=api_error.to_dict())


app.include_router(candidates.router, prefix="/candidates", tags=["candidates"])
app.include_router(votes.router, tags=["votes"])
app.include_router(results.router, tags=["results"])


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint for deploys and uptime probes."""
    return {"status": "ok", "version": settings.app_version}
