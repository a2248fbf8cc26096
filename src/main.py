"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from config.settings import settings
from src.mb_chain.api.router import router as token_router
from src.mb_common.database import check_database, engine
from src.mb_common.errors import AppError, InternalError
from src.mb_common.http_client import close_http_client
from src.mb_common.redis_client import check_redis, close_redis
from src.mb_common.response import error_response
from src.mb_gateway.middleware.request_log import RequestLogMiddleware
from src.mb_payment.api.router import router as pix_router
from src.mb_payment.api.withdraw_router import router as withdraw_router
from src.mb_position.api.router import router as position_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB + Redis, report unconfigured collaborators. Shutdown: dispose."""
    await check_database()
    await check_redis()

    missing_engine = settings.missing_engine_settings()
    if missing_engine:
        logger.warning("Token engine not configured (missing %s)", ", ".join(missing_engine))
    missing_payment = settings.missing_payment_settings()
    if missing_payment:
        logger.warning("Mercado Pago not configured (missing %s)", ", ".join(missing_payment))
    yield
    await engine.dispose()
    await close_redis()
    await close_http_client()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


def _error_json(request: Request, status_code: int, code: int, message: str, data: object) -> JSONResponse:
    resp = error_response(code, message, data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(resp.model_dump()))


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return _error_json(request, exc.http_status, exc.code, exc.message, exc.details)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"field": ".".join(str(p) for p in err.get("loc", ())[1:]), "message": err.get("msg")}
        for err in exc.errors()
    ]
    message = errors[0]["message"] if errors else "Invalid request"
    return _error_json(request, 400, 2000, str(message), errors)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    err = InternalError()
    return _error_json(request, err.http_status, err.code, err.message, None)


app.include_router(token_router, prefix="/api")
app.include_router(pix_router, prefix="/api")
app.include_router(withdraw_router, prefix="/api")
app.include_router(position_router, prefix="/api")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
