"""imgbed – FastAPI application entry-point."""

from contextlib import asynccontextmanager
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from http import HTTPStatus

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware

from src.imgbed.config import SECURITY_HEADERS, UPLOADS_URL_PREFIX, Settings
from src.imgbed.exceptions import (
    INTERNAL_ERROR_MESSAGE,
    NOT_FOUND_MESSAGE,
    RelayError,
)
from src.imgbed.router import health, upload
from src.imgbed.services.storage_service import ensure_upload_dir

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def error_response(status_code: int, message: str) -> JSONResponse:
    """The ``{"success": false, "message": ...}`` envelope every failure uses."""
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
    )


# ──────────────────────────────────────────────
# Exception handlers: every failure ends here
# ──────────────────────────────────────────────
async def relay_error_handler(_request: Request, exc: RelayError) -> JSONResponse:
    return error_response(exc.status_code, exc.message)


async def http_error_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Unknown routes, unsupported methods and absent static files all read as 404.
    if exc.status_code in (404, 405):
        return error_response(404, NOT_FOUND_MESSAGE)
    # Framework detail strings never reach the client.
    return error_response(exc.status_code, HTTPStatus(exc.status_code).phrase)


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    response = error_response(500, INTERNAL_ERROR_MESSAGE)
    # Runs outside the middleware stack, so the headers are added here too.
    response.headers.update(SECURITY_HEADERS)
    return response


async def add_security_headers(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    response = await call_next(request)
    response.headers.update(SECURITY_HEADERS)
    return response


# ──────────────────────────────────────────────
# Application factory
# ──────────────────────────────────────────────
def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application around one immutable ``Settings`` instance."""
    settings = settings or Settings()
    configure_logging(settings)
    ensure_upload_dir(settings.upload_dir)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        logger.info("🚀 PicGo 图床服务正在运行在端口 %s", settings.port)
        logger.info("Upload directory: %s", settings.upload_dir.resolve())
        if settings.api_key is None:
            logger.warning("API_KEY is not set – every upload will be rejected.")
        yield
        logger.info("🛑 Shutting down.")

    app = FastAPI(
        title="imgbed",
        description="Minimal PicGo-compatible image upload relay.",
        version="1.0.0",
        lifespan=lifespan,
        redirect_slashes=False,
    )
    app.state.settings = settings

    # ── CORS (configured from environment variables), wrapped by security headers ──
    app.add_middleware(
        middleware_class=CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_methods_list,
        allow_headers=settings.cors_headers_list,
    )
    app.middleware("http")(add_security_headers)

    # ── error mapping ──
    app.add_exception_handler(RelayError, relay_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    # ── register routers ──
    app.include_router(health.router)
    app.include_router(upload.router)

    # ── serve uploaded images statically ──
    app.mount(
        UPLOADS_URL_PREFIX,
        StaticFiles(directory=str(settings.upload_dir)),
        name="uploads",
    )
    return app


def run() -> None:
    """Console entry-point: build the app and serve it with uvicorn.

    For uvicorn directly use ``uvicorn --factory src.imgbed.main:create_app``.
    """
    settings = Settings()
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
