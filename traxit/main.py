import logging
import shutil
import uuid

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from yt_dlp.version import __version__ as ytdlp_version

from traxit.api import download, health, process
from traxit.config.settings import config
from traxit.core.errors import InvalidUrlError, TraxitError
from traxit.core.logging import log_error, log_warning, setup_logging
from traxit.core.state import state
from traxit.i18n import i18n
from traxit.infra.redis import close_redis, init_redis
from traxit.utils.locale import get_locale

logger = logging.getLogger(__name__)

app = FastAPI(
    title=config.api.title,
    description=config.api.description,
    version=config.api.version,
    docs_url="/docs" if config.api.debug else None,
    redoc_url=None
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.api.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "Content-Length", "X-Request-ID"],
)

@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response

def _render(request: Request, exc: TraxitError) -> JSONResponse:
    locale = get_locale(request.headers.get("accept-language"))
    _ = i18n.translator(locale)

    message = f"{exc.kind} ({exc.status_code}): {exc.detail or '-'}"
    if exc.status_code >= 500:
        log_error(request, message)
    else:
        log_warning(request, message)

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(_, include_detail=config.api.debug),
        headers=exc.headers()
    )

@app.exception_handler(TraxitError)
async def traxit_error_handler(request: Request, exc: TraxitError):
    return _render(request, exc)

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg', '')}"
        for error in exc.errors()
    )
    return _render(request, InvalidUrlError(problems or "invalid request"))

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.debug("Unhandled exception", exc_info=exc)
    return _render(request, TraxitError(f"{type(exc).__name__}: {exc}"))

# Routes
app.include_router(health.router, tags=["Health"])
app.include_router(process.router, tags=["Process"])
app.include_router(download.router, tags=["Download"])

@app.on_event("startup")
async def startup_event():
    setup_logging(config.logging)

    state.redis = await init_redis(config.redis)
    state.ytdlp_version = ytdlp_version
    state.ytdlp_cli_path = shutil.which(config.extractor.ytdlp_binary)
    state.ffmpeg_path = shutil.which(config.transcode.ffmpeg_binary)

    if not state.ffmpeg_path:
        logger.warning(f"{config.transcode.ffmpeg_binary} not found on PATH, transcoding will fail")
    if not state.ytdlp_cli_path:
        logger.warning(f"{config.extractor.ytdlp_binary} not found on PATH, the fallback extractor is unavailable")

    logger.info(f"{config.api.title} {config.api.version} ({config.environment}), "
                f"yt-dlp {state.ytdlp_version}, temp dir {config.temp_root()}")

@app.on_event("shutdown")
async def shutdown_event():
    await close_redis()

def run():
    uvicorn.run(
        "traxit.main:app",
        host=config.server.host,
        port=config.server.port,
        log_level=config.logging.level.lower()
    )

if __name__ == "__main__":
    run()
