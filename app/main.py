import logging
import os
import time
from typing import Iterator

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import Settings, load_settings
from app.errors import ConversionError, FetchError, RenderError, StoreError, summarize_validation_errors
from app.schemas import ConvertRequest, ErrorResponse
from app.services.fetcher import ImageFetcher
from app.services.render import convert_scene
from app.services.storage import S3ArtifactStore

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)
settings = load_settings()

app = FastAPI(title="fabric-pdf-engine")
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.CORS_ALLOW_ORIGINS),
    allow_methods=["*"],
    allow_headers=["*"],
)

_ERROR_STATUS = {
    RenderError: 400,
    FetchError: 502,
    StoreError: 502,
}


def get_settings() -> Settings:
    return settings


def get_fetcher(current: Settings = Depends(get_settings)) -> Iterator[ImageFetcher]:
    fetcher = ImageFetcher(timeout_s=current.IMAGE_FETCH_TIMEOUT_S)
    try:
        yield fetcher
    finally:
        fetcher.close()


def get_store(current: Settings = Depends(get_settings)) -> S3ArtifactStore:
    return S3ArtifactStore(current)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "HTTP_REQUEST",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": round((time.perf_counter() - started) * 1000.0, 1),
        },
    )
    return response


@app.exception_handler(ConversionError)
async def conversion_error_handler(request: Request, exc: ConversionError) -> JSONResponse:
    status = _ERROR_STATUS.get(type(exc), 500)
    logger.warning("CONVERSION_FAILED", extra={"path": request.url.path, "kind": exc.kind, "detail": exc.message})
    return JSONResponse(status_code=status, content=ErrorResponse(**exc.to_dict()).model_dump())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Same error shape as a scene rejected during rendering.
    error = RenderError(f"invalid request: {summarize_validation_errors(exc.errors())}")
    return await conversion_error_handler(request, error)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return PlainTextResponse("Resource not found", status_code=404)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("UNHANDLED_ERROR", extra={"path": request.url.path})
    return JSONResponse(status_code=500, content={"error": type(exc).__name__, "message": "Internal server error"})


@app.get("/")
def index() -> dict:
    return {"message": "FabricJS JSON to PDF Server"}


@app.get("/health")
def health() -> dict:
    return {
        "ok": True,
        "version": os.getenv("RAILWAY_GIT_COMMIT_SHA")
        or os.getenv("GIT_COMMIT_SHA")
        or os.getenv("RENDER_GIT_COMMIT")
        or "unknown",
    }


@app.post(
    "/fabric/convert-to-pdf",
    response_model=str,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
def convert_endpoint(
    payload: ConvertRequest,
    x_internal_key: str = Header(default="", alias="x-internal-key"),
    current: Settings = Depends(get_settings),
    fetcher: ImageFetcher = Depends(get_fetcher),
    store: S3ArtifactStore = Depends(get_store),
) -> str:
    if current.INTERNAL_API_KEY and x_internal_key != current.INTERNAL_API_KEY:
        raise HTTPException(status_code=401, detail="Unauthorized")

    scene = payload.fabric_json
    url = convert_scene(settings=current, scene=scene, fetcher=fetcher, store=store)

    logger.info("/fabric/convert-to-pdf", extra={"objects": len(scene.objects), "url": url})
    return url
