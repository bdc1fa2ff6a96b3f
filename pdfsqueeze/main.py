# pdfsqueeze/main.py
from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pdfsqueeze.api import routers
from pdfsqueeze.core.config import get_settings
from pdfsqueeze.core.errors import CompressionError, ValidationError, classify_failure
from pdfsqueeze.core.logging import configure_logging
from pdfsqueeze.models import EngineName, HealthStatus
from pdfsqueeze.services.native import find_native_transcoder

# === إعدادات وتسجيل ===
settings = get_settings()
logger = configure_logging()

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
)

# === CORS ===
# ملاحظة أمنية: لا نستخدم allow_credentials مع allow_origins=["*"].
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allow_origins,
    allow_credentials=False,
    allow_methods=["POST", "GET", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Original-Size", "X-Compressed-Size", "X-Engine"],
)

# === Routers ===
for router in routers:
    app.include_router(router)


# === Error handling ===
def _describe_request_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request."
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body") or "body"
    if first.get("type") == "missing":
        return f"Missing required field: {field}."
    return f"Invalid value for {field}: {first.get('msg', 'invalid')}."


@app.exception_handler(CompressionError)
async def compression_error_handler(request: Request, exc: CompressionError) -> JSONResponse:
    logger.warning("%s %s → %s: %s", request.method, request.url.path, type(exc).__name__, exc)
    return JSONResponse(status_code=int(exc.status_code), content={"detail": exc.user_message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # أخطاء تحليل الطلب تُعرض بصيغة ValidationError نفسها بدل قائمة FastAPI الافتراضية
    error = ValidationError(_describe_request_error(exc))
    logger.warning("%s %s → طلب غير صالح: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=int(error.status_code), content={"detail": error.user_message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("خطأ غير متوقع في %s %s", request.method, request.url.path)
    error = classify_failure(exc)
    return JSONResponse(status_code=int(error.status_code), content={"detail": error.user_message})


# === Basic endpoints ===
@app.get("/")
async def root() -> dict:
    logger.debug("Root endpoint accessed")
    return {"message": "Welcome to PDF Squeeze API"}


@app.get("/health", response_model=HealthStatus)
async def health_check() -> HealthStatus:
    native_path = await run_in_threadpool(find_native_transcoder, settings)
    logger.debug("Health check invoked (native=%s)", native_path)
    return HealthStatus(
        message="PDF Squeeze API is running",
        engine=EngineName.ghostscript if native_path else EngineName.mupdf,
        native_path=native_path,
    )
