"""
FastAPI application for the AI image studio.

Features:
- Reference image ingestion (inline payloads + previews)
- Prompt assembly with optional Gemini description of reference images
- Image generation with Imagen
- Download of the latest generated images
"""
import json
import time
from typing import Any, Optional, Tuple

import uvicorn
from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import Config
from common.error_messages import ErrorCode, StudioError, format_error_message, get_error_response
from common.routes import router as config_router
from image.client import StudioClient
from image.routes import router as image_router
from image.session import GenerationSession
from media.routes import router as media_router
from utils.logger import get_logger

logger = get_logger("main")

# Fields that must never reach the logs (credentials and base64 payloads)
SENSITIVE_FIELDS = {'api_key', 'secret', 'authorization', 'data', 'data_url'}
MAX_LOGGED_BODY = 2000


def mask_sensitive_data(data: Any, mask_value: str = "***MASKED***") -> Any:
    """
    Recursively mask sensitive fields in data structures.

    Args:
        data: Data to mask (dict, list, or JSON string)
        mask_value: Value to replace sensitive data with

    Returns:
        Data with sensitive fields masked
    """
    if isinstance(data, dict):
        return {
            key: mask_value if key.lower() in SENSITIVE_FIELDS else mask_sensitive_data(value, mask_value)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [mask_sensitive_data(item, mask_value) for item in data]
    if isinstance(data, str):
        try:
            parsed = json.loads(data)
        except (json.JSONDecodeError, ValueError):
            return data
        if isinstance(parsed, (dict, list)):
            return json.dumps(mask_sensitive_data(parsed, mask_value))
    return data


def create_studio_client() -> Tuple[Optional[StudioClient], Optional[str]]:
    """Build the API client once; returns (client, persistent config error)."""
    try:
        Config.validate()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        logger.error("Image generation is disabled until GEMINI_API_KEY is set")
        return None, format_error_message(ErrorCode.MISSING_API_KEY)
    client = StudioClient(api_key=Config.get_gemini_api_key())
    logger.info(f"Studio client ready (text model: {client.text_model}, image model: {client.image_model})")
    return client, None


app = FastAPI(
    title="AI Image Studio API",
    description="Generate images in any style from a prompt and optional reference images.",
    version="1.0.0"
)

app.state.studio_client, app.state.config_error = create_studio_client()
app.state.session = GenerationSession()


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StudioError)
async def studio_error_handler(request: Request, exc: StudioError):
    """Render classified failures as {detail, code}."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code.value}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions globally."""
    if isinstance(exc, HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail}
        )

    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    message, status_code = get_error_response(ErrorCode.UNKNOWN_ERROR)
    return JSONResponse(
        status_code=status_code,
        content={"detail": message, "code": ErrorCode.UNKNOWN_ERROR.value}
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests with timing; JSON response bodies are masked and truncated."""
    start_time = time.time()
    full_url = str(request.url)
    logger.info(f"→ {request.method} {full_url} - Client: {request.client.host if request.client else 'unknown'}")

    try:
        response = await call_next(request)
    except Exception as e:
        process_time = (time.time() - start_time) * 1000
        logger.error(f"← {request.method} {full_url} - Error: {str(e)} - Time: {process_time:.2f}ms")
        raise

    process_time = (time.time() - start_time) * 1000
    log_msg = f"← {request.method} {full_url} - Status: {response.status_code} - Time: {process_time:.2f}ms"

    # Binary downloads are passed through untouched
    if response.headers.get("content-type", "").startswith("application/json"):
        body = b""
        async for chunk in response.body_iterator:
            body += chunk
        masked = mask_sensitive_data(body.decode("utf-8", errors="replace"))
        if len(masked) > MAX_LOGGED_BODY:
            masked = masked[:MAX_LOGGED_BODY] + "... [truncated]"
        log_msg += f"\n  Response Body: {masked}"
        response = Response(
            content=body,
            status_code=response.status_code,
            headers=dict(response.headers),
            media_type=response.media_type
        )

    logger.info(log_msg)
    return response


app.include_router(config_router)
app.include_router(media_router)
app.include_router(image_router)
logger.info("Routers included")


@app.on_event("startup")
async def startup_event():
    """Log startup event."""
    logger.info("=" * 80)
    logger.info("AI Image Studio starting up")
    logger.info(f"Host: {Config.HOST}:{Config.PORT}")
    if app.state.config_error:
        logger.warning(f"Running without API access: {app.state.config_error}")
    logger.info("=" * 80)


@app.on_event("shutdown")
async def shutdown_event():
    """Log shutdown event."""
    logger.info("AI Image Studio shutting down")


@app.get("/healthz")
def health():
    """Health check endpoint."""
    return {"status": "ok"}


if __name__ == "__main__":
    logger.info(f"Starting server on {Config.HOST}:{Config.PORT}")
    uvicorn.run(
        "app:app",
        host=Config.HOST,
        port=Config.PORT,
        reload=True,
        log_level="info"
    )
