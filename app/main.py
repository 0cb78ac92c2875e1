"""
FastAPI application: lifespan, CORS, error handlers and router wiring.

Run locally with either of:

    uvicorn app.main:app --port 3000
    python -m app.main          # honours HOST / PORT
"""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.datastructures import Headers
from starlette.exceptions import HTTPException as StarletteHTTPException

# Load environment variables at the very beginning
load_dotenv()
load_dotenv(".env.local", override=True)

from app.config import settings  # noqa: E402

# Set up logging
logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)

from app.api import detection, system  # noqa: E402
from app.integrations.vision.client import build_classifier  # noqa: E402


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    app.state.classifier = build_classifier(settings)
    logger.info(f"[STARTUP] {settings.service_name} ready | Routes: GET /health, POST /detect")
    yield
    client = getattr(app.state.classifier, "client", None)
    if client is not None and hasattr(client, "close"):
        await client.close()
    app.state.classifier = None
    logger.info("[SHUTDOWN] Vision client closed")


class PreflightCORSMiddleware(CORSMiddleware):
    """CORSMiddleware whose successful preflight replies carry an empty body."""

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code != 200:
            return response
        headers = {
            k: v for k, v in response.headers.items()
            if k.lower() not in ("content-length", "content-type")
        }
        return Response(status_code=200, headers=headers)


app = FastAPI(title="Vero Image Forensics API", lifespan=lifespan)


# ---- Global Exception Handler for CORS ----
# HTTP errors raised outside /detect (404, 405, ...) still carry CORS headers
# so the frontend can read the JSON body instead of a generic Network Error.
@app.exception_handler(StarletteHTTPException)
async def custom_http_exception_handler(request: Request, exc: StarletteHTTPException):
    headers = dict(getattr(exc, "headers", None) or {})
    headers["Access-Control-Allow-Origin"] = "*"
    headers["Access-Control-Allow-Methods"] = "*"
    headers["Access-Control-Allow-Headers"] = "*"

    # Drain the request body so rejected uploads don't drop the connection.
    try:
        async for _ in request.stream():
            pass
    except Exception as e:
        logger.warning(f"Error draining request stream in exception handler: {e}")

    logger.info(f"[ERROR HANDLER] Returning {exc.status_code} for {request.method} {request.url.path}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=headers
    )


# ---- CORS ----
app.add_middleware(
    PreflightCORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(system.router)
app.include_router(detection.router)


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Vero backend running on port {settings.port}")
    uvicorn.run("app.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())
