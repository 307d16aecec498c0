"""
RichHabits Orders API.

Order pipeline backend: role-scoped order lists, stage hub counts, at-risk
detection, and progressive-disclosure hints for the order detail view.

Run from backend/:
    uvicorn main:app --reload
"""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from database import init_db
from domain.errors import DomainError
from domain.responses import error_response
from routes import auth, health, orders

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # default sqlite file lives under ./data
    if settings.database_url.startswith("sqlite:///./"):
        os.makedirs("data", exist_ok=True)

    settings.validate_production_settings()
    await init_db()
    logger.info(f"{app.title} v{app.version} started (environment={settings.environment})")
    yield
    logger.info("Shutting down")


app = FastAPI(
    title="RichHabits Orders API",
    description="Order pipeline stages, risk detection and role-based visibility",
    version="1.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(orders.router)


# ── Error envelope ──────────────────────────────────────────────────

def _envelope(status_code: int, code: str, message: str, details=None, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_response(code, message, details),
        headers=headers,
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """DomainError keeps its code and details; plain HTTPExceptions become "http_error"."""
    if isinstance(exc, DomainError):
        return _envelope(exc.status_code, exc.code, exc.message, exc.details, exc.headers)
    if isinstance(exc.detail, str):
        return _envelope(exc.status_code, "http_error", exc.detail, headers=exc.headers)
    return _envelope(exc.status_code, "http_error", "Request failed", exc.detail, exc.headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in exc.errors()]
    return _envelope(422, "request_validation_error", "Request validation failed", {"errors": errors})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    # Traceback goes to the log only
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=True)
    return _envelope(500, "internal_server_error", "Internal server error")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", 8000)), log_level="info")
