from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import time

from neighbo.core.config import get_settings
from neighbo.core.errors import NeighboError
from neighbo.routers.business import router as business_router
from neighbo.routers.certification import router as certification_router
from neighbo.routers.claims import router as claims_router
from neighbo.routers.health import router as health_router
from neighbo.routers.me import router as me_router
from neighbo.routers.reports import router as reports_router
from neighbo.routers.restaurants import router as restaurants_router
from neighbo.routers.values import router as values_router

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    description="Restaurant discovery API - find nearby restaurants that share your values, backed by owner attestation and community reports.",
    version="0.1.0",
    debug=settings.DEBUG,
)


@app.exception_handler(NeighboError)
async def neighbo_exception_handler(request: Request, exc: NeighboError):
    """Render domain errors as {"error", "message", ...} with their status code."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed input is a 400 like every other rejected precondition."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{location}: {first.get('msg')}" if location else first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=400,
        content={
            "error": "bad_request",
            "message": message,
            "details": jsonable_encoder(errors, exclude={"ctx", "url"}),
        },
    )


# Global exception handler for unhandled errors
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected server errors with structured response."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred. Please try again later.",
            "request_id": request.headers.get("X-Request-ID"),
        }
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f}ms)")
    return response


# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health_router)
app.include_router(values_router, prefix="/api")
app.include_router(restaurants_router, prefix="/api")
app.include_router(certification_router, prefix="/api")
app.include_router(reports_router, prefix="/api")
app.include_router(claims_router, prefix="/api")
app.include_router(me_router, prefix="/api")
app.include_router(business_router, prefix="/api")


@app.get("/")
def read_root():
    return {
        "message": "Welcome to Neighbo API",
        "docs": "/docs",
        "health": "/health"
    }
