import time
from fastapi import FastAPI, Request, status, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from routers import catalog, cart, orders

# Rate limiter
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from middleware.rate_limiter import limiter

# Logging
from core.logging_config import setup_logging
from utils.logger import get_logger, log_request
from middleware import RequestIDMiddleware, get_request_id
from core.config import settings
from core.database import SessionLocal, init_db
from services.events import cart_changed, log_cart_change
from services.seed import seed_catalog


setup_logging(
    log_level=settings.LOG_LEVEL,
    log_dir=settings.LOG_DIR
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()

    if settings.SEED_CATALOG:
        db = SessionLocal()
        try:
            seed_catalog(db)
        finally:
            db.close()

    cart_changed.subscribe(log_cart_change)
    logger.info("Application startup complete", extra={"event": "startup"})
    yield
    cart_changed.unsubscribe(log_cart_change)
    logger.info("Application shutting down", extra={"event": "shutdown"})


app = FastAPI(
    title="Storefront API",
    description="Catalog, cart, checkout and order history",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every request once, with its status and duration."""
    start_time = time.time()

    response = await call_next(request)

    log_request(
        logger,
        request.method,
        request.url.path,
        response.status_code,
        (time.time() - start_time) * 1000,
        extra={"client_ip": request.client.host if request.client else "unknown"}
    )

    return response


# added last so it wraps the logging middleware and its records carry the id
app.add_middleware(RequestIDMiddleware)


@app.get("/health")
async def health_check():
    logger.debug("Health check requested")
    return {"status": "Healthy"}


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Last resort for anything the services did not turn into a domain
    error: log it with the stack trace, answer with a generic 500.
    """
    if isinstance(exc, (HTTPException, RequestValidationError)):
        raise exc

    logger.error(
        f"Unhandled exception: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_type": type(exc).__name__,
            "request_ref": get_request_id(request)
        },
        exc_info=True
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"}
    )


app.include_router(catalog.router)
app.include_router(cart.router)
app.include_router(orders.router)


app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
