from contextlib import asynccontextmanager
from datetime import datetime
import logging

from dotenv import load_dotenv

# Load environment variables as early as possible
load_dotenv()

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.gzip import GZipMiddleware

from .core.config import settings
from .database import create_db_and_tables
from .exceptions import (
    APIError,
    api_error_handler,
    http_exception_handler,
    request_validation_handler,
    create_success_response,
)
from .middleware import (
    RateLimitMiddleware,
    SecurityMiddleware,
    LoggingMiddleware,
    ErrorHandlingMiddleware,
    RequestSizeLimitMiddleware,
)
from .routers import (
    auth_router,
    users_router,
    doctors_router,
    hospitals_router,
    appointments_router,
    pharmacies_router,
    labs_router,
    clinics_router,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format=settings.LOG_FORMAT,
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME}...")
    app.state.db_init_ok = True
    if not settings.secret_key_configured:
        logger.warning("JWT_SECRET_KEY is not configured; using the development default")
    try:
        create_db_and_tables()
        logger.info("Database initialized successfully")
    except Exception as e:
        # Keep serving; /health reports the failure
        app.state.db_init_ok = False
        logger.exception(f"Database initialization failed: {e}")
    yield
    logger.info(f"Shutting down {settings.APP_NAME}...")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
    docs_url=("/docs" if settings.DOCS_ENABLED else None),
    redoc_url=("/redoc" if settings.DOCS_ENABLED else None),
    openapi_url=("/openapi.json" if settings.DOCS_ENABLED else None),
)

# Exception handlers
app.add_exception_handler(APIError, api_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)

# Middleware (last added runs first)
app.add_middleware(ErrorHandlingMiddleware)
app.add_middleware(LoggingMiddleware)
app.add_middleware(SecurityMiddleware)
app.add_middleware(RequestSizeLimitMiddleware)
app.add_middleware(RateLimitMiddleware)
app.add_middleware(GZipMiddleware, minimum_size=settings.GZIP_MIN_SIZE)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=settings.allowed_methods_list,
    allow_headers=settings.allowed_headers_list,
)

app.include_router(auth_router.router)
app.include_router(users_router.router)
app.include_router(doctors_router.router)
app.include_router(hospitals_router.router)
app.include_router(appointments_router.router)
app.include_router(pharmacies_router.router)
app.include_router(labs_router.router)
app.include_router(clinics_router.router)


@app.get("/health")
def health_check():
    return {
        "status": "OK" if getattr(app.state, "db_init_ok", True) else "DEGRADED",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": datetime.utcnow().isoformat(),
        "database": {"ok": getattr(app.state, "db_init_ok", True)},
        "auth": {
            "secret_key_configured": settings.secret_key_configured,
            "jwt_algorithm": settings.ALGORITHM,
            "token_expiry_minutes": settings.ACCESS_TOKEN_EXPIRE_MINUTES,
        },
    }


@app.get("/")
def root():
    return create_success_response(
        {"name": settings.APP_NAME, "version": settings.APP_VERSION},
        "Welcome to the Medical Care API",
    )


# ------------------------
# Run with correct PORT in local/production
# ------------------------
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "medcare.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
