import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sentry_sdk.integrations.asgi import SentryAsgiMiddleware

from app.api.v1 import auth as auth_routes
from app.api.v1 import company as company_routes
from app.core.config import settings
from app.db.session import init_db
from app.security.audit.access_logger import AccessLogMiddleware
from app.security.encryption.field_encryption import get_field_encryptor
from app.security.validation.security_headers import SecurityHeadersMiddleware
from app.utils.error_handler import AppError, ErrorHandlingMiddleware, app_error_handler
from app.utils.logger import configure_logging, get_logger

# Configure logging before anything else
configure_logging()
logger = get_logger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    description="Compliance workspace API with encrypted company profiles",
    version="1.0.0",
)

# Initialize Sentry if DSN is provided
if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.APP_ENV,
        traces_sample_rate=0.1,
        send_default_pii=False,
    )
    app.add_middleware(SentryAsgiMiddleware)
    logger.info(
        "Sentry initialized with SentryAsgiMiddleware", environment=settings.APP_ENV
    )
else:
    logger.info("Sentry not configured (SENTRY_DSN not set)")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(ErrorHandlingMiddleware)
if settings.ENABLE_SECURITY_HEADERS:
    app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(AccessLogMiddleware)

app.add_exception_handler(AppError, app_error_handler)

app.include_router(auth_routes.router, prefix="/api/v1")
app.include_router(company_routes.router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event():
    """Create tables and validate the field encryption key."""
    logger.info(
        "Compliance API starting up",
        app_name=settings.APP_NAME,
        environment=settings.APP_ENV,
        sentry_enabled=bool(settings.SENTRY_DSN),
    )
    init_db()
    if settings.FIELD_ENCRYPTION_KEY is None:
        logger.warning(
            "FIELD_ENCRYPTION_KEY not set; company profile endpoints are disabled"
        )
    else:
        # A malformed key aborts startup
        get_field_encryptor()


@app.get("/")
async def root() -> dict:
    return {"status": "ok", "service": settings.APP_NAME}


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint"""
    return {"status": "ok"}
