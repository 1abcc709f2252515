import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Import all models so every table and relationship is registered on Base
from . import (
    models,  # noqa: F401
    models_booking,  # noqa: F401
    models_support,  # noqa: F401
)
from .database import Base, engine
from .domain.admin.router import router as admin_router
from .domain.bookings.router import owner_router as owner_bookings_router
from .domain.bookings.router import router as bookings_router
from .domain.finance.router import router as finance_router
from .domain.owners.router import router as owners_router
from .domain.payments.router import router as payments_router
from .domain.reviews.router import router as reviews_router
from .domain.spaces.router import owner_router as owner_spaces_router
from .domain.spaces.router import router as spaces_router
from .domain.support.router import admin_router as admin_support_router
from .domain.support.router import owner_router as owner_support_router
from .domain.support.router import router as support_router
from .domain.taxes.router import admin_router as admin_taxes_router
from .domain.taxes.router import router as taxes_router
from .routes.auth import router as auth_router
from .routes.users import router as users_router
from .security_headers import SecurityHeadersMiddleware

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

SECURITY_HEADERS_ENABLED = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Another worker may have created the tables first
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")
            raise

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="Clubicles API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Convert 422 validation errors on the Authorization header into 401s;
    everything else stays a 422 with the field errors
    """
    for error in exc.errors():
        if error.get("loc") and "authorization" in str(error.get("loc")).lower():
            logger.warning(f"Authentication failed for {request.url.path}: Missing or invalid Authorization header")
            return JSONResponse(status_code=401, content={"detail": "Not authenticated"})

    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": jsonable_errors(exc)})


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    # ctx may hold the raw ValueError raised by a field validator
    errors = []
    for error in exc.errors():
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {key: str(value) for key, value in error["ctx"].items()}
        errors.append(error)
    return errors


@app.middleware("http")
async def log_requests(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise


if SECURITY_HEADERS_ENABLED:
    app.add_middleware(SecurityHeadersMiddleware, exclude_paths=["/health", "/docs", "/openapi.json"])
    logger.info("Security headers enabled")
else:
    logger.warning("Security headers DISABLED - only use in development!")


# CORS Configuration
# The auth cookie needs credentials, so origins must be explicit
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "https://clubicles.com,https://www.clubicles.com,http://localhost:5173,http://localhost:3000",
).split(",")

logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    expose_headers=["*"],
)

# Routes
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(spaces_router)
app.include_router(owner_spaces_router)
app.include_router(bookings_router)
app.include_router(owner_bookings_router)
app.include_router(payments_router)
app.include_router(reviews_router)
app.include_router(support_router)
app.include_router(owner_support_router)
app.include_router(admin_support_router)
app.include_router(owners_router)
app.include_router(finance_router)
app.include_router(taxes_router)
app.include_router(admin_taxes_router)
app.include_router(admin_router)


@app.get("/")
def root():
    return {"message": "Clubicles API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
