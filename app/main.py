#run it with uvicorn app.main:app --reload
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv
import logging

from app.api.v1.api_router import api_router
from app.api.v1.responses import error_response
from app.core.config import get_settings
from app.core.exceptions import IntakeError, ValidationError, format_validation_errors
from app.core.rate_limit import FixedWindowLimiter, RateLimitMiddleware

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Load environment variables from .env file
load_dotenv()


async def startup_event():
    """Connect to MongoDB and make sure collections and indexes exist"""
    logger.info("🚀 Starting database initialization...")
    try:
        from app.db.init_db import initialize_database, verify_database_setup

        init_success = await initialize_database()
        if init_success:
            logger.info("✅ Database initialization completed successfully")
        else:
            logger.warning("⚠️ Database initialization completed with warnings")

        verification = await verify_database_setup()
        if verification.get('overall_status') == '✅ PASS':
            logger.info("✅ Database verification passed")
        else:
            logger.warning(f"⚠️ Database verification status: {verification.get('overall_status')}")

    except Exception as e:
        logger.error(f"❌ Database initialization failed: {str(e)}")
        # Continue startup even if DB init fails (for development)


async def shutdown_event():
    """Clean up resources on application shutdown"""
    from app.db import mongo

    try:
        mongo.close()
    except Exception as e:
        logger.error(f"Error closing MongoDB connections: {str(e)}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await startup_event()
    yield
    await shutdown_event()


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(title="Education Forms Backend", version="1.0.0", lifespan=lifespan)

    app.add_middleware(
        RateLimitMiddleware,
        limiter=FixedWindowLimiter(settings.rate_limit_window_ms, settings.rate_limit_max_requests),
        trust_proxy=settings.trust_proxy,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        # Report every violated field, not only the first
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            "Validation failed",
            errors=format_validation_errors(exc.errors()),
        )

    @app.exception_handler(IntakeError)
    async def intake_error_handler(request: Request, exc: IntakeError):
        if isinstance(exc, ValidationError):
            return error_response(exc.status_code, exc.message, errors=exc.errors)
        if exc.status_code >= 500:
            logger.error(f"❌ Unhandled intake error on {request.url.path}: {exc.message}")
            return error_response(exc.status_code, "Internal server error", error=exc)
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"❌ Unhandled error on {request.url.path}: {str(exc)}")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", error=exc)

    app.include_router(api_router)

    @app.get("/api/health")
    def health_check():
        """
        Health check endpoint. Reports which settings are present, never
        their values.
        """
        return {
            "status": "ok",
            "environment": settings.environment,
            "env_vars": {
                "mongodb_url": bool(settings.mongodb_url or settings.mongodb_uri),
                "brevo_api_key": bool(settings.brevo_api_key),
                "from_email": bool(settings.from_email),
                "admin_email": bool(settings.admin_email),
            },
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=get_settings().port)
