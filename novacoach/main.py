"""
Nova Coach Service - Main Entry Point

AI-backed training plans, nutrition, body scans, coach chat and exercise media.
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from novacoach.core.config import settings
from novacoach.core.dependencies import request_locale
from novacoach.core.errors import ClassifiedError, ErrorKind, GenerationCancelled, StaleResultError
from novacoach.core.errors import RequestValidationError as InputError
from novacoach.core.logger import logger, log_error
from novacoach.core.limiter import limiter
from novacoach.routes import chat, exercise, media, nutrition, profile, workout


# Validate configuration on startup
try:
    settings.validate()
    logger.info("Configuration validated successfully")
except ValueError as e:
    logger.error(f"Configuration error: {e}")
    raise


# Create FastAPI app
app = FastAPI(
    title="Nova Coach Service",
    description="AI-backed training plans, nutrition, body scans, coach chat and exercise media",
    version="1.0.0"
)

# Attach rate limiter and its error handler
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


HTTP_STATUS_BY_KIND = {
    ErrorKind.CREDENTIAL_MISSING: 401,
    ErrorKind.CREDENTIAL_INVALID: 401,
    ErrorKind.RESOURCE_NOT_FOUND: 404,
    ErrorKind.QUOTA_EXCEEDED: 429,
    ErrorKind.BILLING_REQUIRED: 402,
    ErrorKind.TIMEOUT: 504,
    ErrorKind.UNKNOWN: 502,
}


@app.exception_handler(ClassifiedError)
async def classified_error_handler(request: Request, exc: ClassifiedError):
    """Bilingual message + retry affordance. Raw diagnostics stay in the logs."""
    log_error(request.url.path, exc)
    body = exc.to_dict()
    body["localizedMessage"] = exc.message_for(request_locale(request.headers.get("accept-language", "")))
    return JSONResponse(status_code=HTTP_STATUS_BY_KIND[exc.kind], content=body)


@app.exception_handler(InputError)
async def input_error_handler(request: Request, exc: InputError):
    log_error(request.url.path, exc)
    return JSONResponse(status_code=400, content={"status": "error", "detail": str(exc)})


@app.exception_handler(GenerationCancelled)
async def cancelled_handler(request: Request, exc: GenerationCancelled):
    return JSONResponse(status_code=499, content={"status": "cancelled"})


@app.exception_handler(StaleResultError)
async def stale_result_handler(request: Request, exc: StaleResultError):
    logger.info(f"{request.url.path}: {exc}")
    return JSONResponse(status_code=409, content={"status": "superseded", "slot": exc.slot})


# Include route modules
app.include_router(workout.router, tags=["Training Plans"])
app.include_router(nutrition.router, tags=["Nutrition & Body Scan"])
app.include_router(exercise.router, tags=["Exercises"])
app.include_router(chat.router, tags=["Coach Chat"])
app.include_router(media.router, tags=["Media"])
app.include_router(profile.router, tags=["Profile"])


@app.get("/")
@limiter.limit("60/minute")
def root(request: Request):
    """Health check endpoint."""
    return {"message": "Nova Coach Service running"}


@app.get("/health")
def health():
    """
    Detailed health status.
    Returns 'degraded' if required configuration is missing.
    """
    missing = [
        name for name, value in (
            ("OPENAI_API_KEY", settings.OPENAI_API_KEY),
            ("INTERNAL_API_SECRET", settings.INTERNAL_API_SECRET),
        )
        if not value
    ]

    if missing:
        return JSONResponse(
            status_code=200,
            content={
                "status": "degraded",
                "service": "nova-coach-service",
                "version": "1.0.0",
                "missing_config": missing,
                "message": f"Missing required environment variables: {', '.join(missing)}"
            }
        )

    return {
        "status": "healthy",
        "service": "nova-coach-service",
        "version": "1.0.0"
    }


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "novacoach.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=False
    )
