"""
Main FastAPI application
Trivia quiz backend gating a once-a-day NFT mint per wallet
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import httpx
import logging
import time
from typing import Optional

from mintquiz.config import Settings, settings
from mintquiz.api import quiz
from mintquiz.exceptions import QuizError, TooManyRequests
from mintquiz.services.quiz_service import QuizService
from mintquiz.services.trivia_service import TriviaService
from mintquiz.utils.attempt_store import AttemptStore
from mintquiz.utils.rate_limiter import RequestThrottle

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

UNTHROTTLED_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load persisted attempts on startup"""
    app_settings: Settings = app.state.settings
    logger.info(f"Starting {app_settings.APP_NAME} v{app_settings.APP_VERSION}")

    try:
        app.state.quiz_service.attempt_store.load()
        logger.info("Attempt store loaded successfully")
    except Exception as e:
        logger.error(f"Failed to load attempt store: {str(e)}")
        raise

    logger.info("Application startup complete")
    yield
    logger.info("Shutting down application")


def create_app(
    app_settings: Optional[Settings] = None,
    trivia_transport: Optional[httpx.AsyncBaseTransport] = None,
    quiz_service: Optional[QuizService] = None
) -> FastAPI:
    """
    Build the application and its single QuizService

    Args:
        app_settings: Settings override (defaults to the environment)
        trivia_transport: httpx transport for OpenTDB calls (tests)
        quiz_service: Fully built service, bypassing the defaults
    """
    app_settings = app_settings or settings

    app = FastAPI(
        title=app_settings.APP_NAME,
        version=app_settings.APP_VERSION,
        description="Trivia quiz backend with a daily pass limit per wallet",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    app.state.settings = app_settings
    app.state.quiz_service = quiz_service or QuizService(
        settings=app_settings,
        trivia_service=TriviaService(app_settings, transport=trivia_transport),
        attempt_store=AttemptStore(app_settings.ATTEMPTS_FILE),
    )
    app.state.throttle = RequestThrottle(
        requests_per_minute=app_settings.RATE_LIMIT_PER_MINUTE,
        requests_per_hour=app_settings.RATE_LIMIT_PER_HOUR
    )

    # Rate limiting middleware
    @app.middleware("http")
    async def rate_limit_middleware(request: Request, call_next):
        """Apply request throttling to everything except health and docs"""
        throttle: RequestThrottle = request.app.state.throttle
        if request.url.path in UNTHROTTLED_PATHS or not throttle.enabled:
            return await call_next(request)

        try:
            throttle.check(throttle.get_client_id(request))
        except TooManyRequests as e:
            return JSONResponse(
                status_code=e.status_code,
                content={"error": e.message, "retry_after": e.retry_after},
                headers={"Retry-After": str(e.retry_after)}
            )

        return await call_next(request)

    # Request logging middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """
        Log all requests with timing

        Unexpected errors are turned into a 500 here, inside CORSMiddleware,
        so the browser still gets a readable {"error": ...} body.
        """
        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)

            content = {"error": "Internal server error"}
            if app_settings.DEBUG:
                content["detail"] = str(exc)
            response = JSONResponse(status_code=500, content=content)

        duration = time.time() - start_time
        logger.info(
            f"{request.method} {request.url.path} - "
            f"Status: {response.status_code} - "
            f"Duration: {duration:.3f}s"
        )
        return response

    # CORS middleware (added last so it wraps the throttle's 429 responses too)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.ALLOWED_ORIGINS,
        allow_origin_regex=app_settings.ALLOWED_ORIGIN_REGEX,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[quiz.QUIZ_VERSION_HEADER],
    )

    # Domain error handler
    @app.exception_handler(QuizError)
    async def quiz_error_handler(request: Request, exc: QuizError):
        """Return domain errors as {"error": message}"""
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    # Validation error handler
    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        """Malformed bodies are plain 400s for the browser client"""
        logger.error(f"Invalid request body on {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """
        Health check endpoint for monitoring

        Returns service status and attempt store state
        """
        service: QuizService = app.state.quiz_service
        return {
            "status": "healthy",
            "service": app_settings.APP_NAME,
            "version": app_settings.APP_VERSION,
            "attempt_store_loaded": service.attempt_store.loaded,
            "timestamp": time.time()
        }

    # Root endpoint
    @app.get("/")
    async def root():
        """Root endpoint with API information"""
        return {
            "message": "Quiz Mint API",
            "version": app_settings.APP_VERSION,
            "docs": "/docs",
            "health": "/health"
        }

    app.include_router(quiz.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "mintquiz.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )
