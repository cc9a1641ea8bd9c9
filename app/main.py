import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from dotenv import load_dotenv

# Load environment variables as early as possible
load_dotenv()

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware

from .core.config import settings
from .core.security import PLACEHOLDER_SECRET
from .db.session import engine, create_db_and_tables
from .exceptions import http_exception_handler
from .middleware import (
    RateLimitMiddleware, SecurityMiddleware, LoggingMiddleware,
    ErrorHandlingMiddleware, RequestSizeLimitMiddleware,
)
from .routers import auth_router, analysis_router
from .application.services.analysis_service import AnalysisService
from .application.services.auth_service import AuthService
from .application.services.prompt_builder import PromptBuilder
from .infrastructure.ai.gemini_provider import GeminiProvider
from .infrastructure.audit.std_logger import StdAuditLogger
from .infrastructure.persistence.sqlalchemy.repositories.analysis_repository_sql import SqlAnalysisRepository
from .infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository
from .infrastructure.storage.local_storage import LocalStorageRepository

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format=settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)


def build_analysis_service() -> AnalysisService:
    # Missing API key or prompt template raises ConfigurationError and aborts startup
    return AnalysisService(
        analysis_repo=SqlAnalysisRepository(engine),
        ai_provider=GeminiProvider(
            settings.GEMINI_API_KEY,
            settings.GEMINI_MODEL,
            timeout=settings.GEMINI_TIMEOUT_SECONDS,
        ),
        storage_repo=LocalStorageRepository(settings.UPLOAD_DIR),
        prompt_builder=PromptBuilder.from_file(settings.PROMPT_TEMPLATE_PATH),
    )


def build_auth_service() -> AuthService:
    return AuthService(user_repo=SqlUserRepository(engine), audit_logger=StdAuditLogger())


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"Starting {settings.APP_NAME}...")
    app.state.analysis_service = build_analysis_service()
    app.state.auth_service = build_auth_service()

    app.state.db_init_ok = True
    app.state.db_init_error = None
    try:
        create_db_and_tables()
        logger.info("Database initialized successfully")
    except Exception as e:
        # Do not crash the app; report via health endpoint
        app.state.db_init_ok = False
        app.state.db_init_error = str(e)
        logger.exception("Database initialization failed")
    yield
    # Shutdown
    logger.info(f"Shutting down {settings.APP_NAME}, waiting for running analyses...")
    await app.state.analysis_service.wait_for_pending()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
    docs_url=("/docs" if settings.DOCS_ENABLED else None),
    redoc_url=("/redoc" if settings.DOCS_ENABLED else None),
    openapi_url=("/openapi.json" if settings.DOCS_ENABLED else None)
)

app.add_exception_handler(HTTPException, http_exception_handler)

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
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router.router)
app.include_router(analysis_router.router)


@app.get("/health")
def health_check():
    return {
        "status": "healthy" if getattr(app.state, "db_init_ok", True) else "degraded",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": {
            "ok": getattr(app.state, "db_init_ok", True),
            "error": getattr(app.state, "db_init_error", None)
        },
        "ai": {
            "api_key_configured": bool(settings.GEMINI_API_KEY),
            "model": settings.GEMINI_MODEL,
        },
        "auth": {
            "secret_key_configured": bool(settings.SECRET_KEY and settings.SECRET_KEY != PLACEHOLDER_SECRET),
            "jwt_algorithm": settings.ALGORITHM,
            "token_expiry_minutes": settings.ACCESS_TOKEN_EXPIRE_MINUTES
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        workers=1,
        log_level=settings.LOG_LEVEL.lower()
    )
