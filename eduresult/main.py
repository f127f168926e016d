"""
FastAPI application for the EduResult portal
Exam folders, student results and AI-assisted answer sheet entry
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from eduresult.routes import auth, exams, students, scan, results
from eduresult.config import settings
from eduresult.core import BaseAPIException
from eduresult.modules.sheet_extraction import ExtractionClient
from eduresult.services import JsonFileBackend, PersistenceAdapter, RecordStore, SessionService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events"""
    logger.info("Starting EduResult API...")
    logger.info(f"Environment: {'development' if settings.DEBUG else 'production'}")

    if app.state.store is None:
        app.state.store = RecordStore(PersistenceAdapter(JsonFileBackend(settings.DATA_DIR)))

    yield

    logger.info("Shutting down EduResult API...")


def create_app(
    store: Optional[RecordStore] = None,
    session: Optional[SessionService] = None,
    extraction_client: Optional[ExtractionClient] = None
) -> FastAPI:
    """
    Build the API around one record store.

    Anything not supplied is created on startup (store) or on first use
    (extraction client).
    """
    app = FastAPI(
        title="EduResult API",
        description="Student exam records with AI-assisted answer sheet entry",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    app.state.store = store
    app.state.session = session or SessionService()
    app.state.extraction_client = extraction_client

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(BaseAPIException)
    async def api_exception_handler(request: Request, exc: BaseAPIException):
        """Handle custom API exceptions"""
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "error": exc.detail,
                "error_code": exc.error_code
            }
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions"""
        logger.error(f"Unexpected error: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "An unexpected error occurred",
                "error_code": "INTERNAL_ERROR"
            }
        )

    app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
    app.include_router(exams.router, prefix="/api/exams", tags=["Exams"])
    app.include_router(students.router, prefix="/api/students", tags=["Students"])
    app.include_router(scan.router, prefix="/api/scan", tags=["Scan"])
    app.include_router(results.router, prefix="/api/results", tags=["Results"])

    @app.get("/")
    async def root():
        """API root endpoint"""
        return {
            "name": "EduResult API",
            "version": "1.0.0",
            "status": "running",
            "docs": "/docs",
            "redoc": "/redoc"
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint for monitoring"""
        return {
            "status": "healthy",
            "version": "1.0.0"
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "eduresult.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
