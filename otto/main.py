"""
FastAPI main application for OTTO
"""
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from otto.core.config import settings
from otto.core.logging import setup_logging
from otto.middleware.logging_middleware import RequestLoggingMiddleware
from otto.routers import chat, images, products
from otto.services.session_manager import session_manager

setup_logging()
logger = logging.getLogger(__name__)


def _key_preview(key: str) -> str:
    return f"{key[:7]}...{key[-4:]}" if len(key) > 11 else "***"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    logger.info(f"Starting {settings.app_name}...")

    logger.info("=" * 60)
    logger.info("ENVIRONMENT VARIABLES CHECK")
    logger.info("=" * 60)

    if settings.openai_api_key:
        logger.info(f"✅ OPENAI_API_KEY is set: {_key_preview(settings.openai_api_key)}")
    else:
        logger.error("❌ OPENAI_API_KEY is NOT set - Image analysis and generation will not work!")

    if settings.image_generation_provider == "gemini":
        if settings.google_ai_api_key:
            logger.info(f"✅ GOOGLE_AI_API_KEY is set: {_key_preview(settings.google_ai_api_key)}")
        else:
            logger.error("❌ GOOGLE_AI_API_KEY is NOT set - Gemini image generation will not work!")

    if settings.external_api_base_url:
        logger.info(f"Image endpoints: {settings.external_api_base_url}")
    else:
        logger.info("Image endpoints: in-process")

    logger.info("=" * 60)

    session_manager.bind_app(app)
    logger.info("Application started")

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.app_name}...")
    await session_manager.close()
    logger.info("Application stopped")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="Agentic commerce assistant API",
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs" if settings.environment == "development" else None,
    redoc_url="/redoc" if settings.environment == "development" else None,
)

# Add middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(RequestLoggingMiddleware)


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint for load balancers"""
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "version": settings.version,
        "sessions": session_manager.session_count,
    }


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "name": settings.app_name,
        "version": settings.version,
        "description": "Agentic commerce assistant API",
        "docs": "/docs" if settings.environment == "development" else None,
        "endpoints": {
            "chat": "/api/chat",
            "products": "/api/products",
            "analyze_image": "/api/analyze-image",
            "generate_image": "/api/generate-image",
        },
    }


# Include routers
app.include_router(chat.router, prefix="/api/chat", tags=["chat"])
app.include_router(products.router, prefix="/api", tags=["products"])
app.include_router(images.router, prefix="/api", tags=["images"])

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "otto.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.environment == "development",
        log_config=None,  # Use our custom logging
        access_log=False,  # We handle this in middleware
    )
