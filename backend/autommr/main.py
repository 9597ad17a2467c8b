"""
FastAPI application for the AutoMMR manifest extraction service.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from datetime import datetime
import logging

from autommr.config import Config
from autommr.errors import ConfigurationError
from autommr.models import HealthResponse
from autommr.routes import analyze, sessions

# Configure logging
logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="AutoMMR API",
    description="Extraction of Maritime Waste Manifest (MMR) forms with a multimodal model",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)

app.include_router(analyze.router)
app.include_router(sessions.router)


@app.on_event("startup")
async def startup_event():
    """Check configuration and load the usage counters on startup."""
    try:
        Config.validate()
        logger.info(f"Configuration validated successfully (provider: {Config.EXTRACTION_PROVIDER})")
    except ConfigurationError as e:
        # Reported to the user on the first extraction request
        logger.error(f"Configuration error: {e.message}")

    sessions.get_usage_counters()


@app.get("/api/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    try:
        configured = Config.validate()
    except ConfigurationError:
        configured = False

    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(),
        provider=Config.EXTRACTION_PROVIDER,
        details={
            'configured': configured,
            'active_sessions': len(sessions.get_session_manager()),
        }
    )


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "autommr.main:app",
        host=Config.API_HOST,
        port=Config.API_PORT,
        reload=True
    )
