from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn
from dotenv import load_dotenv

from microhabit.core.config import settings
from microhabit.core.health import build_health_report, HealthStatus
from microhabit.core.storage import get_store
from microhabit.api.v1.router import api_router
from microhabit.services.logger import logger

# Load environment variables
load_dotenv()

# Create FastAPI app
app = FastAPI(
    title="Micro-Habit Coach API",
    description="Mood-aware micro-habit suggestions",
    version="1.0.0",
    docs_url="/docs" if settings.ENVIRONMENT == "development" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT == "development" else None,
    redirect_slashes=False,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API router
app.include_router(api_router, prefix="/api/v1")


# Health check endpoint
@app.get("/health")
async def health_check():
    report = await build_health_report(api_version=app.version)
    status_code = (
        status.HTTP_200_OK
        if report.status != HealthStatus.CRITICAL
        else status.HTTP_503_SERVICE_UNAVAILABLE
    )
    return JSONResponse(content=report.model_dump(mode="json"), status_code=status_code)


# Startup event
@app.on_event("startup")
async def startup_event():
    get_store()

    for warning in settings.validate_configuration():
        logger.warning(warning)

    logger.info("🚀 Micro-Habit Coach API started successfully!")


# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    logger.info("👋 Micro-Habit Coach API shutting down...")


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
    )
