"""
Fossil Calibrations API - FastAPI Backend
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.calibrations import router as calibrations_router
from config import get_settings
from repositories import get_db_pool, close_db_pool
from services.errors import CalibrationServiceError

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s [%(name)s] %(levelname)s: %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the shared pool on startup, close it on shutdown"""
    await get_db_pool()
    logger.info(f"✅ Database pool ready [{settings.environment}] ({settings.postgres_host}:{settings.postgres_port}/{settings.postgres_db})")
    yield
    await close_db_pool()
    logger.info("Database pool closed")


app = FastAPI(
    title="Fossil Calibrations API",
    description="Search phylogenetic node-age calibrations by clade, tip taxa, age or geological time",
    version="1.0.0",
    lifespan=lifespan,
)

# Enable CORS for webapp
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CalibrationServiceError)
async def calibration_error_handler(request: Request, exc: CalibrationServiceError):
    """Structured error payload: {error: kind, detail: message}"""
    if exc.status_code >= 500:
        logger.error(f"❌ {request.url.path}: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# API endpoints - all under /api/*
app.include_router(calibrations_router)


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/api/health")
async def api_health():
    return {"status": "ok", "service": "fossil_calibrations"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8081)
