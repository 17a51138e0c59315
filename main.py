from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from telecare.config.database import Database
from telecare.config.settings import settings
from telecare.agents.triage_graph import create_pipeline
from telecare.api.triage import router as triage_router
from telecare.middleware import JWTAuthMiddleware
import logging

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    # Startup
    logger.info("Starting Telecare Triage Service...")
    logger.info(f"Environment: {settings.environment}")

    try:
        # Connect to MongoDB
        await Database.connect_db()
        logger.info("MongoDB connected successfully")
    except Exception as e:
        logger.error(f"Failed to connect to MongoDB: {e}")
        raise

    # Reference catalogs are loaded once and shared read-only by every request
    app.state.pipeline = create_pipeline()
    logger.info(
        f"Triage pipeline ready: {len(app.state.pipeline.dataset.symptoms)} symptom conditions, "
        f"{len(app.state.pipeline.dataset.medicines)} medicine conditions"
    )

    yield

    # Shutdown
    logger.info("Shutting down Telecare Triage Service...")
    await Database.close_db()
    logger.info("MongoDB connection closed")


# Initialize FastAPI app
app = FastAPI(
    title="Telecare - Symptom Triage Service",
    description="Classifies symptom descriptions, generates grounded advice and prescription recommendations, and suggests doctors and over-the-counter medicines.",
    version="1.0.0",
    lifespan=lifespan,
)

# add_middleware stacks LIFO: CORS is added last so it runs outermost and
# 401 responses from the JWT middleware still carry CORS headers.
app.add_middleware(JWTAuthMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_allow_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(triage_router)


@app.get("/health")
async def health_check():
    """Service status with MongoDB and Gemini availability."""
    pipeline = getattr(app.state, "pipeline", None)
    return {
        "status": "ok",
        "service": settings.service_name,
        "version": "1.0.0",
        "dependencies": {
            "mongodb": await Database.ping(),
            "gemini": (
                f"configured ({settings.gemini_model})"
                if settings.gemini_api_key
                else "not configured"
            ),
        },
        "datasets": {
            "symptoms": len(pipeline.dataset.symptoms) if pipeline else 0,
            "medicines": len(pipeline.dataset.medicines) if pipeline else 0,
        },
    }


@app.get("/")
async def root():
    return {
        "message": "Telecare - Symptom Triage Service",
        "description": "Symptom classification, advice and prescription recommendations",
        "version": "1.0.0",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.triage_service_port,
        reload=settings.environment == "development",
    )
