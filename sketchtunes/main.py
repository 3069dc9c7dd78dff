from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sketchtunes.api.v1 import auth, users, tracks, websocket
from sketchtunes.config import get_settings
from sketchtunes.core.logging import setup_logging, get_logger
from sketchtunes.services.websocket_manager import websocket_manager

# Configure logging before anything else
setup_logging()
logger = get_logger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application startup")

    yield

    # Shutdown: unmount every player on every connected page
    logger.info(f"Application shutdown: closing {websocket_manager.get_page_count()} player pages...")
    websocket_manager.close_all()
    logger.info("All player pages closed")


app = FastAPI(
    title="SketchTunes Server",
    description="Backend for sharing, playing and commenting on work-in-progress tracks",
    version="1.0.0",
    debug=settings.debug,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan
)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API v1 endpoints
app.include_router(auth.router, prefix=f"{settings.api_v1_prefix}/auth", tags=["Authentication"])
app.include_router(users.router, prefix=f"{settings.api_v1_prefix}/users", tags=["Users"])
app.include_router(tracks.router, prefix=f"{settings.api_v1_prefix}/tracks", tags=["Tracks"])
app.include_router(websocket.router, tags=["WebSocket"])


@app.get("/")
async def root():
    return {"message": "Welcome to SketchTunes!", "status": "running"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
