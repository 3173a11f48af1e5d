import logging
import os
import sys

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from database import create_db_and_tables
from middleware.errors import register_error_handlers
from routes import auth, profile, tasks

# Load environment variables
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s  %(levelname)-8s  %(name)s - %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Task Tracker API",
    description="Multi-user task tracking API with cookie or bearer token authentication",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Registered before CORS so CORS also wraps error responses
register_error_handlers(app)

# CORS configuration
cors_origins = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router, prefix="/auth", tags=["auth"])
app.include_router(profile.router, prefix="/profile", tags=["profile"])
app.include_router(tasks.router, prefix="/tasks", tags=["tasks"])


@app.on_event("startup")
async def on_startup():
    """Create database tables on startup"""
    await create_db_and_tables()
    logger.info("Database ready")


@app.get("/")
def read_root():
    """Root endpoint"""
    return {
        "message": "Task Tracker API is running",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}
