"""Main FastAPI application."""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from motelmap.config import settings
from motelmap.api import admin, listings, uploads, users
from motelmap.database import Base, engine
from motelmap import models  # noqa: F401  registers tables

# In production, manage the schema with migrations
if settings.environment == "development":
    Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Motel Map API",
    description="Backend API for the motel directory",
    version="0.1.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(users.router)
app.include_router(listings.router)
app.include_router(uploads.router)
app.include_router(admin.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Motel Map API",
        "version": "0.1.0",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
