from dotenv import load_dotenv

# Load environment variables before config is imported
load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from offshoot import __version__
from offshoot.api.relay import router as relay_router
from offshoot.api.v1 import router as v1_router
from offshoot.config import config
from offshoot.schemas import HealthResponse
from offshoot.utils.logging import get_logger

log = get_logger()

app = FastAPI(
    title="Offshoot Core",
    description="Palette extraction and product image discovery",
    version=__version__
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    max_age=86400
)

app.include_router(relay_router)
app.include_router(v1_router)

log.info("Offshoot core started", extra={"version": __version__})


@app.get("/healthz", response_model=HealthResponse)
def health_check():
    """Health check endpoint"""
    return HealthResponse(ok=True, version=__version__)


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": "Offshoot Core API",
        "version": __version__,
        "docs": "/docs"
    }
