from dotenv import load_dotenv

# Load environment variables before config reads them
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from wardrobe.api.v1 import router as v1_router
from wardrobe.config import config
from wardrobe.schemas import HealthResponse
from wardrobe.services.colors import __version__
from wardrobe.services.colors.errors import CoordinateOutOfBoundsError, ImageUnreadableError
from wardrobe.services.outfit_analysis import OutfitAnalysisError
from wardrobe.utils.logging import get_logger
from wardrobe.utils.metrics import get_metrics

logger = get_logger()

app = FastAPI(
    title="Wardrobe Colors Backend",
    description="Garment color extraction and outfit color harmony analysis",
    version=__version__
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(v1_router)


# Safety net for errors raised outside the routes' own handling
@app.exception_handler(ImageUnreadableError)
async def image_unreadable_handler(request: Request, exc: ImageUnreadableError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(CoordinateOutOfBoundsError)
async def coordinate_out_of_bounds_handler(request: Request, exc: CoordinateOutOfBoundsError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(OutfitAnalysisError)
async def outfit_analysis_handler(request: Request, exc: OutfitAnalysisError):
    logger.error(f"Unhandled outfit analysis failure on {request.url.path}: {exc}")
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.get("/healthz", response_model=HealthResponse)
def healthz():
    """Health check endpoint."""
    return HealthResponse(ok=True, version=__version__)


@app.get("/metrics")
def metrics():
    """In-process counters and timings."""
    return get_metrics().get_summary()


@app.get("/")
def root():
    return {
        "service": "wardrobe-colors",
        "version": __version__,
        "docs": "/docs",
    }
