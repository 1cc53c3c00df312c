from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dominant_colours import __version__
from dominant_colours.api.v1 import router as v1_router
from dominant_colours.config import config
from dominant_colours.schemas import HealthResponse
from dominant_colours.utils.logging import get_logger

log = get_logger()

app = FastAPI(
    title="Dominant Colours",
    description="Extract dominant colours from images using k-means clustering",
    version=__version__
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(v1_router)

log.info("Dominant Colours API ready",
         extra={"version": __version__, "default_k": config.DEFAULT_K, "max_k": config.MAX_K})


@app.get("/healthz", response_model=HealthResponse)
async def healthz() -> HealthResponse:
    """Liveness probe."""
    return HealthResponse(ok=True, version=__version__)
