"""
Image Compatibility Service

FastAPI application exposing:
- /api/akamai      - Akamai parameter detection and translation
- /api/dimensions  - Cached image dimensions
- /api/formats     - Browser image format support

Run:
    cd backend
    uvicorn main:app --reload
"""

import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from akamai_compat import router as akamai_router
from browser_formats import formats_router
from dimension_cache import dimensions_router, dimension_fetcher

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("[Main] Image compatibility service starting")
    yield
    await dimension_fetcher.close()
    logger.info("[Main] Image compatibility service stopped")


app = FastAPI(title="Image Compatibility Service", lifespan=lifespan)

app.include_router(akamai_router)
app.include_router(dimensions_router)
app.include_router(formats_router)


@app.get("/health")
async def health():
    return {"status": "ok"}
