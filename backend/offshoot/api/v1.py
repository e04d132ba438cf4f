"""
Offshoot v1 API Routes
Palette analysis, palette matching and product image discovery.
"""
from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from fastapi.concurrency import run_in_threadpool
from loguru import logger
from pydantic import BaseModel, Field

from offshoot.config import config
from offshoot.errors import (
    FetchChainExhaustedError, InvalidInputError, NoCandidatesFoundError
)
from offshoot.schemas import (
    ClosestColorResponse, ErrorResponse, HarvestRequest, HarvestResponse, MatchReportResponse,
    PaletteResponse
)
from offshoot.services.colors import PaletteEngine
from offshoot.services.imaging import validate_upload
from offshoot.services.scraping import ImageHarvester
from offshoot.utils.ids import generate_request_id
from offshoot.utils.logging import get_logger
from .deps import get_harvester, get_palette_engine

router = APIRouter(prefix="/v1", tags=["Palette & Harvesting"])


class ImportRequest(BaseModel):
    """Candidate URLs picked by the user for palette analysis."""
    urls: List[str] = Field(..., min_length=1, max_length=20)


async def _read_uploads(files: List[UploadFile]) -> List[bytes]:
    """Read supported uploads, skipping the rest."""
    images = []
    for upload in files:
        content = await upload.read()
        try:
            validate_upload(upload.content_type, len(content))
        except InvalidInputError as e:
            logger.warning(f"Skipped {upload.filename}: {e}")
            continue
        images.append(content)
    return images


async def _analyze(engine: PaletteEngine, images: List[bytes], request_id: str) -> PaletteResponse:
    try:
        palette = await run_in_threadpool(engine.analyze, images, request_id)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    styles = await run_in_threadpool(engine.infer_styles, images)
    return PaletteResponse(
        request_id=request_id,
        palette=list(palette),
        styles=styles,
        images_received=len(images)
    )


@router.post("/palette",
             response_model=PaletteResponse,
             summary="Analyze Palette",
             description="Derive the reference palette from a batch of sample images")
async def analyze_palette(
    files: List[UploadFile] = File(..., description="Sample images (png, jpeg, webp)"),
    engine: PaletteEngine = Depends(get_palette_engine)
) -> PaletteResponse:
    request_id = generate_request_id("pal")
    images = await _read_uploads(files)
    if not images:
        raise HTTPException(
            status_code=415,
            detail=f"No supported images. Supported: {', '.join(config.SUPPORTED_MIME_TYPES)}"
        )
    return await _analyze(engine, images, request_id)


@router.get("/palette",
            response_model=PaletteResponse,
            summary="Current Palette")
async def current_palette(engine: PaletteEngine = Depends(get_palette_engine)) -> PaletteResponse:
    return PaletteResponse(
        request_id=generate_request_id("pal"),
        palette=list(engine.palette),
        images_received=0
    )


@router.post("/palette/score",
             response_model=MatchReportResponse,
             summary="Score Image Against Palette",
             description="Percentage of reference colors present in a candidate image")
async def score_image(
    file: UploadFile = File(..., description="Candidate image"),
    engine: PaletteEngine = Depends(get_palette_engine)
) -> MatchReportResponse:
    images = await _read_uploads([file])
    if not images:
        raise HTTPException(status_code=415, detail="Unsupported or empty image")

    report = await run_in_threadpool(engine.score, images[0])
    return MatchReportResponse(**report.to_dict())


@router.get("/palette/closest",
            response_model=ClosestColorResponse,
            summary="Closest Palette Color")
async def closest_color(
    hex: str = Query(..., pattern="^#?[0-9A-Fa-f]{6}$", description="Color to look up"),
    engine: PaletteEngine = Depends(get_palette_engine)
) -> ClosestColorResponse:
    return ClosestColorResponse(hex=hex, closest=engine.closest(hex))


@router.post("/harvest",
             response_model=HarvestResponse,
             summary="Discover Product Images",
             description="Extract candidate product image URLs from a page",
             responses={
                 400: {"model": ErrorResponse, "description": "Invalid page URL"},
                 404: {"model": ErrorResponse, "description": "No product images found"},
                 502: {"model": ErrorResponse, "description": "All relays failed"},
             })
async def harvest_images(
    request: HarvestRequest,
    harvester: ImageHarvester = Depends(get_harvester)
) -> HarvestResponse:
    request_id = generate_request_id("hrv")
    try:
        images = await harvester.discover(request.url, request_id=request_id)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NoCandidatesFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except FetchChainExhaustedError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return HarvestResponse(request_id=request_id, url=request.url, images=images, count=len(images))


@router.post("/harvest/import",
             response_model=PaletteResponse,
             summary="Import Picked Images",
             description="Download picked candidates and derive the palette from whatever loaded")
async def import_images(
    request: ImportRequest,
    harvester: ImageHarvester = Depends(get_harvester),
    engine: PaletteEngine = Depends(get_palette_engine)
) -> PaletteResponse:
    request_id = generate_request_id("imp")

    images = []
    for url in request.urls:
        content = await harvester.load_image(url)
        if content is None:
            get_logger().for_request(request_id).warning(f"Failed to load {url}")
            continue
        images.append(content)

    if not images:
        raise HTTPException(status_code=502, detail="None of the selected images could be loaded")
    return await _analyze(engine, images, request_id)
