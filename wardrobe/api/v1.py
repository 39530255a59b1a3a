"""
Wardrobe Colors v1 API Routes
Color extraction, color picking, harmony analysis and outfit analysis.
"""
import time

from fastapi import APIRouter, File, HTTPException, Query, UploadFile
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from wardrobe.config import config
from wardrobe.schemas import (
    ColorAnalysisResponse, ColorExtractResponse, ColorPickResponse, ColorsRequest,
    ContrastRequest, ContrastResponse, ErrorResponse, HarmonyResponse, OutfitAnalysisResponse,
)
from wardrobe.services.colors.errors import CoordinateOutOfBoundsError, ImageUnreadableError
from wardrobe.services.colors.extract_api import handle_extract
from wardrobe.services.colors.extraction import pick_color_at_point
from wardrobe.services.colors.harmony import (
    HarmonyResult, analyze_color_harmony, analyze_colors, calculate_contrast,
    harmony_display_name,
)
from wardrobe.services.colors.swatches import render_swatch_strip
from wardrobe.services.imaging import read_image, validate_file_upload
from wardrobe.services.outfit_analysis import OutfitAnalysisError, get_outfit_client
from wardrobe.utils.ids import generate_request_id
from wardrobe.utils.logging import get_logger
from wardrobe.utils.metrics import get_metrics

router = APIRouter(prefix="/v1", tags=["Colors"])
logger = get_logger()

UPLOAD_ERRORS = {
    400: {"model": ErrorResponse, "description": "Image could not be decoded"},
    413: {"model": ErrorResponse, "description": "File too large"},
    415: {"model": ErrorResponse, "description": "Unsupported media type"},
}


def _harmony_response(result: HarmonyResult) -> HarmonyResponse:
    return HarmonyResponse(display_name=harmony_display_name(result.type), **result.to_dict())


async def _read_upload(file: UploadFile, request_id: str):
    validate_file_upload(file)
    try:
        return await read_image(file)
    except ImageUnreadableError as e:
        logger.warning(f"Unreadable upload: {e}", extra={"request_id": request_id})
        get_metrics().increment_failure_count("unreadable")
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/colors/extract",
             response_model=ColorExtractResponse,
             responses=UPLOAD_ERRORS,
             summary="Extract dominant garment colors",
             description="Remove the border-estimated background and rank the remaining colors")
async def extract_colors(
    file: UploadFile = File(..., description="Garment photo (JPEG, PNG or WebP)"),
    sensitivity: int = Query(config.DEFAULT_SENSITIVITY, ge=config.MIN_SENSITIVITY, le=config.MAX_SENSITIVITY,
                             description="Background distance threshold; higher keeps fewer pixels"),
    top_n: int = Query(config.DEFAULT_TOP_N, ge=1, le=config.MAX_TOP_N,
                       description="Maximum number of colors to return"),
    include_swatch: bool = Query(False, description="Include a PNG swatch strip")
) -> ColorExtractResponse:
    request_id = generate_request_id("extract")
    start_time = time.time()

    try:
        rgba = await _read_upload(file, request_id)
        response = await run_in_threadpool(
            handle_extract, rgba, sensitivity, top_n, include_swatch, None, request_id
        )
        logger.info(f"Extraction finished in {(time.time() - start_time) * 1000:.1f}ms",
                    extra={"request_id": request_id, "colors": response.colors})
        return response

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Color extraction failed: {e}", extra={"request_id": request_id})
        get_metrics().increment_failure_count("extract")
        raise HTTPException(status_code=500, detail="Internal server error during color extraction")


@router.post("/colors/pick",
             response_model=ColorPickResponse,
             responses={**UPLOAD_ERRORS, 422: {"model": ErrorResponse, "description": "Coordinate outside the image"}},
             summary="Pick the color of one pixel")
async def pick_color(
    file: UploadFile = File(..., description="Garment photo (JPEG, PNG or WebP)"),
    x: int = Query(..., description="Column, 0-based"),
    y: int = Query(..., description="Row, 0-based")
) -> ColorPickResponse:
    request_id = generate_request_id("pick")
    rgba = await _read_upload(file, request_id)
    height, width = rgba.shape[:2]

    try:
        hex_color = pick_color_at_point(rgba, width, height, x, y)
    except CoordinateOutOfBoundsError as e:
        get_metrics().increment_failure_count("out_of_bounds")
        raise HTTPException(status_code=422, detail=str(e))

    logger.debug(f"Picked {hex_color} at ({x}, {y})", extra={"request_id": request_id})
    return ColorPickResponse(x=x, y=y, hex=hex_color)


@router.post("/colors/harmony",
             response_model=HarmonyResponse,
             summary="Classify the color harmony of a set of colors")
async def color_harmony(body: ColorsRequest) -> HarmonyResponse:
    request_id = generate_request_id("harmony")
    result = analyze_color_harmony(body.colors)

    get_metrics().increment_harmony_count(result.type)
    logger.info(f"Harmony {result.type} ({result.confidence:.2f}) for {len(body.colors)} colors",
                extra={"request_id": request_id})
    return _harmony_response(result)


@router.post("/colors/analyze",
             response_model=ColorAnalysisResponse,
             summary="Primary color, harmony and contrast metrics of a look")
async def color_analysis(body: ColorsRequest) -> ColorAnalysisResponse:
    request_id = generate_request_id("analyze")
    analysis = analyze_colors(body.colors)

    swatch_b64 = None
    if body.include_swatch and body.colors:
        palette = [analysis.primary] + analysis.secondary
        try:
            swatch_b64 = render_swatch_strip(palette, highlight_index=0)
        except (ValueError, RuntimeError) as e:
            logger.warning(f"Swatch generation failed: {e}", extra={"request_id": request_id})

    get_metrics().increment_harmony_count(analysis.harmony.type)
    logger.info(f"Analyzed {len(body.colors)} colors, primary {analysis.primary}",
                extra={"request_id": request_id})

    return ColorAnalysisResponse(
        primary=analysis.primary,
        secondary=analysis.secondary,
        harmony=_harmony_response(analysis.harmony),
        contrast=analysis.contrast,
        saturation=analysis.saturation,
        brightness=analysis.brightness,
        swatch_png_b64=swatch_b64,
    )


@router.post("/colors/contrast",
             response_model=ContrastResponse,
             summary="WCAG contrast ratio between two colors")
async def color_contrast(body: ContrastRequest) -> ContrastResponse:
    return ContrastResponse(
        color1=body.color1,
        color2=body.color2,
        ratio=calculate_contrast(body.color1, body.color2),
    )


@router.post("/outfit-analysis",
             response_model=OutfitAnalysisResponse,
             responses={**UPLOAD_ERRORS, 502: {"model": ErrorResponse, "description": "Analysis service failed"}},
             summary="Analyze a full-body outfit photo",
             description="Forwards the photo to the outfit analysis service and normalizes its reply")
async def outfit_analysis(
    file: UploadFile = File(..., description="Full-body photo (JPEG, PNG or WebP)")
) -> OutfitAnalysisResponse:
    request_id = generate_request_id("outfit")
    validate_file_upload(file)
    image_bytes = await file.read()

    if len(image_bytes) > config.MAX_FILE_MB * 1024 * 1024:
        raise HTTPException(status_code=413, detail=f"File too large. Maximum size: {config.MAX_FILE_MB}MB")

    start_time = time.time()
    try:
        summary = await run_in_threadpool(
            get_outfit_client().analyze_outfit,
            image_bytes,
            file.filename or "outfit.jpg",
            file.content_type or "image/jpeg",
        )
    except OutfitAnalysisError as e:
        logger.error(f"Outfit analysis failed: {e}", extra={"request_id": request_id})
        get_metrics().increment_failure_count("outfit_analysis")
        raise HTTPException(status_code=502, detail=f"Outfit analysis service failed: {e}")

    get_metrics().record_timing("outfit_analysis", (time.time() - start_time) * 1000)

    try:
        response = OutfitAnalysisResponse(**summary)
    except ValidationError as e:
        logger.error(f"Outfit analysis reply does not fit the response model: {e}",
                     extra={"request_id": request_id})
        get_metrics().increment_failure_count("outfit_analysis")
        raise HTTPException(status_code=502, detail="Outfit analysis service returned an unusable reply")

    logger.info("Outfit analysis complete", extra={"request_id": request_id})
    return response
