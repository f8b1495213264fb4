import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.concurrency import run_in_threadpool

from app.api.deps import get_settings, get_vision_client
from app.config import Settings
from app.schemas.analysis import AnalysisResponse, AnalyzeImageRequest, AnalyzeTextRequest
from app.services.vision import (
    InvalidUpstreamPayload,
    VisionClient,
    VisionNotConfigured,
    VisionProviderError,
)
from inspection import ScoreResult, analyze_extraction, analyze_text
from inspection.ocr import OCRUnavailableError, read_sheet_text

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_response(result: ScoreResult) -> AnalysisResponse:
    return AnalysisResponse.model_validate(result.to_dict())


@router.post("", response_model=AnalysisResponse)
async def analyze_image_url(
    payload: AnalyzeImageRequest,
    vision: VisionClient = Depends(get_vision_client),
):
    image_url = (payload.image_url or "").strip()
    if not image_url:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="image_url is required")

    try:
        extracted = await vision.extract_sheet(image_url)
    except VisionNotConfigured:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "Missing OPENAI_API_KEY",
                "hint": "Set OPENAI_API_KEY in the environment or .env file",
            },
        )
    except InvalidUpstreamPayload as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"error": "Invalid upstream payload", "detail": str(exc)},
        )
    except VisionProviderError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"error": str(exc), "detail": exc.detail},
        )

    return _to_response(analyze_extraction(extracted))


@router.post("/text", response_model=AnalysisResponse)
async def analyze_raw_text(payload: AnalyzeTextRequest):
    return _to_response(analyze_text(payload.text))


@router.post("/upload", response_model=AnalysisResponse)
async def analyze_upload(
    file: UploadFile = File(...),
    app_settings: Settings = Depends(get_settings),
):
    data = await file.read()
    await file.close()
    max_bytes = app_settings.UPLOAD_MAX_SIZE_MB * 1024 * 1024
    if len(data) > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="File too large",
        )

    try:
        text = await run_in_threadpool(read_sheet_text, data, app_settings.OCR_LANG)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except OCRUnavailableError as exc:
        logger.warning("OCR unavailable for upload %s: %s", file.filename, exc)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="OCR engine unavailable")

    return _to_response(analyze_text(text))
