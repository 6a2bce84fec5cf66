"""
API Layer for Mood Detection Service

This module provides FastAPI endpoints for the mood detection service.
"""

import logging
from datetime import datetime, timezone
from fastapi import APIRouter, HTTPException
from pydantic import ValidationError

from mood.models import DetectMoodRequest, MoodDetectionResponse, HealthResponse
from mood.orchestrator import process_mood_detection, get_hf_token, ServiceConfigurationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["mood"])


@router.get("/test", response_model=HealthResponse)
async def health():
    """Health check reporting whether the classifier token is configured."""
    logger.info("GET /api/test - Health check called")
    return HealthResponse(
        timestamp=datetime.now(timezone.utc).isoformat(),
        hugging_face_configured=bool(get_hf_token())
    )


@router.post("/detectMood", response_model=MoodDetectionResponse)
async def detect_mood(request: DetectMoodRequest):
    """
    Detect the mood shown in a base64 encoded image.

    This endpoint:
    1. Queries the configured emotion classifiers (stopping early on a confident answer)
    2. Resolves a consensus emotion with crying-bias correction
    3. Maps the emotion to a mood category
    4. Falls back to a simulated result if every classifier failed

    Args:
        request: DetectMoodRequest with the image payload

    Returns:
        MoodDetectionResponse
    """
    logger.info("POST /api/detectMood - Endpoint called")

    try:
        return await process_mood_detection(request)
    except ValidationError as e:
        # Server-built response failed validation; not the caller's fault
        logger.error(f"POST /api/detectMood - Response validation error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
    except ValueError as e:
        logger.error(f"POST /api/detectMood - Validation error: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except ServiceConfigurationError as e:
        logger.error(f"POST /api/detectMood - Configuration error: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        logger.error(f"POST /api/detectMood - Exception: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")
