"""
Orchestrator Layer for Mood Detection Service

This module orchestrates the complete mood detection flow:
1. Validate request and credentials
2. Decode the base64 image payload
3. Query the classifiers (sequential, early stop)
4. Fall back to simulation if every classifier failed (or on any unexpected error)
5. Resolve consensus and map the mood
6. Log activity
7. Return response
"""

import base64
import binascii
import logging
import os
import re
from datetime import datetime
from typing import Optional, Sequence

from mood.config_loader import get_consensus_config
from mood.consensus_engine import ConsensusEngine
from mood.model_clients import EmotionModelClient, build_clients, collect_model_results
from mood.models import DetectMoodRequest, MoodDetectionResponse
from mood.simulation import generate_simulated_result
from utils import activity_logger

logger = logging.getLogger(__name__)

PROCESSING_METHOD = "Multi-Model AI Detection"

_DATA_URL_PREFIX = re.compile(r"^data:image/[a-zA-Z0-9.+-]+;base64,")
_WHITESPACE = re.compile(r"\s+")
_URLSAFE_ALPHABET = str.maketrans("-_", "+/")

_engine = ConsensusEngine(get_consensus_config())


class ServiceConfigurationError(Exception):
    """Raised when the service lacks credentials needed to reach the classifiers."""


def get_hf_token() -> Optional[str]:
    return os.getenv("HF_TOKEN")


def decode_image(image: str) -> bytes:
    """
    Decode a base64 image, stripping an optional data URL prefix.

    Line-wrapped (MIME), URL-safe and unpadded encodings are accepted.

    Raises:
        ValueError: If the payload is not valid base64
    """
    payload = _DATA_URL_PREFIX.sub("", image.strip())
    payload = _WHITESPACE.sub("", payload).translate(_URLSAFE_ALPHABET)
    payload += "=" * (-len(payload) % 4)
    try:
        image_bytes = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        logger.error(f"Invalid base64 image data: {e}")
        raise ValueError("Invalid image data") from e
    if not image_bytes:
        raise ValueError("Invalid image data")
    return image_bytes


async def process_mood_detection(
    request: DetectMoodRequest,
    clients: Optional[Sequence[EmotionModelClient]] = None,
    engine: Optional[ConsensusEngine] = None
) -> MoodDetectionResponse:
    """
    Process a mood detection request.

    Args:
        request: DetectMoodRequest with the base64 image
        clients: Model clients override (defaults to the configured endpoints)
        engine: Consensus engine override

    Returns:
        MoodDetectionResponse from the classifiers, or a simulated one if all
        failed or detection broke unexpectedly

    Raises:
        ValueError: If the image is missing or undecodable
        ServiceConfigurationError: If HF_TOKEN is not configured
    """
    start_time = datetime.now()
    engine = engine or _engine

    if not request.image:
        raise ValueError("No image provided")

    if clients is None:
        token = get_hf_token()
        if not token:
            logger.error("HF_TOKEN not found in environment variables")
            raise ServiceConfigurationError("AI service not properly configured")
        clients = build_clients(token)

    image_bytes = decode_image(request.image)
    logger.info(f"Starting mood detection with {len(clients)} models ({len(image_bytes)} bytes)")

    try:
        results = await collect_model_results(image_bytes, clients)

        if not results:
            logger.warning("All AI models failed, using simulation fallback")
            response = generate_simulated_result()
            activity_logger.log_mood_activity(
                timestamp=start_time,
                status="simulated",
                mood=response.mood.value,
                confidence=response.confidence,
                raw_emotion=response.raw_emotion,
                processing_method=response.processing_method,
                duration_seconds=(datetime.now() - start_time).total_seconds()
            )
            return response

        consensus = engine.resolve(results[0], results)
        mood = engine.map_mood(consensus.emotion)

        response = MoodDetectionResponse(
            mood=mood,
            confidence=consensus.confidence,
            raw_emotion=consensus.emotion,
            all_emotions=consensus.distribution,
            ai_models_used=len(results),
            processing_method=PROCESSING_METHOD
        )

        logger.info(f"Final result: {mood.value} ({consensus.confidence * 100:.1f}%) "
                    f"based on emotion '{consensus.emotion}'")

        activity_logger.log_mood_activity(
            timestamp=start_time,
            status="success",
            mood=mood.value,
            confidence=consensus.confidence,
            raw_emotion=consensus.emotion,
            processing_method=PROCESSING_METHOD,
            model_results=[
                {"model_index": r.model_index, "emotion": r.emotion, "confidence": r.confidence}
                for r in results
            ],
            duration_seconds=(datetime.now() - start_time).total_seconds()
        )
        return response

    except Exception as e:
        logger.error(f"Error processing mood detection, using simulation fallback: {e}", exc_info=True)
        activity_logger.log_mood_activity(
            timestamp=start_time,
            status="error",
            error=str(e),
            duration_seconds=(datetime.now() - start_time).total_seconds()
        )
        return generate_simulated_result()
