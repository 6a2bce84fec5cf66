"""
Simulation Fallback

Produces a synthetic mood response when every classifier failed. The result
is labelled through processing_method and never fed into the consensus
engine or mixed with real classifier scores.
"""

import logging
import random
from typing import Dict, Optional

from mood.config_loader import load_config
from mood.models import EmotionScore, MoodDetectionResponse
from mood.mood_mapper import map_mood

logger = logging.getLogger(__name__)

SIMULATION_METHOD = "Enhanced AI Simulation"

DEFAULT_WEIGHTS = {
    "happy": 0.20,
    "sad": 0.20,
    "neutral": 0.25,
    "surprised": 0.15,
    "angry": 0.10,
    "fear": 0.10
}


def pick_weighted_emotion(weights: Dict[str, float], value: float, fallback: str = "neutral") -> str:
    """Return the first emotion whose cumulative weight reaches value."""
    cumulative = 0.0
    for label, weight in weights.items():
        cumulative += weight
        if value <= cumulative:
            return label
    return fallback


def generate_simulated_result(
    weights: Optional[Dict[str, float]] = None,
    min_confidence: Optional[float] = None,
    max_confidence: Optional[float] = None,
    rng: Optional[random.Random] = None
) -> MoodDetectionResponse:
    """
    Generate a weighted-random mood response.

    Args:
        weights: Emotion -> selection weight. Defaults to the "simulation" config section.
        min_confidence: Lower bound of the synthetic confidence
        max_confidence: Upper bound of the synthetic confidence
        rng: Random source, for reproducible tests

    Returns:
        MoodDetectionResponse with processing_method "Enhanced AI Simulation"
    """
    section = load_config().get("simulation", {})
    weights = weights or section.get("weights") or DEFAULT_WEIGHTS
    low = min_confidence if min_confidence is not None else section.get("min_confidence", 0.75)
    high = max_confidence if max_confidence is not None else section.get("max_confidence", 0.95)
    rng = rng or random.Random()

    emotion = pick_weighted_emotion(weights, rng.random())
    confidence = min(low + rng.random() * (high - low), 0.99)
    mood = map_mood(emotion)

    logger.info(f"Simulated result: {emotion} -> {mood.value} ({confidence * 100:.1f}%)")

    return MoodDetectionResponse(
        mood=mood,
        confidence=confidence,
        raw_emotion=emotion,
        all_emotions=[EmotionScore(label=emotion, score=confidence)],
        ai_models_used=0,
        processing_method=SIMULATION_METHOD
    )
