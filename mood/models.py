"""
Pydantic Models for Mood Detection Service

This module defines the data structures exchanged between the model clients,
the consensus engine and the API layer, plus the engine configuration.
"""

from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict


class MoodCategory(str, Enum):
    """User-facing mood categories reported by the service."""
    HAPPY = "Happy"
    CALM = "Calm"
    MELANCHOLIC = "Melancholic"
    ENERGETIC = "Energetic"
    EXCITED = "Excited"
    ROMANTIC = "Romantic"


class EmotionScore(BaseModel):
    """One label/score pair from a classifier distribution."""
    model_config = ConfigDict(frozen=True)

    label: str
    score: float  # intended in [0, 1], not enforced by producers


class ModelResult(BaseModel):
    """Top emotion and full distribution returned by one classifier."""
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_index: int
    emotion: str
    confidence: float
    distribution: List[EmotionScore] = Field(default_factory=list)


class ConsensusResult(BaseModel):
    """Decision of the consensus engine, prior to mood mapping."""
    model_config = ConfigDict(frozen=True)

    emotion: str
    confidence: float
    distribution: List[EmotionScore] = Field(default_factory=list)


# Raw classifier label -> mood category
DEFAULT_MOOD_TABLE: Dict[str, MoodCategory] = {
    # Happy
    "happy": MoodCategory.HAPPY,
    "joy": MoodCategory.HAPPY,
    "pleasure": MoodCategory.HAPPY,
    # Calm / neutral
    "neutral": MoodCategory.CALM,
    "calm": MoodCategory.CALM,
    "peaceful": MoodCategory.CALM,
    # Sad, crying included
    "sad": MoodCategory.MELANCHOLIC,
    "sadness": MoodCategory.MELANCHOLIC,
    "sorrow": MoodCategory.MELANCHOLIC,
    "grief": MoodCategory.MELANCHOLIC,
    "crying": MoodCategory.MELANCHOLIC,
    "tears": MoodCategory.MELANCHOLIC,
    "weeping": MoodCategory.MELANCHOLIC,
    # Angry -> energetic
    "angry": MoodCategory.ENERGETIC,
    "anger": MoodCategory.ENERGETIC,
    "rage": MoodCategory.ENERGETIC,
    "mad": MoodCategory.ENERGETIC,
    # Surprise -> excited
    "surprised": MoodCategory.EXCITED,
    "surprise": MoodCategory.EXCITED,
    "amazement": MoodCategory.EXCITED,
    "wonder": MoodCategory.EXCITED,
    # Fear and disgust are negative, grouped with sad
    "fear": MoodCategory.MELANCHOLIC,
    "scared": MoodCategory.MELANCHOLIC,
    "afraid": MoodCategory.MELANCHOLIC,
    "disgust": MoodCategory.MELANCHOLIC,
    "disgusted": MoodCategory.MELANCHOLIC,
    # Love
    "love": MoodCategory.ROMANTIC,
    "affection": MoodCategory.ROMANTIC,
    "romantic": MoodCategory.ROMANTIC,
}


class CryingBiasThresholds(BaseModel):
    """
    Thresholds for one crying-bias check.

    An override fires when any rule holds:
        sad > sad_threshold and happy < happy_ceiling
        sad > strong_sad_threshold
        fear > fear_threshold and sad > fear_sad_threshold and happy < fear_happy_ceiling
    """
    sad_threshold: float
    happy_ceiling: float
    strong_sad_threshold: float
    fear_threshold: float
    fear_sad_threshold: float
    fear_happy_ceiling: float
    override_confidence: float


def default_single_thresholds() -> CryingBiasThresholds:
    return CryingBiasThresholds(
        sad_threshold=0.2,
        happy_ceiling=0.1,
        strong_sad_threshold=0.4,
        fear_threshold=0.15,
        fear_sad_threshold=0.1,
        fear_happy_ceiling=0.05,
        override_confidence=0.80,
    )


def default_ensemble_thresholds() -> CryingBiasThresholds:
    return CryingBiasThresholds(
        sad_threshold=0.15,
        happy_ceiling=0.1,
        strong_sad_threshold=0.25,
        fear_threshold=0.1,
        fear_sad_threshold=0.1,
        fear_happy_ceiling=0.05,
        override_confidence=0.85,
    )


class ConsensusConfig(BaseModel):
    """Tunable values consumed by the consensus engine."""
    mood_table: Dict[str, MoodCategory] = Field(default_factory=lambda: dict(DEFAULT_MOOD_TABLE))
    default_mood: MoodCategory = MoodCategory.CALM
    single_bias: CryingBiasThresholds = Field(default_factory=default_single_thresholds)
    ensemble_bias: CryingBiasThresholds = Field(default_factory=default_ensemble_thresholds)
    # "total": divide by number of models; "reporting": by models that reported the label
    ensemble_mean_basis: str = Field(default="total", pattern="^(total|reporting)$")
    consensus_fraction: float = Field(default=0.5, gt=0.0, le=1.0)
    consensus_boost: float = 1.1
    consensus_confidence_cap: float = 0.95
    disagreement_penalty: float = 0.85
    max_confidence: float = 0.99


class DetectMoodRequest(BaseModel):
    """Request model for mood detection endpoint."""
    image: Optional[str] = Field(default=None, description="Base64 encoded image, optionally a data URL")


class MoodDetectionResponse(BaseModel):
    """Response model for mood detection endpoint (camelCase on the wire)."""
    model_config = ConfigDict(populate_by_name=True)

    mood: MoodCategory
    confidence: float = Field(ge=0.0, le=0.99, description="Calibrated confidence")
    raw_emotion: str = Field(alias="rawEmotion")
    all_emotions: List[EmotionScore] = Field(default_factory=list, alias="allEmotions")
    ai_models_used: int = Field(default=0, alias="aiModelsUsed")
    processing_method: str = Field(alias="processingMethod")


class HealthResponse(BaseModel):
    """Response model for the API health check."""
    model_config = ConfigDict(populate_by_name=True)

    message: str = "VibeTunes API running"
    status: str = "connected"
    timestamp: str
    version: str = "1.0.0"
    hugging_face_configured: bool = Field(alias="huggingFaceConfigured")
    ai_mode: str = Field(default="Enhanced Multi-Model AI Detection", alias="aiMode")
