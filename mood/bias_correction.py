"""
Crying Bias Correction

Facial expression classifiers tend to score a crying face as "neutral" with
only a small share of "sad" mass. This module detects that pattern, for one
model result or averaged across every model consulted for a request, and
forces the outcome to "sad" when it is found.

Per-model thresholds are looser than the ensemble ones; the ensemble check
works on averaged scores.
"""

import logging
from typing import Dict, List, Optional, Sequence

from mood.models import (
    ConsensusResult,
    CryingBiasThresholds,
    EmotionScore,
    ModelResult,
    default_ensemble_thresholds,
    default_single_thresholds,
)

logger = logging.getLogger(__name__)

# Emotions averaged by the ensemble check
EMOTIONS_OF_INTEREST = ("sad", "fear", "neutral", "happy")

OVERRIDE_EMOTION = "sad"


def find_score(distribution: Sequence[EmotionScore], label: str) -> Optional[float]:
    """Score of the first entry matching label (case-insensitive), or None."""
    wanted = label.lower()
    for entry in distribution:
        if entry.label.lower() == wanted:
            return entry.score
    return None


def emotion_score(distribution: Sequence[EmotionScore], label: str) -> float:
    """Score for label in distribution, 0.0 when the label is absent."""
    score = find_score(distribution, label)
    return score if score is not None else 0.0


def detect_crying(sad: float, fear: float, happy: float, thresholds: CryingBiasThresholds) -> Optional[str]:
    """
    Evaluate the crying-bias rules.

    Returns:
        Description of the rule that fired, or None if no rule fired
    """
    t = thresholds
    if sad > t.sad_threshold and happy < t.happy_ceiling:
        return f"sad {sad:.3f} > {t.sad_threshold} with happy {happy:.3f} < {t.happy_ceiling}"
    if sad > t.strong_sad_threshold:
        return f"sad {sad:.3f} > {t.strong_sad_threshold}"
    if fear > t.fear_threshold and sad > t.fear_sad_threshold and happy < t.fear_happy_ceiling:
        return (f"fear {fear:.3f} > {t.fear_threshold} with sad {sad:.3f} > {t.fear_sad_threshold} "
                f"and happy {happy:.3f} < {t.fear_happy_ceiling}")
    return None


class CryingBiasCorrector:
    """Overrides over-neutral results that look like crying."""

    def __init__(
        self,
        single_thresholds: Optional[CryingBiasThresholds] = None,
        ensemble_thresholds: Optional[CryingBiasThresholds] = None,
        mean_basis: str = "total"
    ):
        """
        Args:
            single_thresholds: Rules applied to one model's distribution
            ensemble_thresholds: Rules applied to the averaged distribution
            mean_basis: "total" divides by the number of models, "reporting" by
                the number of models whose distribution contains the label
        """
        if mean_basis not in ("total", "reporting"):
            raise ValueError(f"Unknown mean basis '{mean_basis}' (expected 'total' or 'reporting')")
        self.single_thresholds = single_thresholds or default_single_thresholds()
        self.ensemble_thresholds = ensemble_thresholds or default_ensemble_thresholds()
        self.mean_basis = mean_basis

    def correct_single(self, result: ModelResult) -> ConsensusResult:
        """
        Check one model result for the crying pattern.

        Args:
            result: Result of a single classifier

        Returns:
            Forced "sad" result when a rule fires, otherwise the input's own
            emotion, confidence and distribution
        """
        distribution = result.distribution
        sad = emotion_score(distribution, "sad")
        fear = emotion_score(distribution, "fear")
        happy = emotion_score(distribution, "happy")

        reason = detect_crying(sad, fear, happy, self.single_thresholds)
        if reason:
            logger.info(f"Crying bias detected in model {result.model_index}: {reason}")
            return ConsensusResult(
                emotion=OVERRIDE_EMOTION,
                confidence=self.single_thresholds.override_confidence,
                distribution=distribution
            )

        return ConsensusResult(
            emotion=result.emotion,
            confidence=result.confidence,
            distribution=distribution
        )

    def ensemble_means(self, results: Sequence[ModelResult]) -> Dict[str, float]:
        """
        Average score per emotion of interest across results.

        Callers must pass at least one result.
        """
        means = {}
        for label in EMOTIONS_OF_INTEREST:
            scores = [find_score(r.distribution, label) for r in results]
            reported: List[float] = [s for s in scores if s is not None]
            if self.mean_basis == "reporting":
                means[label] = sum(reported) / len(reported) if reported else 0.0
            else:
                means[label] = sum(reported) / len(results)
        return means

    def correct_ensemble(
        self,
        results: Sequence[ModelResult],
        selected: Optional[ModelResult] = None
    ) -> Optional[ConsensusResult]:
        """
        Check the averaged distribution of all results for the crying pattern.

        Only call with two or more results; single results go through
        correct_single().

        Args:
            results: Every model result collected for the request
            selected: Result whose distribution is reported on override
                (defaults to the first result)

        Returns:
            Forced "sad" result when a rule fires, None otherwise
        """
        means = self.ensemble_means(results)
        logger.debug(
            f"Ensemble means over {len(results)} models ({self.mean_basis}): "
            + ", ".join(f"{label}={value:.3f}" for label, value in means.items())
        )

        reason = detect_crying(means["sad"], means["fear"], means["happy"], self.ensemble_thresholds)
        if not reason:
            return None

        logger.info(f"Crying bias detected across {len(results)} models: {reason}")
        selected = selected if selected is not None else results[0]
        return ConsensusResult(
            emotion=OVERRIDE_EMOTION,
            confidence=self.ensemble_thresholds.override_confidence,
            distribution=selected.distribution
        )
