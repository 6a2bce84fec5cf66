"""
Consensus Voter

Majority voting over mapped mood categories when several classifiers
answered for the same image. Agreement earns a small confidence boost,
disagreement a penalty.
"""

import logging
import math
from collections import Counter
from fractions import Fraction
from typing import Optional, Sequence

from mood.bias_correction import CryingBiasCorrector
from mood.models import ConsensusResult, ModelResult
from mood.mood_mapper import MoodMapper

logger = logging.getLogger(__name__)


class ConsensusVoter:
    """Picks a result by majority agreement on mood category."""

    def __init__(
        self,
        mapper: Optional[MoodMapper] = None,
        corrector: Optional[CryingBiasCorrector] = None,
        consensus_fraction: float = 0.5,
        consensus_boost: float = 1.1,
        consensus_confidence_cap: float = 0.95,
        disagreement_penalty: float = 0.85
    ):
        self.mapper = mapper or MoodMapper()
        self.corrector = corrector or CryingBiasCorrector()
        self.consensus_fraction = consensus_fraction
        self.consensus_boost = consensus_boost
        self.consensus_confidence_cap = consensus_confidence_cap
        self.disagreement_penalty = disagreement_penalty

    def consensus_threshold(self, model_count: int) -> int:
        """Minimum number of agreeing models, never below one."""
        # Decimal fraction so 0.29 * 100 floors to 29, not 28
        return max(1, math.floor(Fraction(str(self.consensus_fraction)) * model_count))

    def vote(self, best_result: ModelResult, all_results: Sequence[ModelResult]) -> ConsensusResult:
        """
        Resolve one consensus result from the collected model results.

        Algorithm:
        1. With zero or one result, only the single-model crying check applies
        2. Ensemble crying check; an override skips voting
        3. Tally mapped moods (ties go to the first mood seen)
        4. If the top mood reaches the threshold, return its most confident
           result with boosted confidence
        5. Otherwise return best_result with a confidence penalty

        Args:
            best_result: Result preferred when there is no consensus
            all_results: Every successful model result, in query order

        Returns:
            ConsensusResult
        """
        if len(all_results) <= 1:
            return self.corrector.correct_single(best_result)

        override = self.corrector.correct_ensemble(all_results, selected=best_result)
        if override is not None:
            return override

        moods = [self.mapper.map_mood(result.emotion) for result in all_results]
        # Counter keeps first-seen order, max() keeps the first of equal counts
        mood_counts = Counter(moods)
        top_mood, top_count = max(mood_counts.items(), key=lambda item: item[1])
        threshold = self.consensus_threshold(len(all_results))

        logger.debug(f"Mood distribution: {dict((m.value, c) for m, c in mood_counts.items())}")

        if top_count >= threshold:
            agreeing = [r for r, m in zip(all_results, moods) if m == top_mood]
            chosen = max(agreeing, key=lambda r: r.confidence)
            confidence = min(chosen.confidence * self.consensus_boost, self.consensus_confidence_cap)
            logger.info(
                f"Consensus on {top_mood.value} ({top_count}/{len(all_results)} models, "
                f"threshold {threshold}): using model {chosen.model_index} '{chosen.emotion}'"
            )
            return ConsensusResult(
                emotion=chosen.emotion,
                confidence=confidence,
                distribution=chosen.distribution
            )

        logger.info(
            f"No consensus ({top_mood.value} {top_count}/{len(all_results)} < {threshold}), "
            f"penalizing best result '{best_result.emotion}'"
        )
        return ConsensusResult(
            emotion=best_result.emotion,
            confidence=best_result.confidence * self.disagreement_penalty,
            distribution=best_result.distribution
        )
