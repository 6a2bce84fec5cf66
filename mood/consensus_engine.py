"""
Consensus Engine

Single entry point used by the request layer to turn per-model emotion
results into one calibrated decision. Pure and synchronous: no I/O, no
shared mutable state, safe to call concurrently.
"""

import logging
import math
from typing import Optional, Sequence

from mood.bias_correction import CryingBiasCorrector
from mood.consensus_voter import ConsensusVoter
from mood.models import ConsensusConfig, ConsensusResult, ModelResult
from mood.mood_mapper import MoodMapper

logger = logging.getLogger(__name__)


class ConsensusEngine:
    """Composes crying-bias correction and mood voting."""

    def __init__(self, config: Optional[ConsensusConfig] = None):
        self.config = config or ConsensusConfig()
        self.mapper = MoodMapper(self.config.mood_table, self.config.default_mood)
        self.corrector = CryingBiasCorrector(
            single_thresholds=self.config.single_bias,
            ensemble_thresholds=self.config.ensemble_bias,
            mean_basis=self.config.ensemble_mean_basis
        )
        self.voter = ConsensusVoter(
            mapper=self.mapper,
            corrector=self.corrector,
            consensus_fraction=self.config.consensus_fraction,
            consensus_boost=self.config.consensus_boost,
            consensus_confidence_cap=self.config.consensus_confidence_cap,
            disagreement_penalty=self.config.disagreement_penalty
        )

    def resolve(
        self,
        best_result: Optional[ModelResult],
        all_results: Sequence[ModelResult]
    ) -> ConsensusResult:
        """
        Resolve the final emotion and confidence for one request.

        The caller must supply at least one ModelResult. When best_result is
        None the first entry of all_results is used.

        Args:
            best_result: Preferred single result (first successful model)
            all_results: Every successful model result

        Returns:
            ConsensusResult with confidence clamped to [0, max_confidence]
            (a non-finite confidence becomes 0.0)

        Raises:
            ValueError: If no model result was supplied at all
        """
        all_results = list(all_results)
        if best_result is None:
            if not all_results:
                raise ValueError("Cannot resolve consensus without any model results")
            best_result = all_results[0]

        result = self.voter.vote(best_result, all_results)
        confidence = result.confidence if math.isfinite(result.confidence) else 0.0
        confidence = min(max(confidence, 0.0), self.config.max_confidence)

        logger.info(
            f"Consensus from {len(all_results) or 1} model(s): '{result.emotion}' "
            f"(confidence: {confidence:.3f})"
        )

        return ConsensusResult(
            emotion=result.emotion,
            confidence=confidence,
            distribution=result.distribution
        )

    def map_mood(self, label: str):
        """Map a raw label with this engine's mood table."""
        return self.mapper.map_mood(label)


_default_engine = ConsensusEngine()


def resolve_consensus(
    best_result: Optional[ModelResult],
    all_results: Sequence[ModelResult],
    config: Optional[ConsensusConfig] = None
) -> ConsensusResult:
    """
    Resolve consensus with the built-in defaults, or with config if given.

    See ConsensusEngine.resolve().
    """
    engine = ConsensusEngine(config) if config is not None else _default_engine
    return engine.resolve(best_result, all_results)
