"""
Mood package for the mood detection service.

This package provides:
- API endpoints: POST /api/detectMood, GET /api/test
- Orchestrator: Coordinates the complete detection flow
- Model clients: HTTP clients for the image emotion classifiers
- Consensus engine: Crying-bias correction, mood voting and mood mapping
- Simulation: Fallback used when every classifier fails
"""

from .mood_mapper import map_mood
from .consensus_engine import ConsensusEngine, resolve_consensus

__all__ = [
    'map_mood',
    'ConsensusEngine',
    'resolve_consensus'
]
