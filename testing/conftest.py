import os
import sys

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from mood.models import EmotionScore, ModelResult


def make_result(index: int, emotion: str, confidence: float, **scores: float) -> ModelResult:
    """
    Build a ModelResult with minimal boilerplate.

    The distribution holds the top emotion at its confidence plus any extra
    label=score pairs given as keyword arguments.
    """
    distribution = {emotion: confidence}
    distribution.update(scores)
    return ModelResult(
        model_index=index,
        emotion=emotion,
        confidence=confidence,
        distribution=[EmotionScore(label=label, score=score) for label, score in distribution.items()]
    )


@pytest.fixture(autouse=True)
def activity_log_dir(tmp_path, monkeypatch):
    """Keep activity JSONL files out of the working tree."""
    log_dir = tmp_path / "activity_logs"
    monkeypatch.setenv("ACTIVITY_LOG_DIR", str(log_dir))
    return log_dir
