"""
Activity Logger Utility

Provides activity logging for the mood detection service.
Logs are written to JSONL files for easy parsing and later review.
"""

import json
import os
import logging
import threading
from datetime import datetime
from typing import Dict, Optional, Any, List
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_LOG_DIR = "data/activity_logs"

# Lock for thread-safe file writing
_mood_lock = threading.Lock()


def get_mood_log_dir() -> str:
    """Mood log directory, under ACTIVITY_LOG_DIR when set."""
    base_dir = os.getenv("ACTIVITY_LOG_DIR", DEFAULT_LOG_DIR)
    return os.path.join(base_dir, "mood")


def _get_log_file(log_dir: str, prefix: str) -> str:
    """
    Get log file path for today's date.

    Args:
        log_dir: Log directory path
        prefix: File prefix (e.g., "mood")

    Returns:
        Path to log file
    """
    os.makedirs(log_dir, exist_ok=True)
    today = datetime.now().strftime("%Y%m%d")
    return os.path.join(log_dir, f"{prefix}_activity_{today}.jsonl")


def log_mood_activity(
    timestamp: datetime,
    status: str,  # "success", "simulated", "error"
    mood: Optional[str] = None,
    confidence: Optional[float] = None,
    raw_emotion: Optional[str] = None,
    processing_method: Optional[str] = None,
    model_results: Optional[List[Dict[str, Any]]] = None,
    error: Optional[str] = None,
    duration_seconds: Optional[float] = None
):
    """
    Log mood detection activity.

    Args:
        timestamp: Request timestamp
        status: Activity status ("success", "simulated", "error")
        mood: Reported mood category
        confidence: Reported confidence
        raw_emotion: Raw emotion label behind the mood
        processing_method: How the result was produced
        model_results: Per-model summaries (model_index, emotion, confidence)
        error: Error message (if failed)
        duration_seconds: Processing duration in seconds
    """
    log_entry = {
        "timestamp": timestamp.isoformat(),
        "logged_at": datetime.now().isoformat(),
        "status": status,
        "mood": mood,
        "confidence": confidence,
        "raw_emotion": raw_emotion,
        "processing_method": processing_method,
        "model_results": model_results or [],
        "models_used": len(model_results or []),
        "error": error,
        "duration_seconds": duration_seconds
    }

    try:
        log_file = _get_log_file(get_mood_log_dir(), "mood")
        with _mood_lock:
            with open(log_file, 'a', encoding='utf-8') as f:
                f.write(json.dumps(log_entry, ensure_ascii=False) + '\n')
        logger.debug(f"Logged mood activity to {log_file}")
    except OSError as e:
        logger.warning(f"Failed to log mood activity: {e}", exc_info=True)


def read_activity_logs(log_dir: Optional[str] = None, limit: int = 100) -> List[Dict[str, Any]]:
    """
    Read activity logs from directory.

    Args:
        log_dir: Log directory path (defaults to the mood log directory)
        limit: Maximum number of entries to return

    Returns:
        List of log entries (newest first)
    """
    log_dir = log_dir or get_mood_log_dir()
    if not os.path.exists(log_dir):
        return []

    all_entries = []
    for log_file in Path(log_dir).glob("*.jsonl"):
        try:
            with open(log_file, 'r', encoding='utf-8') as f:
                for line in f:
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        all_entries.append(json.loads(line))
                    except json.JSONDecodeError:
                        continue
        except OSError as e:
            logger.warning(f"Error reading log file {log_file}: {e}")
            continue

    def get_sort_key(entry):
        try:
            return datetime.fromisoformat(entry.get("timestamp", "").replace('Z', '+00:00')).timestamp()
        except (ValueError, AttributeError):
            return 0

    all_entries.sort(key=get_sort_key, reverse=True)
    return all_entries[:limit]
