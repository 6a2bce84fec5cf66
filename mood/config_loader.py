"""
Configuration Loader for Mood Detection Service

This module loads configuration from JSON file and provides fallback defaults.
"""

import json
import os
import logging
from typing import Dict, Any, Optional

from mood.models import ConsensusConfig

logger = logging.getLogger(__name__)

# Default configuration (used as fallback)
DEFAULT_CONFIG = {
    "model_endpoints": [
        "https://api-inference.huggingface.co/models/trpakov/vit-face-expression",
        "https://api-inference.huggingface.co/models/Sanster/liteface_emotion",
        "https://api-inference.huggingface.co/models/dima806/facial_emotions_image_detection"
    ],
    "model_timeout_seconds": 15.0,
    "early_stop_confidence": 0.8,
    "consensus": {
        "default_mood": "Calm",
        "ensemble_mean_basis": "total",
        "consensus_fraction": 0.5,
        "consensus_boost": 1.1,
        "consensus_confidence_cap": 0.95,
        "disagreement_penalty": 0.85,
        "max_confidence": 0.99
    },
    "simulation": {
        "weights": {
            "happy": 0.20,
            "sad": 0.20,
            "neutral": 0.25,
            "surprised": 0.15,
            "angry": 0.10,
            "fear": 0.10
        },
        "min_confidence": 0.75,
        "max_confidence": 0.95
    }
}

# Cache for loaded config
_config_cache: Optional[Dict[str, Any]] = None


def load_config(config_path: str = None) -> Dict[str, Any]:
    """
    Load configuration from JSON file.

    Args:
        config_path: Path to config file. If None, uses default path relative to this module
            and caches the result.

    Returns:
        Configuration dictionary. Returns default config if file not found or invalid.
    """
    global _config_cache

    use_cache = config_path is None
    if use_cache and _config_cache is not None:
        return _config_cache

    if config_path is None:
        module_dir = os.path.dirname(os.path.abspath(__file__))
        config_path = os.path.join(module_dir, "config.json")

    try:
        if os.path.exists(config_path):
            with open(config_path, 'r', encoding='utf-8') as f:
                config = json.load(f)
            logger.info(f"Loaded configuration from {config_path}")
        else:
            logger.warning(f"Config file not found at {config_path}, using default configuration")
            config = DEFAULT_CONFIG
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in config file {config_path}: {e}. Using default configuration.")
        config = DEFAULT_CONFIG
    except (OSError, ValueError) as e:
        logger.error(f"Error loading config file {config_path}: {e}. Using default configuration.")
        config = DEFAULT_CONFIG

    if use_cache:
        _config_cache = config
    return config


def get_consensus_config(config: Dict[str, Any] = None) -> ConsensusConfig:
    """
    Build the engine configuration from the "consensus" section.

    Keys missing from the section keep their built-in defaults.

    Args:
        config: Full configuration dictionary. If None, uses load_config().

    Returns:
        ConsensusConfig instance
    """
    config = config if config is not None else load_config()
    section = config.get("consensus", {}) or {}
    return ConsensusConfig(**section)
