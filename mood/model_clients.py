"""
Model Client Layer for Mood Detection Service

This module provides HTTP clients for the remote image emotion classifiers
and the sequential collection loop that queries them for one image.
Each client implements retry logic and graceful error handling: a failed
model yields None and never raises into the consensus engine.
"""

import httpx
import logging
import math
from typing import List, Optional, Any, Sequence

from mood.config_loader import load_config
from mood.models import EmotionScore, ModelResult

logger = logging.getLogger(__name__)

# Load configuration
_config = load_config()
_model_endpoints = _config.get("model_endpoints", [])
_timeout_config = _config.get("model_timeout_seconds", 15.0)
_early_stop_confidence = _config.get("early_stop_confidence", 0.8)


def parse_classifier_response(data: Any, model_index: int) -> Optional[ModelResult]:
    """
    Turn a classifier's JSON payload into a ModelResult.

    The payload is a list of {"label", "score"} objects. A batched payload
    (list holding one list) is unwrapped.

    Args:
        data: Decoded JSON response
        model_index: 1-based position of the model in the configured list

    Returns:
        ModelResult, or None if the payload is empty, malformed or holds
        NaN/infinite scores
    """
    if isinstance(data, list) and data and isinstance(data[0], list):
        data = data[0]
    if not isinstance(data, list) or not data:
        return None

    try:
        distribution = [EmotionScore(label=str(item["label"]), score=float(item["score"])) for item in data]
    except (KeyError, TypeError, ValueError) as e:
        logger.warning(f"Model {model_index} returned malformed scores: {e}")
        return None

    if not all(math.isfinite(entry.score) for entry in distribution):
        logger.warning(f"Model {model_index} returned non-finite scores")
        return None

    top = max(distribution, key=lambda entry: entry.score)
    return ModelResult(
        model_index=model_index,
        emotion=top.label,
        confidence=top.score,
        distribution=distribution
    )


class EmotionModelClient:
    """Client for one remote image emotion classifier."""

    def __init__(
        self,
        service_url: str,
        model_index: int,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize model client.

        Args:
            service_url: Inference endpoint of the model
            model_index: 1-based position of the model (for logging and results)
            token: Bearer token for the inference API
            timeout: Request timeout in seconds (defaults to config value)
            transport: Optional httpx transport override
        """
        self.service_url = service_url.rstrip("/")
        self.model_index = model_index
        self.token = token
        self.timeout = timeout or _timeout_config
        self.transport = transport
        self.service_name = f"Model{model_index}"

        logger.debug(f"{self.service_name} client initialized with URL: {self.service_url}")

    async def classify(self, image_bytes: bytes) -> Optional[ModelResult]:
        """
        Classify an image, retrying once on failure.

        Args:
            image_bytes: Raw decoded image

        Returns:
            ModelResult, or None if both attempts failed
        """
        result = await self._make_request(image_bytes)
        if result is not None:
            return result

        logger.info(f"Retrying {self.service_name} classification request...")
        result = await self._make_request(image_bytes)
        if result is not None:
            return result

        logger.warning(f"{self.service_name} classification failed after retry")
        return None

    async def _make_request(self, image_bytes: bytes) -> Optional[ModelResult]:
        """
        Make HTTP request to the classifier.

        Returns:
            ModelResult if successful, None on failure
        """
        headers = {"Content-Type": "application/octet-stream"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            timeout_config = httpx.Timeout(
                connect=5.0,
                read=self.timeout,
                write=5.0,
                pool=5.0
            )

            async with httpx.AsyncClient(timeout=timeout_config, transport=self.transport) as client:
                response = await client.post(self.service_url, content=image_bytes, headers=headers)
                response.raise_for_status()
                data = response.json()

            result = parse_classifier_response(data, self.model_index)
            if result is None:
                logger.warning(f"{self.service_name} returned no usable scores")
            return result

        except httpx.TimeoutException:
            logger.warning(f"{self.service_name} request timed out after {self.timeout}s")
            return None
        except httpx.HTTPStatusError as e:
            logger.warning(f"{self.service_name} returned HTTP {e.response.status_code}: {e}")
            return None
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"{self.service_name} request failed: {e}")
            return None


def build_clients(
    token: Optional[str],
    endpoints: Optional[Sequence[str]] = None,
    timeout: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> List[EmotionModelClient]:
    """Create one client per configured model endpoint, in order."""
    endpoints = endpoints if endpoints is not None else _model_endpoints
    return [
        EmotionModelClient(url, index + 1, token=token, timeout=timeout, transport=transport)
        for index, url in enumerate(endpoints)
    ]


async def collect_model_results(
    image_bytes: bytes,
    clients: Sequence[EmotionModelClient],
    early_stop_confidence: Optional[float] = None
) -> List[ModelResult]:
    """
    Query classifiers one after another for the same image.

    Stops as soon as a model reports a top-emotion confidence above
    early_stop_confidence. Failed models are skipped.

    Args:
        image_bytes: Raw decoded image
        clients: Model clients in query order
        early_stop_confidence: Stop threshold (defaults to config value)

    Returns:
        Successful ModelResults in query order (possibly empty)
    """
    stop_at = early_stop_confidence if early_stop_confidence is not None else _early_stop_confidence
    results: List[ModelResult] = []

    for client in clients:
        logger.info(f"Trying AI model {client.model_index}/{len(clients)}...")
        result = await client.classify(image_bytes)
        if result is None:
            continue

        results.append(result)
        logger.info(f"Model {client.model_index} result: {result.emotion} ({result.confidence * 100:.1f}%)")

        if result.confidence > stop_at:
            logger.info(f"Model {client.model_index} above {stop_at}, skipping remaining models")
            break

    return results
