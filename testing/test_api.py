"""
API Tests: /api/test and /api/detectMood

The configured classifiers are swapped for httpx.MockTransport-backed
clients, so the full request path runs without network access.

Run with: pytest testing/test_api.py -v
"""

import base64

import httpx
import pytest
from fastapi.testclient import TestClient

from main import app
from mood import api, orchestrator
from mood.model_clients import build_clients
from mood.models import MoodDetectionResponse
from mood.orchestrator import decode_image
from utils.activity_logger import read_activity_logs

URLS = ["https://models.test/one", "https://models.test/two"]

IMAGE_B64 = base64.b64encode(b"fake-image-bytes").decode("ascii")


def scores(**values):
    return [{"label": label, "score": score} for label, score in values.items()]


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def classifiers(monkeypatch):
    """
    Install fake classifiers; returns the url -> response mapping to fill in.

    An exception stored in the mapping is raised from the transport instead.
    """
    monkeypatch.setenv("HF_TOKEN", "hf_test")
    responses = {}

    def handler(request: httpx.Request) -> httpx.Response:
        response = responses[str(request.url)]
        if isinstance(response, Exception):
            raise response
        return response

    def fake_build_clients(token, **kwargs):
        return build_clients(token, endpoints=URLS, transport=httpx.MockTransport(handler))

    monkeypatch.setattr(orchestrator, "build_clients", fake_build_clients)
    return responses


class TestHealth:

    def test_reports_token_configured(self, client, monkeypatch):
        monkeypatch.setenv("HF_TOKEN", "hf_test")

        data = client.get("/api/test").json()

        assert data["status"] == "connected"
        assert data["huggingFaceConfigured"] is True
        assert data["aiMode"] == "Enhanced Multi-Model AI Detection"

    def test_reports_token_missing(self, client, monkeypatch):
        monkeypatch.delenv("HF_TOKEN", raising=False)

        assert client.get("/api/test").json()["huggingFaceConfigured"] is False

    def test_root_lists_endpoints(self, client):
        data = client.get("/").json()

        assert data["endpoints"]["moodDetection"] == "/api/detectMood"

    def test_unknown_route_lists_available_routes(self, client):
        response = client.get("/api/nowhere")

        assert response.status_code == 404
        assert response.json() == {
            "error": "Not found",
            "message": "Route /api/nowhere not found",
            "availableRoutes": ["GET /", "GET /api/test", "POST /api/detectMood"]
        }


class TestDetectMood:

    def test_confident_single_model(self, client, classifiers):
        classifiers[URLS[0]] = httpx.Response(200, json=scores(happy=0.95, neutral=0.03, sad=0.02))
        classifiers[URLS[1]] = httpx.Response(200, json=scores(angry=0.9))

        response = client.post("/api/detectMood", json={"image": IMAGE_B64})

        assert response.status_code == 200
        data = response.json()
        assert data["mood"] == "Happy"
        assert data["rawEmotion"] == "happy"
        assert data["confidence"] == pytest.approx(0.95)
        assert len(data["allEmotions"]) == 3
        assert data["aiModelsUsed"] == 1
        assert data["processingMethod"] == "Multi-Model AI Detection"

    def test_crying_face_reported_as_melancholic(self, client, classifiers):
        """Both models say neutral, mean sad 0.235 with happy 0.025 -> sad @ 0.85."""
        classifiers[URLS[0]] = httpx.Response(200, json=scores(neutral=0.7, sad=0.25, happy=0.03))
        classifiers[URLS[1]] = httpx.Response(200, json=scores(neutral=0.75, sad=0.22, happy=0.02))

        data = client.post("/api/detectMood", json={"image": f"data:image/jpeg;base64,{IMAGE_B64}"}).json()

        assert data["mood"] == "Melancholic"
        assert data["rawEmotion"] == "sad"
        assert data["confidence"] == pytest.approx(0.85)
        assert data["aiModelsUsed"] == 2

    def test_all_models_failing_uses_simulation(self, client, classifiers):
        classifiers[URLS[0]] = httpx.Response(503, json={"error": "loading"})
        classifiers[URLS[1]] = httpx.Response(500, json={"error": "boom"})

        response = client.post("/api/detectMood", json={"image": IMAGE_B64})

        assert response.status_code == 200
        data = response.json()
        assert data["processingMethod"] == "Enhanced AI Simulation"
        assert data["aiModelsUsed"] == 0
        assert 0.75 <= data["confidence"] <= 0.95

    def test_nan_scores_treated_as_failed_models(self, client, classifiers):
        nan_body = b'[{"label": "happy", "score": NaN}]'
        for url in URLS:
            classifiers[url] = httpx.Response(200, content=nan_body, headers={"Content-Type": "application/json"})

        response = client.post("/api/detectMood", json={"image": IMAGE_B64})

        assert response.status_code == 200
        assert response.json()["processingMethod"] == "Enhanced AI Simulation"

    def test_unexpected_error_falls_back_to_simulation(self, client, classifiers):
        classifiers[URLS[0]] = KeyError("score")
        classifiers[URLS[1]] = httpx.Response(200, json=scores(happy=0.9))

        response = client.post("/api/detectMood", json={"image": IMAGE_B64})

        assert response.status_code == 200
        data = response.json()
        assert data["processingMethod"] == "Enhanced AI Simulation"
        assert data["aiModelsUsed"] == 0
        entries = read_activity_logs()
        assert entries[0]["status"] == "error"
        assert "score" in entries[0]["error"]

    def test_invalid_response_model_is_a_server_error(self, client, classifiers, monkeypatch):
        async def broken(request):
            return MoodDetectionResponse.model_validate({"mood": "Happy", "confidence": float("nan")})

        monkeypatch.setattr(api, "process_mood_detection", broken)

        response = client.post("/api/detectMood", json={"image": IMAGE_B64})

        assert response.status_code == 500
        assert response.json()["detail"] == "Internal server error"

    @pytest.mark.parametrize("encoded", [
        base64.encodebytes(b"x" * 100).decode("ascii"),
        base64.urlsafe_b64encode(b"\xfb\xff\xfe" * 10 + b"x").decode("ascii").rstrip("="),
    ], ids=["line-wrapped", "url-safe-unpadded"])
    def test_alternate_base64_encodings_accepted(self, client, classifiers, encoded):
        classifiers[URLS[0]] = httpx.Response(200, json=scores(happy=0.95))

        response = client.post("/api/detectMood", json={"image": encoded})

        assert response.status_code == 200
        assert response.json()["mood"] == "Happy"

    def test_decode_image_normalizes_encoding(self):
        raw = b"\xfb\xff\xfe" * 10 + b"x"

        assert decode_image(base64.encodebytes(raw).decode("ascii")) == raw
        assert decode_image(base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")) == raw

    def test_success_is_logged(self, client, classifiers):
        classifiers[URLS[0]] = httpx.Response(200, json=scores(surprise=0.85))
        classifiers[URLS[1]] = httpx.Response(200, json=scores(surprise=0.85))

        client.post("/api/detectMood", json={"image": IMAGE_B64})

        entries = read_activity_logs()
        assert entries[0]["status"] == "success"
        assert entries[0]["mood"] == "Excited"
        assert entries[0]["models_used"] == 1

    def test_missing_image(self, client, classifiers):
        response = client.post("/api/detectMood", json={})

        assert response.status_code == 400
        assert response.json()["detail"] == "No image provided"

    def test_invalid_base64(self, client, classifiers):
        response = client.post("/api/detectMood", json={"image": "not base64 at all!"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid image data"

    def test_missing_token(self, client, monkeypatch):
        monkeypatch.delenv("HF_TOKEN", raising=False)

        response = client.post("/api/detectMood", json={"image": IMAGE_B64})

        assert response.status_code == 500
        assert response.json()["detail"] == "AI service not properly configured"
