"""
FastAPI Main Application

This script mounts the mood detection routes and runs the FastAPI server.
"""

import os
import time
import logging

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from mood import api as mood_api

load_dotenv()

# Setup logging with timestamps
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
logger = logging.getLogger(__name__)

# Create FastAPI app instance
app = FastAPI(
    title="VibeTunes Backend API",
    description="Mood detection from facial images using multi-model emotion consensus",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)

app.include_router(mood_api.router)

AVAILABLE_ROUTES = ["GET /", "GET /api/test", "POST /api/detectMood"]


@app.exception_handler(404)
async def not_found(request: Request, exc):
    """List the available routes for unknown paths."""
    logger.warning(f"{request.method} {request.url.path} - Route not found")
    return JSONResponse(
        status_code=404,
        content={
            "error": "Not found",
            "message": f"Route {request.url.path} not found",
            "availableRoutes": AVAILABLE_ROUTES
        }
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every request with its status and duration."""
    started = time.time()
    response = await call_next(request)
    duration_ms = int((time.time() - started) * 1000)
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms} ms)")
    return response


@app.get("/")
async def root():
    """Root endpoint with endpoint documentation."""
    logger.info("GET / - Root endpoint called")
    return {
        "message": "VibeTunes Backend API",
        "version": "1.0.0",
        "status": "running",
        "endpoints": {
            "health": "/api/test",
            "moodDetection": "/api/detectMood"
        },
        "documentation": {
            "detectMood": {
                "method": "POST",
                "url": "/api/detectMood",
                "body": {"image": "base64_encoded_image_string"},
                "response": {
                    "mood": "Happy",
                    "confidence": 0.94,
                    "rawEmotion": "joy",
                    "allEmotions": []
                }
            },
            "healthCheck": {
                "method": "GET",
                "url": "/api/test",
                "response": {"message": "VibeTunes API running", "status": "connected"}
            }
        }
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    logger.info("GET /health - Health check endpoint called")
    return {"status": "healthy"}


if __name__ == "__main__":
    port = int(os.getenv("PORT", "3001"))
    if not os.getenv("HF_TOKEN"):
        logger.warning("HF_TOKEN not found in environment variables; set it in a .env file")
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=port,
        reload=True
    )
