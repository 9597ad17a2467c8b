"""
Model Proxy API Route
=====================

POST /api/analyze - forward page images and a prompt to the configured
extraction provider and return the raw model text.

Request:  {"imageDatas": [{"base64", "mimeType", "fileName", "pageNumber"?}], "promptText": str}
Response: {"text": str}
Errors:   {"error": str} with 400 for missing input, 500 for configuration
          or upstream failures.
"""

import logging
from fastapi import APIRouter
from fastapi.responses import JSONResponse

from autommr.errors import ConfigurationError, ProviderError
from autommr.models import AnalyzeRequest, AnalyzeResponse, ErrorResponse
from autommr.services.manifest_pipeline import get_provider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Model Proxy"])


@router.post(
    "/analyze",
    response_model=AnalyzeResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def analyze(request: AnalyzeRequest):
    """
    Send images plus a prompt to the model and return its text answer.
    """
    if not request.image_datas or not request.prompt_text:
        return JSONResponse(status_code=400, content={"error": "Missing image data or prompt text"})

    try:
        provider = get_provider()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e.message}")
        return JSONResponse(status_code=500, content={"error": e.message})

    try:
        logger.info(f"Analyzing {len(request.image_datas)} image(s) with {provider.display_name}")
        text = provider.submit(request.image_datas, request.prompt_text)
    except ProviderError as e:
        return JSONResponse(status_code=500, content={"error": e.message})

    return AnalyzeResponse(text=text)
