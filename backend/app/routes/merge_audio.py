import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from backend.app.config import get_settings
from backend.app.core.exceptions import MediaUploadError
from backend.app.infra.cloudinary_client import get_media_client
from backend.app.models.schemas import MergeRequest
from backend.app.services import merge_service

router = APIRouter()
logger = logging.getLogger("merger.merge_audio")

# Every verb is routed here so the handler answers non-POST calls itself
_ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@router.api_route("/api/merge-audio", methods=_ALL_METHODS)
async def merge_audio(request: Request) -> JSONResponse:
    """Merge a prospect greeting with the base script and return the audio URL."""
    if request.method != "POST":
        return JSONResponse({"error": "Method not allowed"}, status_code=405)

    try:
        data = await request.json()
    except ValueError:
        logger.warning("Merge request with invalid JSON body")
        data = None

    try:
        merge_request = MergeRequest.model_validate(data)
    except ValidationError as exc:
        logger.info("Merge request rejected: %s", exc.errors())
        return JSONResponse({"error": "Missing required fields"}, status_code=400)

    settings = get_settings()
    try:
        result = await merge_service.merge_voice_note(
            merge_request, client=get_media_client(settings), settings=settings
        )
    except MediaUploadError as exc:
        logger.error("Greeting upload failed: %s", exc.body)
        return JSONResponse(
            {"status": "error", "error": f"Greeting upload failed: {exc.body}"},
            status_code=500,
        )
    except Exception as exc:
        logger.exception("Audio merge error")
        return JSONResponse(
            {"status": "error", "error": str(exc), "message": "Failed to merge audio files"},
            status_code=500,
        )

    return JSONResponse(result.model_dump(by_alias=True), status_code=200)
