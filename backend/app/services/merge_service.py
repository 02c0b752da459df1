"""Greeting + base script merge flow backed by Cloudinary transformations."""

import re
import time
from typing import Callable

from backend.app.config import Settings
from backend.app.core.exceptions import MalformedMediaResponse, MediaUploadError
from backend.app.core.logging import get_logger
from backend.app.infra.cloudinary_client import CloudinaryClient
from backend.app.models.schemas import MergeRequest, MergeResponse, MergeTransformation

logger = get_logger(__name__)

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9]")


def sanitize_name(name: str) -> str:
    return _UNSAFE_CHARS.sub("_", name)


def _epoch_millis() -> int:
    return int(time.time() * 1000)


def build_transformation(greeting_public_id: str, greeting_duration: float, settings: Settings) -> MergeTransformation:
    return MergeTransformation(
        greeting_public_id=greeting_public_id,
        greeting_duration=greeting_duration,
        base_public_id=settings.base_script_public_id,
        volume=settings.greeting_volume,
        fade_ms=settings.greeting_fade_ms,
        output_format=settings.output_format,
    )


async def _cleanup_greeting(client: CloudinaryClient, public_id: str) -> None:
    try:
        await client.destroy(public_id)
        logger.info("Temporary greeting removed public_id=%s", public_id)
    except Exception as exc:
        logger.warning("Cleanup warning (not critical): %s", exc)


async def merge_voice_note(
    request: MergeRequest,
    client: CloudinaryClient,
    settings: Settings,
    clock: Callable[[], int] = _epoch_millis,
) -> MergeResponse:
    """
    Upload the greeting, layer it over the base script and materialize the result.

    Raises MediaUploadError when the greeting upload is rejected. A rejected
    materialize call is not an error: the transformation URL is returned
    instead, since the service renders it on first delivery.
    """
    sanitized = sanitize_name(request.prospect_name)
    logger.info("Processing audio for: %s", request.prospect_name, extra={"correlation_id": request.timestamp})
    logger.info("Download URL: %s", request.download_url)

    greeting = await client.upload(request.download_url, f"greeting_{sanitized}_{clock()}")
    if greeting.duration is None:
        raise MalformedMediaResponse(f"Greeting {greeting.public_id} has no duration")
    logger.info("Greeting uploaded public_id=%s duration=%ss", greeting.public_id, greeting.duration)

    transformation = build_transformation(greeting.public_id, greeting.duration, settings)
    merge_url = client.build_transformation_url(transformation)
    logger.info("Generated concatenation URL: %s", merge_url)

    file_name = f"{sanitized}_voice_note_{request.timestamp}.{settings.output_format}"
    try:
        merged = await client.upload(merge_url, f"{sanitized}_full_voice_note_{request.timestamp}")
    except MediaUploadError as exc:
        # The greeting asset stays: the returned URL still layers it
        logger.warning("Final concatenation failed, returning direct URL: %s", exc.body)
        return MergeResponse(
            merged_audio_url=merge_url,
            public_id=f"{sanitized}_direct_{request.timestamp}",
            file_name=file_name,
            duration=None,
            greeting_duration=greeting.duration,
            message=f"Direct concatenation URL created for {request.prospect_name}",
        )

    logger.info("Final audio created public_id=%s duration=%ss", merged.public_id, merged.duration)

    if settings.cleanup_enabled:
        await _cleanup_greeting(client, greeting.public_id)

    return MergeResponse(
        merged_audio_url=merged.secure_url or client.delivery_url(merged.public_id, settings.output_format),
        public_id=merged.public_id,
        file_name=file_name,
        duration=merged.duration,
        greeting_duration=greeting.duration,
        message=(
            f"Successfully merged audio for {request.prospect_name}. "
            f"Final duration: {merged.duration}s"
        ),
    )
