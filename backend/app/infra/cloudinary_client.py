"""
Thin Cloudinary HTTP client covering the three calls the merge flow needs:
unsigned upload, transformation URL construction and asset destruction.
"""

from typing import Any

import httpx

from backend.app.config import Settings, get_settings
from backend.app.core.exceptions import (
    MalformedMediaResponse,
    MediaCleanupError,
    MediaUploadError,
)
from backend.app.core.logging import get_logger
from backend.app.models.schemas import MediaAsset, MergeTransformation

logger = get_logger(__name__)


def _layer_id(public_id: str) -> str:
    # Layer references use ':' as the folder separator
    return public_id.replace("/", ":")


def _parse_asset(response: httpx.Response) -> MediaAsset:
    try:
        data = response.json()
    except ValueError as exc:
        raise MalformedMediaResponse(f"Upload response is not JSON: {response.text[:200]}") from exc
    if not isinstance(data, dict) or not data.get("public_id"):
        raise MalformedMediaResponse("Upload response missing public_id")

    duration = data.get("duration")
    return MediaAsset(
        public_id=data["public_id"],
        duration=float(duration) if duration is not None else None,
        secure_url=data.get("secure_url"),
    )


class CloudinaryClient:
    def __init__(self, settings: Settings):
        self.settings = settings

    def _api_url(self, action: str) -> str:
        base = self.settings.cloudinary_api_base_url.rstrip("/")
        return (
            f"{base}/{self.settings.cloudinary_cloud_name}/"
            f"{self.settings.cloudinary_resource_type}/{action}"
        )

    def delivery_url(self, public_id: str, extension: str | None = None) -> str:
        base = self.settings.cloudinary_delivery_base_url.rstrip("/")
        suffix = f".{extension}" if extension else ""
        return (
            f"{base}/{self.settings.cloudinary_cloud_name}/"
            f"{self.settings.cloudinary_resource_type}/upload/{public_id}{suffix}"
        )

    async def upload(self, source: str, public_id: str) -> MediaAsset:
        """Ask the service to fetch `source` and store it under `public_id`."""
        payload: dict[str, Any] = {
            "file": source,
            "upload_preset": self.settings.cloudinary_upload_preset,
            "public_id": public_id,
            "resource_type": self.settings.cloudinary_resource_type,
        }
        url = self._api_url("upload")
        async with httpx.AsyncClient(timeout=self.settings.media_http_timeout) as client:
            response = await client.post(url, json=payload)

        if not response.is_success:
            logger.warning(
                "Cloudinary upload failed status=%s public_id=%s body=%s",
                response.status_code, public_id, response.text,
            )
            raise MediaUploadError(response.status_code, response.text)

        asset = _parse_asset(response)
        logger.info(
            "Cloudinary upload ok public_id=%s duration=%s", asset.public_id, asset.duration,
            extra={"public_id": asset.public_id},
        )
        return asset

    def build_transformation_url(self, params: MergeTransformation) -> str:
        """
        Delivery URL that renders the greeting layered over the base script.
        The service renders it on first access and caches the result.
        """
        resource_type = self.settings.cloudinary_resource_type
        layer = ",".join(
            [
                f"l_{resource_type}:{_layer_id(params.greeting_public_id)}",
                f"e_volume:{params.volume}",
                f"e_fade:{params.fade_ms}",
                "so_0",
                f"eo_{params.trim_end}",
            ]
        )
        base = self.settings.cloudinary_delivery_base_url.rstrip("/")
        return (
            f"{base}/{self.settings.cloudinary_cloud_name}/{resource_type}/upload/"
            f"{layer}/fl_layer_apply/f_{params.output_format}/"
            f"{params.base_public_id}.{params.output_format}"
        )

    async def destroy(self, public_id: str) -> None:
        payload = {
            "public_id": public_id,
            "resource_type": self.settings.cloudinary_resource_type,
            "api_key": self.settings.cloudinary_api_key,
            "api_secret": self.settings.cloudinary_api_secret,
        }
        url = self._api_url("destroy")
        async with httpx.AsyncClient(timeout=self.settings.media_http_timeout) as client:
            response = await client.post(url, json=payload)

        if not response.is_success:
            raise MediaCleanupError(
                f"Destroy failed ({response.status_code}) public_id={public_id}: {response.text}"
            )

    async def check_health(self) -> dict[str, Any]:
        url = self.delivery_url(self.settings.base_script_public_id, self.settings.output_format)
        try:
            async with httpx.AsyncClient(timeout=5) as client:
                response = await client.head(url)
                return {
                    "status": "ok" if response.status_code < 400 else "error",
                    "status_code": response.status_code,
                    "url": url,
                }
        except Exception as exc:
            return {"status": "error", "detail": str(exc), "url": url}


def get_media_client(settings: Settings | None = None) -> CloudinaryClient:
    return CloudinaryClient(settings or get_settings())
