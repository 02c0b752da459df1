from fastapi import APIRouter, Query

from backend.app.config import get_settings
from backend.app.infra.cloudinary_client import get_media_client
from backend.app.services import merge_service

router = APIRouter(prefix="/debug", tags=["debug"])


@router.get("/media-health")
async def media_health():
    """
    Check that the base script asset is reachable on the delivery CDN.
    """
    return await get_media_client(get_settings()).check_health()


@router.get("/transformation-url")
async def transformation_url(
    greeting_public_id: str = Query(..., min_length=1),
    duration: float = Query(..., gt=0),
):
    """
    Preview the merge URL for an already uploaded greeting, without calling Cloudinary.
    """
    settings = get_settings()
    transformation = merge_service.build_transformation(greeting_public_id, duration, settings)
    return {
        "greeting_public_id": greeting_public_id,
        "trim_end": transformation.trim_end,
        "url": get_media_client(settings).build_transformation_url(transformation),
    }
