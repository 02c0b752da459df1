from fastapi import APIRouter

from backend.app.config import get_settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health():
    return {"status": "ok", "env": get_settings().app_env}
