from fastapi import FastAPI

from backend.app.core import logging  # noqa: F401 ensures logging config is applied
from backend.app.config import get_settings
from backend.app.routes import debug, health, merge_audio
import sentry_sdk

settings = get_settings()
if settings.sentry_dsn:
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        traces_sample_rate=1.0,
        environment=settings.app_env,
    )

app = FastAPI(title="Voice Note Merger", version="0.1.0")

app.include_router(health.router)
app.include_router(merge_audio.router)
app.include_router(debug.router)
