import math
from dataclasses import dataclass
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MergeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    download_url: str = Field(alias="downloadURL", min_length=1)
    prospect_name: str = Field(alias="prospectName", min_length=1)
    timestamp: str = Field(min_length=1)

    @field_validator("timestamp", mode="before")
    @classmethod
    def _stringify_timestamp(cls, value: Any) -> Any:
        # n8n frequently sends epoch numbers instead of strings
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class MediaAsset(BaseModel):
    public_id: str
    duration: Optional[float] = None
    secure_url: Optional[str] = None


class MergeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: Literal["success"] = "success"
    merged_audio_url: str = Field(alias="mergedAudioUrl")
    public_id: str = Field(alias="publicId")
    file_name: str = Field(alias="fileName")
    duration: Optional[float] = None
    greeting_duration: Optional[float] = Field(default=None, alias="greetingDuration")
    message: str


@dataclass(frozen=True)
class MergeTransformation:
    """Directives for overlaying the greeting onto the base script track."""

    greeting_public_id: str
    greeting_duration: float
    base_public_id: str
    volume: int = 85
    fade_ms: int = 200
    output_format: str = "mp3"

    @property
    def trim_end(self) -> int:
        # Round up so the last fraction of a second of the greeting survives
        return math.ceil(self.greeting_duration)
