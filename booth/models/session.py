from pydantic import BaseModel, Field
from typing import List, Literal, Optional

from booth.models.state import FailureReason, Phase


class SessionStartRequest(BaseModel):
    shot_count: int = Field(default=3, ge=1)


class SessionSnapshot(BaseModel):
    session_id: Optional[str] = None
    phase: Phase = Phase.idle
    target_shot_count: int = 0
    shot_index: int = 0
    seconds_remaining: int = 0
    shot_count: int = 0
    flashed_at: Optional[float] = None
    failure_reason: Optional[FailureReason] = None
    artifact_kind: Optional[Literal["remote", "local"]] = None


class ArtifactResponse(BaseModel):
    kind: Literal["remote", "local"]
    url: Optional[str] = None
    retrieval_code: Optional[str] = None
    filename: Optional[str] = None
    download_url: Optional[str] = None


class LayoutRecord(BaseModel):
    video_width: float
    video_height: float
    preview_width: float
    preview_height: float
    shot_count: int


class ShotOptionsResponse(BaseModel):
    options: List[int]
    default: int
    countdown_first: int
    countdown_subsequent: int
    flash_seconds: float
