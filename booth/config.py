from dataclasses import dataclass
from functools import lru_cache
from typing import List, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="BOOTH_",
        case_sensitive=False,
    )

    app_name: str = "Strip Booth"
    app_description: str = "An unattended kiosk photo-booth that prints a vertical photo strip"
    debug: bool = False
    log_level: str = "INFO"

    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)

    camera_index: int = 0
    camera_width: int = 1280
    camera_height: int = 960
    camera_fps: int = 30
    mirror_frames: bool = True
    preview_width: int = 640
    preview_quality: int = Field(default=60, ge=1, le=100)
    preview_fps: int = Field(default=15, ge=1, le=60)

    shot_options: List[int] = [1, 2, 3, 4]
    default_shot_count: int = 3
    countdown_first: int = Field(default=5, ge=1)
    countdown_subsequent: int = Field(default=3, ge=1)
    flash_seconds: float = Field(default=0.05, ge=0)
    post_capture_seconds: float = Field(default=0.5, ge=0)

    aspect_width: int = 4
    aspect_height: int = 3
    border_size: int = Field(default=10, ge=0)
    preview_border_size: int = Field(default=2, ge=0)
    footer_height: int = Field(default=120, ge=0)
    caption_lines: List[str] = ["Μιλένα & Χρίστος", "06.06.2026"]
    caption_font_sizes: List[int] = [40, 30]
    font_paths: List[str] = [
        "Poppins-Regular.ttf",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/System/Library/Fonts/Supplemental/Arial.ttf",
        "arial.ttf",
    ]
    photo_quality: int = Field(default=90, ge=1, le=100)
    qr_error_correction: str = "H"

    upload_url: str = ""
    upload_timeout: float = Field(default=30.0, gt=0)
    filename_prefix: str = "strip-booth"
    photos_dir: str = "booth/static/photos"

    @field_validator("shot_options")
    @classmethod
    def validate_shot_options(cls, v: List[int]) -> List[int]:
        if not v or any(n < 1 for n in v):
            raise ValueError("shot_options must be a non-empty list of positive counts")
        return sorted(set(v))

    @field_validator("caption_lines")
    @classmethod
    def validate_caption_lines(cls, v: List[str]) -> List[str]:
        if len(v) != 2:
            raise ValueError("caption_lines needs exactly a label line and a date line")
        return v

    @field_validator("caption_font_sizes")
    @classmethod
    def validate_caption_font_sizes(cls, v: List[int]) -> List[int]:
        if len(v) != 2 or any(size < 1 for size in v):
            raise ValueError("caption_font_sizes needs two positive sizes")
        return v

    @field_validator("qr_error_correction")
    @classmethod
    def validate_qr_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"L", "M", "Q", "H"}:
            raise ValueError(f"qr_error_correction must be one of L, M, Q, H, got {v}")
        return level


@dataclass(frozen=True)
class LayoutConstants:
    """Read-only geometry and timing shared by capture, compositing and the UI."""

    target_ratio: float
    border_size: int
    preview_border_size: int
    footer_height: int
    countdown_first: int
    countdown_subsequent: int
    flash_seconds: float
    post_capture_seconds: float
    caption_lines: Tuple[str, str]
    caption_font_sizes: Tuple[int, int]
    font_paths: Tuple[str, ...]
    quality: int

    @classmethod
    def from_settings(cls, settings: Settings) -> "LayoutConstants":
        return cls(
            target_ratio=settings.aspect_width / settings.aspect_height,
            border_size=settings.border_size,
            preview_border_size=settings.preview_border_size,
            footer_height=settings.footer_height,
            countdown_first=settings.countdown_first,
            countdown_subsequent=settings.countdown_subsequent,
            flash_seconds=settings.flash_seconds,
            post_capture_seconds=settings.post_capture_seconds,
            caption_lines=(settings.caption_lines[0], settings.caption_lines[1]),
            caption_font_sizes=(settings.caption_font_sizes[0], settings.caption_font_sizes[1]),
            font_paths=tuple(settings.font_paths),
            quality=settings.photo_quality,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
