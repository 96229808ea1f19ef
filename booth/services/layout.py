from booth.models.session import LayoutRecord

VIDEO_COLUMN_SHARE = 0.7
PREVIEW_COLUMN_SHARE = 0.3
COLUMN_GAP = 8
PREVIEW_GAP = 4
HEADER_ALLOWANCE = 150


def fit_ratio(available_width: float, available_height: float, ratio: float) -> tuple:
    """Largest ``ratio`` box inside the available area."""
    if available_width <= 0 or available_height <= 0:
        return 0.0, 0.0
    if available_width / available_height > ratio:
        return available_height * ratio, available_height
    return available_width, available_width / ratio


def compute_layout(viewport_width: float, viewport_height: float, shot_count: int,
                   ratio: float = 4 / 3) -> LayoutRecord:
    """Size the live video and the column of shot previews for a viewport.

    Call again whenever the viewport changes; nothing is cached.
    """
    if viewport_width <= 0 or viewport_height <= 0:
        raise ValueError("Viewport dimensions must be positive")
    if shot_count < 1:
        raise ValueError("shot_count must be positive")

    video_width, video_height = fit_ratio(
        viewport_width * VIDEO_COLUMN_SHARE,
        max(viewport_height - HEADER_ALLOWANCE, 0),
        ratio,
    )
    preview_width, preview_height = fit_ratio(
        viewport_width * PREVIEW_COLUMN_SHARE - COLUMN_GAP,
        max(viewport_height / shot_count - (shot_count + 1) * PREVIEW_GAP, 0),
        ratio,
    )
    return LayoutRecord(
        video_width=video_width,
        video_height=video_height,
        preview_width=preview_width,
        preview_height=preview_height,
        shot_count=shot_count,
    )
