import logging

import numpy as np

from booth.errors import CaptureFailure
from booth.models.photo import Frame
from booth.services.camera import CameraDevice, CameraStream

logger = logging.getLogger(__name__)


def crop_to_ratio(pixels: np.ndarray, ratio: float) -> np.ndarray:
    """Center-crop ``pixels`` to ``width / height == ratio``.

    Portrait input loses rows top and bottom, landscape input loses columns
    left and right, so either camera orientation yields the same shape. A
    frame narrower than ``ratio`` but not portrait (square, 5:4) also loses
    rows, since it has no spare columns.
    """
    height, width = pixels.shape[:2]
    if width == 0 or height == 0:
        raise CaptureFailure("Empty frame")

    if width < height or width / height < ratio:
        crop_height = min(height, max(1, round(width / ratio)))
        top = (height - crop_height) // 2
        return pixels[top:top + crop_height, :]

    crop_width = min(width, max(1, round(height * ratio)))
    left = (width - crop_width) // 2
    return pixels[:, left:left + crop_width]


class FrameCapture:
    def __init__(self, target_ratio: float):
        self.target_ratio = target_ratio

    def crop(self, pixels: np.ndarray, index: int) -> Frame:
        if pixels is None or pixels.ndim < 2:
            raise CaptureFailure(f"Shot {index} has no pixel data")
        cropped = np.ascontiguousarray(crop_to_ratio(pixels, self.target_ratio)).copy()
        height, width = cropped.shape[:2]
        return Frame(pixels=cropped, width=width, height=height, index=index)

    def capture(self, device: CameraDevice, stream: CameraStream, index: int) -> Frame:
        raw = device.read_frame(stream)
        frame = self.crop(raw, index)
        logger.debug(
            "Captured shot %s: %sx%s cropped to %sx%s",
            index, raw.shape[1], raw.shape[0], frame.width, frame.height,
        )
        return frame
