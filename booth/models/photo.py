from dataclasses import dataclass, field
from typing import Literal, Union

import numpy as np


@dataclass(frozen=True)
class Frame:
    """A cropped RGB shot. The pixel buffer is made read-only on creation."""

    pixels: np.ndarray = field(repr=False)
    width: int
    height: int
    index: int

    def __post_init__(self):
        if self.pixels.shape[:2] != (self.height, self.width):
            raise ValueError(
                f"Frame {self.index} buffer is {self.pixels.shape[1]}x{self.pixels.shape[0]}, "
                f"expected {self.width}x{self.height}"
            )
        self.pixels.setflags(write=False)


@dataclass(frozen=True)
class CompositeImage:
    data: bytes = field(repr=False)
    width: int
    height: int
    quality: int
    mime_type: str = "image/jpeg"


@dataclass(frozen=True)
class RemoteArtifact:
    url: str
    retrieval_code_image: bytes = field(repr=False)
    kind: Literal["remote"] = "remote"


@dataclass(frozen=True)
class LocalArtifact:
    encoded_bytes: bytes = field(repr=False)
    suggested_filename: str
    kind: Literal["local"] = "local"


DeliveryArtifact = Union[RemoteArtifact, LocalArtifact]
