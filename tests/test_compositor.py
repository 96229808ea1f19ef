import io

import numpy as np
import pytest
from PIL import Image

from booth.errors import CompositionFailure
from booth.models.photo import Frame
from booth.services.compositor import Compositor
from conftest import make_layout, solid_frame


def make_frames(count, width=40, height=30, color=(200, 30, 30)):
    return [Frame(pixels=solid_frame(width, height, color), width=width, height=height, index=i)
            for i in range(count)]


def decode(data: bytes) -> Image.Image:
    return Image.open(io.BytesIO(data)).convert("RGB")


@pytest.mark.parametrize("count", [1, 2, 3, 4])
def test_composite_dimensions(count):
    layout = make_layout(border_size=10, footer_height=120)
    composite = Compositor(layout).compose(make_frames(count, width=40, height=30))

    assert composite.width == 40 + 2 * 10
    assert composite.height == count * 30 + (count + 1) * 10 + 120
    img = decode(composite.data)
    assert img.size == (composite.width, composite.height)
    assert composite.mime_type == "image/jpeg"
    assert composite.quality == 90


def test_frames_are_stacked_in_capture_order():
    layout = make_layout(border_size=8, footer_height=60)
    frames = [
        Frame(pixels=solid_frame(64, 48, (250, 0, 0)), width=64, height=48, index=0),
        Frame(pixels=solid_frame(64, 48, (0, 0, 250)), width=64, height=48, index=1),
    ]
    img = decode(Compositor(layout).compose(frames).data)

    first = img.getpixel((8 + 32, 8 + 24))
    second = img.getpixel((8 + 32, 8 + 48 + 8 + 24))
    assert first[0] > 200 and first[2] < 60
    assert second[2] > 200 and second[0] < 60


def test_borders_and_footer_background_are_white():
    layout = make_layout(border_size=24, footer_height=120, caption_lines=("", ""))
    img = decode(Compositor(layout).compose(make_frames(2)).data)

    for point in [(2, 2), (img.width - 3, 2), (2, img.height - 3), (img.width // 2, img.height - 30)]:
        assert min(img.getpixel(point)) > 235


def test_footer_has_caption_text():
    layout = make_layout(border_size=10, footer_height=120)
    compositor = Compositor(layout)
    frames = make_frames(1, width=400, height=300)
    img = decode(compositor.compose(frames).data)

    footer = np.asarray(img)[300 + 20:, :, :]
    assert footer.min() < 100


def test_compose_rejects_empty_sequence():
    with pytest.raises(CompositionFailure):
        Compositor(make_layout()).compose([])


def test_compose_rejects_mismatched_frames():
    frames = make_frames(1) + [Frame(pixels=solid_frame(20, 15), width=20, height=15, index=1)]
    with pytest.raises(CompositionFailure):
        Compositor(make_layout()).compose(frames)


def test_compose_rejects_undecodable_frame():
    bad = Frame(pixels=np.zeros((30, 40, 3), dtype=np.float64), width=40, height=30, index=0)
    with pytest.raises(CompositionFailure):
        Compositor(make_layout()).compose([bad])


def test_preview_uses_preview_border():
    layout = make_layout(preview_border_size=2)
    preview = decode(Compositor(layout).encode_preview(make_frames(1)[0]))
    assert preview.size == (44, 34)
