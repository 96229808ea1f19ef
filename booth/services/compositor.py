import io
import logging
from typing import List, Sequence

from PIL import Image, ImageDraw, ImageFont, ImageOps

from booth.config import LayoutConstants
from booth.errors import CompositionFailure
from booth.models.photo import CompositeImage, Frame

logger = logging.getLogger(__name__)

BACKGROUND = "white"
TEXT_COLOR = "black"
CAPTION_GAP = 10


class Compositor:
    def __init__(self, layout: LayoutConstants):
        self.layout = layout

    def composite_size(self, frame_width: int, frame_height: int, count: int) -> tuple:
        border = self.layout.border_size
        width = frame_width + 2 * border
        height = frame_height * count + border * (count + 1) + self.layout.footer_height
        return width, height

    def compose(self, frames: Sequence[Frame]) -> CompositeImage:
        if not frames:
            raise CompositionFailure("No frames provided")

        images = [self._to_image(frame) for frame in frames]
        frame_width, frame_height = images[0].size
        for frame, img in zip(frames, images):
            if img.size != (frame_width, frame_height):
                raise CompositionFailure(
                    f"Shot {frame.index} is {img.width}x{img.height}, "
                    f"expected {frame_width}x{frame_height}"
                )

        border = self.layout.border_size
        width, height = self.composite_size(frame_width, frame_height, len(images))
        logger.info("Composing %s shots into a %sx%s strip", len(images), width, height)

        strip = Image.new("RGB", (width, height), BACKGROUND)
        y = border
        for img in images:
            strip.paste(img, (border, y))
            y += frame_height + border

        self._draw_footer(strip, footer_top=y)

        buffer = io.BytesIO()
        try:
            strip.save(buffer, format="JPEG", quality=self.layout.quality)
        except (OSError, ValueError) as e:
            raise CompositionFailure(f"Failed to encode strip: {e}") from e
        return CompositeImage(
            data=buffer.getvalue(),
            width=width,
            height=height,
            quality=self.layout.quality,
        )

    def encode_preview(self, frame: Frame, quality: int = 80) -> bytes:
        """JPEG of a single shot framed with the thin preview border."""
        img = ImageOps.expand(self._to_image(frame), border=self.layout.preview_border_size, fill=BACKGROUND)
        buffer = io.BytesIO()
        img.save(buffer, format="JPEG", quality=quality)
        return buffer.getvalue()

    def _to_image(self, frame: Frame) -> Image.Image:
        try:
            img = Image.fromarray(frame.pixels)
        except (TypeError, ValueError) as e:
            raise CompositionFailure(f"Shot {frame.index} could not be decoded: {e}") from e
        if img.mode != "RGB":
            img = img.convert("RGB")
        return img

    def _draw_footer(self, strip: Image.Image, footer_top: int):
        footer_height = self.layout.footer_height
        if footer_height <= 0:
            return

        draw = ImageDraw.Draw(strip)
        lines: List[tuple] = []
        for text, size in zip(self.layout.caption_lines, self.layout.caption_font_sizes):
            font = self._load_font(size)
            left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
            lines.append((text, font, right - left, bottom - top, left, top))

        block_height = sum(line[3] for line in lines) + CAPTION_GAP * (len(lines) - 1)
        y = footer_top + (footer_height - block_height) // 2
        for text, font, text_width, text_height, left, top in lines:
            x = (strip.width - text_width) // 2 - left
            draw.text((x, y - top), text, fill=TEXT_COLOR, font=font)
            y += text_height + CAPTION_GAP

    def _load_font(self, size: int):
        for font_path in self.layout.font_paths:
            try:
                return ImageFont.truetype(font_path, size)
            except OSError:
                continue
        return ImageFont.load_default(size=size)
