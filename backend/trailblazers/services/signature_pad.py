# backend/trailblazers/services/signature_pad.py
"""
Free-hand signature capture.

Pointer-down starts a stroke, pointer-move extends it with a line segment,
pointer-up ends it. The accumulated strokes render to a transparent PNG
(Pillow) and serialize as a ``data:image/png;base64,...`` URL, the payload
stored in ``Participant.signatureData``.
"""

import base64
import io
from typing import Iterable, List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw

from ..core.constants import (
    SIGNATURE_HEIGHT,
    SIGNATURE_LINE_WIDTH,
    SIGNATURE_STROKE_COLOR,
    SIGNATURE_WIDTH,
)

Point = Tuple[float, float]

PNG_DATA_URL_PREFIX = "data:image/png;base64,"


class SignaturePad:
    def __init__(self, width: int = SIGNATURE_WIDTH, height: int = SIGNATURE_HEIGHT):
        self.width = width
        self.height = height
        self._strokes: List[List[Point]] = []
        self._drawing = False

    @classmethod
    def from_strokes(
        cls,
        strokes: Iterable[Sequence[Point]],
        width: int = SIGNATURE_WIDTH,
        height: int = SIGNATURE_HEIGHT,
    ) -> "SignaturePad":
        """Replay recorded strokes as pointer events."""
        pad = cls(width, height)
        for stroke in strokes:
            points = list(stroke)
            if not points:
                continue
            pad.pointer_down(*points[0])
            for point in points[1:]:
                pad.pointer_move(*point)
            pad.pointer_up()
        return pad

    @property
    def is_drawing(self) -> bool:
        return self._drawing

    @property
    def strokes(self) -> List[List[Point]]:
        return [list(stroke) for stroke in self._strokes]

    def is_empty(self) -> bool:
        return not any(self._strokes)

    def pointer_down(self, x: float, y: float) -> None:
        self._strokes.append([(float(x), float(y))])
        self._drawing = True

    def pointer_move(self, x: float, y: float) -> None:
        # Moves without a pressed pointer do not draw
        if not self._drawing:
            return
        self._strokes[-1].append((float(x), float(y)))

    def pointer_up(self) -> None:
        self._drawing = False

    def clear(self) -> None:
        self._strokes = []
        self._drawing = False

    def render(self) -> Image.Image:
        image = Image.new("RGBA", (self.width, self.height), (0, 0, 0, 0))
        draw = ImageDraw.Draw(image)
        radius = SIGNATURE_LINE_WIDTH / 2
        for stroke in self._strokes:
            if len(stroke) == 1:
                x, y = stroke[0]
                draw.ellipse(
                    (x - radius, y - radius, x + radius, y + radius), fill=SIGNATURE_STROKE_COLOR
                )
                continue
            draw.line(stroke, fill=SIGNATURE_STROKE_COLOR, width=SIGNATURE_LINE_WIDTH, joint="curve")
        return image

    def to_png_bytes(self) -> bytes:
        out = io.BytesIO()
        self.render().save(out, format="PNG")
        return out.getvalue()

    def to_data_url(self) -> Optional[str]:
        """PNG data URL of the signature, or None when nothing has been drawn."""
        if self.is_empty():
            return None
        return PNG_DATA_URL_PREFIX + base64.b64encode(self.to_png_bytes()).decode("ascii")


def decode_data_url(data_url: str) -> bytes:
    """PNG bytes from a signature data URL."""
    if not data_url.startswith(PNG_DATA_URL_PREFIX):
        raise ValueError("Not a PNG data URL")
    return base64.b64decode(data_url[len(PNG_DATA_URL_PREFIX):])
