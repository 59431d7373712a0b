"""Export encoder — downsample the capture surface to the canonical artifact size."""

from __future__ import annotations

import base64
import binascii
import io
import warnings
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError

from garden.canvas.surface import CaptureSurface

# Edge length of every artifact that is classified and stored.
EXPORT_SIZE = 224

# Largest incoming image edge accepted for decoding (a 4x high-DPI capture).
MAX_DECODE_SIDE = 4 * EXPORT_SIZE

PNG_CONTENT_TYPE = "image/png"
_DATA_URI_PREFIX = f"data:{PNG_CONTENT_TYPE};base64,"


@dataclass(frozen=True)
class Artifact:
    """A fixed-size RGBA raster ready for classification and storage."""

    image: Image.Image

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size

    def to_png(self) -> bytes:
        buf = io.BytesIO()
        self.image.save(buf, format="PNG")
        return buf.getvalue()

    def to_data_uri(self) -> str:
        return _DATA_URI_PREFIX + base64.b64encode(self.to_png()).decode("ascii")

    @classmethod
    def from_png(cls, data: bytes) -> Artifact:
        """Decode PNG bytes. Images of any other size are resampled to EXPORT_SIZE.

        The header is checked before any pixel data is decoded; images wider or
        taller than MAX_DECODE_SIDE are refused with ValueError.
        """
        try:
            with warnings.catch_warnings():
                warnings.simplefilter("error", Image.DecompressionBombWarning)
                image = Image.open(io.BytesIO(data))
                width, height = image.size
                if width > MAX_DECODE_SIDE or height > MAX_DECODE_SIDE:
                    raise ValueError(
                        f"Image too large: {width}x{height} exceeds {MAX_DECODE_SIDE}px per side"
                    )
                image.load()
        except (Image.DecompressionBombError, Image.DecompressionBombWarning) as e:
            raise ValueError(f"Image too large: {e}") from e
        except (UnidentifiedImageError, OSError) as e:
            raise ValueError(f"Not a decodable image: {e}") from e
        image = image.convert("RGBA")
        if image.size != (EXPORT_SIZE, EXPORT_SIZE):
            image = image.resize((EXPORT_SIZE, EXPORT_SIZE), Image.Resampling.LANCZOS)
        return cls(image=image)

    @classmethod
    def from_data_uri(cls, uri: str) -> Artifact:
        """Accepts ``data:image/png;base64,...`` or bare base64."""
        payload = uri.split(",", 1)[-1] if "," in uri else uri
        try:
            raw = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"Invalid base64 encoding: {e}") from e
        return cls.from_png(raw)


def export(surface: CaptureSurface) -> Artifact | None:
    """Blit the whole surface into a new EXPORT_SIZE × EXPORT_SIZE image.

    The surface buffer is left untouched. Returns None when the surface was
    never initialized.
    """
    buffer = surface.buffer
    if buffer is None:
        return None
    if buffer.size == (EXPORT_SIZE, EXPORT_SIZE):
        return Artifact(image=buffer.copy())
    scaled = buffer.resize((EXPORT_SIZE, EXPORT_SIZE), Image.Resampling.LANCZOS)
    return Artifact(image=scaled)
