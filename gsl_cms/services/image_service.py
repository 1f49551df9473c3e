"""
Image service — normalises every upload to WebP before it reaches storage.

Bounds object size and gives every stored object the same content type
regardless of what the admin uploaded.
"""

from __future__ import annotations

import io

from PIL import Image, UnidentifiedImageError

from gsl_cms.core.exceptions import DecodeError
from gsl_cms.core.logging import get_logger

logger = get_logger(__name__)

WEBP_CONTENT_TYPE = "image/webp"

# Modes the WebP encoder accepts as-is
_WEBP_MODES = {"RGB", "RGBA"}


class ImageService:
    def __init__(self, quality: int = 60) -> None:
        self.quality = quality

    def to_webp(self, data: bytes) -> bytes:
        """Decode ``data`` and re-encode it as lossy WebP. Only the first frame is kept."""
        try:
            with Image.open(io.BytesIO(data)) as img:
                img.load()
                frame = self._webp_compatible(img)
                out = io.BytesIO()
                frame.save(out, format="WEBP", quality=self.quality)
        except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as e:
            raise DecodeError(error=str(e)) from e

        encoded = out.getvalue()
        logger.debug("image_normalised", input_bytes=len(data), output_bytes=len(encoded))
        return encoded

    @staticmethod
    def _webp_compatible(img: Image.Image) -> Image.Image:
        if img.mode in _WEBP_MODES:
            return img
        has_alpha = img.mode in ("LA", "PA") or "transparency" in img.info
        return img.convert("RGBA" if has_alpha else "RGB")
