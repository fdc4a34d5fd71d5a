"""Evidence image optimization before upload.

`resize_image` does the work and raises on failure; `optimize_or_original` is what
views call: it never raises for image problems and hands back the original file
when optimization is not possible.
"""
from __future__ import annotations

import io
import logging
import os
from dataclasses import dataclass
from typing import Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

from domain.constants import RESIZE_MAX_SIZE, RESIZE_QUALITY

logger = logging.getLogger(__name__)


class ImageDecodeError(Exception):
    pass


class ImageEncodeError(Exception):
    pass


@dataclass
class EncodedImage:
    data: bytes
    filename: str
    content_type: str
    width: int = 0
    height: int = 0

    @property
    def size_kb(self) -> int:
        return round(len(self.data) / 1024)


@dataclass
class OptimizeResult:
    image: EncodedImage
    optimized: bool


def fit_within(width: int, height: int, max_size: int) -> Tuple[int, int]:
    """Scale (width, height) so the longer edge equals max_size; smaller images are left alone."""
    if width > max_size or height > max_size:
        if width > height:
            return max_size, round(height * max_size / width)
        return round(width * max_size / height), max_size
    return width, height


def jpeg_filename(filename: str) -> str:
    stem, _ = os.path.splitext(filename or 'image')
    return f"{stem or 'image'}.jpg"


def guess_content_type(filename: str) -> str:
    ext = os.path.splitext(filename or '')[1].lower()
    return {
        '.jpg': 'image/jpeg', '.jpeg': 'image/jpeg', '.png': 'image/png',
        '.gif': 'image/gif', '.webp': 'image/webp', '.heic': 'image/heic',
    }.get(ext, 'application/octet-stream')


def resize_image(data: bytes, filename: str, max_size: int = RESIZE_MAX_SIZE,
                 quality: float = RESIZE_QUALITY) -> EncodedImage:
    try:
        with Image.open(io.BytesIO(data)) as src:
            src.load()
            # Phone photos store the sensor orientation in EXIF; bake it into the pixels
            upright = ImageOps.exif_transpose(src)
            width, height = fit_within(upright.width, upright.height, max_size)
            img = upright.convert('RGB')
    except (UnidentifiedImageError, Image.DecompressionBombError, Image.DecompressionBombWarning,
            OSError, ValueError, SyntaxError) as e:
        raise ImageDecodeError(f"Image load failed: {e}") from e

    if (width, height) != img.size:
        img = img.resize((width, height), Image.LANCZOS)

    out = io.BytesIO()
    try:
        img.save(out, format='JPEG', quality=int(round(quality * 100)))
    except (OSError, ValueError) as e:
        raise ImageEncodeError(f"JPEG encoding failed: {e}") from e
    payload = out.getvalue()
    if not payload:
        raise ImageEncodeError("JPEG encoding produced no output")
    return EncodedImage(payload, jpeg_filename(filename), 'image/jpeg', width, height)


def optimize_or_original(data: bytes, filename: str, max_size: int = RESIZE_MAX_SIZE,
                         quality: float = RESIZE_QUALITY) -> OptimizeResult:
    try:
        return OptimizeResult(resize_image(data, filename, max_size, quality), optimized=True)
    except (ImageDecodeError, ImageEncodeError) as e:
        logger.warning("Resize failed, using original %s: %s", filename, e)
        return OptimizeResult(EncodedImage(data, filename, guess_content_type(filename)), optimized=False)
