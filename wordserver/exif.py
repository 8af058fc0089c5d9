from __future__ import annotations
import io
import logging
import math
from typing import Any, Dict, Tuple

from PIL import ExifTags, Image, UnidentifiedImageError

from .schemas import ExifResult

logger = logging.getLogger(__name__)

def _plain(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float)):
        return value
    if isinstance(value, bytes):
        return value.decode('utf-8', errors='replace').rstrip('\x00')
    if isinstance(value, tuple):
        return [_plain(v) for v in value]
    # IFDRational and friends
    if hasattr(value, 'numerator'):
        try:
            number = float(value)
        except (TypeError, ZeroDivisionError, ValueError):
            return str(value)
        return None if math.isnan(number) else number
    return str(value)

def extract_exif(data: bytes) -> Tuple[int, Dict[str, Any]]:
    """Read EXIF tags from an uploaded image; returns (status, body)."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            exif = img.getexif()
            tags = {ExifTags.TAGS.get(tag, str(tag)): _plain(v) for tag, v in exif.items()}
            # camera settings live in the Exif sub-IFD
            for tag, v in exif.get_ifd(ExifTags.IFD.Exif).items():
                tags[ExifTags.TAGS.get(tag, str(tag))] = _plain(v)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        logger.info("Rejected EXIF upload: %s", e)
        return 400, ExifResult(success=False, result='Unsupported image').model_dump()
    return 200, ExifResult(success=len(tags) > 0, result=tags).model_dump()
