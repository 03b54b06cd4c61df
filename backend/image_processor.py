import base64
import io
import time
from dataclasses import dataclass
from typing import Optional

from PIL import Image, UnidentifiedImageError

MAX_UPLOAD_BYTES = 5 * 1024 * 1024
RESIZE_THRESHOLD = 1024
RESIZE_WIDTH = 768
JPEG_QUALITY = 70


class ImageValidationError(Exception):
    """Upload rejected before any decoding (wrong type, too large)."""
    pass


class ImageProcessingError(Exception):
    """Upload could not be decoded or re-encoded."""
    pass


@dataclass
class PreparedImage:
    base64: str
    resized: bool
    width: int
    height: int
    duration_ms: float


def validate_upload(content_type: Optional[str], size: int, max_bytes: int = MAX_UPLOAD_BYTES):
    if not content_type or not content_type.startswith("image/"):
        raise ImageValidationError("Only image uploads are allowed.")
    if size > max_bytes:
        raise ImageValidationError(f"Image too large. Max size is {max_bytes // (1024 * 1024)}MB.")


def prepare_image(data: bytes) -> PreparedImage:
    """Downscale wide photos and re-encode as JPEG for the model."""
    start = time.perf_counter()
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
        resized = False
        w, h = img.size
        if w > RESIZE_THRESHOLD:
            new_h = max(1, int(h * RESIZE_WIDTH / w))
            img = img.resize((RESIZE_WIDTH, new_h), Image.Resampling.LANCZOS)
            resized = True
        if img.mode != 'RGB':
            img = img.convert('RGB')
        buf = io.BytesIO()
        img.save(buf, format='JPEG', quality=JPEG_QUALITY)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        print(f"[IMAGE_ERROR] Image processing failed: {e}")
        raise ImageProcessingError("Could not process the image. Try another file.") from e

    return PreparedImage(
        base64=base64.b64encode(buf.getvalue()).decode('utf-8'),
        resized=resized,
        width=img.size[0],
        height=img.size[1],
        duration_ms=round((time.perf_counter() - start) * 1000, 1),
    )
