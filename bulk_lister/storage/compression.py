"""
Image Compression
=================
Shrinks photos before upload: phone photos of 5MB come down to a few
hundred KB, which keeps uploads fast on mobile connections.

- Resizes to fit a max dimension, keeping the aspect ratio
- Applies EXIF orientation, then drops EXIF (location data stays private)
- Re-encodes as JPEG

If anything goes wrong the original file is uploaded as-is.
"""

import io
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path

from PIL import Image, ImageOps

logger = logging.getLogger(__name__)


@dataclass
class CompressedFile:
    """Bytes ready to upload"""
    filename: str
    content: bytes
    content_type: str

    @property
    def size(self) -> int:
        return len(self.content)


def guess_content_type(path: str) -> str:
    content_type, _ = mimetypes.guess_type(path)
    return content_type or "application/octet-stream"


class ImageCompressor:
    """Compresses images to upload constraints"""

    def __init__(
        self,
        max_dimension: int = 1920,
        quality: int = 80,
        threshold_bytes: int = 300 * 1024,
    ):
        """
        Args:
            max_dimension: Longest edge of the output in pixels
            quality: JPEG quality (1-95)
            threshold_bytes: Files smaller than this are left alone
        """
        self.max_dimension = max_dimension
        self.quality = quality
        self.threshold_bytes = threshold_bytes

    def should_compress(self, size: int, content_type: str) -> bool:
        if size < self.threshold_bytes:
            return False
        if not content_type.startswith("image/"):
            return False
        return True

    def compress(self, path: str) -> CompressedFile:
        """Compress one file, falling back to the original bytes on error"""
        source = Path(path)
        content = source.read_bytes()
        content_type = guess_content_type(path)

        if not self.should_compress(len(content), content_type):
            return CompressedFile(source.name, content, content_type)

        try:
            compressed = self._encode(content)
        except Exception as e:
            logger.warning("Compression failed for %s, uploading original: %s", source.name, e)
            return CompressedFile(source.name, content, content_type)

        logger.info(
            "Compressed %s: %.0fKB -> %.0fKB",
            source.name, len(content) / 1024, len(compressed) / 1024,
        )
        return CompressedFile(f"{source.stem}.jpg", compressed, "image/jpeg")

    def _encode(self, content: bytes) -> bytes:
        with Image.open(io.BytesIO(content)) as img:
            img = ImageOps.exif_transpose(img)
            img.thumbnail((self.max_dimension, self.max_dimension))
            if img.mode != "RGB":
                img = img.convert("RGB")

            output = io.BytesIO()
            img.save(output, format="JPEG", quality=self.quality, optimize=True)
            return output.getvalue()
