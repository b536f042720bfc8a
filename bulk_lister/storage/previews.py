"""
Preview Handles
===============
Small local thumbnails shown while the seller is still picking photos.

Every handle handed out by the registry must be released: when the photo
is removed, when the session resets and when the workflow shuts down.
The registry tracks outstanding handles so release_all() can clean up on
any exit path.
"""

import logging
import shutil
import tempfile
import uuid
from pathlib import Path
from typing import Dict, Optional

from PIL import Image, ImageOps

from ..schema.bulk_listing import PreviewHandle

logger = logging.getLogger(__name__)

PREVIEW_SIZE = 256


class PreviewRegistry:
    """Creates and tracks preview thumbnails in a private temp directory"""

    def __init__(self, preview_size: int = PREVIEW_SIZE):
        self.preview_size = preview_size
        self._handles: Dict[str, PreviewHandle] = {}
        self._dir: Optional[Path] = None

    @property
    def outstanding(self) -> int:
        return len(self._handles)

    def _directory(self) -> Path:
        if self._dir is None or not self._dir.exists():
            self._dir = Path(tempfile.mkdtemp(prefix="bulk-previews-"))
        return self._dir

    def acquire(self, path: str) -> PreviewHandle:
        """
        Build a preview for a local image.

        Raises:
            OSError: If the file cannot be read as an image
        """
        handle_id = str(uuid.uuid4())
        target = self._directory() / f"{handle_id}.jpg"

        with Image.open(path) as img:
            img = ImageOps.exif_transpose(img)
            img.thumbnail((self.preview_size, self.preview_size))
            if img.mode != "RGB":
                img = img.convert("RGB")
            img.save(target, format="JPEG", quality=70)

        handle = PreviewHandle(handle_id=handle_id, path=str(target))
        self._handles[handle_id] = handle
        return handle

    def release(self, handle: Optional[PreviewHandle]):
        if handle is None or handle.released:
            return
        self._handles.pop(handle.handle_id, None)
        try:
            Path(handle.path).unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not delete preview %s: %s", handle.path, e)
        handle.released = True

    def release_all(self):
        """Release every outstanding handle and remove the temp directory"""
        for handle in list(self._handles.values()):
            self.release(handle)
        if self._dir is not None:
            shutil.rmtree(self._dir, ignore_errors=True)
            self._dir = None

    def __enter__(self) -> "PreviewRegistry":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release_all()
        return False
