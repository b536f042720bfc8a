"""
Tests for image compression and local preview handles.
"""

import io
import os

import pytest
from PIL import Image

from bulk_lister.storage import ImageCompressor, PreviewRegistry


@pytest.fixture
def large_image(tmp_path):
    """A noisy PNG well above the compression threshold."""
    path = tmp_path / "large.png"
    Image.frombytes("RGB", (1200, 900), os.urandom(1200 * 900 * 3)).save(path, format="PNG")
    return str(path)


class TestImageCompressor:

    def test_small_file_passes_through(self, make_image):
        path = make_image("small.jpg")
        with open(path, "rb") as fh:
            original = fh.read()

        result = ImageCompressor().compress(path)

        assert result.content == original
        assert result.filename == "small.jpg"
        assert result.content_type == "image/jpeg"

    def test_large_file_resized_to_jpeg(self, large_image):
        result = ImageCompressor(max_dimension=600).compress(large_image)

        assert result.filename == "large.jpg"
        assert result.content_type == "image/jpeg"
        assert result.size < os.path.getsize(large_image)
        with Image.open(io.BytesIO(result.content)) as img:
            assert img.format == "JPEG"
            assert max(img.size) == 600

    def test_non_image_passes_through(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_bytes(b"x" * (400 * 1024))

        result = ImageCompressor().compress(str(path))

        assert result.content_type == "text/plain"
        assert result.size == 400 * 1024

    def test_undecodable_image_falls_back_to_original(self, tmp_path):
        path = tmp_path / "broken.jpg"
        path.write_bytes(b"\xff\xd8" + b"\x00" * (400 * 1024))

        result = ImageCompressor().compress(str(path))

        assert result.filename == "broken.jpg"
        assert result.size == 400 * 1024 + 2

    def test_should_compress(self):
        compressor = ImageCompressor(threshold_bytes=1000)

        assert compressor.should_compress(999, "image/jpeg") is False
        assert compressor.should_compress(1000, "image/jpeg") is True
        assert compressor.should_compress(5000, "application/pdf") is False


class TestPreviewRegistry:

    def test_acquire_and_release(self, make_image):
        registry = PreviewRegistry(preview_size=32)

        handle = registry.acquire(make_image())

        assert os.path.exists(handle.path)
        assert registry.outstanding == 1
        with Image.open(handle.path) as img:
            assert max(img.size) <= 32

        registry.release(handle)
        registry.release(handle)

        assert handle.released is True
        assert not os.path.exists(handle.path)
        assert registry.outstanding == 0

    def test_release_all(self, make_image):
        registry = PreviewRegistry()
        handles = [registry.acquire(make_image(f"p{i}.jpg")) for i in range(3)]
        directory = os.path.dirname(handles[0].path)

        registry.release_all()

        assert registry.outstanding == 0
        assert all(h.released for h in handles)
        assert not os.path.exists(directory)

    def test_context_manager(self, make_image):
        with PreviewRegistry() as registry:
            handle = registry.acquire(make_image())
        assert handle.released is True

    def test_unreadable_file(self, tmp_path):
        path = tmp_path / "fake.jpg"
        path.write_bytes(b"not an image")

        with pytest.raises(OSError):
            PreviewRegistry().acquire(str(path))
