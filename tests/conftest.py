"""
Shared fixtures for bulk lister tests.
"""

from unittest.mock import MagicMock

import pytest
from PIL import Image

from bulk_lister.schema import Product, ProductFormData, UploadedPhoto
from bulk_lister.workflow import BulkUploadWorkflow


# ============================================================================
# Local image files
# ============================================================================

@pytest.fixture
def make_image(tmp_path):
    """Factory writing a small JPEG to tmp_path and returning its path."""
    def _make(name="photo.jpg", size=(64, 48), color=(200, 30, 30), fmt="JPEG"):
        path = tmp_path / name
        Image.new("RGB", size, color).save(path, format=fmt)
        return str(path)
    return _make


@pytest.fixture
def photo_paths(make_image):
    """Five distinct photos on disk."""
    return [make_image(f"photo{i}.jpg", color=(i * 40, 100, 150)) for i in range(5)]


# ============================================================================
# Products
# ============================================================================

@pytest.fixture
def valid_form():
    """Factory for form data that passes validation."""
    def _make(**overrides):
        values = dict(title="Trek Domane SL5", brand="Trek", model="Domane SL5", price=1800)
        values.update(overrides)
        return ProductFormData(**values)
    return _make


@pytest.fixture
def make_product():
    """Factory for products with n photos."""
    def _make(group_id="group-1", photos=2, form_data=None):
        urls = [f"https://cdn.test/{group_id}/{i}.jpg" for i in range(photos)]
        thumbs = [f"https://cdn.test/{group_id}/{i}_thumb.jpg" for i in range(photos)]
        return Product(
            group_id=group_id,
            image_urls=urls,
            thumbnail_urls=thumbs,
            suggested_name=group_id,
            form_data=form_data or ProductFormData(),
        )
    return _make


# ============================================================================
# Service adapters
# ============================================================================

def uploaded(index: int) -> UploadedPhoto:
    return UploadedPhoto(
        id=f"img-{index}",
        url=f"https://cdn.test/img-{index}.jpg",
        card_url=f"https://cdn.test/img-{index}_card.jpg",
        thumbnail_url=f"https://cdn.test/img-{index}_thumb.jpg",
    )


@pytest.fixture
def upload_adapter():
    """Upload adapter returning a deterministic photo per index."""
    adapter = MagicMock()
    adapter.upload.side_effect = lambda compressed, batch_id, index: uploaded(index)
    return adapter


@pytest.fixture
def grouping_adapter():
    return MagicMock()


@pytest.fixture
def analysis_adapter():
    return MagicMock()


@pytest.fixture
def enhancement_adapter():
    adapter = MagicMock()
    adapter.remove_background.side_effect = lambda url, cid: url.replace(".jpg", "_nobg.png")
    return adapter


@pytest.fixture
def listings_adapter():
    return MagicMock()


@pytest.fixture
def scheduler():
    """Records auto-close requests instead of starting timers."""
    return MagicMock(name="scheduler")


@pytest.fixture
def workflow(
    upload_adapter,
    grouping_adapter,
    analysis_adapter,
    enhancement_adapter,
    listings_adapter,
    scheduler,
):
    wf = BulkUploadWorkflow(
        upload_adapter=upload_adapter,
        grouping_adapter=grouping_adapter,
        analysis_adapter=analysis_adapter,
        enhancement_adapter=enhancement_adapter,
        listings_adapter=listings_adapter,
        scheduler=scheduler,
    )
    yield wf
    wf.shutdown()
