"""
Bulk Upload Workflow
====================
Turns a pile of photos into published listings, one stage at a time:

    photos -> uploading -> grouping -> assigning -> enhancing
           -> reviewing -> final -> publishing -> success

- photos: seller picks files (local previews are created here)
- uploading/grouping: automatic. Upload failure goes back to photos with
  an error. Grouping never fails; it falls back to one product per photo.
- assigning: seller fixes the grouping; empty products are dropped on continue
- enhancing: optional background removal on chosen covers
- reviewing: one product at a time; validity is recomputed on every edit
- final: summary; publish sends every ready product in one request
- publishing: on failure, back to final with all edits intact

The session can only be closed when nothing is in flight (photos,
success, or final without an error).
"""

import logging
import os
import threading
import time
from typing import Any, Callable, Iterable, List, Optional

import requests

from .session import WorkflowSession
from .stages import Stage, WorkflowStateError, can_transition, CLOSABLE_STAGES
from ..adapters import (
    UploadAdapter,
    GroupingAdapter,
    AnalysisAdapter,
    EnhancementAdapter,
    BulkListingsAdapter,
)
from ..ai.analysis import analyze_groups
from ..ai.grouping import group_photos
from ..ai.normalizer import build_product
from ..assignment import photo_reassignment
from ..config import PipelineConfig
from ..enhancer.background_removal import BackgroundRemover
from ..publisher.bulk_publisher import BulkPublisher, PublishError
from ..publisher.preview import summarize
from ..schema.bulk_listing import Product, Progress, RawPhoto
from ..schema.validation import ready_count
from ..storage.compression import ImageCompressor, guess_content_type
from ..storage.previews import PreviewRegistry
from ..storage.upload_dispatcher import UploadDispatcher, UploadError, UPLOAD_CONCURRENCY

logger = logging.getLogger(__name__)


def _start_timer(delay: float, callback: Callable[[], None]):
    """
    Default auto-close scheduler.

    The callback runs close() on the timer thread, not the caller's. open()
    and close() cancel a pending timer, so a session the caller has already
    moved on from is never reset underneath it. Callers with their own event
    loop should pass a scheduler that posts the callback onto that loop.
    """
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


class BulkUploadWorkflow:
    """
    Controller for one interactive bulk upload session.

    Use as a context manager (or call shutdown()) so local previews are
    released however the session ends.
    """

    def __init__(
        self,
        upload_adapter,
        grouping_adapter,
        analysis_adapter,
        enhancement_adapter,
        listings_adapter,
        compressor: Optional[ImageCompressor] = None,
        previews: Optional[PreviewRegistry] = None,
        upload_concurrency: int = UPLOAD_CONCURRENCY,
        success_close_delay: float = 3.0,
        scheduler: Callable[[float, Callable[[], None]], Any] = _start_timer,
        on_progress: Optional[Callable[[Stage, Progress], None]] = None,
        on_close: Optional[Callable[[], None]] = None,
    ):
        """
        Initialize the workflow.

        Args:
            upload_adapter: Object upload service client
            grouping_adapter: Photo grouping service client
            analysis_adapter: Listing analysis service client
            enhancement_adapter: Background removal service client
            listings_adapter: Bulk listing-creation service client
            compressor: Image compressor (defaults to 1920px / quality 80)
            previews: Preview registry (defaults to a fresh one)
            upload_concurrency: Uploads in flight per batch
            success_close_delay: Seconds between success and auto-close
            scheduler: scheduler(delay, callback) used for the auto-close.
                The default runs the callback on a daemon timer thread.
                A returned object with cancel() is cancelled on open/close
            on_progress: Called with (stage, progress) during batch stages
            on_close: Called whenever the session closes
        """
        self.compressor = compressor or ImageCompressor()
        self.previews = previews or PreviewRegistry()
        self.dispatcher = UploadDispatcher(upload_adapter, concurrency=upload_concurrency)
        self.grouping_adapter = grouping_adapter
        self.analysis_adapter = analysis_adapter
        self.remover = BackgroundRemover(enhancement_adapter)
        self.publisher = BulkPublisher(listings_adapter)

        self.success_close_delay = success_close_delay
        self.scheduler = scheduler
        self.on_progress = on_progress
        self.on_close = on_close

        self.session = WorkflowSession()
        self.is_open = False
        self._on_complete: Optional[Callable[[List[str]], None]] = None
        self._close_timer = None

    @classmethod
    def from_config(cls, config: PipelineConfig, **kwargs) -> "BulkUploadWorkflow":
        """Wire every adapter from one PipelineConfig, sharing a connection pool"""
        http = requests.Session()
        functions_url, token = config.functions_url, config.access_token

        return cls(
            upload_adapter=UploadAdapter(functions_url, token, config.upload_timeout, http),
            grouping_adapter=GroupingAdapter(functions_url, token, config.grouping_timeout, http),
            analysis_adapter=AnalysisAdapter(functions_url, token, config.analysis_timeout, http),
            enhancement_adapter=EnhancementAdapter(functions_url, token, config.enhancement_timeout, http),
            listings_adapter=BulkListingsAdapter(config.app_url, token, config.publish_timeout, http),
            compressor=ImageCompressor(
                max_dimension=config.max_dimension,
                quality=config.jpeg_quality,
                threshold_bytes=config.compress_threshold_bytes,
            ),
            upload_concurrency=config.upload_concurrency,
            success_close_delay=config.success_close_delay,
            **kwargs,
        )

    # ============================================================
    # Session lifecycle
    # ============================================================

    @property
    def stage(self) -> Stage:
        return self.session.stage

    @property
    def products(self) -> List[Product]:
        return self.session.products

    @property
    def current_product(self) -> Optional[Product]:
        return self.session.current_product

    @property
    def can_close(self) -> bool:
        stage = self.session.stage
        if stage not in CLOSABLE_STAGES:
            return False
        return not (stage == Stage.FINAL and self.session.error)

    def open(self, on_complete: Optional[Callable[[List[str]], None]] = None):
        """Start a fresh session"""
        self._cancel_close_timer()
        self._reset()
        self._on_complete = on_complete
        self.is_open = True
        logger.info("Bulk upload session opened")

    def close(self) -> bool:
        """
        Close the session if nothing is in flight.

        Returns:
            True if closed, False if the current stage does not allow it
        """
        if not self.is_open:
            return True
        if not self.can_close:
            logger.info("Close ignored during %s", self.session.stage.value)
            return False

        self._cancel_close_timer()
        self._reset()
        self.is_open = False
        self._on_complete = None
        logger.info("Bulk upload session closed")
        if self.on_close:
            self.on_close()
        return True

    def shutdown(self):
        """Release local resources regardless of stage"""
        self._cancel_close_timer()
        self.previews.release_all()
        for photo in self.session.photos:
            photo.preview = None
        self.is_open = False

    def __enter__(self) -> "BulkUploadWorkflow":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()
        return False

    def dismiss_error(self):
        self.session.error = None

    def _reset(self):
        self.previews.release_all()
        self.session = WorkflowSession()

    def _cancel_close_timer(self):
        if self._close_timer is not None and hasattr(self._close_timer, "cancel"):
            self._close_timer.cancel()
        self._close_timer = None

    def _auto_close(self):
        self._close_timer = None
        self.close()

    # ============================================================
    # Stage helpers
    # ============================================================

    def _require(self, *stages: Stage):
        if self.session.stage not in stages:
            allowed = ", ".join(s.value for s in stages)
            raise WorkflowStateError(
                f"Not allowed during {self.session.stage.value} (allowed: {allowed})"
            )

    def _transition(self, target: Stage):
        current = self.session.stage
        if not can_transition(current, target):
            raise WorkflowStateError(f"Cannot move from {current.value} to {target.value}")
        self.session.stage = target
        logger.debug("Stage %s -> %s", current.value, target.value)

    def _report(self, stage: Stage, progress: Progress):
        if self.on_progress:
            self.on_progress(stage, progress)

    # ============================================================
    # photos
    # ============================================================

    def add_photos(self, paths: Iterable[str]) -> List[RawPhoto]:
        """Select local image files. Non-images and unreadable files are skipped."""
        self._require(Stage.PHOTOS)
        added = []

        for path in paths:
            content_type = guess_content_type(str(path))
            if not content_type.startswith("image/"):
                logger.warning("Ignoring non-image file: %s", path)
                continue

            try:
                preview = self.previews.acquire(str(path))
            except OSError as e:
                logger.warning("Ignoring unreadable image %s: %s", path, e)
                continue

            try:
                size = os.path.getsize(path)
            except OSError as e:
                self.previews.release(preview)
                logger.warning("Ignoring unreadable image %s: %s", path, e)
                continue

            photo = RawPhoto(path=str(path), content_type=content_type, size=size, preview=preview)
            self.session.photos.append(photo)
            added.append(photo)

        return added

    def remove_photo(self, index: int):
        self._require(Stage.PHOTOS)
        photo = self.session.photos.pop(index)
        self.previews.release(photo.preview)
        photo.preview = None

    def set_primary_photo(self, index: int):
        """Move a selected photo to the front so it becomes a cover"""
        self._require(Stage.PHOTOS)
        if index == 0:
            return
        photo = self.session.photos.pop(index)
        self.session.photos.insert(0, photo)

    # ============================================================
    # uploading -> grouping -> assigning
    # ============================================================

    def start_upload(self) -> Stage:
        """
        Compress, upload, group and analyse the selected photos.

        Returns:
            The stage reached: assigning on success, photos on upload failure
        """
        self._require(Stage.PHOTOS)
        if not self.session.photos:
            raise WorkflowStateError("Add at least one photo first")

        session = self.session
        session.error = None
        self._transition(Stage.UPLOADING)

        try:
            compressed = []
            total = len(session.photos)
            for i, photo in enumerate(session.photos):
                compressed.append(self.compressor.compress(photo.path))
                session.upload_progress = Progress(i + 1, total, "compressing")
                self._report(Stage.UPLOADING, session.upload_progress)

            session.batch_id = f"bulk-{int(time.time() * 1000)}"
            session.upload_progress = Progress(0, len(compressed), "uploading")
            uploaded = self.dispatcher.upload_all(
                compressed, session.batch_id, on_progress=self._upload_progress
            )
            if not uploaded:
                raise UploadError("No photos could be uploaded")
        except (UploadError, OSError) as e:
            logger.error("Upload stage failed: %s", e)
            session.error = str(e) or "Upload failed"
            self._transition(Stage.PHOTOS)
            return session.stage

        session.uploaded_photos = uploaded
        self._run_grouping()
        return session.stage

    def _upload_progress(self, progress: Progress):
        self.session.upload_progress = progress
        self._report(Stage.UPLOADING, progress)

    def _run_grouping(self):
        session = self.session
        self._transition(Stage.GROUPING)

        session.groups = group_photos(self.grouping_adapter, session.uploaded_photos)
        analyses = analyze_groups(self.analysis_adapter, session.groups, session.uploaded_photos)
        session.products = [
            build_product(group, session.uploaded_photos, analyses.get(group.id))
            for group in session.groups
        ]
        session.current_index = 0
        self._transition(Stage.ASSIGNING)

    # ============================================================
    # assigning
    # ============================================================

    def move_photo(self, photo_url: str, from_index: int, to_index: int) -> bool:
        self._require(Stage.ASSIGNING)
        return photo_reassignment.move_photo(self.session.products, photo_url, from_index, to_index)

    def create_product_from_photo(self, photo_url: str, from_index: int) -> Optional[Product]:
        self._require(Stage.ASSIGNING)
        return photo_reassignment.create_product_from_photo(self.session.products, photo_url, from_index)

    def continue_from_assigning(self):
        """Drop empty products and move on to enhancement"""
        self._require(Stage.ASSIGNING)
        for product in photo_reassignment.prune_empty(self.session.products):
            self.session.selection.forget(product.group_id)
        self.session.clamp_index()
        self._transition(Stage.ENHANCING)

    # ============================================================
    # enhancing
    # ============================================================

    def back_to_assigning(self):
        self._require(Stage.ENHANCING)
        self._transition(Stage.ASSIGNING)

    def toggle_enhancement(self, group_id: str) -> bool:
        self._require(Stage.ENHANCING)
        return self.session.selection.toggle(group_id)

    def select_all_for_enhancement(self):
        self._require(Stage.ENHANCING)
        self.session.selection.select_all(self.session.products)

    def clear_enhancement_selection(self):
        self._require(Stage.ENHANCING)
        self.session.selection.clear()

    def run_enhancement(self) -> List[str]:
        """
        Remove backgrounds for the selected products, then go to review.

        Failures are skipped; review is reached regardless.
        """
        self._require(Stage.ENHANCING)
        session = self.session
        enhanced = []
        try:
            if session.selection.selected:
                enhanced = self.remover.run(
                    session.products, session.selection, on_progress=self._enhancement_progress
                )
        finally:
            self._enter_review()
        return enhanced

    def skip_enhancement(self):
        self._require(Stage.ENHANCING)
        self._enter_review()

    def _enhancement_progress(self, progress: Progress):
        self.session.enhancement_progress = progress
        self._report(Stage.ENHANCING, progress)

    def _enter_review(self):
        self.session.current_index = 0
        self._transition(Stage.REVIEWING)

    # ============================================================
    # reviewing
    # ============================================================

    def update_field(self, name: str, value: Any) -> bool:
        """Edit the current product. Returns its validity after the edit."""
        self._require(Stage.REVIEWING)
        product = self.session.current_product
        if product is None:
            raise WorkflowStateError("No product to edit")
        return product.update_field(name, value)

    def next_product(self):
        """Advance; from the last product go to the final review"""
        self._require(Stage.REVIEWING)
        if self.session.current_index < len(self.session.products) - 1:
            self.session.current_index += 1
        else:
            self._transition(Stage.FINAL)

    def previous_product(self):
        """Go back; from the first product return to enhancement"""
        self._require(Stage.REVIEWING)
        if self.session.current_index > 0:
            self.session.current_index -= 1
        else:
            self._transition(Stage.ENHANCING)

    def delete_product(self, group_id: str) -> bool:
        self._require(Stage.REVIEWING, Stage.FINAL)
        products = self.session.products
        for i, product in enumerate(products):
            if product.group_id == group_id:
                del products[i]
                self.session.selection.forget(group_id)
                if i < self.session.current_index:
                    self.session.current_index -= 1
                self.session.clamp_index()
                return True
        return False

    def remove_background_current(self) -> Optional[str]:
        """
        Enhance the cover of the product under review.

        Returns:
            The enhanced URL, or None if it was already enhanced or failed
            (failures set session.error)
        """
        self._require(Stage.REVIEWING)
        product = self.session.current_product
        if product is None or self.session.selection.is_enhanced(product.group_id):
            return None

        try:
            enhanced_url = self.remover.enhance_product(product, f"bulk-{int(time.time() * 1000)}")
        except Exception as e:
            logger.error("Background removal failed for %s: %s", product.group_id, e)
            self.session.error = f"Failed to remove background: {e}"
            return None

        self.session.selection.mark_enhanced(product.group_id)
        self.session.error = None
        return enhanced_url

    # ============================================================
    # final -> publishing -> success
    # ============================================================

    def edit_product(self, index: int):
        self._require(Stage.FINAL)
        if not 0 <= index < len(self.session.products):
            raise IndexError(f"Product index {index} out of range")
        self.session.current_index = index
        self._transition(Stage.REVIEWING)

    def back_to_reviewing(self):
        """Return to the product that was being edited last"""
        self._require(Stage.FINAL)
        self.session.clamp_index()
        self._transition(Stage.REVIEWING)

    @property
    def ready_count(self) -> int:
        return ready_count(self.session.products)

    @property
    def can_publish(self) -> bool:
        return self.session.stage == Stage.FINAL and self.ready_count > 0

    def summary(self) -> dict:
        return summarize(self.session.products)

    def publish(self) -> Stage:
        """
        Publish every ready product as one batch.

        Returns:
            success, or final if the batch failed (session.error is set)
        """
        self._require(Stage.FINAL)
        if self.ready_count == 0:
            raise WorkflowStateError("No products are ready to publish")

        session = self.session
        session.error = None
        self._transition(Stage.PUBLISHING)

        try:
            result = self.publisher.publish(session.products)
        except PublishError as e:
            session.error = str(e)
            self._transition(Stage.FINAL)
            return session.stage

        session.created_listing_ids = result.created_ids
        self._transition(Stage.SUCCESS)

        if self._on_complete:
            self._on_complete(list(result.created_ids))
        self._close_timer = self.scheduler(self.success_close_delay, self._auto_close)
        return session.stage
