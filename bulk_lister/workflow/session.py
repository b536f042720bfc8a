"""
Workflow Session
================
Everything one bulk upload session knows, in one place. The controller
owns the session and hands it to each stage; nothing else holds state.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .stages import Stage
from ..enhancer.background_removal import EnhancementSelection
from ..schema.bulk_listing import PhotoGroup, Product, Progress, RawPhoto, UploadedPhoto


@dataclass
class WorkflowSession:
    stage: Stage = Stage.PHOTOS

    # Selection and upload
    photos: List[RawPhoto] = field(default_factory=list)
    uploaded_photos: List[UploadedPhoto] = field(default_factory=list)
    upload_progress: Progress = field(default_factory=Progress)
    batch_id: Optional[str] = None

    # Grouping and review
    groups: List[PhotoGroup] = field(default_factory=list)
    products: List[Product] = field(default_factory=list)
    current_index: int = 0

    # Enhancement
    selection: EnhancementSelection = field(default_factory=EnhancementSelection)
    enhancement_progress: Progress = field(default_factory=Progress)

    # Outcome
    error: Optional[str] = None
    created_listing_ids: List[str] = field(default_factory=list)

    @property
    def current_product(self) -> Optional[Product]:
        if 0 <= self.current_index < len(self.products):
            return self.products[self.current_index]
        return None

    def clamp_index(self):
        self.current_index = max(0, min(self.current_index, len(self.products) - 1))
