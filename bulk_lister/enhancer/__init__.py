"""Cover image enhancement (background removal)"""

from .background_removal import EnhancementSelection, BackgroundRemover

__all__ = ["EnhancementSelection", "BackgroundRemover"]
