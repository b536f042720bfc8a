"""
Group Analysis
==============
Runs the analysis service once per photo group, all groups in parallel.

A group whose analysis fails gets None and is filled in by hand later;
the stage itself never fails.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Dict, Any, Optional

from ..schema.bulk_listing import PhotoGroup, UploadedPhoto

logger = logging.getLogger(__name__)


def _analyze_one(adapter, group: PhotoGroup, image_urls: List[str]) -> Optional[Dict[str, Any]]:
    try:
        return adapter.analyze(image_urls)
    except Exception as e:
        logger.warning("Analysis failed for %s: %s", group.id, e)
        return None


def analyze_groups(
    adapter,
    groups: List[PhotoGroup],
    photos: List[UploadedPhoto],
) -> Dict[str, Optional[Dict[str, Any]]]:
    """
    Analyze every group concurrently.

    Args:
        adapter: AnalysisAdapter
        groups: Photo groups to analyze
        photos: Uploaded photos the group indexes point into

    Returns:
        Mapping of group id to raw analysis (None where analysis failed)
    """
    if not groups:
        return {}

    with ThreadPoolExecutor(max_workers=len(groups)) as executor:
        futures = {
            group.id: executor.submit(
                _analyze_one,
                adapter,
                group,
                [photos[idx].url for idx in group.photo_indexes],
            )
            for group in groups
        }
        results = {group_id: future.result() for group_id, future in futures.items()}

    analysed = sum(1 for r in results.values() if r is not None)
    logger.info("Analysis complete: %d of %d groups", analysed, len(groups))
    return results
