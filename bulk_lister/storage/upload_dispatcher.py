"""
Upload Dispatcher
=================
Uploads a batch of compressed photos with bounded concurrency.

Files go out in fixed-size batches (3 by default). Every upload in a batch
runs concurrently and the whole batch finishes before the next one
starts. Progress is reported after each batch.

Failure handling:
- The service rejects one file: log it, skip it, keep going
- The network fails: abort the whole upload (UploadError)
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Callable

from ..adapters.base_adapter import ServiceRejectedError, MalformedResponseError
from ..schema.bulk_listing import UploadedPhoto, Progress

logger = logging.getLogger(__name__)

UPLOAD_CONCURRENCY = 3


class UploadError(Exception):
    """The upload stage cannot continue"""


class UploadDispatcher:
    """Runs batched uploads against an UploadAdapter"""

    def __init__(self, adapter, concurrency: int = UPLOAD_CONCURRENCY):
        """
        Args:
            adapter: UploadAdapter (anything with upload(file, batch_id, index))
            concurrency: Uploads in flight per batch
        """
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.adapter = adapter
        self.concurrency = concurrency

    def upload_all(
        self,
        files: List,
        batch_id: str,
        on_progress: Optional[Callable[[Progress], None]] = None,
    ) -> List[UploadedPhoto]:
        """
        Upload every file.

        Args:
            files: CompressedFile list, in submission order
            batch_id: Correlation id for the whole session
            on_progress: Called with cumulative progress after each batch

        Returns:
            Uploaded photos in submission order, minus skipped files

        Raises:
            UploadError: On a network-level failure
        """
        total = len(files)
        uploaded: List[UploadedPhoto] = []
        skipped = 0

        with ThreadPoolExecutor(max_workers=self.concurrency) as executor:
            for start in range(0, total, self.concurrency):
                batch = files[start:start + self.concurrency]
                futures = [
                    executor.submit(self.adapter.upload, f, batch_id, start + offset)
                    for offset, f in enumerate(batch)
                ]

                batch_results = []
                fatal = None
                for offset, future in enumerate(futures):
                    index = start + offset
                    try:
                        batch_results.append(future.result())
                    except (ServiceRejectedError, MalformedResponseError) as e:
                        skipped += 1
                        logger.warning("Skipping photo %d (%s): %s", index + 1, batch[offset].filename, e)
                    except Exception as e:
                        fatal = fatal or e

                if fatal is not None:
                    logger.error("Upload aborted at batch starting %d: %s", start, fatal)
                    raise UploadError(str(fatal) or "Upload failed") from fatal

                uploaded.extend(batch_results)
                if on_progress:
                    on_progress(Progress(min(start + len(batch), total), total, "uploading"))

        logger.info("Uploaded %d of %d photos (%d skipped)", len(uploaded), total, skipped)
        return uploaded
