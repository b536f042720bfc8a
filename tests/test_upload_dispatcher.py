"""
Tests for batched uploads: bounded concurrency, ordering, per-file skips
and whole-stage aborts.
"""

import threading
import time
from unittest.mock import MagicMock

import pytest

from bulk_lister.adapters import (
    MalformedResponseError,
    ServiceRejectedError,
    ServiceUnavailableError,
)
from bulk_lister.schema import UploadedPhoto
from bulk_lister.storage import CompressedFile, UploadDispatcher, UploadError


def files(n):
    return [CompressedFile(f"p{i}.jpg", b"jpeg", "image/jpeg") for i in range(n)]


def photo_for(index):
    return UploadedPhoto(id=str(index), url=f"https://cdn.test/{index}.jpg")


class TestUploadAll:

    def test_results_in_submission_order(self):
        adapter = MagicMock()

        def upload(compressed, batch_id, index):
            # later files finish first
            time.sleep(0.01 * (3 - index % 3))
            return photo_for(index)

        adapter.upload.side_effect = upload

        result = UploadDispatcher(adapter).upload_all(files(7), "bulk-1")

        assert [p.id for p in result] == [str(i) for i in range(7)]

    def test_sends_batch_id_and_index(self):
        adapter = MagicMock()
        adapter.upload.side_effect = lambda f, batch_id, index: photo_for(index)
        batch = files(2)

        UploadDispatcher(adapter).upload_all(batch, "bulk-42")

        calls = {c.args[2]: c.args for c in adapter.upload.call_args_list}
        assert calls[0] == (batch[0], "bulk-42", 0)
        assert calls[1] == (batch[1], "bulk-42", 1)

    def test_never_more_than_three_in_flight(self):
        lock = threading.Lock()
        state = {"active": 0, "peak": 0}

        def upload(compressed, batch_id, index):
            with lock:
                state["active"] += 1
                state["peak"] = max(state["peak"], state["active"])
            time.sleep(0.02)
            with lock:
                state["active"] -= 1
            return photo_for(index)

        adapter = MagicMock()
        adapter.upload.side_effect = upload

        UploadDispatcher(adapter, concurrency=3).upload_all(files(8), "bulk-1")

        assert state["peak"] <= 3
        assert adapter.upload.call_count == 8

    def test_progress_after_each_batch(self):
        adapter = MagicMock()
        adapter.upload.side_effect = lambda f, b, index: photo_for(index)
        progress = []

        UploadDispatcher(adapter).upload_all(files(7), "bulk-1", on_progress=progress.append)

        assert [(p.current, p.total) for p in progress] == [(3, 7), (6, 7), (7, 7)]
        assert all(p.phase == "uploading" for p in progress)

    def test_rejected_file_is_skipped(self):
        adapter = MagicMock()

        def upload(compressed, batch_id, index):
            if index == 1:
                raise ServiceRejectedError("too large", status_code=413)
            if index == 3:
                raise MalformedResponseError("no url")
            return photo_for(index)

        adapter.upload.side_effect = upload
        progress = []

        result = UploadDispatcher(adapter).upload_all(files(5), "bulk-1", on_progress=progress.append)

        assert [p.id for p in result] == ["0", "2", "4"]
        assert progress[-1].current == 5

    def test_network_failure_aborts(self):
        adapter = MagicMock()

        def upload(compressed, batch_id, index):
            if index == 4:
                raise ServiceUnavailableError("connection reset")
            return photo_for(index)

        adapter.upload.side_effect = upload

        with pytest.raises(UploadError, match="connection reset"):
            UploadDispatcher(adapter).upload_all(files(9), "bulk-1")

        # the failing batch finishes, later batches never start
        assert adapter.upload.call_count == 6

    def test_empty_input(self):
        adapter = MagicMock()
        assert UploadDispatcher(adapter).upload_all([], "bulk-1") == []
        adapter.upload.assert_not_called()

    def test_concurrency_must_be_positive(self):
        with pytest.raises(ValueError):
            UploadDispatcher(MagicMock(), concurrency=0)
