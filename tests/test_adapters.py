"""
Tests for the HTTP service adapters: wire format and error mapping.
"""

from unittest.mock import MagicMock

import pytest
import requests

from bulk_lister.adapters import (
    AnalysisAdapter,
    BulkListingsAdapter,
    EnhancementAdapter,
    GroupingAdapter,
    MalformedResponseError,
    ServiceRejectedError,
    ServiceUnavailableError,
    UploadAdapter,
)
from bulk_lister.ai import analyze_groups
from bulk_lister.schema import UploadedPhoto
from bulk_lister.storage import CompressedFile


def response(status=200, body=None, text=""):
    resp = MagicMock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.text = text
    if isinstance(body, Exception):
        resp.json.side_effect = body
    else:
        resp.json.return_value = body
    return resp


@pytest.fixture
def http():
    return MagicMock(spec=requests.Session)


class TestServiceAdapterErrors:

    def test_network_error(self, http):
        http.post.side_effect = requests.ConnectionError("refused")
        adapter = AnalysisAdapter("https://fn.test", "tok", session=http)

        with pytest.raises(ServiceUnavailableError):
            adapter.analyze(["u1"])

    def test_timeout_is_unavailable(self, http):
        http.post.side_effect = requests.Timeout("slow")
        adapter = GroupingAdapter("https://fn.test", "tok", timeout=5, session=http)

        with pytest.raises(ServiceUnavailableError):
            adapter.group_photos(["u1"])
        assert http.post.call_args.kwargs["timeout"] == 5

    def test_error_status_uses_body_message(self, http):
        http.post.return_value = response(429, {"error": "Rate limited"})
        adapter = EnhancementAdapter("https://fn.test", "tok", session=http)

        with pytest.raises(ServiceRejectedError, match="Rate limited") as exc:
            adapter.remove_background("u1", "bulk-1-0")
        assert exc.value.status_code == 429

    def test_error_status_without_json(self, http):
        http.post.return_value = response(502, ValueError("not json"), text="Bad Gateway")
        adapter = EnhancementAdapter("https://fn.test", "tok", session=http)

        with pytest.raises(ServiceRejectedError, match="Bad Gateway"):
            adapter.remove_background("u1", "bulk-1-0")

    def test_invalid_json(self, http):
        http.post.return_value = response(200, ValueError("not json"))
        adapter = AnalysisAdapter("https://fn.test", "tok", session=http)

        with pytest.raises(MalformedResponseError):
            adapter.analyze(["u1"])

    def test_non_object_body(self, http):
        http.post.return_value = response(200, ["a", "b"])
        adapter = AnalysisAdapter("https://fn.test", "tok", session=http)

        with pytest.raises(MalformedResponseError):
            adapter.analyze(["u1"])


class TestUploadAdapter:

    def test_multipart_upload(self, http):
        http.post.return_value = response(200, {"data": {
            "id": "pub-1",
            "url": "https://cdn.test/1.jpg",
            "cardUrl": "https://cdn.test/1_card.jpg",
            "thumbnailUrl": "https://cdn.test/1_thumb.jpg",
            "mobileCardUrl": "https://cdn.test/1_mobile.jpg",
        }})
        adapter = UploadAdapter("https://fn.test/", "tok", session=http)

        photo = adapter.upload(CompressedFile("a.jpg", b"bytes", "image/jpeg"), "bulk-9", 4)

        args, kwargs = http.post.call_args
        assert args[0] == "https://fn.test/functions/v1/upload-to-cloudinary"
        assert kwargs["files"]["file"] == ("a.jpg", b"bytes", "image/jpeg")
        assert kwargs["data"] == {"listingId": "bulk-9", "index": "4"}
        assert kwargs["headers"] == {"Authorization": "Bearer tok"}
        assert photo.url == "https://cdn.test/1.jpg"
        assert photo.mobile_card_url == "https://cdn.test/1_mobile.jpg"

    def test_missing_url(self, http):
        http.post.return_value = response(200, {"data": {"id": "x"}})
        adapter = UploadAdapter("https://fn.test", "tok", session=http)

        with pytest.raises(MalformedResponseError):
            adapter.upload(CompressedFile("a.jpg", b"", "image/jpeg"), "bulk-1", 0)


class TestGroupingAdapter:

    def test_groups_parsed(self, http):
        http.post.return_value = response(200, {"groups": [
            {"id": "g1", "photoIndexes": [0, 2, 2], "suggestedName": "Bike", "confidence": 140},
            {"photoIndexes": [1]},
        ]})
        adapter = GroupingAdapter("https://fn.test", "tok", session=http)

        groups = adapter.group_photos(["u0", "u1", "u2"])

        assert http.post.call_args.kwargs["json"] == {"imageUrls": ["u0", "u1", "u2"]}
        assert groups[0].photo_indexes == [0, 2]
        assert groups[0].confidence == 100
        assert groups[1].id == "group-2"
        assert groups[1].suggested_name == "Product 2"
        assert groups[1].confidence == 50

    def test_repeated_ids_made_unique(self, http):
        http.post.return_value = response(200, {"groups": [
            {"id": "group-1", "photoIndexes": [0]},
            {"id": "group-1", "photoIndexes": [1]},
            {"id": "group-1-2", "photoIndexes": [2]},
        ]})
        adapter = GroupingAdapter("https://fn.test", "tok", session=http)
        analysis = MagicMock()
        analysis.analyze.side_effect = lambda urls: {"urls": urls}

        groups = adapter.group_photos(["u0", "u1", "u2"])
        results = analyze_groups(analysis, groups, [UploadedPhoto(id=u, url=u) for u in ("u0", "u1", "u2")])

        assert [g.id for g in groups] == ["group-1", "group-1-2", "group-1-2-2"]
        assert len(results) == 3
        assert results["group-1-2"] == {"urls": ["u1"]}

    @pytest.mark.parametrize("body", [
        {},
        {"groups": []},
        {"groups": [{"photoIndexes": [5]}]},
        {"groups": [{"photoIndexes": ["0"]}]},
        {"groups": ["g1"]},
    ])
    def test_invalid_groupings(self, http, body):
        http.post.return_value = response(200, body)
        adapter = GroupingAdapter("https://fn.test", "tok", session=http)

        with pytest.raises(MalformedResponseError):
            adapter.group_photos(["u0", "u1"])


class TestAnalysisAdapter:

    def test_sends_hints(self, http):
        http.post.return_value = response(200, {"analysis": {"brand": "Trek"}})
        adapter = AnalysisAdapter("https://fn.test", "tok", session=http)

        assert adapter.analyze(["u0"]) == {"brand": "Trek"}
        assert http.post.call_args.kwargs["json"] == {"imageUrls": ["u0"], "userHints": {}}
        assert http.post.call_args.kwargs["headers"]["Content-Type"] == "application/json"


class TestEnhancementAdapter:

    def test_card_url_fallback(self, http):
        http.post.return_value = response(200, {"data": {"cardUrl": "https://cdn.test/c.png"}})
        adapter = EnhancementAdapter("https://fn.test", "tok", session=http)

        assert adapter.remove_background("u1", "bulk-1-0") == "https://cdn.test/c.png"
        assert http.post.call_args.kwargs["json"] == {"imageUrl": "u1", "listingId": "bulk-1-0"}

    def test_no_url(self, http):
        http.post.return_value = response(200, {"data": {}})
        adapter = EnhancementAdapter("https://fn.test", "tok", session=http)

        with pytest.raises(MalformedResponseError):
            adapter.remove_background("u1", "bulk-1-0")


class TestBulkListingsAdapter:

    def test_created_ids(self, http):
        http.post.return_value = response(200, {"created": [101, "102"]})
        adapter = BulkListingsAdapter("https://app.test", "tok", session=http)

        assert adapter.create_listings([{"title": "a"}, {"title": "b"}]) == ["101", "102"]
        assert http.post.call_args.args[0] == "https://app.test/api/marketplace/listings/bulk"
        assert http.post.call_args.kwargs["json"] == {"listings": [{"title": "a"}, {"title": "b"}]}

    def test_from_env_requires_settings(self, monkeypatch):
        monkeypatch.delenv("BULK_LISTER_APP_URL", raising=False)
        monkeypatch.setenv("BULK_LISTER_ACCESS_TOKEN", "tok")

        with pytest.raises(ValueError):
            BulkListingsAdapter.from_env()
