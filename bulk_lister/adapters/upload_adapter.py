"""
Object Upload Adapter
=====================
Sends one compressed photo to the upload edge function, which stores it in
the CDN and returns the URL of each rendition.
"""

import os
from typing import Optional

from .base_adapter import ServiceAdapter, MalformedResponseError
from ..schema.bulk_listing import UploadedPhoto


class UploadAdapter(ServiceAdapter):
    """Client for the object upload service"""

    service_name = "Upload service"
    endpoint = "/functions/v1/upload-to-cloudinary"

    def upload(self, compressed, batch_id: str, index: int) -> UploadedPhoto:
        """
        Upload a single file.

        Args:
            compressed: CompressedFile to send
            batch_id: Correlation id shared by every file in the session
            index: Position of the file in the submission order

        Returns:
            UploadedPhoto with the stored renditions

        Raises:
            ServiceRejectedError: Upload refused for this file
            ServiceUnavailableError: Network failure
        """
        body = self._post_multipart(
            files={"file": (compressed.filename, compressed.content, compressed.content_type)},
            data={"listingId": batch_id, "index": str(index)},
        )

        data = body.get("data")
        if not isinstance(data, dict) or not data.get("url"):
            raise MalformedResponseError(f"{self.service_name} response has no image URL")
        return UploadedPhoto.from_dict(data)

    @classmethod
    def from_env(cls, timeout: Optional[float] = None) -> "UploadAdapter":
        base_url = os.getenv("BULK_LISTER_FUNCTIONS_URL")
        token = os.getenv("BULK_LISTER_ACCESS_TOKEN")
        if not all([base_url, token]):
            raise ValueError(
                "Upload service not configured. "
                "Please set BULK_LISTER_FUNCTIONS_URL and BULK_LISTER_ACCESS_TOKEN"
            )
        return cls(base_url, token, timeout=timeout)
