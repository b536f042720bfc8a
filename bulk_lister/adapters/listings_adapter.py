"""
Bulk Listings Adapter
=====================
Client for the marketplace bulk listing-creation API.
"""

import os
from typing import List, Dict, Any, Optional

from .base_adapter import ServiceAdapter, MalformedResponseError


class BulkListingsAdapter(ServiceAdapter):
    """Creates many listings with one request"""

    service_name = "Listings service"
    endpoint = "/api/marketplace/listings/bulk"

    def create_listings(self, listings: List[Dict[str, Any]]) -> List[str]:
        """
        Submit listing payloads as one batch.

        Returns:
            Ids of the listings that were created (may be fewer than submitted)
        """
        body = self._post_json({"listings": listings})
        created = body.get("created", [])
        if not isinstance(created, list):
            raise MalformedResponseError(f"{self.service_name} 'created' is not a list")
        return [str(listing_id) for listing_id in created]

    @classmethod
    def from_env(cls, timeout: Optional[float] = None) -> "BulkListingsAdapter":
        base_url = os.getenv("BULK_LISTER_APP_URL")
        token = os.getenv("BULK_LISTER_ACCESS_TOKEN")
        if not all([base_url, token]):
            raise ValueError(
                "Listings service not configured. "
                "Please set BULK_LISTER_APP_URL and BULK_LISTER_ACCESS_TOKEN"
            )
        return cls(base_url, token, timeout=timeout)
