"""
Pipeline Configuration
======================
Service endpoints, credentials and tuning knobs, read from the environment.

Environment Variables:
- BULK_LISTER_FUNCTIONS_URL: Base URL of the edge functions (upload, grouping, analysis, enhancement)
- BULK_LISTER_APP_URL: Base URL of the marketplace app (bulk listing API)
- BULK_LISTER_ACCESS_TOKEN: Bearer token for the signed-in seller
- BULK_LISTER_UPLOAD_TIMEOUT / _GROUPING_TIMEOUT / _ANALYSIS_TIMEOUT /
  _ENHANCEMENT_TIMEOUT / _PUBLISH_TIMEOUT: Per-call timeouts in seconds
- BULK_LISTER_UPLOAD_CONCURRENCY: Uploads in flight per batch (default: 3)
- BULK_LISTER_MAX_DIMENSION: Longest edge after compression (default: 1920)
- BULK_LISTER_JPEG_QUALITY: JPEG quality after compression (default: 80)
- BULK_LISTER_COMPRESS_THRESHOLD_KB: Files smaller than this skip compression (default: 300)
- BULK_LISTER_SUCCESS_CLOSE_DELAY: Seconds before the session closes after publishing (default: 3)
"""

import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value else default


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


@dataclass
class PipelineConfig:
    functions_url: str
    app_url: str
    access_token: str

    upload_timeout: float = 60.0
    grouping_timeout: float = 90.0
    analysis_timeout: float = 120.0
    enhancement_timeout: float = 120.0
    publish_timeout: float = 60.0

    upload_concurrency: int = 3
    max_dimension: int = 1920
    jpeg_quality: int = 80
    compress_threshold_bytes: int = 300 * 1024
    success_close_delay: float = 3.0

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        """
        Build configuration from environment variables.

        Raises:
            ValueError: If service URLs or the access token are missing
        """
        functions_url = os.getenv("BULK_LISTER_FUNCTIONS_URL")
        app_url = os.getenv("BULK_LISTER_APP_URL")
        access_token = os.getenv("BULK_LISTER_ACCESS_TOKEN")

        if not all([functions_url, app_url, access_token]):
            raise ValueError(
                "Bulk lister not configured. Please set BULK_LISTER_FUNCTIONS_URL, "
                "BULK_LISTER_APP_URL and BULK_LISTER_ACCESS_TOKEN"
            )

        return cls(
            functions_url=functions_url.rstrip("/"),
            app_url=app_url.rstrip("/"),
            access_token=access_token,
            upload_timeout=_env_float("BULK_LISTER_UPLOAD_TIMEOUT", 60.0),
            grouping_timeout=_env_float("BULK_LISTER_GROUPING_TIMEOUT", 90.0),
            analysis_timeout=_env_float("BULK_LISTER_ANALYSIS_TIMEOUT", 120.0),
            enhancement_timeout=_env_float("BULK_LISTER_ENHANCEMENT_TIMEOUT", 120.0),
            publish_timeout=_env_float("BULK_LISTER_PUBLISH_TIMEOUT", 60.0),
            upload_concurrency=_env_int("BULK_LISTER_UPLOAD_CONCURRENCY", 3),
            max_dimension=_env_int("BULK_LISTER_MAX_DIMENSION", 1920),
            jpeg_quality=_env_int("BULK_LISTER_JPEG_QUALITY", 80),
            compress_threshold_bytes=_env_int("BULK_LISTER_COMPRESS_THRESHOLD_KB", 300) * 1024,
            success_close_delay=_env_float("BULK_LISTER_SUCCESS_CLOSE_DELAY", 3.0),
        )
