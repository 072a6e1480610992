from __future__ import annotations

from typing import Any


class APIError(Exception):
    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details


class IngestError(APIError):
    """Failure of one ingestion. The session keeps no tree after one of these."""


class UnsupportedInputError(IngestError):
    def __init__(self, message: str = "Only folders and ZIP files are supported"):
        super().__init__(415, "unsupported_input", message)


class SizeLimitExceededError(IngestError):
    def __init__(self, limit_mb: int, size: int):
        super().__init__(
            413,
            "size_limit_exceeded",
            f"File exceeds {limit_mb}MB limit",
            {"limit_mb": limit_mb, "size": size},
        )


class ArchiveDecodeError(IngestError):
    def __init__(self, reason: str):
        super().__init__(422, "decode_failure", f"Failed to process ZIP: {reason}")


class IngestionInProgressError(APIError):
    def __init__(self):
        super().__init__(409, "ingestion_in_progress", "Another drop is still being processed")
