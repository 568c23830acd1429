"""Protocol definitions for dependency injection and testability."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional, Protocol

from .models import CompressionResult, StoreConfig


class S3ClientProtocol(Protocol):
    """Protocol for the S3 client operations the uploader needs."""

    def put_object(
        self, Bucket: str, Key: str, Body: bytes, ContentType: str
    ) -> Dict[str, Any]:
        """Put object to S3."""
        ...


class HttpResponseProtocol(Protocol):
    """Subset of ``requests.Response`` used by the compression client."""

    status_code: int
    headers: Mapping[str, str]
    content: bytes
    text: str

    @property
    def ok(self) -> bool:
        ...


class HttpSessionProtocol(Protocol):
    """Subset of ``requests.Session`` used by the compression client."""

    def post(self, url: str, **kwargs: Any) -> HttpResponseProtocol:
        ...

    def get(self, url: str, **kwargs: Any) -> HttpResponseProtocol:
        ...


class ClipboardWriter(Protocol):
    """Destination for the final formatted URL(s)."""

    def write(self, text: str) -> None:
        ...


class LoggerProtocol(Protocol):
    """Protocol for logging operations."""

    def debug(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log debug message."""
        ...

    def info(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log info message."""
        ...

    def warning(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log warning message."""
        ...

    def error(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log error message."""
        ...


class CompressionService(ABC):
    """Abstract lossy compression backend."""

    @abstractmethod
    def compress(self, data: bytes, api_key: Optional[str]) -> CompressionResult:
        """Compress image bytes."""
        ...


class ObjectStoreUploader(ABC):
    """Abstract single-request object store writer."""

    @abstractmethod
    def upload(
        self, store: StoreConfig, key: str, data: bytes, content_type: str
    ) -> None:
        """Write bytes under a key."""
        ...
