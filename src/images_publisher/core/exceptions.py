"""Custom exceptions and error handling utilities for the images publisher."""

from __future__ import annotations

from functools import wraps
from typing import Any, Callable, Optional, TypeVar

from .logging_config import get_logger


class ImagesPublisherError(Exception):
    """Base exception for all images publisher errors."""

    phase = "pipeline"


class NoInputError(ImagesPublisherError):
    """Error raised when the source yields no image."""

    phase = "acquire"


class MissingCredentialError(ImagesPublisherError):
    """Error raised when the compression API key is absent."""

    phase = "setup"


class CompressionError(ImagesPublisherError):
    """Error raised when the compression service rejects or breaks protocol.

    ``phase`` is ``"submit"`` for the POST of the original bytes and
    ``"download"`` for the GET of the compressed artifact.
    """

    def __init__(
        self, phase: str, message: str, status_code: Optional[int] = None
    ) -> None:
        self.phase = phase
        self.status_code = status_code
        self.message = message
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"Compression {self.phase} failed ({self.status_code}): {self.message}"
        return f"Compression {self.phase} failed: {self.message}"


class UploadError(ImagesPublisherError):
    """Error raised for object store write failures."""

    phase = "upload"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(ImagesPublisherError):
    """Error raised for invalid configuration options."""

    phase = "configuration"


class ClipboardError(ImagesPublisherError):
    """Error raised when the clipboard cannot be written."""

    phase = "publish"


F = TypeVar("F", bound=Callable[..., Any])


def with_error_handling(func: F) -> F:
    """Wrap a function with standardized error handling."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:  # type: ignore[override]
        logger = get_logger("publisher")
        try:
            return func(*args, **kwargs)
        except ImagesPublisherError:
            logger.debug("Publisher error", exc_info=True)
            raise
        except Exception as exc:  # noqa: BLE001
            logger.error(f"Unhandled error in {func.__name__}: {exc}", exc_info=True)
            raise ImagesPublisherError(str(exc)) from exc

    return wrapper  # type: ignore[return-value]
