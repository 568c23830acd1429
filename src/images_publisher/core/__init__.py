"""Core pipeline components for the images publisher."""

from .compression import TinifyCompressionClient
from .exceptions import (
    ClipboardError,
    CompressionError,
    ConfigurationError,
    ImagesPublisherError,
    MissingCredentialError,
    NoInputError,
    UploadError,
    with_error_handling,
)
from .keys import KeyGenerator, format_timestamp
from .logging_config import get_logger, setup_logger
from .media import (
    COMPRESSIBLE_EXTENSIONS,
    IMAGE_EXTENSIONS,
    content_type,
    extract_extension,
    is_compressible,
    is_image_file,
    pretty_bytes,
    savings_percent,
)
from .models import (
    BatchStatus,
    BatchSummary,
    CompressionResult,
    ImageItem,
    ItemFailure,
    ItemOutcome,
    ItemSuccess,
    PipelineState,
    PublicUrlConfig,
    PublisherConfig,
    StoreConfig,
)
from .services import BatchOrchestrator, PipelineRunner, ProcessingContext
from .storage import S3ObjectStoreUploader
from .urls import build_public_url, format_url, join_url

__all__ = [
    "BatchOrchestrator",
    "BatchStatus",
    "BatchSummary",
    "COMPRESSIBLE_EXTENSIONS",
    "ClipboardError",
    "CompressionError",
    "CompressionResult",
    "ConfigurationError",
    "IMAGE_EXTENSIONS",
    "ImageItem",
    "ImagesPublisherError",
    "ItemFailure",
    "ItemOutcome",
    "ItemSuccess",
    "KeyGenerator",
    "MissingCredentialError",
    "NoInputError",
    "PipelineRunner",
    "PipelineState",
    "ProcessingContext",
    "PublicUrlConfig",
    "PublisherConfig",
    "S3ObjectStoreUploader",
    "StoreConfig",
    "TinifyCompressionClient",
    "UploadError",
    "build_public_url",
    "content_type",
    "extract_extension",
    "format_timestamp",
    "format_url",
    "get_logger",
    "is_compressible",
    "is_image_file",
    "join_url",
    "pretty_bytes",
    "savings_percent",
    "setup_logger",
    "with_error_handling",
]
