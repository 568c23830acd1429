"""Testing utilities and fakes for the images publisher."""

from .fakes import (
    FakeClipboard,
    FakeHttpSession,
    FakeLogger,
    FakeResponse,
    FakeS3Client,
    S3Bucket,
    S3Object,
    create_test_image,
    make_publisher_config,
    setup_test_s3_environment,
    tinify_responses,
)

__all__ = [
    "FakeClipboard",
    "FakeHttpSession",
    "FakeLogger",
    "FakeResponse",
    "FakeS3Client",
    "S3Bucket",
    "S3Object",
    "create_test_image",
    "make_publisher_config",
    "setup_test_s3_environment",
    "tinify_responses",
]
