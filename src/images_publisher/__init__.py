"""Compress images, upload them to S3-compatible storage and share the URL."""

__version__ = "0.1.0"
