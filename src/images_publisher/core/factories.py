"""Factory classes for creating configured service instances."""

from typing import Any, Optional

import boto3
from botocore.config import Config

from .compression import TinifyCompressionClient
from .keys import KeyGenerator
from .logging_config import get_logger
from .models import StoreConfig
from .observability import StructuredLogger
from .protocols import LoggerProtocol, S3ClientProtocol
from .services import BatchOrchestrator, PipelineRunner, ProgressCallback
from .storage import S3ObjectStoreUploader


class LoggerFactory:
    """Factory for creating logger instances."""

    @staticmethod
    def create_logger(name: str, level: Optional[int] = None) -> LoggerProtocol:
        """Create a configured logger instance."""
        logger = get_logger(name)
        if level is not None:
            logger.setLevel(level)
        return StructuredLogger(logger)


class S3ClientFactory:
    """Factory for creating S3 client instances."""

    @staticmethod
    def create_s3_client(store: StoreConfig, **kwargs: Any) -> S3ClientProtocol:
        """
        Create an S3 client bound to an S3-compatible endpoint.

        The addressing style only changes how the client builds its
        requests; public URLs are derived separately.
        """
        session = boto3.Session(
            aws_access_key_id=store.access_key_id,
            aws_secret_access_key=store.secret_access_key,
            region_name=store.region,
        )
        config = Config(s3={"addressing_style": store.addressing_style})
        return session.client(  # type: ignore
            "s3", endpoint_url=store.endpoint, config=config, **kwargs
        )


class PipelineFactory:
    """Factory for creating the runner and the batch orchestrator."""

    @staticmethod
    def create_runner(
        timeout: Optional[float] = None,
        logger: Optional[LoggerProtocol] = None,
    ) -> PipelineRunner:
        """Create a runner wired to the real compression service and store."""
        if logger is None:
            logger = LoggerFactory.create_logger("publisher")

        return PipelineRunner(
            compressor=TinifyCompressionClient(timeout=timeout),
            uploader=S3ObjectStoreUploader(S3ClientFactory.create_s3_client),
            key_generator=KeyGenerator(),
            logger=logger,
        )

    @staticmethod
    def create_orchestrator(
        timeout: Optional[float] = None,
        logger: Optional[LoggerProtocol] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> BatchOrchestrator:
        """Create a sequential batch orchestrator over a fresh runner."""
        if logger is None:
            logger = LoggerFactory.create_logger("publisher")

        runner = PipelineFactory.create_runner(timeout=timeout, logger=logger)
        return BatchOrchestrator(runner=runner, logger=logger, progress=progress)
