"""Single-request writer for S3-compatible object stores."""

from typing import Callable

from botocore.exceptions import BotoCoreError, ClientError

from .exceptions import UploadError
from .logging_config import get_logger
from .models import StoreConfig
from .protocols import ObjectStoreUploader, S3ClientProtocol

S3ClientBuilder = Callable[[StoreConfig], S3ClientProtocol]


class S3ObjectStoreUploader(ObjectStoreUploader):
    """Writes one object per call with a single ``put_object`` request.

    A client is built per upload from the store settings. There is no
    retry, no multipart and no resume: the write either lands whole or
    raises ``UploadError``.
    """

    def __init__(self, client_builder: S3ClientBuilder):
        self._client_builder = client_builder
        self._logger = get_logger("storage")

    def upload(
        self, store: StoreConfig, key: str, data: bytes, content_type: str
    ) -> None:
        """
        Put ``data`` under ``key`` in the configured bucket.

        Raises:
            UploadError: On any client construction, transport or service error.
        """
        self._logger.debug(
            f"Uploading {len(data)} bytes to {store.bucket}/{key} ({content_type})"
        )
        try:
            client = self._client_builder(store)
            client.put_object(
                Bucket=store.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except ClientError as exc:
            error = exc.response.get("Error", {})
            code = error.get("Code", "Unknown")
            message = error.get("Message") or str(exc)
            raise UploadError(f"S3 put_object failed ({code}): {message}") from exc
        except BotoCoreError as exc:
            raise UploadError(f"S3 put_object failed: {exc}") from exc
        except Exception as exc:  # noqa: BLE001
            raise UploadError(str(exc)) from exc

        self._logger.info(f"Uploaded {store.bucket}/{key}")
