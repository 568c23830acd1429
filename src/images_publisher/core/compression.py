"""Client for the TinyPNG lossy compression service.

The service works in two steps: the original bytes are POSTed to the
shrink endpoint, which answers with a ``Location`` header pointing at the
compressed artifact; that URL is then fetched with the same credentials.
Failures are never retried.
"""

from typing import Optional

import requests

from .exceptions import CompressionError, MissingCredentialError
from .logging_config import get_logger
from .models import CompressionResult
from .protocols import CompressionService, HttpSessionProtocol

SHRINK_URL = "https://api.tinify.com/shrink"
AUTH_USERNAME = "api"
USAGE_COUNTER_HEADER = "Compression-Count"


class TinifyCompressionClient(CompressionService):
    """Drives the submit/fetch protocol of the compression service."""

    def __init__(
        self,
        session: Optional[HttpSessionProtocol] = None,
        shrink_url: str = SHRINK_URL,
        timeout: Optional[float] = None,
    ):
        self._session = session or requests.Session()
        self._shrink_url = shrink_url
        # None leaves hang behaviour to the transport defaults
        self._timeout = timeout
        self._logger = get_logger("compression")

    def compress(self, data: bytes, api_key: Optional[str]) -> CompressionResult:
        """
        Compress image bytes through the remote service.

        Args:
            data: Original image bytes.
            api_key: Compression service API key.

        Returns:
            CompressionResult with the compressed bytes and size statistics.

        Raises:
            MissingCredentialError: If no API key is supplied.
            CompressionError: On any non-2xx response, a missing ``Location``
                header, or a transport failure.
        """
        if not api_key:
            raise MissingCredentialError("Compression API key is not configured")

        auth = (AUTH_USERNAME, api_key)

        self._logger.debug(f"Submitting {len(data)} bytes to {self._shrink_url}")
        try:
            submit = self._session.post(
                self._shrink_url, data=data, auth=auth, timeout=self._timeout
            )
        except requests.RequestException as exc:
            raise CompressionError("submit", str(exc)) from exc

        if not submit.ok:
            raise CompressionError("submit", submit.text, submit.status_code)

        location = submit.headers.get("Location")
        if not location:
            raise CompressionError("submit", "missing location")

        usage_counter = submit.headers.get(USAGE_COUNTER_HEADER)

        self._logger.debug(f"Fetching compressed artifact from {location}")
        try:
            download = self._session.get(location, auth=auth, timeout=self._timeout)
        except requests.RequestException as exc:
            raise CompressionError("download", str(exc)) from exc

        if not download.ok:
            raise CompressionError("download", download.text, download.status_code)

        output = download.content
        self._logger.info(
            f"Compressed {len(data)} -> {len(output)} bytes"
            f" (usage counter: {usage_counter or 'n/a'})"
        )
        return CompressionResult(
            output=output,
            before_size=len(data),
            after_size=len(output),
            usage_counter=usage_counter,
        )
