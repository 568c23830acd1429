"""Compress, upload and publish services for single items and batches."""

import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from .exceptions import (
    ClipboardError,
    ImagesPublisherError,
    MissingCredentialError,
    NoInputError,
)
from .keys import KeyGenerator
from .media import content_type, is_compressible
from .models import (
    BatchSummary,
    ImageItem,
    ItemFailure,
    ItemOutcome,
    ItemSuccess,
    PipelineState,
    PublisherConfig,
)
from .observability import LogContext
from .protocols import (
    ClipboardWriter,
    CompressionService,
    LoggerProtocol,
    ObjectStoreUploader,
)
from .urls import build_public_url, format_url

ImageSource = Callable[[], Optional[ImageItem]]
StateListener = Callable[[PipelineState, "ProcessingContext"], None]
ProgressCallback = Callable[[int, int, ImageItem, PipelineState], None]

_STATE_ORDER = list(PipelineState)


@dataclass
class ProcessingContext:
    """Context for one item run; states only ever move forward."""

    correlation_id: str
    start_time: float = field(default_factory=time.time)
    state: PipelineState = PipelineState.IDLE
    history: List[PipelineState] = field(
        default_factory=lambda: [PipelineState.IDLE]
    )
    item: Optional[ImageItem] = None
    log_context: LogContext = field(default_factory=LogContext)

    def advance(self, state: PipelineState) -> None:
        if _STATE_ORDER.index(state) <= _STATE_ORDER.index(self.state):
            raise RuntimeError(f"Cannot move from {self.state.value} to {state.value}")
        self.state = state
        self.history.append(state)

    @property
    def elapsed(self) -> float:
        return time.time() - self.start_time


def require_api_key(config: PublisherConfig) -> None:
    """Fail before any network call when compression lacks credentials."""
    if config.compress and not config.compression_api_key:
        raise MissingCredentialError("Compression API key is not configured")


class PipelineRunner:
    """Runs one item through acquire, compress, upload and publish."""

    def __init__(
        self,
        compressor: CompressionService,
        uploader: ObjectStoreUploader,
        key_generator: KeyGenerator,
        logger: LoggerProtocol,
    ):
        self._compressor = compressor
        self._uploader = uploader
        self._key_generator = key_generator
        self._logger = logger
        self.last_context: Optional[ProcessingContext] = None

    def run(
        self,
        acquire: ImageSource,
        config: PublisherConfig,
        clipboard: Optional[ClipboardWriter] = None,
        on_state: Optional[StateListener] = None,
    ) -> ItemOutcome:
        """
        Process the image produced by ``acquire``.

        Every failure ends the run as an ``ItemFailure``; nothing is raised.
        When ``clipboard`` is given, the formatted URL is written to it
        before the success is returned.

        Args:
            acquire: Provider returning the image, or None when there is none.
            config: Configuration for this invocation.
            clipboard: Writer for the formatted URL (interactive mode).
            on_state: Listener called on every state transition.

        Returns:
            ItemSuccess or ItemFailure.
        """
        correlation_id = f"item_{uuid.uuid4().hex[:12]}"
        context = ProcessingContext(
            correlation_id=correlation_id,
            log_context=LogContext(
                correlation_id=correlation_id,
                operation="publish_item",
                component="pipeline_runner",
            ),
        )
        self.last_context = context

        def advance(state: PipelineState) -> None:
            context.advance(state)
            if on_state is not None:
                on_state(state, context)

        source_identifier = ""
        try:
            require_api_key(config)

            advance(PipelineState.ACQUIRING)
            item = acquire()
            if item is None:
                raise NoInputError("No image found at the source")
            context.item = item
            source_identifier = item.source_identifier
            log_context = context.log_context.with_metadata(
                source=item.source_identifier, extension=item.extension
            )
            context.log_context = log_context

            original_size = item.size
            body = item.data
            usage_counter = None

            if config.compress and is_compressible(item.extension):
                advance(PipelineState.COMPRESSING)
                self._logger.debug(
                    "Compressing image", log_context.with_operation("compress")
                )
                result = self._compressor.compress(
                    item.data, config.compression_api_key
                )
                body = result.output
                usage_counter = result.usage_counter
            elif config.compress:
                self._logger.debug(
                    "Skipping compression for unsupported format", log_context
                )

            advance(PipelineState.UPLOADING)
            key = self._key_generator.generate(
                config.store.key_prefix, item.extension
            )
            self._logger.debug(
                "Uploading image", log_context.with_operation("upload"), key=key
            )
            self._uploader.upload(
                config.store, key, body, content_type(item.extension)
            )

            advance(PipelineState.PUBLISHING)
            url = build_public_url(config.public_url, key)
            formatted_url = format_url(url, config.url_format)

            outcome: ItemOutcome = ItemSuccess(
                source_identifier=source_identifier,
                key=key,
                url=url,
                formatted_url=formatted_url,
                original_size=original_size,
                final_size=len(body),
                usage_counter=usage_counter,
            )

            if clipboard is not None and self._write_clipboard(
                clipboard, formatted_url, log_context
            ):
                outcome = outcome.model_copy(update={"clipboard_written": True})

            self._logger.info(
                "Published image",
                log_context,
                url=url,
                processing_time_ms=round(context.elapsed * 1000),
            )

        except ImagesPublisherError as exc:
            outcome = ItemFailure(
                source_identifier=source_identifier,
                error_message=str(exc),
                phase=exc.phase,
                status_code=getattr(exc, "status_code", None),
            )
            self._logger.error(
                "Image publishing failed",
                context.log_context.with_metadata(phase=exc.phase, error=str(exc)),
            )

        except Exception as exc:  # noqa: BLE001
            outcome = ItemFailure(
                source_identifier=source_identifier,
                error_message=str(exc),
                phase=context.state.value,
            )
            self._logger.error(
                "Unexpected error while publishing image",
                context.log_context.with_metadata(
                    phase=context.state.value, error=repr(exc)
                ),
            )

        advance(PipelineState.DONE)
        return outcome

    def process(
        self,
        item: ImageItem,
        config: PublisherConfig,
        on_state: Optional[StateListener] = None,
    ) -> ItemOutcome:
        """Process an already acquired item, without touching the clipboard."""
        return self.run(lambda: item, config, on_state=on_state)

    def _write_clipboard(
        self, clipboard: ClipboardWriter, text: str, log_context: LogContext
    ) -> bool:
        # The object is already stored; a clipboard failure must not hide the URL
        try:
            clipboard.write(text)
        except ClipboardError as exc:
            self._logger.warning(
                "Could not write to clipboard", log_context, error=str(exc)
            )
            return False
        return True


class BatchOrchestrator:
    """Runs items one after another and aggregates the results.

    Failures never stop the batch. The clipboard is written once, after
    the last item, with every formatted URL joined by newlines.
    """

    def __init__(
        self,
        runner: PipelineRunner,
        logger: LoggerProtocol,
        progress: Optional[ProgressCallback] = None,
    ):
        self._runner = runner
        self._logger = logger
        self._progress = progress

    def run(
        self,
        items: Sequence[ImageItem],
        config: PublisherConfig,
        clipboard: Optional[ClipboardWriter] = None,
    ) -> BatchSummary:
        """
        Process ``items`` strictly sequentially.

        Raises:
            MissingCredentialError: If compression is requested without an
                API key. Raised before any item is touched.

        Returns:
            BatchSummary; its status is ``NO_CANDIDATES`` for empty input.
        """
        require_api_key(config)

        summary = BatchSummary()
        total = len(items)

        if not items:
            self._logger.info("No images to process")
            return summary

        self._logger.info(f"Processing {total} images sequentially")

        for index, item in enumerate(items):
            outcome = self._runner.process(
                item, config, on_state=self._state_listener(index, total, item)
            )
            summary.record(outcome)

            if isinstance(outcome, ItemFailure):
                self._logger.warning(
                    f"Item {index + 1}/{total} failed: {item.source_identifier}"
                    f" ({outcome.phase}): {outcome.error_message}"
                )
            else:
                self._logger.info(
                    f"Item {index + 1}/{total} published: {outcome.url}"
                )

        if summary.succeeded and clipboard is not None:
            try:
                clipboard.write("\n".join(summary.formatted_urls))
                summary.clipboard_written = True
            except ClipboardError as exc:
                self._logger.warning(f"Could not write to clipboard: {exc}")

        self._log_summary(summary)
        return summary

    def _state_listener(
        self, index: int, total: int, item: ImageItem
    ) -> Optional[StateListener]:
        if self._progress is None:
            return None
        progress = self._progress

        def listener(state: PipelineState, _context: ProcessingContext) -> None:
            progress(index, total, item, state)

        return listener

    def _log_summary(self, summary: BatchSummary) -> None:
        self._logger.info(
            f"Batch finished with status {summary.status.value}: "
            f"{len(summary.succeeded)} succeeded, {len(summary.failed)} failed, "
            f"{summary.total_original_bytes} -> {summary.total_final_bytes} bytes"
        )
