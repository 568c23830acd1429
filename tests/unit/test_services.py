"""Unit tests for the pipeline runner and batch orchestrator."""

from datetime import datetime, timezone
from itertools import count

import pytest

from images_publisher.core.compression import TinifyCompressionClient
from images_publisher.core.exceptions import MissingCredentialError
from images_publisher.core.keys import KeyGenerator
from images_publisher.core.models import (
    BatchStatus,
    ImageItem,
    ItemFailure,
    ItemSuccess,
    PipelineState,
)
from images_publisher.core.services import (
    BatchOrchestrator,
    PipelineRunner,
    ProcessingContext,
)
from images_publisher.core.storage import S3ObjectStoreUploader
from images_publisher.testing import (
    FakeClipboard,
    FakeHttpSession,
    FakeLogger,
    FakeResponse,
    make_publisher_config,
    setup_test_s3_environment,
    tinify_responses,
)

FIXED_INSTANT = datetime(2024, 5, 6, 7, 8, 9, 123000, tzinfo=timezone.utc)


def sequential_ids():
    counter = count(1)
    return lambda: f"{next(counter):08d}-0000-0000-0000-000000000000"


def make_item(name: str = "shot.png", data: bytes = b"x" * 1000) -> ImageItem:
    return ImageItem(
        source_identifier=f"/tmp/{name}",
        data=data,
        filename_hint=name,
        extension=name.rsplit(".", 1)[-1],
    )


class Harness:
    """Runner wired to fakes."""

    def __init__(self):
        self.s3 = setup_test_s3_environment()
        self.http = FakeHttpSession()
        self.logger = FakeLogger()
        self.runner = PipelineRunner(
            compressor=TinifyCompressionClient(session=self.http),
            uploader=S3ObjectStoreUploader(lambda _store: self.s3),
            key_generator=KeyGenerator(
                clock=lambda: FIXED_INSTANT, id_factory=sequential_ids()
            ),
            logger=self.logger,
        )


@pytest.fixture
def harness():
    return Harness()


class TestProcessingContext:
    def test_advances_forward(self):
        context = ProcessingContext(correlation_id="c")
        context.advance(PipelineState.ACQUIRING)
        context.advance(PipelineState.UPLOADING)
        assert context.history == [
            PipelineState.IDLE,
            PipelineState.ACQUIRING,
            PipelineState.UPLOADING,
        ]

    def test_cannot_go_back(self):
        context = ProcessingContext(correlation_id="c")
        context.advance(PipelineState.UPLOADING)
        with pytest.raises(RuntimeError):
            context.advance(PipelineState.COMPRESSING)


class TestPipelineRunner:
    """Tests for PipelineRunner."""

    def test_compress_upload_publish(self, harness):
        harness.http.responses.extend(tinify_responses(b"y" * 600, usage_counter="7"))
        config = make_publisher_config(url_format="markdown")
        clipboard = FakeClipboard()

        outcome = harness.runner.run(lambda: make_item(), config, clipboard=clipboard)

        assert isinstance(outcome, ItemSuccess)
        assert outcome.key == "uploads/2024-05-06T07-08-09-123Z-00000001.png"
        assert outcome.url == (
            "https://s3.example.com/test-bucket/uploads/2024-05-06T07-08-09-123Z-00000001.png"
        )
        assert outcome.formatted_url == f"![]({outcome.url})"
        assert outcome.original_size == 1000
        assert outcome.final_size == 600
        assert outcome.usage_counter == "7"
        assert outcome.source_identifier == "/tmp/shot.png"
        assert clipboard.writes == [outcome.formatted_url]
        assert outcome.clipboard_written

        stored = harness.s3.get_bucket("test-bucket").get_object(outcome.key)
        assert stored.body == b"y" * 600
        assert stored.content_type == "image/png"

        assert harness.runner.last_context.history == [
            PipelineState.IDLE,
            PipelineState.ACQUIRING,
            PipelineState.COMPRESSING,
            PipelineState.UPLOADING,
            PipelineState.PUBLISHING,
            PipelineState.DONE,
        ]

    def test_no_compress_passes_original_bytes(self, harness):
        config = make_publisher_config(compress=False, api_key=None)

        outcome = harness.runner.run(lambda: make_item(), config)

        assert isinstance(outcome, ItemSuccess)
        assert outcome.final_size == outcome.original_size == 1000
        assert harness.http.requests == []
        assert harness.s3.put_calls[0]["Body"] == b"x" * 1000
        assert PipelineState.COMPRESSING not in harness.runner.last_context.history

    def test_unsupported_format_skips_compression(self, harness):
        config = make_publisher_config()

        outcome = harness.runner.run(lambda: make_item("anim.gif", b"GIF89a"), config)

        assert isinstance(outcome, ItemSuccess)
        assert outcome.key.endswith(".gif")
        assert harness.http.requests == []
        assert harness.s3.put_calls[0]["ContentType"] == "image/gif"
        assert PipelineState.COMPRESSING not in harness.runner.last_context.history

    def test_no_input(self, harness):
        clipboard = FakeClipboard()

        outcome = harness.runner.run(lambda: None, make_publisher_config(), clipboard=clipboard)

        assert isinstance(outcome, ItemFailure)
        assert outcome.phase == "acquire"
        assert "No image" in outcome.error_message
        assert harness.s3.operation_count == 0
        assert clipboard.writes == []

    def test_missing_api_key_fails_before_network(self, harness):
        acquired = []

        def acquire():
            acquired.append(True)
            return make_item()

        outcome = harness.runner.run(acquire, make_publisher_config(api_key=None))

        assert isinstance(outcome, ItemFailure)
        assert outcome.phase == "setup"
        assert acquired == []
        assert harness.http.requests == []
        assert harness.s3.operation_count == 0

    def test_submit_unauthorized_never_uploads(self, harness):
        harness.http.queue(FakeResponse(401, text="Unauthorized"))
        clipboard = FakeClipboard()

        outcome = harness.runner.run(lambda: make_item(), make_publisher_config(), clipboard=clipboard)

        assert isinstance(outcome, ItemFailure)
        assert outcome.phase == "submit"
        assert outcome.status_code == 401
        assert "Unauthorized" in outcome.error_message
        assert harness.s3.operation_count == 0
        assert clipboard.writes == []
        assert harness.runner.last_context.history[-2:] == [
            PipelineState.COMPRESSING,
            PipelineState.DONE,
        ]

    def test_upload_failure(self, harness):
        harness.s3.set_failure_mode(True, "Access Denied")
        clipboard = FakeClipboard()

        outcome = harness.runner.run(
            lambda: make_item(), make_publisher_config(compress=False), clipboard=clipboard
        )

        assert isinstance(outcome, ItemFailure)
        assert outcome.phase == "upload"
        assert outcome.error_message == "Access Denied"
        assert clipboard.writes == []
        assert PipelineState.PUBLISHING not in harness.runner.last_context.history

    def test_publish_configuration_error(self, harness):
        config = make_publisher_config(
            compress=False, endpoint="s3.example.com", addressing_style="virtual"
        )

        outcome = harness.runner.run(lambda: make_item(), config)

        assert isinstance(outcome, ItemFailure)
        assert outcome.phase == "configuration"
        assert harness.s3.operation_count == 1

    def test_clipboard_failure_keeps_success(self, harness):
        outcome = harness.runner.run(
            lambda: make_item(),
            make_publisher_config(compress=False),
            clipboard=FakeClipboard(should_fail=True),
        )

        assert isinstance(outcome, ItemSuccess)
        assert not outcome.clipboard_written
        assert harness.logger.get_logs("WARNING")

    def test_unexpected_error_becomes_failure(self, harness):
        def acquire():
            raise RuntimeError("disk on fire")

        outcome = harness.runner.run(acquire, make_publisher_config(compress=False))

        assert isinstance(outcome, ItemFailure)
        assert outcome.phase == "acquiring"
        assert outcome.error_message == "disk on fire"

    def test_state_listener(self, harness):
        seen = []

        harness.runner.run(
            lambda: make_item(),
            make_publisher_config(compress=False),
            on_state=lambda state, _ctx: seen.append(state),
        )

        assert seen == [
            PipelineState.ACQUIRING,
            PipelineState.UPLOADING,
            PipelineState.PUBLISHING,
            PipelineState.DONE,
        ]

    def test_failure_logged_with_correlation(self, harness):
        harness.runner.run(lambda: None, make_publisher_config())

        errors = harness.logger.get_logs("ERROR")
        assert len(errors) == 1
        assert errors[0]["correlation_id"].startswith("item_")
        assert errors[0]["phase"] == "acquire"


class TestBatchOrchestrator:
    """Tests for BatchOrchestrator."""

    def test_partial_failure(self, harness):
        harness.http.responses.extend(tinify_responses(b"a" * 600))
        harness.http.responses.extend(tinify_responses(b"b" * 300))
        harness.http.responses.extend(tinify_responses(b"c" * 100))
        harness.s3.fail_on_call(2)
        clipboard = FakeClipboard()
        orchestrator = BatchOrchestrator(harness.runner, harness.logger)
        items = [
            make_item("one.png", b"1" * 1000),
            make_item("two.png", b"2" * 500),
            make_item("three.png", b"3" * 200),
        ]

        summary = orchestrator.run(items, make_publisher_config(), clipboard=clipboard)

        assert [s.source_identifier for s in summary.succeeded] == [
            "/tmp/one.png",
            "/tmp/three.png",
        ]
        assert [f.source_identifier for f in summary.failed] == ["/tmp/two.png"]
        assert summary.failed[0].phase == "upload"
        assert summary.total_original_bytes == 1200
        assert summary.total_final_bytes == 700
        assert summary.status == BatchStatus.PARTIAL

        assert len(clipboard.writes) == 1
        assert clipboard.writes[0].split("\n") == [
            summary.succeeded[0].formatted_url,
            summary.succeeded[1].formatted_url,
        ]
        assert summary.clipboard_written

    def test_processes_in_order(self, harness):
        orchestrator = BatchOrchestrator(harness.runner, harness.logger)
        items = [make_item(f"{n}.png") for n in ("a", "b", "c")]

        summary = orchestrator.run(items, make_publisher_config(compress=False))

        assert [c["Key"][-12:] for c in harness.s3.put_calls] == [
            "00000001.png",
            "00000002.png",
            "00000003.png",
        ]
        assert summary.status == BatchStatus.SUCCESS

    def test_empty_input_is_no_candidates(self, harness):
        clipboard = FakeClipboard()
        orchestrator = BatchOrchestrator(harness.runner, harness.logger)

        summary = orchestrator.run([], make_publisher_config(), clipboard=clipboard)

        assert summary.status == BatchStatus.NO_CANDIDATES
        assert harness.http.requests == []
        assert harness.s3.operation_count == 0
        assert clipboard.writes == []

    def test_all_failed(self, harness):
        harness.s3.set_failure_mode(True)
        clipboard = FakeClipboard()
        orchestrator = BatchOrchestrator(harness.runner, harness.logger)

        summary = orchestrator.run(
            [make_item("a.gif"), make_item("b.gif")],
            make_publisher_config(),
            clipboard=clipboard,
        )

        assert summary.status == BatchStatus.FAILURE
        assert len(summary.failed) == 2
        assert summary.total_original_bytes == 0
        assert summary.total_final_bytes == 0
        assert clipboard.writes == []
        assert not summary.clipboard_written

    def test_missing_api_key_aborts_before_items(self, harness):
        orchestrator = BatchOrchestrator(harness.runner, harness.logger)

        with pytest.raises(MissingCredentialError):
            orchestrator.run([make_item()], make_publisher_config(api_key=None))

        assert harness.http.requests == []
        assert harness.s3.operation_count == 0

    def test_progress_is_monotonic(self, harness):
        events = []
        orchestrator = BatchOrchestrator(
            harness.runner,
            harness.logger,
            progress=lambda i, total, item, state: events.append((i, total, state)),
        )

        orchestrator.run(
            [make_item("a.png"), make_item("b.png")], make_publisher_config(compress=False)
        )

        indexes = [event[0] for event in events]
        assert indexes == sorted(indexes)
        assert (0, 2, PipelineState.UPLOADING) in events
        assert (1, 2, PipelineState.DONE) in events

    def test_clipboard_failure_does_not_fail_batch(self, harness):
        orchestrator = BatchOrchestrator(harness.runner, harness.logger)

        summary = orchestrator.run(
            [make_item()],
            make_publisher_config(compress=False),
            clipboard=FakeClipboard(should_fail=True),
        )

        assert summary.status == BatchStatus.SUCCESS
        assert not summary.clipboard_written
