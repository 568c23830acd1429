"""Main module for the images publisher CLI."""

import argparse
import sys
from typing import List, Optional

from .clipboard import StdoutClipboard, SystemClipboard
from .config import Settings, load_settings
from .core import (
    BatchStatus,
    BatchSummary,
    ImageItem,
    ImagesPublisherError,
    ItemFailure,
    ItemOutcome,
    MissingCredentialError,
    PipelineState,
    get_logger,
    pretty_bytes,
    savings_percent,
    setup_logger,
    with_error_handling,
)
from .core.factories import LoggerFactory, PipelineFactory
from .sources import load_selection, read_image_file, select_image_files
from . import __version__

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_PARTIAL = 2
EXIT_NO_CANDIDATES = 3

_PHASE_LABELS = {
    PipelineState.COMPRESSING: "Compressing",
    PipelineState.UPLOADING: "Uploading",
}


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with the upload, batch and version commands."""
    parser = argparse.ArgumentParser(
        prog="images-publisher",
        description="Compress images, upload them to S3-compatible storage and copy shareable URLs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Compress one screenshot, upload it and copy the URL
  images-publisher upload ~/Desktop/screenshot.png

  # Upload a selection as-is and copy Markdown image links
  images-publisher batch --no-compress --format markdown *.png *.gif

  # Show version
  images-publisher version

Configuration is read from IMAGES_PUBLISHER_* environment variables or .env
        """,
    )

    subparsers: argparse._SubParsersAction = parser.add_subparsers(
        dest="command", help="Available commands"
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--no-compress",
        action="store_true",
        help="Upload the original bytes without calling the compression service",
    )
    common.add_argument(
        "--format",
        dest="url_format",
        choices=["raw", "markdown", "bbcode"],
        default=None,
        help="URL output format (default: IMAGES_PUBLISHER_URL_FORMAT or raw)",
    )
    common.add_argument(
        "--print",
        dest="print_only",
        action="store_true",
        help="Print the URL(s) to stdout instead of copying them",
    )
    common.add_argument("--debug", action="store_true", help="Enable debug logging")

    upload_parser = subparsers.add_parser(
        "upload", parents=[common], help="Publish a single image"
    )
    upload_parser.add_argument("path", help="Image file (file:// URLs accepted)")

    batch_parser = subparsers.add_parser(
        "batch", parents=[common], help="Publish several images one by one"
    )
    batch_parser.add_argument("paths", nargs="+", help="Files to publish; non-images are ignored")

    subparsers.add_parser("version", help="Show version information")

    return parser


def render_item_outcome(outcome: ItemOutcome) -> str:
    """Human-readable result of a single-item run."""
    if isinstance(outcome, ItemFailure):
        return f"Upload failed ({outcome.phase}): {outcome.error_message}"

    lines = [f"Uploaded {outcome.key}", f"  URL: {outcome.url}"]
    if outcome.final_size != outcome.original_size:
        saved = outcome.original_size - outcome.final_size
        lines.append(
            f"  Size: {pretty_bytes(outcome.original_size)} -> "
            f"{pretty_bytes(outcome.final_size)} "
            f"(saved {pretty_bytes(saved)}, "
            f"{savings_percent(outcome.original_size, outcome.final_size)})"
        )
    else:
        lines.append(f"  Size: {pretty_bytes(outcome.final_size)}")
    if outcome.usage_counter:
        lines.append(f"  Compressions this month: {outcome.usage_counter}")
    return "\n".join(lines)


def render_batch_summary(summary: BatchSummary) -> str:
    """Human-readable result of a batch run."""
    status = summary.status
    if status == BatchStatus.NO_CANDIDATES:
        return "No images found in the selection (supported: PNG, JPG, WebP, GIF, SVG, BMP, ICO)"

    if status == BatchStatus.FAILURE:
        header = f"All {len(summary.failed)} uploads failed"
    else:
        count = len(summary.succeeded)
        header = f"Uploaded {count} image{'s' if count > 1 else ''}"
        if status == BatchStatus.PARTIAL:
            header += f", {len(summary.failed)} failed"
        header += (
            f" - saved {pretty_bytes(summary.saved_bytes)} "
            f"({savings_percent(summary.total_original_bytes, summary.total_final_bytes)})"
        )

    lines = [header]
    for failure in summary.failed:
        lines.append(
            f"  FAILED {failure.source_identifier} ({failure.phase}): {failure.error_message}"
        )
    return "\n".join(lines)


def batch_exit_code(summary: BatchSummary) -> int:
    return {
        BatchStatus.SUCCESS: EXIT_SUCCESS,
        BatchStatus.PARTIAL: EXIT_PARTIAL,
        BatchStatus.FAILURE: EXIT_FAILURE,
        BatchStatus.NO_CANDIDATES: EXIT_NO_CANDIDATES,
    }[summary.status]



def load_configured_settings(args: argparse.Namespace) -> Settings:
    """Load settings and apply the log level: --debug, then the setting, then LOG_LEVEL."""
    settings = load_settings()
    setup_logger(level="DEBUG" if args.debug else settings.log_level)
    return settings

@with_error_handling
def run_upload(args: argparse.Namespace) -> int:
    """Single image: rich feedback, URL copied before reporting success."""
    settings = load_configured_settings(args)
    config = settings.to_publisher_config(
        compress=not args.no_compress, url_format=args.url_format
    )
    clipboard = StdoutClipboard() if args.print_only else SystemClipboard()
    runner = PipelineFactory.create_runner(timeout=config.request_timeout)

    outcome = runner.run(lambda: read_image_file(args.path), config, clipboard=clipboard)

    if isinstance(outcome, ItemFailure):
        print(render_item_outcome(outcome), file=sys.stderr)
        return EXIT_FAILURE

    report = render_item_outcome(outcome)
    if not args.print_only:
        if outcome.clipboard_written:
            report += "\nURL copied to clipboard"
        else:
            report += "\nCould not copy the URL to the clipboard"
    print(report, file=sys.stderr)
    return EXIT_SUCCESS


@with_error_handling
def run_batch(args: argparse.Namespace) -> int:
    """Several images: sequential, fail-soft, one clipboard write at the end."""
    logger = get_logger("publisher")
    settings = load_configured_settings(args)
    config = settings.to_publisher_config(
        compress=not args.no_compress, url_format=args.url_format
    )

    candidates = select_image_files(args.paths)
    skipped = len(args.paths) - len(candidates)
    if skipped:
        logger.info(f"Ignoring {skipped} non-image file(s)")

    items: List[ImageItem] = load_selection(candidates)
    clipboard = StdoutClipboard() if args.print_only else SystemClipboard()

    def progress(index: int, total: int, item: ImageItem, state: PipelineState) -> None:
        label = _PHASE_LABELS.get(state)
        if label:
            logger.info(f"{label} {index + 1}/{total}... {item.filename_hint}")

    orchestrator = PipelineFactory.create_orchestrator(
        timeout=config.request_timeout,
        logger=LoggerFactory.create_logger("publisher"),
        progress=progress,
    )
    summary = orchestrator.run(items, config, clipboard=clipboard)

    report = render_batch_summary(summary)
    if summary.clipboard_written and not args.print_only:
        report += "\nURLs copied to clipboard"
    print(report, file=sys.stderr)
    return batch_exit_code(summary)


def main(argv: Optional[List[str]] = None) -> None:
    """
    Entry point for the images publisher command-line interface (CLI).

    Dispatches to the single-image ``upload`` command, the multi-image
    ``batch`` command or ``version``, and exits with a status code that
    tells success, partial success and failure apart.
    """
    parser = build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    if args.command == "version":
        print("Images Publisher CLI")
        print(f"Version {__version__}")
        print("Compress, upload to S3-compatible storage, share")
        sys.exit(EXIT_SUCCESS)

    if args.command not in ("upload", "batch"):
        parser.print_help()
        sys.exit(EXIT_FAILURE)

    logger = get_logger("publisher")

    try:
        if args.command == "upload":
            code = run_upload(args)
        else:
            code = run_batch(args)
    except MissingCredentialError as exc:
        logger.error(f"{exc}. Set IMAGES_PUBLISHER_TINYPNG_API_KEY or use --no-compress.")
        code = EXIT_FAILURE
    except ImagesPublisherError as exc:
        logger.error(f"Operation failed: {exc}")
        code = EXIT_FAILURE
    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        code = EXIT_FAILURE

    sys.exit(code)


if __name__ == "__main__":
    main()
