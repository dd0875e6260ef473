"""Command line entry points for the enrichment pipeline."""

from __future__ import annotations

import argparse
import json
import signal
import sys
import threading
from typing import Optional, Sequence

from . import logging_manager
from .config_manager import configure_settings, get_settings

logger = logging_manager.get_logger().getChild("cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Word enrichment pipeline")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging output.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP API with uvicorn.")
    serve.add_argument(
        "--host",
        default="0.0.0.0",
        help="Hostname or IP address for the uvicorn server (default: %(default)s)",
    )
    serve.add_argument(
        "--port",
        type=int,
        default=8000,
        help="TCP port for the uvicorn server (default: %(default)s)",
    )
    serve.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload; useful during local development.",
    )
    serve.add_argument(
        "--with-workers",
        action="store_true",
        help="Also run the stream consumers inside the API process.",
    )
    serve.add_argument(
        "--log-level",
        default="info",
        choices=["critical", "error", "warning", "info", "debug", "trace"],
        help="Log level passed to uvicorn (default: %(default)s)",
    )

    subparsers.add_parser("workers", help="Run the stage consumers until interrupted.")

    enrich = subparsers.add_parser("enrich", help="Process a batch of words in-process.")
    enrich.add_argument("words", nargs="+", help="Source words to enrich.")
    enrich.add_argument("--source-language", required=True, help="Language of the source words.")
    enrich.add_argument("--target-language", required=True, help="Language to translate into.")
    enrich.add_argument("--no-audio", action="store_true", help="Skip audio generation.")
    enrich.add_argument("--images", action="store_true", help="Generate mnemonic images.")
    enrich.add_argument("--sentences", action="store_true", help="Generate example sentences.")
    enrich.add_argument(
        "--override-translation",
        action="store_true",
        help="Ignore previously stored results and translate again.",
    )
    enrich.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait for the batch before giving up.",
    )
    return parser


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    factory = "create_app_with_workers" if args.with_workers else "create_app"
    uvicorn.run(
        f"enrichment.webapi.application:{factory}",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
        factory=True,
    )
    return 0


def _run_workers(args: argparse.Namespace) -> int:
    from .container import PipelineContainer

    container = PipelineContainer.build()
    stop_event = threading.Event()

    def _request_stop(signum, frame) -> None:  # pragma: no cover - signal handling
        logger.info(
            "Received signal %s; stopping consumers",
            signum,
            extra={"event": "cli.workers.signal"},
        )
        stop_event.set()

    signal.signal(signal.SIGINT, _request_stop)
    signal.signal(signal.SIGTERM, _request_stop)
    container.runner.start()
    try:
        stop_event.wait()
    finally:
        container.shutdown()
    return 0


def _enrich(args: argparse.Namespace) -> int:
    from .container import PipelineContainer
    from .sessions.models import BatchRequest

    request = BatchRequest(
        source_words=args.words,
        source_language=args.source_language,
        target_language=args.target_language,
        enable_source_audio=not args.no_audio,
        enable_target_audio=not args.no_audio,
        enable_image_generation=args.images,
        enable_sentence_generation=args.sentences,
        override_translation=args.override_translation,
    )
    container = PipelineContainer.build()
    try:
        session = container.manager.submit(request)
        session = container.manager.wait(session.id, timeout=args.timeout)
    finally:
        container.shutdown()
    print(json.dumps(session.to_dict(), indent=2, ensure_ascii=False))
    return 0 if session.status.value == "COMPLETED" else 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Parse ``argv`` and dispatch to the selected command."""

    parser = build_parser()
    args = parser.parse_args(argv)
    if args.debug:
        configure_settings(debug=True)
    logging_manager.configure_logging_level(debug_enabled=get_settings().debug)

    handlers = {"serve": _serve, "workers": _run_workers, "enrich": _enrich}
    return handlers[args.command](args)


if __name__ == "__main__":  # pragma: no cover - manual execution
    sys.exit(main())
