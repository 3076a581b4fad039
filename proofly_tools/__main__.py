"""Command line entry point for the Proofly tools."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import threading
from pathlib import Path

from . import AppConfig, BatchAnalyzer, SettingsStore
from .errors import ProoflyError
from .models.base import AnalysisRequest, ImageBytesRequest, ImageUrlRequest
from .services.analyzer import BatchItemResult
from .services.session_client import SessionClient
from .tools.registry import ToolDispatcher, ToolRegistry
from .tools.rendering import OutputFormat, format_result_text, render_json, result_to_dict

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Proofly deepfake analysis tools")
    parser.add_argument(
        "--list-tools",
        action="store_true",
        help="Print the available tools and their input schemas, then exit.",
    )
    parser.add_argument(
        "--tool",
        help="Name of a tool to invoke, e.g. check-session-status.",
    )
    parser.add_argument(
        "--arguments",
        default="{}",
        help="JSON object with the tool arguments.",
    )
    parser.add_argument(
        "--image",
        "-i",
        type=Path,
        action="append",
        help="Local image file to analyze. May be repeated.",
    )
    parser.add_argument(
        "--url",
        action="append",
        help="Image URL to analyze. May be repeated.",
    )
    parser.add_argument(
        "--format",
        choices=[fmt.value for fmt in OutputFormat],
        default=OutputFormat.TEXT.value,
        help="Output format.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Settings file to use instead of the default location.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log progress to stderr.",
    )

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.list_tools:
        payload = [spec.describe() for spec in ToolRegistry.list_specs()]
        json.dump(payload, sys.stdout, indent=2)
        sys.stdout.write("\n")
        return

    try:
        config = AppConfig.load(args.config) if args.config else SettingsStore().load()
    except (OSError, ValueError) as exc:
        parser.error(f"Could not load settings: {exc}")
    if not config.api_key:
        logger.info("No Proofly API key configured; proceeding without one.")

    if args.tool:
        try:
            arguments = json.loads(args.arguments)
        except json.JSONDecodeError as exc:
            parser.error(f"--arguments is not valid JSON: {exc}")
        if not isinstance(arguments, dict):
            parser.error("--arguments must be a JSON object.")
        arguments.setdefault("format", args.format)
        cancel = threading.Event()
        with SessionClient(config) as client:
            try:
                output = ToolDispatcher(client).call(args.tool, arguments, cancel=cancel)
            except ProoflyError as exc:
                _fail(exc)
            except KeyboardInterrupt:
                _interrupted(cancel)
        _write(output.text)
        return

    requests: list[AnalysisRequest] = []
    for path in args.image or []:
        if not path.is_file():
            parser.error(f"Image not found: {path}")
        requests.append(ImageBytesRequest(image_bytes=path.read_bytes(), filename=path.name))
    requests.extend(ImageUrlRequest(image_url=url) for url in args.url or [])
    if not requests:
        parser.error("Provide --list-tools, --tool, --image or --url.")

    cancel = threading.Event()
    analyzer = BatchAnalyzer(config)
    try:
        outcomes = analyzer.analyze_many(
            requests,
            cancel=cancel,
            progress_callback=lambda done, total, label: logger.info(
                "[%d/%d] finished %s", done, total, label
            ),
        )
    except KeyboardInterrupt:
        _interrupted(cancel)

    _write(_render_outcomes(outcomes, OutputFormat(args.format), base_url=config.base_url))
    if not all(outcome.ok for outcome in outcomes):
        raise SystemExit(1)


def _render_outcomes(
    outcomes: list[BatchItemResult],
    output_format: OutputFormat,
    *,
    base_url: str,
) -> str:
    if output_format is OutputFormat.JSON:
        payload = [
            {
                "source": outcome.label,
                "result": (
                    result_to_dict(outcome.result, base_url=base_url) if outcome.result else None
                ),
                "error": outcome.error_message,
            }
            for outcome in outcomes
        ]
        return render_json(payload)

    sections = []
    for outcome in outcomes:
        if outcome.result is not None:
            body = format_result_text(outcome.result, base_url=base_url)
        else:
            body = f"Error: {outcome.error_message}\n"
        sections.append(f"## {outcome.label}\n{body}")
    return "\n".join(sections)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _interrupted(cancel: threading.Event) -> None:
    cancel.set()
    logger.warning("Interrupted; pending analyses were cancelled.")
    raise SystemExit(130) from None


def _fail(exc: ProoflyError) -> None:
    sys.stderr.write(f"Error: {exc}\n")
    raise SystemExit(1)


def _write(text: str) -> None:
    sys.stdout.write(text)
    if not text.endswith("\n"):
        sys.stdout.write("\n")


if __name__ == "__main__":  # pragma: no cover
    main()
