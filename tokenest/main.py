"""Command line entrypoint."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from tokenest.config import get_settings
from tokenest.logging import configure_logging, logger
from tokenest.services.estimator import TokenEstimator, decode_text
from tokenest.services.exceptions import InvalidRequestError, ServiceError


def _read_bytes(source: str) -> bytes:
    if source == "-":
        return sys.stdin.buffer.read()
    return Path(source).read_bytes()


def _estimate_files(estimator: TokenEstimator, sources: list[str]) -> None:
    if not sources:
        print(estimator.estimate_text(_read_bytes("-")))
        return

    total = 0
    for source in sources:
        tokens = estimator.estimate_text(_read_bytes(source))
        total += tokens
        print(f"{tokens}\t{source}")
    if len(sources) > 1:
        print(f"{total}\ttotal")


def _estimate_request(estimator: TokenEstimator, source: str) -> None:
    raw = decode_text(_read_bytes(source), estimator.settings.input.encoding)
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InvalidRequestError(f"Request is not valid JSON: {exc.msg}.") from exc
    except RecursionError as exc:
        raise InvalidRequestError("Request JSON is nested too deeply.") from exc
    response = estimator.estimate_request(payload)
    print(response.model_dump_json())


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="tokenest", description="Estimate language-model token counts"
    )
    parser.add_argument("files", nargs="*", help="Text files to count; stdin when omitted or '-'")
    parser.add_argument(
        "--request",
        metavar="FILE",
        help="JSON count_tokens payload to estimate ('-' for stdin)",
    )
    args = parser.parse_args(argv)
    if args.request and args.files:
        parser.error("--request cannot be combined with text files")

    settings = get_settings()
    configure_logging(settings.log_level_value)
    estimator = TokenEstimator(settings=settings)

    try:
        if args.request:
            _estimate_request(estimator, args.request)
        else:
            _estimate_files(estimator, args.files)
    except (ServiceError, OSError) as exc:
        logger.error("token_estimation_failed", error=str(exc), error_type=type(exc).__name__)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
