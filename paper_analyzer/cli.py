#!/usr/bin/env python3
"""
Upload PDFs to a running analyzer and print the reconstructed results.

Usage:
    paper-analyzer-client paper1.pdf paper2.pdf
    paper-analyzer-client paper1.pdf --url http://localhost:8000 --legacy
    paper-analyzer-client paper1.pdf --json
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Optional, Sequence

import httpx

from .clients.analysis_client import AnalysisClient, AnalysisRequestError
from .core.logging import configure_logging
from .schemas.responses import AnalysisResult


def _print_progress(text: str) -> None:
    sys.stderr.write(text if text.endswith("\n") else text + "\n")
    sys.stderr.flush()


def _print_result(result: AnalysisResult) -> None:
    for index, summary in enumerate(result.summaries, start=1):
        name = result.filenames[index - 1] if index <= len(result.filenames) else f"Paper {index}"
        print(f"=== Summary for {name} ===")
        print(summary)
        print()
    if result.unifiedAnalysis:
        print("=== Unified Analysis ===")
        print(result.unifiedAnalysis)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Analyze research papers with the Paper Analyzer service.")
    ap.add_argument("pdfs", nargs="+", help="PDF files to upload")
    ap.add_argument("--url", default="http://127.0.0.1:8000", help="Analyzer base URL")
    ap.add_argument("--timeout", type=float, default=None, help="HTTP timeout in seconds (default: none)")
    ap.add_argument("--legacy", action="store_true", help="Use the plain-text marker protocol")
    ap.add_argument("--json", action="store_true", help="Print the result object as JSON")
    ap.add_argument("--quiet", action="store_true", help="Do not print progress to stderr")
    ap.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging("DEBUG" if args.verbose else "WARNING")

    on_progress = None if args.quiet else _print_progress
    try:
        with AnalysisClient(base_url=args.url, timeout=args.timeout) as client:
            result = client.analyze(args.pdfs, structured=not args.legacy, on_progress=on_progress)
    except FileNotFoundError as e:
        print(f"File not found: {e.filename}", file=sys.stderr)
        return 2
    except (AnalysisRequestError, httpx.HTTPError) as e:
        print(f"An error occurred: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result.model_dump(), indent=2, ensure_ascii=False))
    else:
        _print_result(result)

    if result.error:
        print(f"Error occurred: {result.error}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
