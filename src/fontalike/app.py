# -*- coding: utf-8 -*-
"""
src/fontalike/app.py

Core application controller for FontAlike.

This module contains the `MatchService`, which owns the shared catalog, the
matcher and the worker pools, and orchestrates the fetch-decode-match
workflow for each request. It also provides the command line interface used
by the `fontalike` console script and `main.py`.
"""

import argparse
import json
import logging
import sys
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path
from typing import Callable, Iterable, List, NamedTuple, Optional

from .config import Config, config
from .core.catalog_builder import add_build_arguments, run_build
from .core.feature_extractor import describe_features, extract_features_from_bytes
from .core.font_decoder import decode_font
from .core.font_catalog import CatalogStore
from .core.font_matcher import FontMatcher, MatchReport
from .utils.font_fetcher import fetch_font_bytes

logger = logging.getLogger(__name__)

APP_NAME = "FontAlike"
FETCH_WORKERS = 2

Fetcher = Callable[..., Optional[bytes]]


class MatchRequest(NamedTuple):
    family: str
    weight: Optional[str] = None
    style: Optional[str] = None
    url: Optional[str] = None
    referer: Optional[str] = None
    font_bytes: Optional[bytes] = None


class MatchService:
    """
    The main application controller. Manages the catalog, the worker pools
    and the matching workflow.

    The catalog is loaded once, on first use, and shared read-only by every
    request. Decoding and matching run on a bounded worker pool; downloads
    run on a separate pool so a slow server can be abandoned after
    `fetch_timeout` seconds without tying up a matching worker.
    """

    def __init__(
        self,
        settings: Config = config,
        store: Optional[CatalogStore] = None,
        fetcher: Fetcher = fetch_font_bytes,
    ):
        self.settings = settings
        self.store = store if store is not None else CatalogStore(settings.catalog_path)
        self.fetcher = fetcher
        self.matcher = FontMatcher(
            self.store.get,
            top_k=settings.top_k,
            fallback_count=settings.fallback_count,
        )
        self._executor = ThreadPoolExecutor(
            max_workers=settings.max_workers, thread_name_prefix="fontalike-match"
        )
        self._fetch_executor = ThreadPoolExecutor(
            max_workers=FETCH_WORKERS, thread_name_prefix="fontalike-fetch"
        )

    def __enter__(self) -> "MatchService":
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def close(self):
        """Stops the worker pools. Pending downloads are abandoned."""
        self._executor.shutdown(wait=True)
        self._fetch_executor.shutdown(wait=False, cancel_futures=True)

    def fetch(self, url: str, referer: Optional[str] = None) -> Optional[bytes]:
        """
        Downloads a query font, giving up after the configured timeout.

        Returns:
            Optional[bytes]: The font bytes, or None on timeout or failure.
        """
        timeout = self.settings.fetch_timeout
        future = self._fetch_executor.submit(self.fetcher, url, referer, timeout)
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError:
            future.cancel()
            logger.warning(f"Font download timed out after {timeout}s: {url}")
        except Exception as e:
            logger.warning(f"Font download failed for {url}: {e}")
        return None

    def match(
        self,
        family: str,
        weight: Optional[str] = None,
        style: Optional[str] = None,
        url: Optional[str] = None,
        referer: Optional[str] = None,
        font_bytes: Optional[bytes] = None,
    ) -> MatchReport:
        """
        Matches one declared font, downloading it first when only a URL is
        known. Without usable bytes matching proceeds on the name alone.
        """
        if font_bytes is None and url:
            font_bytes = self.fetch(url, referer)
            if font_bytes is None:
                logger.warning(f"Matching '{family}' by name only.")
        return self.matcher.match(family, weight=weight, style=style, font_bytes=font_bytes)

    def submit(self, family: str, **kwargs) -> "Future[MatchReport]":
        """Schedules match() on the worker pool."""
        return self._executor.submit(self.match, family, **kwargs)

    def match_many(self, requests: Iterable[MatchRequest]) -> List[MatchReport]:
        """
        Matches several fonts concurrently.

        Returns:
            List[MatchReport]: One report per request, in request order.
        """
        futures = [self._executor.submit(self.match, *request) for request in requests]
        return [future.result() for future in futures]


# --- Command line ---

def format_report(report: MatchReport) -> str:
    """Renders a report as human-readable text."""
    lines = [f"{report.family} ({report.method.value})"]
    if report.error:
        lines.append(f"  Error: {report.error}")
    for i, alt in enumerate(report.alternatives, start=1):
        lines.append(f"  {i}. {alt.family:<28} {alt.similarity:>3}%  {alt.reason}")
        lines.append(f"     {alt.download_url}")
    if not report.alternatives and not report.error:
        lines.append("  No alternatives found.")
    return "\n".join(lines)


def _read_file(path: Path) -> Optional[bytes]:
    try:
        return path.read_bytes()
    except OSError as e:
        logger.error(f"Could not read font file '{path}': {e}")
        return None


def _cmd_match(args: argparse.Namespace) -> int:
    font_bytes = None
    if args.file is not None:
        font_bytes = _read_file(args.file)
        if font_bytes is None:
            return 1

    family = args.family
    if not family and font_bytes is not None:
        decoded = decode_font(font_bytes)
        family = decoded.family_name if decoded is not None else None
        if family:
            logger.info(f"Using family name '{family}' from {args.file}.")
    if not family:
        logger.error("A font family is required; pass one or a --file whose name table has it.")
        return 1

    store = CatalogStore(args.catalog) if args.catalog else None
    with MatchService(store=store) as service:
        try:
            report = service.match(
                family,
                weight=args.weight,
                style=args.style,
                url=args.url,
                referer=args.referer,
                font_bytes=font_bytes,
            )
        except ValueError as e:
            logger.error(str(e))
            return 1

    if args.json:
        print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(format_report(report))
    return 0


def _cmd_features(args: argparse.Namespace) -> int:
    data = _read_file(args.file)
    if data is None:
        return 1
    features = extract_features_from_bytes(data)
    if features is None:
        logger.error(f"Could not decode font file '{args.file}'.")
        return 1
    print(json.dumps(describe_features(features), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fontalike",
        description="Find free alternatives for commercial or unavailable fonts.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    match_parser = subparsers.add_parser("match", help="Suggest free alternatives for a font")
    match_parser.add_argument(
        "family", nargs="?", help="Declared font-family name (defaults to the family in --file)"
    )
    source = match_parser.add_mutually_exclusive_group()
    source.add_argument("--file", type=Path, help="Local font file (TTF, OTF, WOFF, WOFF2)")
    source.add_argument("--url", help="URL of the font file (http, https or data:)")
    match_parser.add_argument("--weight", help="Declared font-weight")
    match_parser.add_argument("--style", help="Declared font-style")
    match_parser.add_argument("--referer", help="Page that declared the font")
    match_parser.add_argument("--catalog", type=Path, help="Catalog file to use instead of the configured one")
    match_parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    match_parser.set_defaults(handler=_cmd_match)

    features_parser = subparsers.add_parser("features", help="Print the feature vector of a font file")
    features_parser.add_argument("file", type=Path)
    features_parser.set_defaults(handler=_cmd_features)

    catalog_parser = subparsers.add_parser("build-catalog", help="Build the reference font catalog")
    add_build_arguments(catalog_parser)
    catalog_parser.set_defaults(handler=run_build)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    The main entry point for the FontAlike command line.

    Returns:
        int: Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logger.debug(f"{APP_NAME} data directory: {config.app_dir}")
    return args.handler(args)


if __name__ == '__main__':
    sys.exit(main())
