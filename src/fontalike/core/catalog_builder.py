# -*- coding: utf-8 -*-
"""
src/fontalike/core/catalog_builder.py

Offline pipeline that builds the reference font catalog.

The font list comes from the Google Fonts Developer API. For each family one
representative file is downloaded, decoded and reduced to its feature vector
with the very same extractor the matcher uses, so catalog vectors and query
vectors are always comparable. Downloads are sequential with a fixed delay to
stay polite, and the partial result list is checkpointed so an interrupted
build resumes where it stopped.
"""

import argparse
import json
import logging
import os
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Union

import requests

from ..config import config
from .feature_extractor import extract_features_from_bytes
from .font_catalog import FontRecord, save_catalog

logger = logging.getLogger(__name__)

API_KEY_ENV = "GOOGLE_FONTS_API_KEY"
PREFERRED_VARIANTS = ("regular", "400")
REQUEST_TIMEOUT = 30.0


class CatalogBuildError(Exception):
    """Raised when the font list cannot be retrieved."""


class BuildSummary(NamedTuple):
    succeeded: int
    failed: int
    skipped: int
    output_path: Path


def pick_font_url(files: Optional[Dict[str, str]]) -> Optional[str]:
    """
    Chooses the file to download for a family: the 'regular' variant, then
    '400', then whatever is listed first. http:// is upgraded to https://.
    """
    if not files:
        return None
    url = None
    for variant in PREFERRED_VARIANTS:
        if files.get(variant):
            url = files[variant]
            break
    if url is None:
        url = next((u for u in files.values() if u), None)
    if url is None:
        return None
    if url.startswith("http://"):
        url = "https://" + url[len("http://"):]
    return url


def load_progress(path: Union[str, Path]) -> List[FontRecord]:
    """
    Reads the partial result list of an interrupted build.

    A missing file means a fresh start. A corrupt one is logged and ignored.
    """
    path = Path(path)
    if not path.exists():
        return []
    try:
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)
        if not isinstance(payload, list):
            raise ValueError("progress file must hold a JSON array")
        return [FontRecord.from_dict(entry) for entry in payload]
    except (OSError, ValueError) as e:
        logger.warning(f"Could not load progress file '{path}', starting fresh: {e}")
        return []


def save_progress(records: List[FontRecord], path: Union[str, Path]):
    save_catalog(records, path)


class CatalogBuilder:
    """
    Downloads every catalog family and writes the feature catalog.
    """

    def __init__(
        self,
        api_key: str,
        output_path: Union[str, Path],
        progress_path: Union[str, Path],
        api_url: str = config.api_url,
        delay_seconds: float = config.delay_seconds,
        checkpoint_every: int = config.checkpoint_every,
        user_agent: str = config.user_agent,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            api_key (str): Google Fonts Developer API key.
            output_path (Union[str, Path]): Where the final catalog is written.
            progress_path (Union[str, Path]): Resumable checkpoint file.
            api_url (str): Font list endpoint.
            delay_seconds (float): Pause after every attempted download.
            checkpoint_every (int): Successful fonts between checkpoints.
            user_agent (str): User-Agent sent with font downloads.
            session (Optional[requests.Session]): HTTP session to reuse.
            sleep (Callable[[float], None]): Delay function.
        """
        if not api_key:
            raise ValueError("A Google Fonts API key is required")
        self.api_key = api_key
        self.output_path = Path(output_path)
        self.progress_path = Path(progress_path)
        self.api_url = api_url
        self.delay_seconds = delay_seconds
        self.checkpoint_every = max(1, checkpoint_every)
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({"User-Agent": user_agent})
        self.sleep = sleep

    def fetch_font_list(self) -> List[Dict[str, Any]]:
        """
        Retrieves the family list, most popular first.

        Raises:
            CatalogBuildError: On a network error, HTTP error or bad payload.
        """
        logger.info("Fetching Google Fonts list...")
        try:
            response = self.session.get(
                self.api_url,
                params={"key": self.api_key, "sort": "popularity"},
                timeout=REQUEST_TIMEOUT,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            raise CatalogBuildError(f"Google Fonts API error: {e}") from e
        except ValueError as e:
            raise CatalogBuildError(f"Google Fonts API returned invalid JSON: {e}") from e

        items = payload.get("items") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            raise CatalogBuildError("Google Fonts API response has no 'items' list")
        logger.info(f"Found {len(items)} fonts")
        return items

    def download_font(self, url: str) -> Optional[bytes]:
        try:
            response = self.session.get(url, timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning(f"Download failed for {url}: {e}")
            return None
        return response.content or None

    def _build_record(self, item: Dict[str, Any], data: bytes) -> Optional[FontRecord]:
        features = extract_features_from_bytes(data)
        if features is None:
            return None
        try:
            return FontRecord.from_dict({
                "family": item.get("family"),
                "category": item.get("category"),
                "features": [float(v) for v in features],
            })
        except ValueError as e:
            logger.warning(f"Rejected catalog entry: {e}")
            return None

    def build(self) -> BuildSummary:
        """
        Runs the whole pipeline.

        Returns:
            BuildSummary: Families written, failed, and skipped because an
                          earlier run already processed them.

        Raises:
            CatalogBuildError: If the font list cannot be fetched.
        """
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        fonts = self.fetch_font_list()

        results = load_progress(self.progress_path)
        processed = {record.family for record in results}
        if results:
            logger.info(f"Resuming from progress file: {len(results)} fonts already processed")

        total = len(fonts)
        failed = 0
        skipped = 0

        for i, item in enumerate(fonts):
            family = item.get("family") if isinstance(item, dict) else None
            if not family:
                logger.warning(f"  [{i + 1}/{total}] SKIP entry without a family name")
                failed += 1
                continue
            if family in processed:
                skipped += 1
                continue

            url = pick_font_url(item.get("files"))
            if url is None:
                logger.info(f"  [{i + 1}/{total}] SKIP {family}: no file URL")
                failed += 1
                continue

            data = self.download_font(url)
            record = self._build_record(item, data) if data else None
            if record is None:
                logger.info(f"  [{i + 1}/{total}] {family}... {'PARSE' if data else 'DOWNLOAD'} FAILED")
                failed += 1
                self.sleep(self.delay_seconds)
                continue

            results.append(record)
            processed.add(family)
            logger.info(f"  [{i + 1}/{total}] {family}... OK")

            if len(results) % self.checkpoint_every == 0:
                save_progress(results, self.progress_path)
                logger.info(f"  --- Progress saved: {len(results)} fonts ---")

            self.sleep(self.delay_seconds)

        save_catalog(results, self.output_path)
        if self.progress_path.exists():
            self.progress_path.unlink()

        summary = BuildSummary(
            succeeded=len(results),
            failed=failed,
            skipped=skipped,
            output_path=self.output_path,
        )
        size_kb = round(self.output_path.stat().st_size / 1024)
        logger.info("Done!")
        logger.info(f"  Succeeded: {summary.succeeded}")
        logger.info(f"  Failed: {summary.failed}")
        logger.info(f"  Output: {summary.output_path} ({size_kb} KB)")
        return summary


# --- Command line ---

def add_build_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("--api-key", default=None,
                        help=f"Google Fonts Developer API key (default: ${API_KEY_ENV})")
    parser.add_argument("--output", type=Path, default=None,
                        help="Catalog file to write (default: from config.ini)")
    parser.add_argument("--progress", type=Path, default=None,
                        help="Progress checkpoint file (default: from config.ini)")
    parser.add_argument("--delay", type=float, default=None,
                        help="Seconds to wait between downloads")


def run_build(args: argparse.Namespace) -> int:
    """Builds the catalog from parsed arguments and returns an exit code."""
    api_key = args.api_key or os.environ.get(API_KEY_ENV)
    if not api_key:
        logger.error(f"Set the {API_KEY_ENV} environment variable or pass --api-key.")
        logger.error("Get a free key at: https://console.cloud.google.com")
        return 1

    builder = CatalogBuilder(
        api_key=api_key,
        output_path=args.output or config.catalog_path,
        progress_path=args.progress or config.progress_path,
        delay_seconds=config.delay_seconds if args.delay is None else args.delay,
    )
    try:
        builder.build()
    except CatalogBuildError as e:
        logger.error(f"Catalog build failed: {e}")
        return 1
    except OSError as e:
        logger.error(f"Could not write catalog: {e}")
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(
        level=config.log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    parser = argparse.ArgumentParser(description="Build the FontAlike reference font catalog.")
    add_build_arguments(parser)
    return run_build(parser.parse_args(argv))
