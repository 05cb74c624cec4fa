# -*- coding: utf-8 -*-
"""
src/fontalike/core/font_catalog.py

The reference catalog: the pre-computed feature vectors of every known free
font, as written by the catalog builder.

On disk the catalog is a compact JSON array of
{"family": str, "category": str, "features": [15 numbers]} objects. Entries
are validated into FontRecord instances on load; anything malformed is
skipped rather than trusted at match time. A CatalogStore loads the file
lazily, at most once, and hands the same immutable FontCatalog to every
caller for the life of the process.
"""

import json
import logging
import math
import re
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

import numpy as np

from .feature_extractor import FEATURE_COUNT

logger = logging.getLogger(__name__)


class FontCategory(str, Enum):
    SERIF = "serif"
    SANS_SERIF = "sans-serif"
    MONOSPACE = "monospace"
    DISPLAY = "display"
    HANDWRITING = "handwriting"


def normalize_family(name: str) -> str:
    """
    Canonical form of a family name used for equality checks: lower-case,
    apostrophes removed, hyphens treated as spaces, whitespace collapsed.
    """
    name = re.sub(r"['‘’]", "", name.lower())
    name = name.replace("-", " ")
    return re.sub(r"\s+", " ", name).strip()


@dataclass(frozen=True, eq=False)
class FontRecord:
    """One catalog entry. The features array is never modified after load."""

    family: str
    category: FontCategory
    features: np.ndarray

    @classmethod
    def from_dict(cls, entry: Any) -> "FontRecord":
        """
        Validates a loosely-typed catalog entry.

        Raises:
            ValueError: If the entry is not a mapping, the family is missing or
                        empty, the category is unknown, or the feature list is
                        not exactly FEATURE_COUNT finite numbers.
        """
        if not isinstance(entry, dict):
            raise ValueError(f"catalog entry must be an object, got {type(entry).__name__}")

        family = entry.get("family")
        if not isinstance(family, str) or not family.strip():
            raise ValueError("catalog entry has no family name")

        try:
            category = FontCategory(entry.get("category"))
        except ValueError:
            raise ValueError(f"unknown category {entry.get('category')!r} for '{family}'")

        raw = entry.get("features")
        if not isinstance(raw, (list, tuple)) or len(raw) != FEATURE_COUNT:
            raise ValueError(f"'{family}' must have exactly {FEATURE_COUNT} features")
        values = []
        for value in raw:
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise ValueError(f"'{family}' has a non-numeric feature value {value!r}")
            values.append(float(value))

        features = np.array(values, dtype=np.float64)
        features.setflags(write=False)
        return cls(family=family.strip(), category=category, features=features)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "family": self.family,
            "category": self.category.value,
            "features": [round(float(v), 6) for v in self.features],
        }


class FontCatalog:
    """
    Immutable, ordered collection of FontRecord.

    Keeps a (N, FEATURE_COUNT) matrix of all vectors for vectorised distance
    computation and a case-insensitive family index.
    """

    def __init__(self, records: Iterable[FontRecord] = ()):
        self._records: Tuple[FontRecord, ...] = tuple(records)
        if self._records:
            matrix = np.vstack([r.features for r in self._records])
        else:
            matrix = np.empty((0, FEATURE_COUNT), dtype=np.float64)
        matrix.setflags(write=False)
        self._matrix = matrix

        self._by_name: Dict[str, FontRecord] = {}
        for record in self._records:
            # First occurrence wins for duplicate names
            self._by_name.setdefault(record.family.lower(), record)

    @property
    def records(self) -> Tuple[FontRecord, ...]:
        return self._records

    @property
    def matrix(self) -> np.ndarray:
        return self._matrix

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[FontRecord]:
        return iter(self._records)

    def __bool__(self) -> bool:
        return bool(self._records)

    def find_exact(self, family: str) -> Optional[FontRecord]:
        """Case-insensitive exact family lookup."""
        return self._by_name.get(family.strip().lower())

    def by_category(self, category: FontCategory) -> List[FontRecord]:
        return [r for r in self._records if r.category == category]


def parse_catalog(payload: Any) -> FontCatalog:
    """
    Builds a FontCatalog from decoded JSON, skipping malformed entries.

    Args:
        payload (Any): The decoded JSON document; expected to be a list.

    Returns:
        FontCatalog: The valid records in file order.
    """
    if not isinstance(payload, list):
        logger.error(f"Font catalog must be a JSON array, got {type(payload).__name__}.")
        return FontCatalog()

    records = []
    skipped = 0
    for index, entry in enumerate(payload):
        try:
            records.append(FontRecord.from_dict(entry))
        except ValueError as e:
            skipped += 1
            logger.warning(f"Skipping malformed catalog entry #{index}: {e}")

    if skipped:
        logger.warning(f"Skipped {skipped} malformed catalog entries.")
    return FontCatalog(records)


def load_catalog(path: Union[str, Path]) -> FontCatalog:
    """
    Loads the font catalog from a JSON file.

    Returns:
        FontCatalog: The loaded catalog, or an empty one if the file is
                     missing or cannot be parsed.
    """
    path = Path(path)
    if not path.exists():
        logger.error(f"Font catalog not found at '{path}'.")
        logger.error("Please run the 'scripts/build_font_database.py' script first.")
        return FontCatalog()
    try:
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error(f"Error loading or parsing font catalog '{path}': {e}")
        return FontCatalog()

    catalog = parse_catalog(payload)
    logger.info(f"Font feature catalog loaded: {len(catalog)} fonts")
    return catalog


def save_catalog(records: Iterable[FontRecord], path: Union[str, Path]) -> Path:
    """Writes records as compact JSON, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = [record.to_dict() for record in records]
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, separators=(",", ":"), ensure_ascii=False)
    return path


class CatalogStore:
    """
    Lazily loads the catalog at a path exactly once.

    The first caller of get() performs the load; concurrent callers wait on
    the same Future instead of parsing the file again. The loaded catalog is
    kept for the lifetime of the store and never refreshed.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._future: Optional["Future[FontCatalog]"] = None

    @property
    def loaded(self) -> bool:
        future = self._future
        return future is not None and future.done()

    def get(self) -> FontCatalog:
        with self._lock:
            owner = self._future is None
            if owner:
                self._future = Future()
            future = self._future

        if owner:
            try:
                future.set_result(load_catalog(self.path))
            except Exception as e:
                logger.error(f"Unexpected error while loading font catalog: {e}", exc_info=True)
                future.set_result(FontCatalog())
        return future.result()
