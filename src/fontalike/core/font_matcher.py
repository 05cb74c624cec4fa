# -*- coding: utf-8 -*-
"""
src/fontalike/core/font_matcher.py

This module defines the FontMatcher class, responsible for turning a declared
font (family name, optional weight/style, optional font bytes) into a ranked
list of free alternatives from the reference catalog.

Strategies run in order and the first one that yields candidates wins:

1. Curated name overrides for iconic commercial families.
2. "No catalog" report when the catalog is missing or empty.
3. Exact / fuzzy lookup of the declared family in the catalog.
4. Nearest-neighbour search on the extracted feature vector.
5. Category fallback from keywords in the family name.

Every result carries the method that produced it, so callers can tell a
curated pick from a weak category guess.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote_plus

import numpy as np

from .feature_extractor import describe_features, extract_features
from .font_catalog import FontCatalog, FontCategory, FontRecord, normalize_family
from .font_decoder import decode_font
from .name_overrides import find_name_override
from .similarity import Neighbor, find_similar

logger = logging.getLogger(__name__)

SPECIMEN_URL_TEMPLATE = "https://fonts.google.com/specimen/{}"
NO_CATALOG_MESSAGE = "Font feature catalog not built yet. Run: python scripts/build_font_database.py"

OVERRIDE_SIMILARITY = 95
EXACT_SIMILARITY = 100
FALLBACK_SIMILARITY = 50
MIN_PREFIX_LENGTH = 3
MAX_EXACT_NEIGHBORS = 4

# --- Build-artifact suffixes left on family names by bundlers ---
_LEADING_UNDERSCORES_RE = re.compile(r"^_+")
_ARTIFACT_SUFFIX_RES = (
    re.compile(r"__[A-Za-z0-9]+$"),
    re.compile(r"[-_\s]+(?=[0-9a-fA-F]*[0-9])[0-9a-fA-F]{6,}$"),
    re.compile(r"[-_\s]+\d{3,}$"),
    re.compile(r"[-_\s]+fallback$", re.IGNORECASE),
)

# --- Category keywords ---
_MONOSPACE_RE = re.compile(r"mono|code|courier|consolas|menlo|terminal")
_HANDWRITING_RE = re.compile(r"script|cursive|handwrit|brush|callig")


class MatchMethod(str, Enum):
    NAME_OVERRIDE = "name-override"
    EXACT_MATCH = "exact-match"
    FEATURE_SIMILARITY = "feature-similarity"
    CATEGORY_FALLBACK = "category-fallback"
    NO_DATABASE = "no-database"


def specimen_url(family: str) -> str:
    """Catalog-browsing URL for a family name."""
    return SPECIMEN_URL_TEMPLATE.format(quote_plus(family))


@dataclass(frozen=True)
class MatchResult:
    """One alternative font proposed for the query."""

    family: str
    similarity: int
    reason: str
    method: MatchMethod
    category: Optional[FontCategory] = None
    distance: Optional[float] = None

    @property
    def download_url(self) -> str:
        return specimen_url(self.family)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "family": self.family,
            "similarity": self.similarity,
            "reason": self.reason,
            "method": self.method.value,
            "downloadUrl": self.download_url,
        }
        if self.category is not None:
            data["category"] = self.category.value
        if self.distance is not None:
            data["distance"] = round(self.distance, 4)
        return data


@dataclass
class MatchReport:
    """The ranked alternatives for one request, plus how they were found."""

    family: str
    method: MatchMethod
    alternatives: List[MatchResult] = field(default_factory=list)
    weight: Optional[str] = None
    style: Optional[str] = None
    features: Optional[Dict[str, float]] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "original": {"family": self.family, "weight": self.weight, "style": self.style},
            "method": self.method.value,
            "alternatives": [alt.to_dict() for alt in self.alternatives],
        }
        if self.features is not None:
            data["features"] = self.features
        if self.error is not None:
            data["error"] = self.error
        return data


def strip_artifact_suffix(family: str) -> str:
    """
    Removes build-artifact decorations from a family name, e.g.
    '__Inter_a1b2c3' -> 'Inter', 'Roboto__swap' -> 'Roboto',
    'Lato-12345' -> 'Lato', 'Inter_Fallback_0f3e2d' -> 'Inter'.

    Short numeric suffixes are kept so names like 'Source Sans 3' survive.
    Remaining underscores become spaces: '__Inter_Tight_abc123' -> 'Inter Tight'.
    """
    name = _LEADING_UNDERSCORES_RE.sub("", family.strip())
    changed = True
    while changed:
        changed = False
        for pattern in _ARTIFACT_SUFFIX_RES:
            shorter = pattern.sub("", name).strip()
            if shorter and shorter != name:
                name = shorter
                changed = True
    name = re.sub(r"_+", " ", name).strip()
    return name or family.strip()


def _extends_by_words(longer: str, prefix: str) -> bool:
    return longer.startswith(prefix) and (len(longer) == len(prefix) or longer[len(prefix)] == " ")


def infer_category(family: str) -> Optional[FontCategory]:
    """Guesses a coarse category from keywords in a family name."""
    lower = family.lower()
    if _MONOSPACE_RE.search(lower):
        return FontCategory.MONOSPACE
    if "serif" in lower and "sans" not in lower:
        return FontCategory.SERIF
    if "sans" in lower:
        return FontCategory.SANS_SERIF
    if _HANDWRITING_RE.search(lower):
        return FontCategory.HANDWRITING
    return None


class _QueryFont:
    """Decodes the query bytes at most once, on first use."""

    def __init__(self, font_bytes: Optional[bytes]):
        self._bytes = font_bytes
        self._decoded = False
        self._vector: Optional[np.ndarray] = None

    @property
    def vector(self) -> Optional[np.ndarray]:
        if not self._decoded:
            self._decoded = True
            if self._bytes:
                font = decode_font(self._bytes)
                if font is not None:
                    self._vector = extract_features(font)
        return self._vector


class FontMatcher:
    """
    Runs the matching cascade against a lazily supplied catalog.
    """

    def __init__(
        self,
        catalog_provider: Callable[[], FontCatalog],
        top_k: int = 5,
        fallback_count: int = 5,
    ):
        """
        Args:
            catalog_provider (Callable[[], FontCatalog]): Returns the catalog;
                typically CatalogStore.get, so the file is read on first use.
            top_k (int): Number of feature-similarity alternatives.
            fallback_count (int): Number of category-fallback alternatives.
        """
        self.catalog_provider = catalog_provider
        self.top_k = max(1, top_k)
        self.fallback_count = max(1, fallback_count)

    def match(
        self,
        family: str,
        weight: Optional[str] = None,
        style: Optional[str] = None,
        font_bytes: Optional[bytes] = None,
    ) -> MatchReport:
        """
        Finds free alternatives for a declared font.

        Args:
            family (str): The declared font-family name.
            weight (Optional[str]): Declared font-weight, echoed in the report.
            style (Optional[str]): Declared font-style, echoed in the report.
            font_bytes (Optional[bytes]): The font file, if it could be fetched.

        Returns:
            MatchReport: The ranked alternatives and the method used.

        Raises:
            ValueError: If family is empty.
        """
        if not family or not family.strip():
            raise ValueError("Font family is required")
        family = family.strip()
        query = _QueryFont(font_bytes)

        def report(method: MatchMethod, alternatives: List[MatchResult], **extra) -> MatchReport:
            return MatchReport(family=family, method=method, alternatives=alternatives,
                               weight=weight, style=style, **extra)

        overrides = find_name_override(family)
        if overrides:
            logger.info(f"Name override applies to '{family}'.")
            return report(MatchMethod.NAME_OVERRIDE, self._override_results(family, overrides))

        catalog = self.catalog_provider()
        if not catalog:
            logger.warning("Font feature catalog is empty; cannot match by catalog.")
            return report(MatchMethod.NO_DATABASE, [], error=NO_CATALOG_MESSAGE)

        record = self.lookup_catalog_name(family, catalog)
        if record is not None:
            logger.info(f"'{family}' is already in the catalog as '{record.family}'.")
            alternatives = [self._already_free(record)]
            features = None
            if query.vector is not None:
                features = describe_features(query.vector)
                neighbors = find_similar(query.vector, catalog,
                                         min(MAX_EXACT_NEIGHBORS, self.top_k - 1),
                                         exclude_family=record.family)
                alternatives.extend(self._similarity_result(n) for n in neighbors)
            return report(MatchMethod.EXACT_MATCH, alternatives, features=features)

        if query.vector is not None:
            return report(MatchMethod.FEATURE_SIMILARITY,
                          self._feature_results(family, query.vector, catalog),
                          features=describe_features(query.vector))

        return report(MatchMethod.CATEGORY_FALLBACK, self._category_results(family, catalog))

    # --- Strategy helpers ---

    def _override_results(self, family: str, overrides) -> List[MatchResult]:
        results = [
            MatchResult(
                family=alt.family,
                similarity=OVERRIDE_SIMILARITY,
                reason=alt.reason,
                method=MatchMethod.NAME_OVERRIDE,
            )
            for alt in overrides
        ]
        catalog = self.catalog_provider()
        record = catalog.find_exact(family) if catalog else None
        if record is not None:
            results = [self._already_free(record)] + [r for r in results if r.family != record.family]
        return results

    @staticmethod
    def lookup_catalog_name(family: str, catalog: FontCatalog) -> Optional[FontRecord]:
        """
        Finds the declared family in the catalog by name.

        Tries an exact case-insensitive match, then the name with build
        artifacts stripped, then prefix containment in either direction on
        normalized names (the closest length wins). A query that extends a
        catalog name must do so by whole words, so "Inter Tight Display"
        reaches "Inter Tight" while "Interstate" does not reach "Inter".
        """
        record = catalog.find_exact(family)
        if record is not None:
            return record

        stripped = strip_artifact_suffix(family)
        if stripped != family:
            record = catalog.find_exact(stripped)
            if record is not None:
                return record

        query = normalize_family(stripped)
        if len(query) < MIN_PREFIX_LENGTH:
            return None

        best: Optional[FontRecord] = None
        best_gap = None
        for candidate in catalog:
            name = normalize_family(candidate.family)
            if not name:
                continue
            if name.startswith(query) or _extends_by_words(query, name):
                gap = abs(len(name) - len(query))
                if best_gap is None or gap < best_gap:
                    best, best_gap = candidate, gap
        return best

    def _feature_results(self, family: str, vector: np.ndarray, catalog: FontCatalog) -> List[MatchResult]:
        neighbors = find_similar(vector, catalog, self.top_k, exclude_family=family)
        if not neighbors:
            return []

        base = normalize_family(strip_artifact_suffix(family))
        top = neighbors[0]
        if normalize_family(top.record.family) == base:
            logger.info(f"Nearest neighbour of '{family}' is the same family; it is already free.")
            secondary = [self._similarity_result(n) for n in neighbors[1:self.top_k]]
            return [self._already_free(top.record, top.distance)] + secondary

        return [self._similarity_result(n) for n in neighbors]

    def _category_results(self, family: str, catalog: FontCatalog) -> List[MatchResult]:
        category = infer_category(family)
        members = catalog.by_category(category) if category is not None else []
        if not members:
            members = list(catalog)
        logger.info(f"Falling back to category {category.value if category else 'any'} for '{family}'.")
        return [
            MatchResult(
                family=record.family,
                similarity=FALLBACK_SIMILARITY,
                reason=f"Category match: {record.category.value} (weak fallback)",
                method=MatchMethod.CATEGORY_FALLBACK,
                category=record.category,
            )
            for record in members[: self.fallback_count]
        ]

    @staticmethod
    def _already_free(record: FontRecord, distance: Optional[float] = None) -> MatchResult:
        return MatchResult(
            family=record.family,
            similarity=EXACT_SIMILARITY,
            reason="Already free: this font is in the catalog",
            method=MatchMethod.EXACT_MATCH,
            category=record.category,
            distance=distance,
        )

    @staticmethod
    def _similarity_result(neighbor: Neighbor) -> MatchResult:
        return MatchResult(
            family=neighbor.record.family,
            similarity=neighbor.similarity,
            reason=f"{neighbor.similarity}% visual match",
            method=MatchMethod.FEATURE_SIMILARITY,
            category=neighbor.record.category,
            distance=neighbor.distance,
        )
