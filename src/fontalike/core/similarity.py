# -*- coding: utf-8 -*-
"""
src/fontalike/core/similarity.py

Weighted distance between feature vectors, its mapping to a 0-100
similarity percentage, and nearest-neighbour search over the catalog.
"""

import logging
from typing import List, NamedTuple, Optional

import numpy as np

from .font_catalog import FontCatalog, FontRecord, normalize_family

logger = logging.getLogger(__name__)

# Relative perceptual importance of each dimension, in FEATURE_NAMES order.
FEATURE_WEIGHTS = np.array([
    1.0,  # weight_class
    0.8,  # width_class: condensed vs wide
    1.3,  # x_height_ratio: strongest proportional differentiator
    0.7,  # cap_height_ratio
    0.5,  # ascender_ratio
    0.5,  # descender_ratio
    1.0,  # avg_width_ratio
    1.8,  # serif_score: serif vs sans is the biggest visual class
    0.9,  # contrast_ratio
    0.7,  # roundness: geometric vs humanist
    3.0,  # is_monospace
    0.3,  # italic_angle
    0.9,  # panose_serif
    0.4,  # panose_weight
    0.5,  # complexity: script/decorative vs clean
], dtype=np.float64)
FEATURE_WEIGHTS.setflags(write=False)


SIMILARITY_DECAY = 1.2


class Neighbor(NamedTuple):
    record: FontRecord
    distance: float
    similarity: int


def feature_distance(a: np.ndarray, b: np.ndarray) -> float:
    """
    Weighted Euclidean distance between two feature vectors.
    Lower distance means more visually similar.
    """
    diff = np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)
    return float(np.sqrt(np.sum(FEATURE_WEIGHTS * diff * diff)))


def distance_to_similarity(distance: float) -> int:
    """
    Converts a distance to a 0-100 similarity percentage with exponential
    decay: distance 0 is 100%, distance 2 is about 9%.
    """
    return int(round(100 * np.exp(-SIMILARITY_DECAY * distance)))


def find_similar(
    query: np.ndarray,
    catalog: FontCatalog,
    top_n: int = 5,
    exclude_family: Optional[str] = None,
) -> List[Neighbor]:
    """
    Finds the catalog fonts closest to a query vector.

    Args:
        query (np.ndarray): The query feature vector.
        catalog (FontCatalog): The reference catalog.
        top_n (int): Maximum number of neighbours to return.
        exclude_family (Optional[str]): Family to leave out, compared after
                                        normalization.

    Returns:
        List[Neighbor]: Neighbours sorted by non-decreasing distance.
    """
    if not catalog or top_n <= 0:
        return []

    diff = catalog.matrix - np.asarray(query, dtype=np.float64)
    distances = np.sqrt(np.sum(FEATURE_WEIGHTS * diff * diff, axis=1))
    order = np.argsort(distances, kind="stable")

    excluded = normalize_family(exclude_family) if exclude_family else None
    neighbors: List[Neighbor] = []
    for index in order:
        record = catalog.records[index]
        if excluded and normalize_family(record.family) == excluded:
            continue
        distance = float(distances[index])
        neighbors.append(Neighbor(record, distance, distance_to_similarity(distance)))
        if len(neighbors) >= top_n:
            break

    logger.debug(f"Nearest neighbours: {[(n.record.family, round(n.distance, 3)) for n in neighbors]}")
    return neighbors
