"""
k-means (Lloyd's algorithm) over scaled feature vectors.

Silence filtering: a frame is active when its scaled RMS dimension exceeds the
silence threshold. Inactive frames never take part in centroid computation and
are labelled SILENCE_CLUSTER (-1).

Tie-break rule (assignment and final labelling): when two centroids are at
exactly the same distance, the lower centroid index wins.

Initialisation samples k active vectors uniformly with replacement; duplicate
initial centroids are allowed. A centroid that loses all its vectors keeps its
previous position.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from voxsplit.diarization.errors import FeatureShapeError
from voxsplit.diarization.models import (
    FEATURE_DIMENSIONS,
    RMS_INDEX,
    SILENCE_CLUSTER,
    ClusterModel,
    FeatureFrame,
    LabeledFrame,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 100
DEFAULT_SILENCE_THRESHOLD = 0.1


def extract_feature_vectors(frames: Sequence[FeatureFrame]) -> tuple[np.ndarray, np.ndarray]:
    """Frames -> (times (n,), vectors (n, 7)). Raises FeatureShapeError on wrong dimensions."""
    times = np.empty(len(frames), dtype=np.float64)
    vectors = np.empty((len(frames), FEATURE_DIMENSIONS), dtype=np.float64)
    for i, frame in enumerate(frames):
        if len(frame.vector) != FEATURE_DIMENSIONS:
            raise FeatureShapeError(
                f"Feature frame {i} at t={frame.time} has {len(frame.vector)} dimensions, "
                f"expected {FEATURE_DIMENSIONS}"
            )
        times[i] = frame.time
        vectors[i] = frame.vector
    return times, vectors


def euclidean_distance(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.sqrt(np.sum((np.asarray(a) - np.asarray(b)) ** 2)))


def nearest_centroid(vectors: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """
    Index of the closest centroid for each row of vectors.
    np.argmin returns the first minimum, so exact ties go to the lowest index.
    """
    distances = np.sqrt(((vectors[:, None, :] - centroids[None, :, :]) ** 2).sum(axis=2))
    return np.argmin(distances, axis=1)


def active_mask(vectors: np.ndarray, silence_threshold: float = DEFAULT_SILENCE_THRESHOLD) -> np.ndarray:
    """True where the scaled RMS dimension is strictly above the threshold."""
    if len(vectors) == 0:
        return np.zeros(0, dtype=bool)
    return vectors[:, RMS_INDEX] > silence_threshold


def kmeans(
    vectors: np.ndarray,
    k: int,
    rng: np.random.Generator | None = None,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> ClusterModel:
    """
    Lloyd's algorithm. Stops when no assignment changed in a round or after
    max_iterations rounds. Sequential; no parallel work.
    """
    vectors = np.asarray(vectors, dtype=np.float64)
    n = len(vectors)
    if n == 0 or k <= 0:
        return ClusterModel(
            centroids=np.empty((0, vectors.shape[1] if vectors.ndim == 2 else FEATURE_DIMENSIONS)),
            assignments=np.empty(0, dtype=np.int64),
        )
    rng = rng if rng is not None else np.random.default_rng()

    centroids = vectors[rng.integers(0, n, size=k)].copy()
    assignments = np.full(n, -1, dtype=np.int64)
    iterations = 0
    changed = True

    while changed and iterations < max_iterations:
        iterations += 1
        new_assignments = nearest_centroid(vectors, centroids)
        changed = bool(np.any(new_assignments != assignments))
        assignments = new_assignments

        # Empty clusters keep their previous centroid
        for c in range(k):
            members = vectors[assignments == c]
            if len(members):
                centroids[c] = members.mean(axis=0)

    logger.debug("k-means: k=%d n=%d iterations=%d converged=%s", k, n, iterations, not changed)
    return ClusterModel(centroids=centroids, assignments=assignments, iterations=iterations)


def cluster_frames(
    frames: Sequence[FeatureFrame],
    max_speakers: int,
    rng: np.random.Generator | None = None,
    silence_threshold: float = DEFAULT_SILENCE_THRESHOLD,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> tuple[list[LabeledFrame], ClusterModel | None]:
    """
    Cluster active frames into at most max_speakers groups and label every frame.

    Returns ([], None) when there are no active frames; callers then resolve every
    chunk to "Unknown". Otherwise every frame gets a LabeledFrame: -1 when silent,
    else its nearest final centroid.
    """
    times, vectors = extract_feature_vectors(frames)
    active = active_mask(vectors, silence_threshold)
    n_active = int(np.count_nonzero(active))
    if n_active == 0:
        logger.info("No active frames (of %d); clustering skipped", len(frames))
        return [], None

    k = min(max_speakers, n_active)
    model = kmeans(vectors[active], k, rng=rng, max_iterations=max_iterations)

    clusters = np.full(len(frames), SILENCE_CLUSTER, dtype=np.int64)
    clusters[active] = nearest_centroid(vectors[active], model.centroids)

    labeled = [
        LabeledFrame(time=float(t), vector=tuple(frame.vector), cluster=int(c))
        for t, frame, c in zip(times, frames, clusters)
    ]
    return labeled, model
