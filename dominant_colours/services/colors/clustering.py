"""
K-means colour clustering engine.

Partitions a working set of colour samples into k groups with k-means++
seeding, lower-index tie-breaking, bounded empty-cluster recovery and a
centroid-displacement convergence test. A run is a pure function of its
inputs and seed: no global random state is touched.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple

import numpy as np
from loguru import logger

from .errors import DegenerateClusteringError, InvalidInputError, InvalidKError
from .sampling import validate_samples

DEFAULT_SEED = 42
DEFAULT_MAX_ITERATIONS = 100
DEFAULT_TOLERANCE = 1e-4

# Below this many samples per worker the thread pool costs more than it saves
MIN_SAMPLES_PER_WORKER = 4096


class DegeneratePolicy(str, Enum):
    """What to do when clusters stay empty after recovery."""
    RAISE = "raise"
    REDUCE = "reduce"


@dataclass(frozen=True)
class DominantColor:
    """One finalized cluster: integer colour and its share of the samples."""
    rgb: Tuple[int, int, int]
    weight: float
    count: int
    seed_index: int


@dataclass(frozen=True)
class ClusterResult:
    """Weight-ordered clusters plus run metadata."""
    colors: Tuple[DominantColor, ...]
    requested_k: int
    n_samples: int
    iterations: int
    converged: bool
    inertia: float

    def __len__(self) -> int:
        return len(self.colors)

    def __iter__(self) -> Iterator[DominantColor]:
        return iter(self.colors)

    def __getitem__(self, index: int) -> DominantColor:
        return self.colors[index]

    @property
    def weights(self) -> List[float]:
        return [c.weight for c in self.colors]

    @property
    def rgbs(self) -> List[Tuple[int, int, int]]:
        return [c.rgb for c in self.colors]


def _squared_distances(samples: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """(N, K) squared Euclidean distances, accumulated channel by channel."""
    d2 = np.zeros((samples.shape[0], centroids.shape[0]), dtype=np.float64)
    for c in range(samples.shape[1]):
        delta = samples[:, c, np.newaxis] - centroids[np.newaxis, :, c]
        d2 += delta * delta
    return d2


def _assign_chunk(samples: np.ndarray, centroids: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    d2 = _squared_distances(samples, centroids)
    # argmin returns the first minimum, so ties go to the lower centroid index
    labels = np.argmin(d2, axis=1)
    return labels, d2[np.arange(len(samples)), labels]


def assign_labels(samples: np.ndarray, centroids: np.ndarray,
                  executor: Optional[ThreadPoolExecutor] = None,
                  workers: int = 1) -> Tuple[np.ndarray, np.ndarray]:
    """
    Assign every sample to its nearest centroid.

    Args:
        samples: (N, 3) float64 samples
        centroids: (K, 3) float64 centroids
        executor: Optional thread pool for data-parallel assignment
        workers: Number of contiguous chunks to split the samples into

    Returns:
        Tuple of (labels, squared distance to the assigned centroid)
    """
    n = len(samples)
    if executor is None or workers <= 1 or n < workers * MIN_SAMPLES_PER_WORKER:
        return _assign_chunk(samples, centroids)

    labels = np.empty(n, dtype=np.intp)
    dists = np.empty(n, dtype=np.float64)
    bounds = np.linspace(0, n, workers + 1, dtype=np.int64)

    def work(start: int, stop: int) -> None:
        chunk_labels, chunk_dists = _assign_chunk(samples[start:stop], centroids)
        labels[start:stop] = chunk_labels
        dists[start:stop] = chunk_dists

    futures = [executor.submit(work, int(a), int(b)) for a, b in zip(bounds[:-1], bounds[1:])]
    # Barrier: the update step only sees a complete assignment
    for future in futures:
        future.result()

    return labels, dists


def init_centroids(samples: np.ndarray, k: int, rng: np.random.Generator) -> np.ndarray:
    """
    k-means++ seeding.

    The first centroid is drawn uniformly; each next one with probability
    proportional to its squared distance from the nearest chosen centroid.
    If every distance is zero (fewer distinct colours than k) the draw falls
    back to uniform, which produces duplicate centroids for recovery to
    deal with.
    """
    n = len(samples)
    centroids = np.empty((k, samples.shape[1]), dtype=np.float64)

    first = int(rng.integers(n))
    centroids[0] = samples[first]
    closest = _squared_distances(samples, centroids[:1])[:, 0]

    for i in range(1, k):
        total = closest.sum()
        if total > 0:
            idx = int(rng.choice(n, p=closest / total))
        else:
            idx = int(rng.integers(n))
        centroids[i] = samples[idx]
        closest = np.minimum(closest, _squared_distances(samples, centroids[i:i + 1])[:, 0])

    return centroids


def _update_centroids(samples: np.ndarray, labels: np.ndarray, counts: np.ndarray,
                      previous: np.ndarray) -> np.ndarray:
    k = len(previous)
    sums = np.column_stack([
        np.bincount(labels, weights=samples[:, c], minlength=k)
        for c in range(samples.shape[1])
    ])
    updated = previous.copy()
    nonempty = counts > 0
    updated[nonempty] = sums[nonempty] / counts[nonempty, np.newaxis]
    return updated


def _recover_empty_clusters(samples: np.ndarray, centroids: np.ndarray,
                            labels: np.ndarray, dists: np.ndarray,
                            counts: np.ndarray) -> int:
    """
    Re-seed empty clusters in place at the samples farthest from their centroid.

    At most k attempts are made. Stops early when no sample has a positive
    distance left to donate.

    Returns:
        Number of clusters re-seeded
    """
    k = len(centroids)
    attempts = 0
    while attempts < k:
        empty = np.flatnonzero(counts == 0)
        if empty.size == 0:
            break

        donor = int(np.argmax(dists))
        if dists[donor] <= 0.0:
            break

        target = int(empty[0])
        counts[labels[donor]] -= 1
        labels[donor] = target
        counts[target] += 1
        dists[donor] = 0.0
        centroids[target] = samples[donor]
        attempts += 1

    return attempts


def cluster(samples,
            k: int,
            seed: int = DEFAULT_SEED,
            max_iterations: int = DEFAULT_MAX_ITERATIONS,
            tolerance: float = DEFAULT_TOLERANCE,
            degenerate_policy: DegeneratePolicy = DegeneratePolicy.RAISE,
            workers: int = 1,
            channel_max: float = 255.0,
            cancel: Optional[threading.Event] = None) -> ClusterResult:
    """
    Cluster colour samples into at most k dominant colours.

    Args:
        samples: (N, 3) working set
        k: Number of clusters, 1 <= k <= N
        seed: Seed for k-means++ initialization
        max_iterations: Upper bound on assignment/update rounds
        tolerance: Largest centroid displacement accepted as converged
        degenerate_policy: RAISE fails on unrecoverable empty clusters,
            REDUCE drops them and returns fewer than k colours
        workers: Threads used for the assignment step
        channel_max: Channel maximum of the input (255 for 8-bit, 1.0 for
            normalized); output colours are always 8-bit
        cancel: Checked between iterations; when set, the current
            assignment is finalized as if max_iterations was reached

    Returns:
        ClusterResult sorted by weight descending, ties by seed index

    Raises:
        InvalidInputError: If samples are empty, malformed, or outside
            [0, channel_max]
        InvalidKError: If k is outside [1, N]
        DegenerateClusteringError: If clusters stay empty under RAISE
        ValueError: If max_iterations < 1 or tolerance < 0
    """
    data = validate_samples(samples).astype(np.float64)
    n = data.shape[0]

    if isinstance(k, bool) or not isinstance(k, (int, np.integer)) or k < 1 or k > n:
        raise InvalidKError(k, n)
    k = int(k)

    if max_iterations < 1:
        raise ValueError(f"max_iterations must be >= 1, got {max_iterations}")
    if tolerance < 0:
        raise ValueError(f"tolerance must be >= 0, got {tolerance}")
    if channel_max <= 0:
        raise ValueError(f"channel_max must be positive, got {channel_max}")

    low, high = float(data.min()), float(data.max())
    if low < 0 or high > channel_max:
        raise InvalidInputError(
            f"Pixel channels must lie in [0, {channel_max:g}], got values in [{low:g}, {high:g}]"
        )

    policy = DegeneratePolicy(degenerate_policy)
    workers = max(1, int(workers))

    logger.info(f"Starting k-means with k={k}, {n} samples, seed={seed}, policy={policy.value}")

    rng = np.random.default_rng(seed)
    centroids = init_centroids(data, k, rng)
    seed_indices = np.arange(k)

    labels = np.zeros(n, dtype=np.intp)
    iterations = 0
    converged = False

    executor = ThreadPoolExecutor(max_workers=workers) if workers > 1 else None
    try:
        for iteration in range(1, max_iterations + 1):
            labels, dists = assign_labels(data, centroids, executor, workers)
            counts = np.bincount(labels, minlength=len(centroids))

            reseeded = 0
            if np.any(counts == 0):
                reseeded = _recover_empty_clusters(data, centroids, labels, dists, counts)
                still_empty = int(np.sum(counts == 0))

                if still_empty:
                    if policy is DegeneratePolicy.RAISE:
                        raise DegenerateClusteringError(
                            f"{still_empty} of {len(centroids)} clusters are still empty after "
                            f"{reseeded} recovery attempts at iteration {iteration}; "
                            f"the samples hold fewer distinct colours than k={k}",
                            empty_clusters=still_empty,
                            iteration=iteration,
                        )

                    keep = counts > 0
                    remap = np.cumsum(keep) - 1
                    labels = remap[labels]
                    centroids = centroids[keep]
                    counts = counts[keep]
                    seed_indices = seed_indices[keep]
                    logger.warning(f"Dropped {still_empty} empty clusters at iteration {iteration}, "
                                   f"continuing with {len(centroids)}")

                if reseeded:
                    logger.debug(f"Re-seeded {reseeded} empty clusters at iteration {iteration}")

            updated = _update_centroids(data, labels, counts, centroids)
            shift = float(np.sqrt(np.sum((updated - centroids) ** 2, axis=1)).max())
            centroids = updated
            iterations = iteration

            logger.debug(f"Iteration {iteration}: max centroid shift {shift:.6f}")

            # A re-seeded centroid jumped, so its displacement says nothing about stability
            if not reseeded and shift <= tolerance:
                converged = True
                break

            if cancel is not None and cancel.is_set():
                logger.warning(f"K-means cancelled after {iteration} iterations")
                break
    finally:
        if executor is not None:
            executor.shutdown(wait=True)

    if not converged:
        logger.info(f"K-means stopped after {iterations} iterations without converging")

    return _finalize(data, centroids, labels, seed_indices, k, iterations, converged, channel_max)


def _finalize(data: np.ndarray, centroids: np.ndarray, labels: np.ndarray,
              seed_indices: np.ndarray, requested_k: int, iterations: int,
              converged: bool, channel_max: float) -> ClusterResult:
    n = len(data)
    counts = np.bincount(labels, minlength=len(centroids))
    inertia = float(np.sum((data - centroids[labels]) ** 2))

    scaled = centroids * (255.0 / channel_max)
    rounded = np.clip(np.rint(scaled), 0, 255).astype(np.int64)

    order = sorted(range(len(centroids)), key=lambda i: (-int(counts[i]), int(seed_indices[i])))

    colors = tuple(
        DominantColor(
            rgb=(int(rounded[i, 0]), int(rounded[i, 1]), int(rounded[i, 2])),
            weight=float(counts[i]) / n,
            count=int(counts[i]),
            seed_index=int(seed_indices[i]),
        )
        for i in order
    )

    weights_str = [f"{c.weight:.3f}" for c in colors]
    logger.info(f"Clustering finished: {len(colors)} colours, weights {weights_str}")

    return ClusterResult(
        colors=colors,
        requested_k=requested_k,
        n_samples=n,
        iterations=iterations,
        converged=converged,
        inertia=inertia,
    )
