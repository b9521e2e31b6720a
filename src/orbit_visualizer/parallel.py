"""
Parallel trajectory sampling.

Each satellite is sampled independently, so the work fans out over a
process pool. Every worker builds its own orbit-predictor propagator;
results come back in input order whatever order workers finish in.
"""

from concurrent.futures import ProcessPoolExecutor
from typing import List, Optional, Sequence
import logging
import multiprocessing as mp
import os

from .models import ElementSet, TimeWindow, Trajectory
from .propagator import OrbitPredictorPropagator
from .sampler import sample_trajectory

logger = logging.getLogger(__name__)


def get_optimal_workers(max_workers: Optional[int] = None, num_satellites: int = 0) -> int:
    """
    Determine number of worker processes.

    Args:
        max_workers: Requested maximum (None = auto-detect)
        num_satellites: Number of element sets to sample

    Returns:
        Worker count, never more than CPUs or satellites
    """
    cpu_count = os.cpu_count() or 4
    workers = cpu_count if max_workers is None else min(max_workers, cpu_count)
    if num_satellites > 0:
        workers = min(workers, num_satellites)
    return max(1, workers)


def _sample_worker(element_set: ElementSet, window: TimeWindow) -> Trajectory:
    return sample_trajectory(element_set, window, OrbitPredictorPropagator())


def _mp_context():
    # 'fork' starts faster; not available on Windows
    try:
        return mp.get_context("fork")
    except ValueError:
        logger.debug("'fork' context not available, using default")
        return None


def sample_trajectories_parallel(
    element_sets: Sequence[ElementSet],
    window: TimeWindow,
    max_workers: Optional[int] = None,
) -> List[Trajectory]:
    """
    Sample many satellites over a process pool.

    Args:
        element_sets: Satellites to sample
        window: Shared, read-only time window
        max_workers: Worker process cap

    Returns:
        Trajectories in the same order as ``element_sets``
    """
    if not element_sets:
        return []

    workers = get_optimal_workers(max_workers, len(element_sets))
    logger.info(f"Sampling {len(element_sets)} satellites with {workers} worker processes")

    with ProcessPoolExecutor(max_workers=workers, mp_context=_mp_context()) as executor:
        return list(executor.map(_sample_worker, element_sets, [window] * len(element_sets)))
