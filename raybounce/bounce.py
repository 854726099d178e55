"""
bounce.py - Multi-bounce ray simulation

For each bounce step every active ray is resolved against the scene
spheres:
    - hit:  a segment origin -> hit point is recorded and the reflected
            ray joins the active set of the next step
    - miss: a long escape segment along the ray direction is recorded
            and the ray stops

The loop always runs the configured number of steps. The whole bounce
tree is rebuilt from scratch on every call; nothing is cached between
calls.

Project: Ray Bounce Simulator
"""

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .config import BounceConfig
from .rays import MIN_LENGTH, Ray
from .spheres import Sphere, closest_hit, reflect

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Segment:
    """
    Drawable line between two points, tagged with its bounce step.

    Attributes
    ----------
    start : np.ndarray
        Segment start [x, y, z]
    end : np.ndarray
        Segment end [x, y, z]
    step : int
        0-based bounce step that produced the segment
    """
    start: np.ndarray
    end: np.ndarray
    step: int

    def __eq__(self, other) -> bool:
        if not isinstance(other, Segment):
            return NotImplemented
        return (
            self.step == other.step
            and np.array_equal(self.start, other.start)
            and np.array_equal(self.end, other.end)
        )

    @property
    def length(self) -> float:
        return float(np.linalg.norm(self.end - self.start))


def _escape_segment(ray: Ray, step: int, miss_length: float) -> Segment:
    start = ray.origin.copy()
    if ray.length < MIN_LENGTH:
        logger.warning("Zero-length ray direction at %s, emitting empty escape segment", start)
        return Segment(start=start, end=start.copy(), step=step)
    return Segment(start=start, end=start + miss_length * ray.unit_direction(), step=step)


def simulate(
    rays: Sequence[Ray],
    spheres: Sequence[Sphere],
    max_steps: Optional[int] = None,
    config: Optional[BounceConfig] = None,
) -> List[Segment]:
    """
    Trace rays through up to max_steps bounces and collect their path.

    Parameters
    ----------
    rays : sequence of Ray
        Initial rays; they are not modified
    spheres : sequence of Sphere
        Scene geometry, read only
    max_steps : int, optional
        Number of bounce steps; overrides config.max_steps when given
    config : BounceConfig, optional
        Epsilon, miss length and hit policy (default: BounceConfig())

    Returns
    -------
    List[Segment]
        One segment per (ray, step) pair active at that step, ordered by
        step and then by ray order within the step
    """
    if config is None:
        config = BounceConfig()
    if max_steps is None:
        max_steps = config.max_steps

    active = []
    for ray in rays:
        if not ray.is_finite:
            logger.warning("Dropping ray with non-finite data: %r", ray)
            continue
        active.append(ray)

    segments: List[Segment] = []
    for step in range(max_steps):
        next_active = []
        for ray in active:
            hit = closest_hit(spheres, ray, config.epsilon, config.policy)
            if hit is None:
                segments.append(_escape_segment(ray, step, config.miss_length))
                continue
            segments.append(Segment(start=ray.origin.copy(), end=hit.position, step=step))
            bounced = reflect(ray, hit)
            if bounced.is_finite:
                next_active.append(bounced)
            else:
                logger.warning("Dropping reflected ray with non-finite data at step %d", step)
        logger.debug("Step %d: %d active rays, %d continue", step, len(active), len(next_active))
        active = next_active

    return segments


class BounceBuffer:
    """
    Caller-owned segment buffer, rebuilt once per frame.

    Each call to update() replaces the previous frame's segments; nothing
    accumulates across frames.

    Examples
    --------
    >>> buffer = BounceBuffer()
    >>> buffer.update([Ray([0, 0, -5], [0, 0, 1])], [Sphere([0, 0, 0], 1.0)])
    2
    >>> starts, ends, steps = buffer.as_arrays()
    """

    def __init__(self, config: Optional[BounceConfig] = None):
        self.config = config if config is not None else BounceConfig()
        self._segments: List[Segment] = []

    @property
    def segments(self) -> List[Segment]:
        return list(self._segments)

    def update(self, rays: Sequence[Ray], spheres: Sequence[Sphere]) -> int:
        """Recompute the segments for the given scene; returns the segment count."""
        self._segments = simulate(rays, spheres, config=self.config)
        return len(self._segments)

    def clear(self) -> None:
        self._segments = []

    def as_arrays(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Pack the segments for a line renderer.

        Returns
        -------
        starts : np.ndarray, shape (N, 3)
        ends : np.ndarray, shape (N, 3)
        steps : np.ndarray, shape (N,), int
        """
        if not self._segments:
            return np.zeros((0, 3)), np.zeros((0, 3)), np.zeros(0, dtype=int)
        starts = np.array([s.start for s in self._segments], dtype=np.float64)
        ends = np.array([s.end for s in self._segments], dtype=np.float64)
        steps = np.array([s.step for s in self._segments], dtype=int)
        return starts, ends, steps

    def alphas(self, base: float = 1.0, falloff: float = 0.5) -> np.ndarray:
        """Per-segment opacity, base * falloff ** step."""
        _, _, steps = self.as_arrays()
        return base * np.power(falloff, steps.astype(np.float64))

    def __len__(self) -> int:
        return len(self._segments)

    def __iter__(self) -> Iterator[Segment]:
        return iter(self._segments)


# =============================================================================
# Demo
# =============================================================================

if __name__ == "__main__":
    print("=" * 60)
    print("Bounce Simulation")
    print("=" * 60)

    scene_spheres = [Sphere(position=[0, 0, 0], radius=1.0)]
    scene_rays = [Ray(origin=[0, 0, -5], direction=[0, 0, 1])]

    for seg in simulate(scene_rays, scene_spheres):
        print(f"  step {seg.step}: {seg.start} -> {seg.end} (length {seg.length:.3f})")

    print("\nEmpty scene:")
    for seg in simulate(scene_rays, []):
        print(f"  step {seg.step}: {seg.start} -> {seg.end}")
