"""
rays.py - Ray class and ray generators for the bounce simulator

A ray is defined by:
    - Origin point O = (x, y, z)
    - Direction D = (dx, dy, dz), any non-negative length

The direction is kept exactly as given. Reflection produces directions
of the same length as the incoming one, and the intersection routine
solves the full quadratic, so nothing downstream needs unit vectors.

Project: Ray Bounce Simulator
"""

import logging

import numpy as np
from typing import List, Sequence

logger = logging.getLogger(__name__)

# Vectors shorter than this cannot be normalized
MIN_LENGTH = 1e-15


def as_vec3(value, name: str = "vector") -> np.ndarray:
    """
    Convert array-like input to a float64 3-vector.

    Raises
    ------
    ValueError
        If the input does not have exactly three components
    """
    arr = np.array(value, dtype=np.float64).reshape(-1)
    if arr.shape != (3,):
        raise ValueError(f"{name} must have 3 components, got shape {arr.shape}")
    return arr


def normalize(vector: np.ndarray) -> np.ndarray:
    """
    Normalize a vector to unit length.

    Parameters
    ----------
    vector : np.ndarray
        Input vector of any dimension

    Returns
    -------
    np.ndarray
        Unit vector in same direction

    Raises
    ------
    ValueError
        If vector has zero magnitude
    """
    magnitude = np.linalg.norm(vector)
    if magnitude < MIN_LENGTH:
        raise ValueError("Cannot normalize zero vector")
    return vector / magnitude


class Ray:
    """
    A ray cast into the scene: an origin plus a direction.

    Attributes
    ----------
    origin : np.ndarray
        Position of the ray start [x, y, z]
    direction : np.ndarray
        Direction vector [dx, dy, dz], not normalized

    Examples
    --------
    >>> ray = Ray(origin=[0, 0, -5], direction=[0, 0, 1])
    >>> ray.point_at(4.0)
    array([ 0.,  0., -1.])
    """

    def __init__(
        self,
        origin: List[float] | np.ndarray,
        direction: List[float] | np.ndarray,
    ):
        self.origin = as_vec3(origin, "origin")
        self.direction = as_vec3(direction, "direction")

    @property
    def length_squared(self) -> float:
        """Squared length of the direction vector."""
        return float(np.dot(self.direction, self.direction))

    @property
    def length(self) -> float:
        """Length of the direction vector."""
        return float(np.linalg.norm(self.direction))

    @property
    def is_finite(self) -> bool:
        """True if origin and direction hold no NaN or infinity."""
        return bool(np.all(np.isfinite(self.origin)) and np.all(np.isfinite(self.direction)))

    @property
    def is_degenerate(self) -> bool:
        """True if the ray cannot be traced (near-zero direction or non-finite data)."""
        return not self.is_finite or self.length < MIN_LENGTH

    def point_at(self, t: float) -> np.ndarray:
        """
        Get the point along the ray at parameter t.

        The parametric ray equation is: P(t) = origin + t * direction

        Parameters
        ----------
        t : float
            Parameter value, in units of the direction length

        Returns
        -------
        np.ndarray
            Point [x, y, z] at parameter t
        """
        return self.origin + t * self.direction

    def unit_direction(self) -> np.ndarray:
        """Direction scaled to unit length (raises ValueError on zero)."""
        return normalize(self.direction)

    def translate(self, offset: np.ndarray) -> None:
        """Move the ray origin by offset, keeping the direction."""
        self.origin = self.origin + as_vec3(offset, "offset")

    def copy(self) -> 'Ray':
        """Independent copy of this ray."""
        return Ray(origin=self.origin.copy(), direction=self.direction.copy())

    @classmethod
    def from_two_points(
        cls,
        point1: List[float] | np.ndarray,
        point2: List[float] | np.ndarray,
    ) -> 'Ray':
        """
        Create a ray starting at point1 and passing through point2.

        The direction is point2 - point1, so point_at(1.0) == point2.
        """
        p1 = as_vec3(point1, "point1")
        p2 = as_vec3(point2, "point2")
        return cls(origin=p1, direction=p2 - p1)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Ray):
            return NotImplemented
        return (
            np.array_equal(self.origin, other.origin)
            and np.array_equal(self.direction, other.direction)
        )

    def __repr__(self) -> str:
        return (
            f"Ray(origin=[{self.origin[0]:.4f}, {self.origin[1]:.4f}, {self.origin[2]:.4f}], "
            f"direction=[{self.direction[0]:.4f}, {self.direction[1]:.4f}, {self.direction[2]:.4f}])"
        )


# =============================================================================
# Ray Generation Utilities
# =============================================================================

def create_ray_grid(
    nx: int,
    ny: int,
    spacing: float,
    z: float,
    direction: Sequence[float] = (0.0, 0.0, 1.0),
    center: Sequence[float] = (0.0, 0.0),
) -> List[Ray]:
    """
    Create a rectangular grid of parallel rays in the plane z = const.

    Origins are laid out row by row (y outer, x inner) and centred on
    `center`, so a 3x3 grid with spacing 1 spans [-1, 1] on both axes.

    Parameters
    ----------
    nx, ny : int
        Number of origins along x and y
    spacing : float
        Distance between neighbouring origins
    z : float
        Z-coordinate of the origin plane
    direction : array-like, optional
        Shared direction of every ray (default: +z)
    center : array-like, optional
        (x, y) centre of the grid

    Returns
    -------
    List[Ray]
        nx * ny rays
    """
    if nx < 1 or ny < 1:
        raise ValueError(f"Grid size must be positive, got {nx}x{ny}")

    direction = as_vec3(direction, "direction")
    cx, cy = float(center[0]), float(center[1])

    xs = cx + (np.arange(nx) - (nx - 1) / 2.0) * spacing
    ys = cy + (np.arange(ny) - (ny - 1) / 2.0) * spacing

    rays = []
    for y in ys:
        for x in xs:
            rays.append(Ray(origin=[x, y, z], direction=direction))

    logger.debug("Created %dx%d ray grid at z=%s", nx, ny, z)
    return rays


def create_ray_fan(
    origin: Sequence[float],
    target: Sequence[float],
    spread: float,
    num_rays: int,
) -> List[Ray]:
    """
    Create a fan of rays from a single origin aimed across a target.

    Aim points are spaced evenly on a segment of length 2 * spread
    through `target`, perpendicular to the origin-target line and lying
    in the plane that contains the y-axis where possible.

    Parameters
    ----------
    origin : array-like
        Common starting point
    target : array-like
        Centre of the aim segment
    spread : float
        Half-length of the aim segment
    num_rays : int
        Number of rays in the fan

    Returns
    -------
    List[Ray]
        Rays whose directions run from origin to each aim point
    """
    if num_rays < 1:
        raise ValueError(f"num_rays must be positive, got {num_rays}")

    o = as_vec3(origin, "origin")
    t = as_vec3(target, "target")
    axis = normalize(t - o)

    # Pick the world axis least aligned with the fan axis to build the offset direction
    helper = np.array([0.0, 1.0, 0.0])
    if abs(np.dot(helper, axis)) > 0.9:
        helper = np.array([1.0, 0.0, 0.0])
    side = normalize(helper - np.dot(helper, axis) * axis)

    if num_rays == 1:
        offsets = [0.0]
    else:
        offsets = np.linspace(-spread, spread, num_rays)

    return [Ray.from_two_points(o, t + offset * side) for offset in offsets]


# =============================================================================
# Demo
# =============================================================================

if __name__ == "__main__":
    print("=" * 60)
    print("Ray Generators")
    print("=" * 60)

    ray = Ray.from_two_points([0, 0, -5], [0, 0, 0])
    print(f"\nTwo-point ray: {ray}")
    print(f"Point at t=0.8: {ray.point_at(0.8)}")

    grid = create_ray_grid(nx=3, ny=2, spacing=0.5, z=-5)
    print(f"\nGrid: {len(grid)} rays")
    for r in grid:
        print(f"  {r}")

    fan = create_ray_fan(origin=[0, 0, -5], target=[0, 0, 0], spread=1.5, num_rays=5)
    print(f"\nFan: {len(fan)} rays")
    for r in fan:
        print(f"  {r}")
