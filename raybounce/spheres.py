"""
spheres.py - Sphere geometry, ray intersection and reflection

Each sphere knows:
    - Its centre position
    - Its radius

Intersection solves the ray/sphere quadratic for a ray whose direction
is not necessarily unit length:

    a = |D|²,  b = 2 (O - C)·D,  c = |O - C|² - r²

and keeps the smallest root that clears a small epsilon, so a ray just
reflected off the surface does not hit it again at t ≈ 0.

Project: Ray Bounce Simulator
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from .rays import Ray, as_vec3

logger = logging.getLogger(__name__)

# Minimum ray parameter accepted as a hit
HIT_EPSILON = 1e-3

POLICY_FIRST = "first"
POLICY_NEAREST = "nearest"
POLICIES = (POLICY_FIRST, POLICY_NEAREST)


@dataclass(frozen=True, eq=False)
class Hit:
    """
    First valid intersection of a ray with a sphere.

    Attributes
    ----------
    position : np.ndarray
        Intersection point O + t·D
    normal : np.ndarray
        Outward unit normal at the intersection point
    t : float
        Ray parameter of the intersection
    """
    position: np.ndarray
    normal: np.ndarray
    t: float

    def __eq__(self, other) -> bool:
        if not isinstance(other, Hit):
            return NotImplemented
        return (
            self.t == other.t
            and np.array_equal(self.position, other.position)
            and np.array_equal(self.normal, other.normal)
        )


class Sphere:
    """
    Static sphere in the scene.

    Attributes
    ----------
    position : np.ndarray
        Centre [x, y, z]
    radius : float
        Radius, >= 0
    """

    def __init__(self, position: Sequence[float] | np.ndarray, radius: float = 1.0):
        radius = float(radius)
        if not np.isfinite(radius) or radius < 0:
            raise ValueError(f"Sphere radius must be finite and >= 0, got {radius}")
        self.position = as_vec3(position, "position")
        self.radius = radius

    def translate(self, offset: np.ndarray) -> None:
        """Move the sphere centre by offset."""
        self.position = self.position + as_vec3(offset, "offset")

    def copy(self) -> 'Sphere':
        return Sphere(self.position.copy(), self.radius)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Sphere):
            return NotImplemented
        return np.array_equal(self.position, other.position) and self.radius == other.radius

    def __repr__(self) -> str:
        p = self.position
        return f"Sphere(position=[{p[0]:.4f}, {p[1]:.4f}, {p[2]:.4f}], radius={self.radius:.4f})"


def intersect(sphere: Sphere, ray: Ray, epsilon: float = HIT_EPSILON) -> Optional[Hit]:
    """
    Intersect a ray with a sphere.

    Parameters
    ----------
    sphere : Sphere
        Target sphere
    ray : Ray
        Incoming ray, direction of any non-zero length
    epsilon : float, optional
        Smallest ray parameter accepted as a hit (default: 1e-3)

    Returns
    -------
    Hit or None
        Nearest intersection with t >= epsilon, or None on a miss.
        Degenerate rays (near-zero direction, NaN or infinite data) never hit.
    """
    if ray.is_degenerate:
        return None

    o = ray.origin
    d = ray.direction
    oc = o - sphere.position

    a = float(np.dot(d, d))
    b = 2.0 * float(np.dot(oc, d))
    c = float(np.dot(oc, oc)) - sphere.radius ** 2

    disc = b * b - 4.0 * a * c
    if not np.isfinite(disc) or disc < 0:
        return None

    t_mid = -b / (2.0 * a)
    t_delta = np.sqrt(disc) / (2.0 * a)

    # t_delta >= 0, so the near root comes first
    for t in (t_mid - t_delta, t_mid + t_delta):
        if t >= epsilon:
            break
    else:
        return None

    position = o + t * d
    outward = position - sphere.position
    length = np.linalg.norm(outward)
    if length == 0.0:
        # Zero-radius sphere hit dead centre: no usable normal
        return None

    return Hit(position=position, normal=outward / length, t=float(t))


def reflect(ray: Ray, hit: Hit) -> Ray:
    """
    Reflect a ray about the surface normal at a hit.

    The new ray starts at the hit position and its direction is
    D - 2 (D·N) N, which keeps the length of D. No check is made on the
    sign of D·N, so rays hitting from inside reflect the same way.

    Parameters
    ----------
    ray : Ray
        Incoming ray
    hit : Hit
        Intersection of that ray

    Returns
    -------
    Ray
        Reflected ray
    """
    d = ray.direction
    n = hit.normal
    parallel = np.dot(d, n) * n
    return Ray(origin=hit.position.copy(), direction=d - 2.0 * parallel)


def closest_hit(
    spheres: Sequence[Sphere],
    ray: Ray,
    epsilon: float = HIT_EPSILON,
    policy: str = POLICY_NEAREST,
) -> Optional[Hit]:
    """
    Resolve a ray against the scene spheres.

    Parameters
    ----------
    spheres : sequence of Sphere
        Scene geometry, in scene order
    ray : Ray
        Ray to test
    epsilon : float, optional
        Minimum accepted ray parameter
    policy : str, optional
        "nearest" tests every sphere and keeps the smallest t (earlier
        sphere wins ties); "first" only tests spheres[0]

    Returns
    -------
    Hit or None
    """
    if policy not in POLICIES:
        raise ValueError(f"Unknown hit policy {policy!r}, expected one of {POLICIES}")
    if not spheres:
        return None

    if policy == POLICY_FIRST:
        return intersect(spheres[0], ray, epsilon)

    best = None
    for sphere in spheres:
        hit = intersect(sphere, ray, epsilon)
        if hit is not None and (best is None or hit.t < best.t):
            best = hit
    return best


# =============================================================================
# Demo
# =============================================================================

if __name__ == "__main__":
    print("=" * 60)
    print("Sphere Intersection")
    print("=" * 60)

    sphere = Sphere(position=[0, 0, 0], radius=1.0)
    ray = Ray(origin=[0, 0, -5], direction=[0, 0, 1])

    hit = intersect(sphere, ray)
    print(f"\n{sphere}\n{ray}")
    print(f"Hit position: {hit.position}, normal: {hit.normal}, t={hit.t:.4f}")

    bounced = reflect(ray, hit)
    print(f"Reflected: {bounced}")
    print(f"Second intersection: {intersect(sphere, bounced)}")

    miss = Ray(origin=[2, 0, -5], direction=[0, 0, 1])
    print(f"\nOffset ray {miss} -> {intersect(sphere, miss)}")
