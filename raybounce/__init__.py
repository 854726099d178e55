"""
raybounce - Ray/sphere bounce simulation

Casts rays from a grid of origins, intersects them with spheres, reflects
them for a fixed number of bounces and returns the path as line segments
tagged with their bounce step, ready for a debug line renderer.
"""

from .rays import Ray, normalize
from .rays import create_ray_grid, create_ray_fan

from .spheres import Sphere, Hit
from .spheres import intersect, reflect, closest_hit

from .bounce import Segment, BounceBuffer, simulate
from .config import BounceConfig
from .scene import Scene, FrameDriver

__version__ = "0.1.0"

__all__ = [
    # Rays
    "Ray",
    "normalize",
    "create_ray_grid",
    "create_ray_fan",
    # Spheres
    "Sphere",
    "Hit",
    "intersect",
    "reflect",
    "closest_hit",
    # Simulation
    "Segment",
    "BounceBuffer",
    "simulate",
    "BounceConfig",
    "Scene",
    "FrameDriver",
]
