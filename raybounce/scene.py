"""
scene.py - Explicit scene description and per-frame driver

The scene is a plain value object handed to the simulator every frame:
initial rays, spheres, and optional constant velocities for entities
that move between frames. The frame driver advances the scene, counts
frames and rebuilds the bounce buffer.

Project: Ray Bounce Simulator
"""

import logging
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .bounce import BounceBuffer
from .config import BounceConfig
from .rays import Ray, as_vec3
from .spheres import Sphere

logger = logging.getLogger(__name__)


class Scene:
    """
    Rays and spheres for one simulation, plus per-entity velocities.

    Attributes
    ----------
    rays : List[Ray]
        Initial rays, traced in this order
    spheres : List[Sphere]
        Scene geometry, in scene order
    """

    def __init__(
        self,
        rays: Optional[Iterable[Ray]] = None,
        spheres: Optional[Iterable[Sphere]] = None,
    ):
        self.rays: List[Ray] = list(rays or [])
        self.spheres: List[Sphere] = list(spheres or [])
        self._ray_velocities: List[Tuple[int, np.ndarray]] = []
        self._sphere_velocities: List[Tuple[int, np.ndarray]] = []

    def add_sphere(self, sphere: Sphere, velocity: Optional[Sequence[float]] = None) -> Sphere:
        """Append a sphere; a velocity makes it move in advance()."""
        self.spheres.append(sphere)
        if velocity is not None:
            self._sphere_velocities.append((len(self.spheres) - 1, as_vec3(velocity, "velocity")))
        return sphere

    def add_rays(self, rays: Iterable[Ray], velocity: Optional[Sequence[float]] = None) -> None:
        """Append rays; a velocity moves their origins in advance()."""
        v = as_vec3(velocity, "velocity") if velocity is not None else None
        for ray in rays:
            self.rays.append(ray)
            if v is not None:
                self._ray_velocities.append((len(self.rays) - 1, v))

    @property
    def moving_count(self) -> int:
        return len(self._ray_velocities) + len(self._sphere_velocities)

    def advance(self, dt: float) -> None:
        """Move every entity that has a velocity by velocity * dt."""
        for index, velocity in self._sphere_velocities:
            self.spheres[index].translate(velocity * dt)
        for index, velocity in self._ray_velocities:
            self.rays[index].translate(velocity * dt)

    def snapshot(self) -> Tuple[List[Ray], List[Sphere]]:
        """Independent copies of the current rays and spheres."""
        return [r.copy() for r in self.rays], [s.copy() for s in self.spheres]

    def __repr__(self) -> str:
        return (
            f"Scene(rays={len(self.rays)}, spheres={len(self.spheres)}, "
            f"moving={self.moving_count})"
        )


class FrameDriver:
    """
    Calls the simulator once per frame.

    Parameters
    ----------
    scene : Scene
        Scene to advance and trace; mutated by tick()
    config : BounceConfig, optional
        Simulation settings for the owned buffer
    """

    def __init__(self, scene: Scene, config: Optional[BounceConfig] = None):
        self.scene = scene
        self.buffer = BounceBuffer(config)
        self.frame = 0

    def tick(self, dt: float = 0.0) -> BounceBuffer:
        """Advance the scene by dt and rebuild the segment buffer."""
        self.frame += 1
        self.scene.advance(dt)
        count = self.buffer.update(self.scene.rays, self.scene.spheres)
        logger.debug("Frame %d: %d segments", self.frame, count)
        return self.buffer

    def run(
        self,
        frames: int,
        dt: float = 1.0 / 60.0,
        on_frame: Optional[Callable[[int, BounceBuffer], None]] = None,
    ) -> int:
        """
        Run a fixed number of frames.

        on_frame, if given, is called after each frame with the frame
        counter and the freshly rebuilt buffer.

        Returns
        -------
        int
            Frame counter after the run
        """
        for _ in range(frames):
            buffer = self.tick(dt)
            if on_frame is not None:
                on_frame(self.frame, buffer)
        return self.frame


# =============================================================================
# Demo
# =============================================================================

if __name__ == "__main__":
    from .rays import create_ray_grid

    scene = Scene()
    scene.add_sphere(Sphere(position=[-1.5, 0, 0], radius=1.0), velocity=[1.0, 0, 0])
    scene.add_rays(create_ray_grid(nx=3, ny=3, spacing=0.75, z=-5))
    print(scene)

    def report(frame, buffer):
        _, _, steps = buffer.as_arrays()
        counts = np.bincount(steps, minlength=buffer.config.max_steps)
        print(f"  frame {frame}: sphere x={scene.spheres[0].position[0]:+.2f}, segments per step {counts.tolist()}")

    FrameDriver(scene).run(frames=4, dt=0.5, on_frame=report)
