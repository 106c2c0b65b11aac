"""Renders a scene into a surface tile by tile on a pool of worker threads."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional, Protocol

from .camera import Camera
from .ray import JOB_INC
from .scene import Scene
from .vector import Vec3, morton_to_xy

JOB_WIDTH = 16


class _Surface(Protocol):
    width: int
    height: int

    def set(self, x: int, y: int, value: int) -> None: ...


def pack_color(color: Vec3) -> int:
    """Pack a colour with components in [0, 1] into an opaque 0xAARRGGBB value."""
    r = int(color.x * 255)
    g = int(color.y * 255)
    b = int(color.z * 255)
    return (0xFF000000 | (r << 16) | (g << 8) | b) & 0xFFFFFFFF


@dataclass
class _JobOutput:
    x_min: int
    y_min: int
    colors: list[Vec3] = field(
        default_factory=lambda: [Vec3.zero()] * (JOB_WIDTH * JOB_WIDTH)
    )


class Raytracer:
    """Traces one primary ray per pixel of a surface through a scene."""

    def __init__(
        self,
        surface: _Surface,
        scene: Scene,
        camera: Camera,
        workers: Optional[int] = None,
    ):
        self.surface = surface
        self.scene = scene
        self.camera = camera
        self.workers = workers

    def _run_job(self, x_min: int, y_min: int) -> _JobOutput:
        output = _JobOutput(x_min, y_min)
        for job_id in range(0, JOB_WIDTH * JOB_WIDTH, JOB_INC):
            color = self.scene.intersect(self.camera.construct_ray(job_id, x_min, y_min))
            x, y = morton_to_xy(job_id)
            output.colors[x + y * JOB_WIDTH] = color
        return output

    def render_frame(self) -> None:
        """Trace every pixel and write the packed colours into the surface."""
        width, height = self.surface.width, self.surface.height
        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            futures = [
                pool.submit(self._run_job, x, y)
                for y in range(0, height, JOB_WIDTH)
                for x in range(0, width, JOB_WIDTH)
            ]
            for future in futures:
                output = future.result()
                for y in range(JOB_WIDTH):
                    for x in range(JOB_WIDTH):
                        px, py = x + output.x_min, y + output.y_min
                        # Tiles at the border may reach past the surface.
                        if px < width and py < height:
                            color = output.colors[x + y * JOB_WIDTH]
                            self.surface.set(px, py, pack_color(color))