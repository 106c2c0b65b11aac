"""Description of a single ray hit."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .material import Material
from .vector import FLT_MAX, Vec2, Vec3


@dataclass
class Manifest:
    """Where and how a ray met a surface."""

    t: float = FLT_MAX
    surface_normal: Vec3 = field(default_factory=Vec3.zero)
    shading_normal: Vec3 = field(default_factory=Vec3.zero)
    uv: Vec2 = field(default_factory=Vec2)
    material: Optional[Material] = None
    intersection_point: Vec3 = field(default_factory=Vec3.zero)