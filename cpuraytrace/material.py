"""Surface materials and image textures."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from os import PathLike
from typing import Optional, Union

import numpy as np
from PIL import Image

from .vector import Vec2, Vec3

_GAMMA = 2.2


class MaterialType(enum.Enum):
    BASIC = "basic"
    DIELECTRIC = "dielectric"


class Texture:
    """An RGBA float image; row 0 is the bottom of the picture (v = 0)."""

    def __init__(self, pixels):
        data = np.asarray(pixels, dtype=np.float64)
        if data.ndim != 3 or data.shape[2] != 4 or data.shape[0] == 0 or data.shape[1] == 0:
            raise ValueError(f"expected a non-empty (height, width, 4) array, got {data.shape}")
        self.pixels = data

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @classmethod
    def from_file(cls, path: Union[str, PathLike]) -> Texture:
        """Load an image, converting 8-bit colour to linear floats and flipping it vertically."""
        with Image.open(path) as image:
            channels = len(image.getbands())
            rgba = np.asarray(image.convert("RGBA"), dtype=np.float64) / 255.0
        rgba = rgba[::-1].copy()
        rgba[..., :3] = rgba[..., :3] ** _GAMMA
        if channels != 4:
            rgba[..., 3] = 1.0
        return cls(rgba)

    def get_value(self, uv: Vec2) -> Vec3:
        """RGB value of the texel at uv, truncating to the texel grid."""
        x = int(float(self.width - 1) * uv.x)
        y = int(float(self.height - 1) * uv.y)
        index = y * self.width + x
        if not 0 <= index < self.width * self.height:
            raise IndexError(f"texture coordinate {uv} lies outside the image")
        r, g, b, _ = self.pixels.reshape(-1, 4)[index]
        return Vec3(float(r), float(g), float(b))


@dataclass
class Material:
    """Colour, texture and optical properties of a surface."""

    color: Vec3
    specularity: float
    texture: Optional[Texture] = None
    height_map: Optional[Texture] = None
    refraction_index: float = 1.0
    type: MaterialType = MaterialType.BASIC