"""
Decoded level structures for Descent .RDL files.

A level is a mine made of cubes (segments). Each cube has 8 corner vertices,
6 sides, and per side an optional neighbouring cube, an optional wall and,
for sides that are drawn, a texture.

Corner slots on each side, by neighbour mask bit:
    0 (LEFT)   - 2, 3, 7, 6
    1 (TOP)    - 0, 3, 7, 4
    2 (RIGHT)  - 0, 1, 5, 4
    3 (BOTTOM) - 1, 2, 6, 5
    4 (FRONT)  - 4, 5, 6, 7
    5 (BACK)   - 0, 1, 2, 3

Side names label the mask bits; they do not say where the corners sit.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

import numpy as np


# Neighbour value for a side with no adjoining cube.
NO_NEIGHBOR = -1

# Neighbour value Descent uses for the side leading out of the mine.
EXIT_NEIGHBOR = -2

# Wall id for a side without a wall or door.
NO_WALL = 255

SIDE_COUNT = 6
CORNER_COUNT = 8
UVL_COUNT = 4


class Side(IntEnum):
    """Cube sides, in the bit order of the neighbour and wall bitmasks."""
    LEFT = 0
    TOP = 1
    RIGHT = 2
    BOTTOM = 3
    FRONT = 4
    BACK = 5


def texture_present(neighbor: int, wall: int) -> bool:
    """
    Whether a side carries a texture record.

    A side is textured when it is on the outside of the mine or when a wall
    or door sits on it. This is derived, never stored in the file.
    """
    return neighbor == NO_NEIGHBOR or wall != NO_WALL


class Vertex(NamedTuple):
    x: float
    y: float
    z: float


@dataclass(frozen=True)
class UVL:
    """Texture coordinate and light value for one corner of a side."""
    u: int
    v: int
    l: int


@dataclass(frozen=True)
class Texture:
    """
    Texture applied to a side.

    ``secondary`` is the overlay texture, only present when the high bit of
    the stored primary number was set. ``primary`` never has that bit.
    """
    primary: int
    secondary: Optional[int] = None
    uvls: Tuple[UVL, ...] = ()


@dataclass(frozen=True)
class EnergyCenter:
    """Energy center / special segment record."""
    special: int
    number: int
    value: int


@dataclass(frozen=True)
class Cube:
    vertex_indices: Tuple[int, ...]
    neighbors: Tuple[int, ...]
    walls: Tuple[int, ...]
    lighting: float
    textures: Tuple[Optional[Texture], ...]
    energy_center: Optional[EnergyCenter] = None

    def is_exterior(self, side: Side) -> bool:
        return self.neighbors[side] == NO_NEIGHBOR

    def has_wall(self, side: Side) -> bool:
        return self.walls[side] != NO_WALL

    def has_texture(self, side: Side) -> bool:
        return self.textures[side] is not None


@dataclass(frozen=True)
class RdlHeader:
    """The fixed 20 byte preamble of an .RDL file."""
    signature: bytes
    version: int
    mine_data_offset: int
    objects_offset: int
    file_size: int


@dataclass
class Level:
    """
    A decoded level: header, vertex table and cube table.

    ``vertices`` is a read-only float64 array of shape (N, 3).
    """
    header: RdlHeader
    vertices: np.ndarray = field(default_factory=lambda: np.zeros((0, 3)))
    cubes: List[Cube] = field(default_factory=list)

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def cube_count(self) -> int:
        return len(self.cubes)

    def vertex(self, index: int) -> Vertex:
        x, y, z = self.vertices[index]
        return Vertex(float(x), float(y), float(z))

    def exterior_side_count(self) -> int:
        return sum(
            1 for cube in self.cubes for side in Side if cube.is_exterior(side)
        )

    def to_dict(self) -> Dict[str, Any]:
        """Summary suitable for JSON output."""
        d: Dict[str, Any] = {
            "version": self.header.version,
            "mine_data_offset": self.header.mine_data_offset,
            "objects_offset": self.header.objects_offset,
            "file_size": self.header.file_size,
            "vertex_count": self.vertex_count,
            "cube_count": self.cube_count,
            "exterior_sides": self.exterior_side_count(),
            "walls": sum(
                1 for cube in self.cubes for side in Side if cube.has_wall(side)
            ),
            "energy_centers": sum(
                1 for cube in self.cubes if cube.energy_center is not None
            ),
        }
        if self.vertex_count:
            d["bounds"] = {
                "min": self.vertices.min(axis=0).tolist(),
                "max": self.vertices.max(axis=0).tolist(),
            }
        return d
