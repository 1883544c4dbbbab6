"""
Mesh export for decoded levels.

Every cube side without a neighbouring cube is part of the mine's outer
shell and becomes one quad. Quads are written as-is to ASCII PLY, or split
into triangles for the formats trimesh exports (GLB, OBJ, STL, ...).
"""

import io
import logging
from pathlib import Path
from typing import List, Optional, TextIO, Tuple, Union

import numpy as np
import trimesh

from descent.level import Cube, Level, Side

log = logging.getLogger(__name__)

# Cube corner slots making up each side, see descent.level. Dict order is the
# face order of the exported mesh.
SIDE_CORNERS = {
    Side.LEFT: (2, 3, 7, 6),
    Side.TOP: (0, 3, 7, 4),
    Side.RIGHT: (0, 1, 5, 4),
    Side.BOTTOM: (1, 2, 6, 5),
    Side.BACK: (0, 1, 2, 3),
    Side.FRONT: (4, 5, 6, 7),
}

Quad = Tuple[int, int, int, int]


def cube_quads(cube: Cube) -> List[Quad]:
    """
    Quads for the exterior sides of one cube.

    Args:
        cube: Decoded cube

    Returns:
        List of (a, b, c, d) vertex table indices, in SIDE_CORNERS order
    """
    quads = []
    for side, corners in SIDE_CORNERS.items():
        if cube.is_exterior(side):
            quads.append(tuple(cube.vertex_indices[c] for c in corners))
    return quads


def level_quads(level: Level) -> np.ndarray:
    """
    Quads for every exterior side in the level.

    Returns:
        Mx4 int array of vertex table indices
    """
    quads = [quad for cube in level.cubes for quad in cube_quads(cube)]
    if not quads:
        return np.zeros((0, 4), dtype=np.int64)
    return np.array(quads, dtype=np.int64)


def quads_to_triangles(quads: np.ndarray) -> np.ndarray:
    """Split each quad (a, b, c, d) into triangles (a, b, c) and (a, c, d)."""
    quads = np.asarray(quads).reshape(-1, 4)
    first = quads[:, [0, 1, 2]]
    second = quads[:, [0, 2, 3]]
    return np.stack([first, second], axis=1).reshape(-1, 3)


def write_ply(
    level: Level,
    stream: TextIO,
    name: str = "",
    vertices_only: bool = False,
) -> None:
    """
    Write a level as ASCII PLY with one quad face per exterior side.

    Args:
        level: Decoded level
        stream: Text stream to write to
        name: Level name for the header comment
        vertices_only: Omit the face element
    """
    quads = level_quads(level)

    stream.write("ply\n")
    stream.write("format ascii 1.0\n")
    stream.write(f"comment An exported Descent 1 level ({name})\n")
    stream.write(f"element vertex {level.vertex_count}\n")
    stream.write("property float x\n")
    stream.write("property float y\n")
    stream.write("property float z\n")
    if not vertices_only:
        stream.write(f"element face {len(quads)}\n")
        stream.write("property list uchar int vertex_index\n")
    stream.write("end_header\n")

    for x, y, z in level.vertices:
        stream.write(f"{x:g} {y:g} {z:g}\n")

    if not vertices_only:
        for a, b, c, d in quads:
            stream.write(f"4 {a} {b} {c} {d}\n")


def level_to_ply(level: Level, name: str = "", vertices_only: bool = False) -> str:
    """Return the ASCII PLY text for a level."""
    buffer = io.StringIO()
    write_ply(level, buffer, name=name, vertices_only=vertices_only)
    return buffer.getvalue()


def level_to_trimesh(level: Level) -> "trimesh.Trimesh":
    """
    Build a triangle mesh of the level's outer shell.

    Vertices are kept in table order so indices match the level.

    Returns:
        trimesh.Trimesh mesh
    """
    faces = quads_to_triangles(level_quads(level))
    vertices = np.asarray(level.vertices, dtype=np.float64)
    return trimesh.Trimesh(vertices=vertices, faces=faces, process=False)


def export_level(
    level: Level,
    path: Union[str, Path],
    name: Optional[str] = None,
    vertices_only: bool = False,
) -> Path:
    """
    Write a level mesh to disk, choosing the format from the suffix.

    ``.ply`` is written as ASCII quads; anything else goes through trimesh.

    Args:
        level: Decoded level
        path: Output path (.ply, .glb, .obj, .stl, ...)
        name: Level name for the PLY header comment (defaults to the stem)
        vertices_only: PLY only, omit faces

    Returns:
        Path to the written file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if path.suffix.lower() == ".ply":
        with open(path, "w", newline="\n") as f:
            write_ply(level, f, name=name or path.stem, vertices_only=vertices_only)
    else:
        mesh = level_to_trimesh(level)
        mesh.export(str(path))

    log.info("Wrote %s", path)
    return path
