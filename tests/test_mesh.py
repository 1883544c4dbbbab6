"""Tests for mesh.py - exterior quads, PLY and trimesh export."""

import io

import numpy as np
import pytest

from descent.cursor import ByteCursor
from descent.level import NO_NEIGHBOR
from descent.mesh import (
    SIDE_CORNERS,
    cube_quads,
    export_level,
    level_quads,
    level_to_ply,
    level_to_trimesh,
    quads_to_triangles,
    write_ply,
)
from descent.rdl import decode_cube, read_rdl

from builders import build_cube, build_rdl


class TestQuads:
    """Test exterior side detection."""

    def test_isolated_cube(self, single_cube_rdl):
        cube = read_rdl(single_cube_rdl).cubes[0]
        quads = cube_quads(cube)

        assert quads == [
            (2, 3, 7, 6),  # bit 0
            (0, 3, 7, 4),  # bit 1
            (0, 1, 5, 4),  # bit 2
            (1, 2, 6, 5),  # bit 3
            (0, 1, 2, 3),  # bit 5
            (4, 5, 6, 7),  # bit 4
        ]

    @pytest.mark.parametrize("bit, corners", [
        (0, (2, 3, 7, 6)),
        (1, (0, 3, 7, 4)),
        (2, (0, 1, 5, 4)),
        (3, (1, 2, 6, 5)),
        (4, (4, 5, 6, 7)),
        (5, (0, 1, 2, 3)),
    ])
    def test_single_open_side(self, bit, corners):
        """Each mask bit maps to its own fixed group of corner slots."""
        neighbors = [0] * 6
        neighbors[bit] = NO_NEIGHBOR
        # distinct vertex table indices so slots and indices cannot be confused
        data = build_cube(neighbors=neighbors, vertex_indices=tuple(range(10, 18)))
        cube = decode_cube(ByteCursor(data), vertex_count=18, cube_count=1)

        assert cube_quads(cube) == [tuple(10 + c for c in corners)]

    def test_quads_use_vertex_table_indices(self, two_cube_rdl):
        cube1 = read_rdl(two_cube_rdl).cubes[1]
        quads = cube_quads(cube1)

        # back side (corners 0-3) is shared with cube 0, front side is exterior
        assert (4, 5, 6, 7) not in quads
        assert (8, 9, 10, 11) in quads
        assert len(quads) == 5

    def test_walled_side_with_neighbor_is_not_exterior(self, two_cube_rdl):
        cube0 = read_rdl(two_cube_rdl).cubes[0]
        assert (4, 5, 6, 7) not in cube_quads(cube0)

    def test_level_quads(self, two_cube_rdl):
        quads = level_quads(read_rdl(two_cube_rdl))

        assert quads.shape == (10, 4)
        assert quads.max() == 11

    def test_empty_level(self):
        quads = level_quads(read_rdl(build_rdl()))
        assert quads.shape == (0, 4)

    def test_every_side_has_corners(self):
        assert len(SIDE_CORNERS) == 6
        assert all(len(set(corners)) == 4 for corners in SIDE_CORNERS.values())

    def test_quads_to_triangles(self):
        triangles = quads_to_triangles(np.array([[0, 1, 2, 3], [4, 5, 6, 7]]))
        np.testing.assert_array_equal(
            triangles,
            [[0, 1, 2], [0, 2, 3], [4, 5, 6], [4, 6, 7]],
        )


class TestPly:
    """Test ASCII PLY output."""

    def test_header(self, single_cube_rdl):
        ply = level_to_ply(read_rdl(single_cube_rdl), name="level01.rdl")
        header = ply.split("end_header\n")[0].splitlines()

        assert header == [
            "ply",
            "format ascii 1.0",
            "comment An exported Descent 1 level (level01.rdl)",
            "element vertex 8",
            "property float x",
            "property float y",
            "property float z",
            "element face 6",
            "property list uchar int vertex_index",
        ]

    def test_body(self, single_cube_rdl):
        ply = level_to_ply(read_rdl(single_cube_rdl))
        body = ply.split("end_header\n")[1].splitlines()

        assert len(body) == 8 + 6
        assert body[0] == "0 1 0"
        assert body[7] == "1 1 1"
        assert body[8] == "4 2 3 7 6"
        assert body[-1] == "4 4 5 6 7"

    def test_fractional_coordinates(self):
        level = read_rdl(build_rdl(vertices=[(32768, -16384, 65536 * 100)]))
        body = level_to_ply(level).split("end_header\n")[1]
        assert body == "0.5 -0.25 100\n"

    def test_vertices_only(self, single_cube_rdl):
        ply = level_to_ply(read_rdl(single_cube_rdl), vertices_only=True)

        assert "element face" not in ply
        assert len(ply.split("end_header\n")[1].splitlines()) == 8

    def test_empty_level(self):
        ply = level_to_ply(read_rdl(build_rdl()))

        assert "element vertex 0\n" in ply
        assert "element face 0\n" in ply
        assert ply.endswith("end_header\n")

    def test_write_to_stream(self, two_cube_rdl):
        stream = io.StringIO()
        write_ply(read_rdl(two_cube_rdl), stream, name="level02.rdl")

        assert stream.getvalue().count("\n4 ") == 10


class TestTrimeshExport:
    """Test triangle mesh conversion."""

    def test_level_to_trimesh(self, two_cube_rdl):
        level = read_rdl(two_cube_rdl)
        mesh = level_to_trimesh(level)

        assert len(mesh.vertices) == 12
        assert len(mesh.faces) == 20
        np.testing.assert_array_almost_equal(mesh.vertices, level.vertices)

    def test_export_ply(self, tmp_path, single_cube_rdl):
        path = export_level(read_rdl(single_cube_rdl), tmp_path / "out" / "level01.ply")

        text = path.read_text()
        assert text.startswith("ply\n")
        assert "comment An exported Descent 1 level (level01)" in text

    def test_export_glb(self, tmp_path, two_cube_rdl):
        path = export_level(read_rdl(two_cube_rdl), tmp_path / "level02.glb")

        assert path.exists()
        assert path.read_bytes()[:4] == b"glTF"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
