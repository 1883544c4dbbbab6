"""Tests for level.py - decoded level structures."""

import numpy as np
import pytest

from descent.level import (
    EXIT_NEIGHBOR,
    NO_NEIGHBOR,
    NO_WALL,
    Cube,
    Level,
    RdlHeader,
    Side,
    Texture,
    Vertex,
    texture_present,
)


def _cube(neighbors, walls):
    textures = tuple(
        Texture(primary=1) if texture_present(n, w) else None
        for n, w in zip(neighbors, walls)
    )
    return Cube(
        vertex_indices=tuple(range(8)),
        neighbors=tuple(neighbors),
        walls=tuple(walls),
        lighting=0.5,
        textures=textures,
    )


class TestTexturePredicate:
    """A side is textured iff it is exterior or walled."""

    @pytest.mark.parametrize("neighbor,wall,expected", [
        (NO_NEIGHBOR, NO_WALL, True),   # outer shell
        (NO_NEIGHBOR, 3, True),         # walled outer shell
        (7, 3, True),                   # door between cubes
        (7, NO_WALL, False),            # open connection
    ])
    def test_four_cases(self, neighbor, wall, expected):
        assert texture_present(neighbor, wall) is expected

    def test_exit_side_without_wall(self):
        """The exit marker counts as a neighbour, not as exterior."""
        assert texture_present(EXIT_NEIGHBOR, NO_WALL) is False


class TestSide:
    def test_bit_order(self):
        assert [s.name for s in Side] == ["LEFT", "TOP", "RIGHT", "BOTTOM", "FRONT", "BACK"]
        assert [int(s) for s in Side] == list(range(6))


class TestCube:
    def test_side_helpers(self):
        cube = _cube(
            neighbors=[NO_NEIGHBOR, 1, 2, NO_NEIGHBOR, 3, 4],
            walls=[NO_WALL, 0, NO_WALL, NO_WALL, NO_WALL, NO_WALL],
        )

        assert cube.is_exterior(Side.LEFT)
        assert not cube.is_exterior(Side.TOP)
        assert cube.has_wall(Side.TOP)
        assert not cube.has_wall(Side.LEFT)
        assert cube.has_texture(Side.LEFT)
        assert cube.has_texture(Side.TOP)
        assert not cube.has_texture(Side.RIGHT)
        assert cube.has_texture(Side.BOTTOM)


class TestLevel:
    def _level(self):
        header = RdlHeader(b"LVLP", 1, 20, 0, 100)
        vertices = np.array([[0.0, 0.0, 0.0], [1.0, 2.0, 3.0]])
        cube = _cube(
            neighbors=[NO_NEIGHBOR, 1, NO_NEIGHBOR, 1, 1, 1],
            walls=[NO_WALL, NO_WALL, NO_WALL, NO_WALL, 2, NO_WALL],
        )
        return Level(header=header, vertices=vertices, cubes=[cube])

    def test_counts(self):
        level = self._level()
        assert level.vertex_count == 2
        assert level.cube_count == 1

    def test_vertex(self):
        vertex = self._level().vertex(1)
        assert vertex == Vertex(1.0, 2.0, 3.0)
        assert isinstance(vertex.x, float)

    def test_to_dict(self):
        d = self._level().to_dict()

        assert d["vertex_count"] == 2
        assert d["cube_count"] == 1
        assert d["exterior_sides"] == 2
        assert d["walls"] == 1
        assert d["energy_centers"] == 0
        assert d["bounds"] == {"min": [0.0, 0.0, 0.0], "max": [1.0, 2.0, 3.0]}

    def test_empty_level_has_no_bounds(self):
        level = Level(header=RdlHeader(b"LVLP", 1, 20, 0, 25))
        d = level.to_dict()
        assert d["vertex_count"] == 0
        assert "bounds" not in d


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
