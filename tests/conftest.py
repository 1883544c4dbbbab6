"""Shared fixtures: synthetic HOG, RDL and cube records."""

import pytest

from descent.level import NO_NEIGHBOR, NO_WALL

from builders import build_cube, build_hog, build_rdl, scramble, unit_cube_vertices


@pytest.fixture
def make_rdl():
    return build_rdl


@pytest.fixture
def make_hog():
    return build_hog


@pytest.fixture
def single_cube_rdl():
    """A level with one isolated cube: every side exterior."""
    return build_rdl(
        vertices=unit_cube_vertices(),
        cubes=[build_cube(lighting=7864, textures={0: (5, None), 4: (7, 3)})],
    )


@pytest.fixture
def two_cube_rdl():
    """
    Two cubes joined front to back.

    Cube 0's FRONT side (corners 4-7) adjoins cube 1's BACK side (corners
    0-3), and a door (wall 4) sits on that shared side of cube 0.
    """
    vertices = unit_cube_vertices(0) + unit_cube_vertices(1)[4:]
    cube0 = build_cube(
        neighbors=[NO_NEIGHBOR] * 4 + [1, NO_NEIGHBOR],
        walls=[NO_WALL] * 4 + [4, NO_WALL],
        vertex_indices=(0, 1, 2, 3, 4, 5, 6, 7),
    )
    cube1 = build_cube(
        neighbors=[NO_NEIGHBOR] * 5 + [0],
        vertex_indices=(4, 5, 6, 7, 8, 9, 10, 11),
        energy_center=(2, -1, 300),
    )
    return build_rdl(vertices=vertices, cubes=[cube0, cube1])


@pytest.fixture
def sample_hog(single_cube_rdl, two_cube_rdl):
    """An archive with two levels, a scrambled text file and a binary blob."""
    # "Hi\n" scrambled
    text = bytes([scramble(c) for c in b"Hi"]) + b"\x0a"
    return build_hog([
        ("level01.rdl", single_cube_rdl),
        ("level02.rdl", two_cube_rdl),
        ("briefing.txb", text),
        ("palette.256", bytes(range(16))),
    ])


