"""
RDL (Descent level) decoder.

File format:
- Signature: "LVLP" (4 bytes)
- Version: uint32
- Mine data offset: uint32
- Objects offset: uint32
- File size: uint32 (must equal the actual length)

Mine data, at the mine data offset:
- Mine version: uint8
- Vertex count: uint16
- Cube count: uint16
- Vertices: vertex_count x (x, y, z), each int32 16:16 fixed point
- Cubes: cube_count variable-length records

Cube record:
- Neighbour mask: uint8. Bits 0-5 are the sides LEFT, TOP, RIGHT, BOTTOM,
  FRONT, BACK; bit 6 flags an energy center record.
- Neighbours: int16 for each side whose bit is set
- Vertex indices: 8 x uint16
- Energy center (only when bit 6 is set): special uint8, number int8,
  value int16
- Lighting: int16, divided by 24 * 327.68
- Wall mask: uint8, same side order as the neighbour mask
- Walls: uint8 for each side whose bit is set
- Textures: for each side with no neighbour or with a wall,
  primary uint16 (bit 15 set means a secondary uint16 follows), then
  4 x (u int16, v int16, l uint16)

All numbers are little-endian.
"""

import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union

import numpy as np

from descent.cursor import Buffer, ByteCursor, FIXED_ONE
from descent.errors import (
    IndexOutOfRangeError,
    InvalidMagicError,
    MalformedGeometryError,
    OutOfBoundsError,
    SizeMismatchError,
    TruncatedInputError,
)
from descent.level import (
    CORNER_COUNT,
    EXIT_NEIGHBOR,
    NO_NEIGHBOR,
    NO_WALL,
    UVL_COUNT,
    Cube,
    EnergyCenter,
    Level,
    RdlHeader,
    Side,
    Texture,
    UVL,
    texture_present,
)

log = logging.getLogger(__name__)

# Constants
MAGIC = b"LVLP"
HEADER_SIZE = 20
VERTEX_SIZE = 12
# version byte + vertex count + cube count
MINE_COUNTS_SIZE = 5

ENERGY_CENTER_BIT = 1 << 6
SECONDARY_TEXTURE_BIT = 1 << 15
LIGHTING_SCALE = 24 * 327.68


def parse_header(data: Buffer) -> RdlHeader:
    """
    Parse and validate the 20 byte level header.

    Args:
        data: Complete contents of an .RDL file

    Returns:
        RdlHeader

    Raises:
        InvalidMagicError: Signature is not "LVLP"
        TruncatedInputError: Fewer than 20 bytes
        SizeMismatchError: Declared file size differs from len(data)
    """
    signature = bytes(data[:len(MAGIC)])
    if signature != MAGIC:
        raise InvalidMagicError(
            f"Invalid magic: {signature!r}, expected {MAGIC!r}", offset=0, field="signature"
        )

    if len(data) < HEADER_SIZE:
        raise TruncatedInputError(
            f"Level header needs {HEADER_SIZE} bytes, got {len(data)}", offset=0, field="header"
        )

    cursor = ByteCursor(data)
    header = RdlHeader(
        signature=cursor.read_bytes(4, "signature"),
        version=cursor.read_u32("version"),
        mine_data_offset=cursor.read_u32("mine_data_offset"),
        objects_offset=cursor.read_u32("objects_offset"),
        file_size=cursor.read_u32("file_size"),
    )

    if header.file_size != len(data):
        raise SizeMismatchError(
            f"Header declares {header.file_size} bytes but file has {len(data)}",
            offset=16,
            field="file_size",
        )

    return header


def is_valid_rdl(data: Buffer) -> bool:
    """True if the buffer has the level signature and a matching size field."""
    try:
        parse_header(data)
    except (InvalidMagicError, TruncatedInputError, SizeMismatchError):
        return False
    return True


def read_counts(cursor: ByteCursor, header: RdlHeader) -> Tuple[int, int]:
    """
    Read the vertex and cube counts at the start of the mine data.

    Leaves the cursor at the first vertex record.
    """
    if header.mine_data_offset + MINE_COUNTS_SIZE > len(cursor):
        raise TruncatedInputError(
            f"Mine data offset {header.mine_data_offset} is past the end of "
            f"a {len(cursor)} byte file",
            offset=header.mine_data_offset,
            field="mine_data_offset",
        )

    cursor.seek(header.mine_data_offset)
    mine_version = cursor.read_u8("mine_version")
    vertex_count = cursor.read_u16("vertex_count")
    cube_count = cursor.read_u16("cube_count")

    log.debug(
        "Mine version %d: %d vertices, %d cubes", mine_version, vertex_count, cube_count
    )
    return vertex_count, cube_count


def cube_offset(header: RdlHeader, vertex_count: int) -> int:
    """Offset of the first cube record."""
    return header.mine_data_offset + MINE_COUNTS_SIZE + VERTEX_SIZE * vertex_count


def decode_vertices(cursor: ByteCursor, count: int) -> np.ndarray:
    """
    Read ``count`` fixed point vertices starting at the cursor.

    Returns:
        Read-only float64 array of shape (count, 3)
    """
    start = cursor.position
    if start + VERTEX_SIZE * count > len(cursor):
        raise TruncatedInputError(
            f"Vertex table of {count} entries runs past the end of a "
            f"{len(cursor)} byte file",
            offset=start,
            field="vertices",
        )

    if count == 0:
        vertices = np.zeros((0, 3), dtype=np.float64)
    else:
        raw = np.frombuffer(cursor.data, dtype="<i4", count=count * 3, offset=start)
        vertices = raw.reshape(count, 3) / FIXED_ONE

    cursor.skip(VERTEX_SIZE * count, "vertices")
    vertices.setflags(write=False)
    return vertices


def _decode_texture(cursor: ByteCursor, prefix: str) -> Texture:
    primary = cursor.read_u16(f"{prefix}.primary")
    secondary = None
    if primary & SECONDARY_TEXTURE_BIT:
        primary &= ~SECONDARY_TEXTURE_BIT
        secondary = cursor.read_u16(f"{prefix}.secondary")

    uvls = tuple(
        UVL(
            u=cursor.read_i16(f"{prefix}.uvls[{k}].u"),
            v=cursor.read_i16(f"{prefix}.uvls[{k}].v"),
            l=cursor.read_u16(f"{prefix}.uvls[{k}].l"),
        )
        for k in range(UVL_COUNT)
    )
    return Texture(primary=primary, secondary=secondary, uvls=uvls)


def decode_cube(
    cursor: ByteCursor,
    vertex_count: int,
    cube_count: int,
    index: int = 0,
) -> Cube:
    """
    Decode one cube record at the cursor.

    Args:
        cursor: Positioned at the start of the record
        vertex_count: Size of the vertex table, for index checks
        cube_count: Size of the cube table, for neighbour checks
        index: Position of this cube, used in error messages

    Returns:
        Cube

    Raises:
        IndexOutOfRangeError: A vertex or neighbour index is out of range
        OutOfBoundsError: The record runs past the end of the buffer
    """
    prefix = f"cubes[{index}]"

    neighbor_mask = cursor.read_u8(f"{prefix}.neighbor_mask")

    neighbors = []
    for side in Side:
        if not neighbor_mask & (1 << side):
            neighbors.append(NO_NEIGHBOR)
            continue
        offset = cursor.position
        neighbor = cursor.read_i16(f"{prefix}.neighbors[{side.name}]")
        if neighbor != EXIT_NEIGHBOR and not 0 <= neighbor < cube_count:
            raise IndexOutOfRangeError(
                f"Neighbour {neighbor} outside cube table of {cube_count}",
                offset=offset,
                field=f"{prefix}.neighbors[{side.name}]",
            )
        neighbors.append(neighbor)

    vertex_indices = []
    for corner in range(CORNER_COUNT):
        offset = cursor.position
        vertex_index = cursor.read_u16(f"{prefix}.vertex_indices[{corner}]")
        if vertex_index >= vertex_count:
            raise IndexOutOfRangeError(
                f"Vertex {vertex_index} outside vertex table of {vertex_count}",
                offset=offset,
                field=f"{prefix}.vertex_indices[{corner}]",
            )
        vertex_indices.append(vertex_index)

    energy_center = None
    if neighbor_mask & ENERGY_CENTER_BIT:
        energy_center = EnergyCenter(
            special=cursor.read_u8(f"{prefix}.energy_center.special"),
            number=cursor.read_i8(f"{prefix}.energy_center.number"),
            value=cursor.read_i16(f"{prefix}.energy_center.value"),
        )

    lighting = cursor.read_i16(f"{prefix}.lighting") / LIGHTING_SCALE

    wall_mask = cursor.read_u8(f"{prefix}.wall_mask")
    walls = [
        cursor.read_u8(f"{prefix}.walls[{side.name}]")
        if wall_mask & (1 << side) else NO_WALL
        for side in Side
    ]

    textures: List[Optional[Texture]] = []
    for side in Side:
        if texture_present(neighbors[side], walls[side]):
            textures.append(_decode_texture(cursor, f"{prefix}.textures[{side.name}]"))
        else:
            textures.append(None)

    return Cube(
        vertex_indices=tuple(vertex_indices),
        neighbors=tuple(neighbors),
        walls=tuple(walls),
        lighting=lighting,
        textures=tuple(textures),
        energy_center=energy_center,
    )


def decode_level(data: Buffer, header: Optional[RdlHeader] = None) -> Level:
    """
    Decode the vertex and cube tables of a level.

    Args:
        data: Complete contents of an .RDL file
        header: Previously parsed header; parsed from ``data`` if omitted

    Returns:
        Level

    Raises:
        DescentFormatError: Any header, truncation or geometry problem.
            Failures while reading cube records surface as
            MalformedGeometryError with the offset and field.
    """
    if header is None:
        header = parse_header(data)

    cursor = ByteCursor(data)
    vertex_count, cube_count = read_counts(cursor, header)
    vertices = decode_vertices(cursor, vertex_count)

    cursor.seek(cube_offset(header, vertex_count))
    cubes = []
    try:
        for i in range(cube_count):
            cubes.append(decode_cube(cursor, vertex_count, cube_count, index=i))
    except OutOfBoundsError as err:
        raise MalformedGeometryError(
            f"Cube table ends early ({len(cubes)} of {cube_count} cubes decoded)",
            offset=err.offset,
            field=err.field,
        ) from err

    log.info("Decoded level: %d vertices, %d cubes", vertex_count, cube_count)
    return Level(header=header, vertices=vertices, cubes=cubes)


def read_rdl(data: Buffer) -> Level:
    """Validate and decode an .RDL buffer."""
    return decode_level(data)


def load_rdl(path: Union[str, Path]) -> Level:
    """Read and decode an .RDL file from disk."""
    return decode_level(Path(path).read_bytes())


class RdlReader:
    """
    Wrapper over an .RDL buffer exposing the header, vertices and cubes.

    The header is parsed lazily so ``is_valid()`` can be asked of any
    buffer without raising.
    """

    def __init__(self, data: Buffer):
        self._data = data
        self._header: Optional[RdlHeader] = None

    @property
    def header(self) -> RdlHeader:
        if self._header is None:
            self._header = parse_header(self._data)
        return self._header

    def is_valid(self) -> bool:
        return is_valid_rdl(self._data)

    def cube_offset(self) -> int:
        cursor = ByteCursor(self._data)
        vertex_count, _ = read_counts(cursor, self.header)
        return cube_offset(self.header, vertex_count)

    def vertices(self) -> np.ndarray:
        cursor = ByteCursor(self._data)
        vertex_count, _ = read_counts(cursor, self.header)
        return decode_vertices(cursor, vertex_count)

    def cubes(self) -> List[Cube]:
        return self.level().cubes

    def level(self) -> Level:
        return decode_level(self._data, self.header)
