"""
descent-hog - Readers for the data files of the game Descent.

- .HOG: archive of named files ("DHF" magic)
- .RDL: level geometry, a mine of connected six-sided cubes ("LVLP" magic)
- .TXB: scrambled text
"""

__version__ = "0.1.0"

from descent.errors import (
    DescentFormatError,
    IndexOutOfRangeError,
    InvalidMagicError,
    MalformedGeometryError,
    OutOfBoundsError,
    PayloadConsumedError,
    SizeMismatchError,
    TruncatedInputError,
)
from descent.hog import HogEntry, HogReader, open_hog, get_hog_info, validate_hog
from descent.level import Cube, Level, Side, Texture, texture_present
from descent.rdl import RdlReader, read_rdl, load_rdl
from descent.txb import TxbText, decode_txb
from descent.mesh import export_level, level_to_ply, level_to_trimesh

__all__ = [
    "DescentFormatError",
    "IndexOutOfRangeError",
    "InvalidMagicError",
    "MalformedGeometryError",
    "OutOfBoundsError",
    "PayloadConsumedError",
    "SizeMismatchError",
    "TruncatedInputError",
    "HogEntry",
    "HogReader",
    "open_hog",
    "get_hog_info",
    "validate_hog",
    "Cube",
    "Level",
    "Side",
    "Texture",
    "texture_present",
    "RdlReader",
    "read_rdl",
    "load_rdl",
    "TxbText",
    "decode_txb",
    "export_level",
    "level_to_ply",
    "level_to_trimesh",
]
