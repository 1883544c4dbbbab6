"""
Read Descent .HOG archives.

File format:
- Magic: "DHF" (3 bytes)
- Then, repeated until the end of the file:
    - name: 13 bytes, NUL padded
    - size: uint32 little-endian
    - data: ``size`` bytes

There is no table of contents, so finding an entry means scanning every
header before it.
"""

import logging
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

from descent.cursor import Buffer, ByteCursor
from descent.errors import (
    DescentFormatError,
    InvalidMagicError,
    OutOfBoundsError,
    PayloadConsumedError,
    TruncatedInputError,
)

log = logging.getLogger(__name__)

# Constants
MAGIC = b"DHF"
NAME_SIZE = 13
ENTRY_HEADER_SIZE = NAME_SIZE + 4


def _decode_name(raw: bytes) -> str:
    return raw.split(b"\x00", 1)[0].decode("ascii", errors="replace")


class HogEntry:
    """
    One named file inside a HOG archive.

    ``read()`` hands out the payload exactly once.
    """

    __slots__ = ("name", "size", "header_offset", "_data", "_consumed")

    def __init__(self, name: str, size: int, header_offset: int, data: Buffer):
        self.name = name
        self.size = size
        self.header_offset = header_offset
        self._data = data
        self._consumed = False

    @property
    def offset(self) -> int:
        """Absolute offset of the payload."""
        return self.header_offset + ENTRY_HEADER_SIZE

    @property
    def consumed(self) -> bool:
        return self._consumed

    @property
    def extension(self) -> str:
        return Path(self.name).suffix.lower()

    def read(self) -> bytes:
        """
        Return the payload bytes.

        Raises:
            PayloadConsumedError: The payload was already read
            TruncatedInputError: The declared size runs past the archive end
        """
        if self._consumed:
            raise PayloadConsumedError(f"Payload of {self.name} has already been read")

        end = self.offset + self.size
        if end > len(self._data):
            raise TruncatedInputError(
                f"Entry {self.name} declares {self.size} bytes but only "
                f"{max(len(self._data) - self.offset, 0)} remain",
                offset=self.offset,
                field=f"{self.name}.payload",
            )

        self._consumed = True
        return bytes(self._data[self.offset:end])

    def __repr__(self) -> str:
        return f"HogEntry(name={self.name!r}, size={self.size}, offset={self.offset})"


class HogReader:
    """
    Sequential reader over an in-memory HOG archive.

    Iterating yields ``HogEntry`` objects in stored order. Each iteration
    starts again just after the magic.

    Example:
        >>> reader = HogReader.from_path("descent.hog")
        >>> for entry in reader:
        ...     if entry.name.endswith(".rdl"):
        ...         level = read_rdl(entry.read())
    """

    def __init__(self, data: Buffer):
        self._data = data

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "HogReader":
        return cls(Path(path).read_bytes())

    def __len__(self) -> int:
        return len(self._data)

    def is_valid(self) -> bool:
        """True if the buffer starts with the HOG magic."""
        return bytes(self._data[:len(MAGIC)]) == MAGIC

    def __iter__(self) -> Iterator[HogEntry]:
        return self.entries()

    def entries(self) -> Iterator[HogEntry]:
        """
        Lazily scan the archive.

        Iteration stops when fewer bytes than an entry header remain.

        Raises:
            InvalidMagicError: The buffer is not a HOG archive
            TruncatedInputError: An entry's payload runs past the end
        """
        if not self.is_valid():
            raise InvalidMagicError(
                f"Invalid magic: {bytes(self._data[:len(MAGIC)])!r}, expected {MAGIC!r}",
                offset=0,
                field="magic",
            )

        cursor = ByteCursor(self._data, len(MAGIC))
        while cursor.remaining >= ENTRY_HEADER_SIZE:
            header_offset = cursor.position
            name = _decode_name(cursor.read_bytes(NAME_SIZE, "name"))
            size = cursor.read_u32("size")
            log.debug("Entry %s: %d bytes at %d", name, size, header_offset)

            yield HogEntry(name, size, header_offset, self._data)

            try:
                cursor.skip(size, f"{name}.payload")
            except OutOfBoundsError as err:
                raise TruncatedInputError(
                    f"Entry {name} declares {size} bytes but only "
                    f"{cursor.remaining} remain",
                    offset=err.offset,
                    field=err.field,
                ) from err

        if cursor.remaining:
            log.debug("Ignoring %d trailing bytes", cursor.remaining)

    def find(self, name: str) -> Optional[HogEntry]:
        """Scan for an entry by name (case-insensitive)."""
        wanted = name.lower()
        for entry in self.entries():
            if entry.name.lower() == wanted:
                return entry
        return None

    def read(self, name: str) -> bytes:
        """
        Read the payload of the named entry.

        Raises:
            KeyError: No entry has that name
        """
        entry = self.find(name)
        if entry is None:
            raise KeyError(f"Entry not found: {name}")
        return entry.read()


def open_hog(path: Union[str, Path]) -> HogReader:
    """
    Load a HOG archive from disk.

    Raises:
        InvalidMagicError: The file does not start with "DHF"
    """
    reader = HogReader.from_path(path)
    if not reader.is_valid():
        raise InvalidMagicError(f"Not a HOG archive: {path}", offset=0, field="magic")
    return reader


def list_hog_contents(path: Union[str, Path]) -> List[str]:
    """
    List all entry names in a HOG archive.

    Args:
        path: Path to .hog file

    Returns:
        Entry names in stored order
    """
    return [entry.name for entry in open_hog(path)]


def get_hog_info(path: Union[str, Path]) -> Dict:
    """
    Get summary information about a HOG archive.

    Args:
        path: Path to .hog file

    Returns:
        Dict with entry list and sizes
    """
    path = Path(path)
    reader = open_hog(path)

    entries = []
    total_size = 0
    for entry in reader:
        entries.append({
            "name": entry.name,
            "size": entry.size,
            "offset": entry.offset,
        })
        total_size += entry.size

    return {
        "entries": entries,
        "total_payload_size": total_size,
        "archive_size": len(reader),
    }


def extract_hog(
    path: Union[str, Path],
    output_dir: Union[str, Path],
    names: Optional[List[str]] = None,
) -> List[Path]:
    """
    Write entries out as-is, without decoding.

    Args:
        path: Path to .hog file
        output_dir: Directory to write into (created if needed)
        names: Only extract these entries (case-insensitive); all if None

    Returns:
        Paths of the written files
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    wanted = {n.lower() for n in names} if names is not None else None

    written = []
    for entry in open_hog(path):
        if wanted is not None and entry.name.lower() not in wanted:
            continue
        # Entry names are flat 8.3 names; never let one escape output_dir
        filename = Path(entry.name).name
        if filename in ("", ".", ".."):
            log.warning("Skipping entry with unusable name %r at %d", entry.name, entry.header_offset)
            continue
        target = output_dir / filename
        target.write_bytes(entry.read())
        log.info("Wrote %s (%d bytes)", target, entry.size)
        written.append(target)

    return written


def validate_hog(path: Union[str, Path]) -> Tuple[bool, List[str]]:
    """
    Validate a HOG archive and every level inside it.

    Checks:
    - File exists and has the "DHF" magic
    - Every entry's declared size fits in the file
    - Every .rdl entry has a valid header and decodes

    Args:
        path: Path to .hog file

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    from descent.rdl import read_rdl

    errors = []
    path = Path(path)

    if not path.exists():
        return False, [f"File not found: {path}"]

    reader = HogReader.from_path(path)
    if not reader.is_valid():
        return False, ["Not a HOG archive (bad magic)"]

    try:
        for entry in reader:
            if entry.extension != ".rdl":
                continue
            try:
                read_rdl(entry.read())
            except DescentFormatError as e:
                errors.append(f"{entry.name}: {e}")
    except TruncatedInputError as e:
        errors.append(str(e))

    return len(errors) == 0, errors
