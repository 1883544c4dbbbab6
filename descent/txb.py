"""
Descramble Descent .TXB text files.

A byte of 0x0A is a line feed and is stored as-is (the game turns it into
CR LF). Every other byte is rotated left by 2 bits and then XORed with 0xA7.
"""

from typing import Iterator

import numpy as np

from descent.cursor import Buffer

LINE_FEED = 0x0A
KEY = 0xA7


def descramble_byte(value: int) -> int:
    """Descramble a single byte."""
    if value == LINE_FEED:
        return LINE_FEED
    return (((value & 0x3F) << 2) | ((value & 0xC0) >> 6)) ^ KEY


def descramble(data: Buffer) -> bytes:
    """Descramble a whole buffer at once."""
    raw = np.frombuffer(bytes(data), dtype=np.uint8)
    rotated = (((raw & 0x3F) << 2) | (raw >> 6)) ^ KEY
    out = np.where(raw == LINE_FEED, raw, rotated).astype(np.uint8)
    return out.tobytes()


def decode_txb(data: Buffer, encoding: str = "latin-1", crlf: bool = False) -> str:
    """
    Descramble a .TXB buffer into text.

    Args:
        data: Raw .TXB contents
        encoding: Character set of the plain text
        crlf: Convert line feeds to CR LF as the game does

    Returns:
        Decoded text
    """
    text = descramble(data).decode(encoding)
    if crlf:
        text = text.replace("\n", "\r\n")
    return text


class TxbText:
    """
    Lazy, restartable view of a .TXB buffer as characters.

    Example:
        >>> "".join(TxbText(b"\\x0a"))
        '\\n'
    """

    def __init__(self, data: Buffer):
        self._data = data

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[str]:
        for value in bytes(self._data):
            yield chr(descramble_byte(value))

    def text(self) -> str:
        return decode_txb(self._data)
