"""Shared helpers for obfuscation plugins: server info, header sizing and the PRNG."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Optional

_MASK64 = (1 << 64) - 1
_MASK32 = (1 << 32) - 1

_DEFAULT_STATE = (0x10000000, 0xFFFFFFFF)


@dataclass
class ServerInfo:
    """Connection parameters handed to an obfuscation plugin."""

    host: str = ""
    port: int = 0
    param: Optional[str] = None
    g_data: Any = None
    iv: bytes = b""
    recv_iv: bytes = b""
    key: bytes = b""
    head_len: int = 0
    tcp_mss: int = 0


class XorShift128Plus:
    """The xorshift128+ pseudo random generator producing 64-bit values."""

    def __init__(self, seed: Optional[int] = None) -> None:
        if seed is None:
            self._s0, self._s1 = _DEFAULT_STATE
        else:
            seed &= _MASK32
            self._s0 = seed | 0x100000000
            self._s1 = ((seed << 32) | 0x1) & _MASK64

    def next(self) -> int:
        """Advance the state and return the next 64-bit value."""
        x = self._s0
        y = self._s1
        self._s0 = y
        x ^= (x << 23) & _MASK64
        x ^= x >> 17
        x ^= y ^ (y >> 26)
        self._s1 = x
        return (x + y) & _MASK64

    def __iter__(self):
        return self

    def __next__(self) -> int:
        return self.next()


_generator = XorShift128Plus()
_seeded = False


def init_shift128plus() -> None:
    """Seed the shared generator from the current time, once per process."""
    global _generator, _seeded
    if not _seeded:
        _seeded = True
        _generator = XorShift128Plus(int(time.time()))


def xorshift128plus() -> int:
    """Return the next value of the shared generator."""
    return _generator.next()


def get_head_size(data: Optional[bytes], def_size: int) -> int:
    """Return the size of the address header at the start of ``data``."""
    if data is None or len(data) < 2:
        return def_size
    head_type = data[0] & 0x7
    if head_type == 1:
        return 7
    if head_type == 4:
        return 19
    if head_type == 3:
        return 4 + data[1]
    return def_size