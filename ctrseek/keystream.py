"""Counter-mode keystream generation.

A ``KeystreamState`` holds one live counter block, a buffer of keystream
generated from it and a cursor into that buffer. States are derived for any
byte offset directly from the initial counter (an add with carry over the
counter bytes), never by stepping forward block by block from offset zero.

CTR gives confidentiality only. Nothing here authenticates data.
"""
from __future__ import annotations

from typing import Union

import numpy as np

from .cipher.block import BlockCipher
from .cipher.counter import block_position, counter_for_block, increment_counter
from .errors import CounterLengthError


STREAM_BUFFER_SIZE = 512

Buffer = Union[bytes, bytearray, memoryview]


def xor_into(dst: Buffer, a: Buffer, b: Buffer) -> None:
    """``dst[i] = a[i] ^ b[i]`` for ``i < len(a)``; ``dst`` may alias ``a``."""
    n = len(a)
    if n == 0:
        return
    np.bitwise_xor(
        np.frombuffer(a, dtype=np.uint8, count=n),
        np.frombuffer(b, dtype=np.uint8, count=n),
        out=np.frombuffer(dst, dtype=np.uint8, count=n),
    )


def check_initial_counter(cipher: BlockCipher, initial_counter: bytes) -> bytes:
    if len(initial_counter) != cipher.block_size:
        raise CounterLengthError(len(initial_counter), cipher.block_size)
    return bytes(initial_counter)


class KeystreamState:
    """Live counter block plus buffered keystream.

    ``out[used:]`` is keystream not yet consumed; ``base`` is the absolute
    stream offset of ``out[0]``.
    """

    def __init__(self, cipher: BlockCipher, counter: bytearray, *, base: int = 0,
                 buffer_size: int = STREAM_BUFFER_SIZE):
        if buffer_size < 1:
            raise ValueError("buffer_size must be positive")
        self.cipher = cipher
        self.counter = counter
        self.capacity = max(buffer_size, cipher.block_size)
        self.out = b""
        self.used = 0
        self.base = base

    @classmethod
    def at_offset(cls, cipher: BlockCipher, initial_counter: bytes, offset: int, *,
                  buffer_size: int = STREAM_BUFFER_SIZE) -> "KeystreamState":
        """State whose next keystream byte is the one at ``offset``."""
        bs = cipher.block_size
        block_index, block_offset = block_position(offset, bs)
        state = cls(
            cipher,
            counter_for_block(initial_counter, block_index),
            base=block_index * bs,
            buffer_size=buffer_size,
        )
        state.refill()
        # Trim the leading part of the first block
        state.used = block_offset
        return state

    @property
    def position(self) -> int:
        return self.base + self.used

    @property
    def available(self) -> int:
        return len(self.out) - self.used

    def refill(self) -> None:
        """Move the unconsumed tail to the front and top up with fresh blocks."""
        bs = self.cipher.block_size
        tail = self.out[self.used:]
        self.base += self.used

        counters = bytearray()
        free = self.capacity - len(tail)
        while free >= bs:
            counters += self.counter
            increment_counter(self.counter)
            free -= bs

        if counters:
            self.out = tail + self.cipher.encrypt_blocks(bytes(counters))
        else:
            self.out = tail
        self.used = 0

    def seek(self, offset: int) -> bool:
        """Move the cursor to ``offset`` if the buffer still covers it."""
        if self.base <= offset <= self.base + len(self.out):
            self.used = offset - self.base
            return True
        return False

    def xor_keystream(self, dst: Buffer, src: Buffer) -> None:
        """XOR ``src`` with the next ``len(src)`` keystream bytes into ``dst``."""
        src = memoryview(src).cast("B")
        dst = memoryview(dst).cast("B")
        if len(dst) < len(src):
            raise ValueError("Output buffer smaller than input")

        bs = self.cipher.block_size
        pos = 0
        n = len(src)
        while pos < n:
            if self.available < bs:
                self.refill()
            take = min(n - pos, self.available)
            xor_into(dst[pos:pos + take], src[pos:pos + take], self.out[self.used:self.used + take])
            pos += take
            self.used += take


class CTRStream:
    """Sequential counter-mode stream, optionally starting mid-stream."""

    def __init__(self, cipher: BlockCipher, initial_counter: bytes, *,
                 buffer_size: int = STREAM_BUFFER_SIZE, offset: int = 0):
        iv = check_initial_counter(cipher, initial_counter)
        self._state = KeystreamState.at_offset(cipher, iv, offset, buffer_size=buffer_size)

    @property
    def position(self) -> int:
        return self._state.position

    def xor_keystream(self, dst: Buffer, src: Buffer) -> None:
        self._state.xor_keystream(dst, src)

    def update(self, data: Buffer) -> bytes:
        out = bytearray(len(data))
        self._state.xor_keystream(out, data)
        return bytes(out)
