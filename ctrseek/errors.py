"""Exceptions raised by the keystream engine.

Source errors are never wrapped: whatever the byte source raises reaches the
caller of ``read_at`` unchanged. The classes here cover the engine's own
failure modes.
"""
from __future__ import annotations


class CounterLengthError(ValueError):
    """The initial counter does not match the cipher's block size."""

    def __init__(self, got: int, block_size: int):
        super().__init__(f"Initial counter must be {block_size} bytes (block size), got {got}")
        self.got = got
        self.block_size = block_size


class CounterOverflowError(OverflowError):
    """A read would wrap the counter past its fixed width (strict mode only)."""

    def __init__(self, block_index: int, width: int):
        super().__init__(
            f"Block index {block_index} wraps a {width * 8}-bit counter"
        )
        self.block_index = block_index
        self.width = width


class ShortReadError(EOFError):
    """The byte source returned fewer bytes than requested.

    The caller's buffer then holds raw source bytes and must be treated as
    unspecified.
    """

    def __init__(self, offset: int, requested: int, received: int):
        super().__init__(
            f"Short read at offset {offset}: requested {requested} bytes, got {received}"
        )
        self.offset = offset
        self.requested = requested
        self.received = received
