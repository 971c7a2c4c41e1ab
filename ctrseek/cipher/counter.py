"""Fixed-width big-endian counter arithmetic for counter mode.

Counters are ``bytearray`` objects whose last byte is least significant.
All arithmetic wraps modulo ``2 ** (8 * len(counter))``.
"""
from __future__ import annotations

from typing import Tuple

from ..errors import CounterOverflowError


def increment_counter(counter: bytearray) -> bool:
    """Add one in place. Returns True if the counter wrapped to all zeros."""
    for i in range(len(counter) - 1, -1, -1):
        counter[i] = (counter[i] + 1) & 0xFF
        if counter[i] != 0:
            return False
    return True


def add_to_counter(counter: bytearray, n: int) -> bool:
    """Add ``n`` in place with byte-wise carry.

    Returns True if the sum overflowed past the first byte (the counter
    still holds the wrapped value).
    """
    if n < 0:
        raise ValueError("Counter increment must be non-negative")

    carry = 0
    i = len(counter) - 1
    while i >= 0 and (n or carry):
        total = counter[i] + (n & 0xFF) + carry
        counter[i] = total & 0xFF
        carry = total >> 8
        n >>= 8
        i -= 1
    return bool(n or carry)


def counter_for_block(initial_counter: bytes, block_index: int, *, strict: bool = False) -> bytearray:
    """Counter block for ``block_index`` blocks past ``initial_counter``."""
    counter = bytearray(initial_counter)
    if add_to_counter(counter, block_index) and strict:
        raise CounterOverflowError(block_index, len(counter))
    return counter


def counter_range_ok(initial_counter: bytes, last_block_index: int) -> bool:
    """True if ``last_block_index`` is reachable from ``initial_counter`` without wrapping."""
    return not add_to_counter(bytearray(initial_counter), last_block_index)


def block_position(offset: int, block_size: int) -> Tuple[int, int]:
    """Split a byte offset into ``(block_index, block_offset)``."""
    if offset < 0:
        raise ValueError(f"Offset must be non-negative, got {offset}")
    block_offset = offset % block_size
    return (offset - block_offset) // block_size, block_offset
