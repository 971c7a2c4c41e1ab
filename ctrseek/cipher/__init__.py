from .block import AESBlockCipher, BlockCipher, KeyedBlockCipher
from .counter import (
    add_to_counter,
    block_position,
    counter_for_block,
    counter_range_ok,
    increment_counter,
)

__all__ = [
    "AESBlockCipher",
    "BlockCipher",
    "KeyedBlockCipher",
    "add_to_counter",
    "block_position",
    "counter_for_block",
    "counter_range_ok",
    "increment_counter",
]
