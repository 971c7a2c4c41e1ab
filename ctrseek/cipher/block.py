"""Block cipher bindings consumed by the keystream engine.

The engine only needs a fixed ``block_size`` and a forward ``encrypt_block``.
Counter mode never decrypts a block, so no inverse is required.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes


class BlockCipher:
    block_size: int

    def encrypt_block(self, block: bytes) -> bytes:  # pragma: no cover
        raise NotImplementedError

    def encrypt_blocks(self, data: bytes) -> bytes:
        """Encrypt concatenated blocks independently (ECB over ``data``)."""
        bs = self.block_size
        if len(data) % bs != 0:
            raise ValueError(f"Input must be a multiple of {bs} bytes")
        return b"".join(self.encrypt_block(data[i:i + bs]) for i in range(0, len(data), bs))


class AESBlockCipher(BlockCipher):
    """AES with a bound key (16, 24 or 32 bytes).

    Each call builds its own encryption context, so one instance may be shared
    between threads.
    """

    block_size = 16

    def __init__(self, key: bytes):
        if len(key) not in (16, 24, 32):
            raise ValueError(f"AES key must be 16, 24 or 32 bytes, got {len(key)}")
        self._algorithm = algorithms.AES(bytes(key))

    def encrypt_block(self, block: bytes) -> bytes:
        if len(block) != self.block_size:
            raise ValueError(f"Block must be {self.block_size} bytes")
        return self.encrypt_blocks(block)

    def encrypt_blocks(self, data: bytes) -> bytes:
        if len(data) % self.block_size != 0:
            raise ValueError(f"Input must be a multiple of {self.block_size} bytes")
        encryptor = Cipher(self._algorithm, modes.ECB()).encryptor()
        return encryptor.update(bytes(data)) + encryptor.finalize()


@dataclass
class KeyedBlockCipher(BlockCipher):
    """Binds a key to a cipher whose ``encrypt_block`` takes ``(block, key)``."""

    cipher: Any
    key: bytes
    block_size: int

    def __post_init__(self):
        if self.block_size < 1:
            raise ValueError("block_size must be positive")

    def encrypt_block(self, block: bytes) -> bytes:
        if len(block) != self.block_size:
            raise ValueError(f"Block must be {self.block_size} bytes")
        out = self.cipher.encrypt_block(bytes(block), self.key)
        if len(out) != self.block_size:
            raise ValueError(f"Cipher returned {len(out)} bytes, expected {self.block_size}")
        return out
