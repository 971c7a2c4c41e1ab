import pytest
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from ctrseek.cipher.block import AESBlockCipher, BlockCipher
from ctrseek.config import load_settings
from ctrseek.sources import ByteSource

KEY = b"thisIsJustARandomStringOfChars=)"
NONCE = bytes(range(16))


class EchoCipher(BlockCipher):
    """Identity 'cipher': the keystream is the sequence of counter blocks."""

    def __init__(self, block_size: int):
        self.block_size = block_size

    def encrypt_block(self, block: bytes) -> bytes:
        return bytes(block)


class FailingSource(ByteSource):
    def __init__(self, exc: Exception):
        self.exc = exc
        self.calls = 0

    def read_at(self, buffer, offset):
        self.calls += 1
        raise self.exc


def reference_ctr(key: bytes, nonce: bytes, data: bytes) -> bytes:
    """Standard sequential AES-CTR from the cryptography library."""
    enc = Cipher(algorithms.AES(key), modes.CTR(nonce)).encryptor()
    return enc.update(data) + enc.finalize()


def pattern(size: int) -> bytes:
    return (bytes(range(256)) * (size // 256 + 1))[:size]


@pytest.fixture
def aes():
    return AESBlockCipher(KEY)


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    for name in (
        "CTRSEEK_BUFFER_SIZE",
        "CTRSEEK_ENGINE_MODE",
        "CTRSEEK_COUNTER_OVERFLOW",
        "CTRSEEK_LOG_LEVEL",
        "CTRSEEK_RUNS_DIR",
        "GLOBAL_SEED",
    ):
        monkeypatch.delenv(name, raising=False)
    load_settings.cache_clear()
    yield
    load_settings.cache_clear()
