"""Random-access counter-mode readers.

``CTRReaderAt`` derives a fresh keystream state for every call and needs no
locking. ``SharedCTRReaderAt`` keeps one state between calls to reuse
keystream for nearby offsets and serializes callers with a lock.

Both read from a ``ByteSource`` and are byte sources themselves, so the same
class decrypts ciphertext and encrypts plaintext.
"""
from __future__ import annotations

import io
import logging
import threading
from typing import Optional

from .cipher.block import BlockCipher
from .cipher.counter import counter_range_ok
from .config import Settings, load_settings
from .errors import CounterOverflowError, ShortReadError
from .keystream import STREAM_BUFFER_SIZE, Buffer, KeystreamState, check_initial_counter
from .sources import ByteSource

logger = logging.getLogger(__name__)


class CTRReaderAt(ByteSource):
    """Stateless-per-call seekable CTR reader.

    Args:
        cipher: Block cipher with the key already bound.
        initial_counter: Counter block for stream offset 0; must be exactly
            ``cipher.block_size`` bytes.
        source: Underlying random-access byte source.
        buffer_size: Keystream bytes generated per refill.
        strict_counter: Raise ``CounterOverflowError`` instead of silently
            wrapping when a read reaches past the counter space.

    Raises:
        CounterLengthError: If ``initial_counter`` has the wrong length.
    """

    def __init__(self, cipher: BlockCipher, initial_counter: bytes, source: ByteSource, *,
                 buffer_size: int = STREAM_BUFFER_SIZE, strict_counter: bool = False):
        if buffer_size < 1:
            raise ValueError("buffer_size must be positive")
        self.cipher = cipher
        self.initial_counter = check_initial_counter(cipher, initial_counter)
        self.source = source
        self.buffer_size = buffer_size
        self.strict_counter = strict_counter
        logger.debug(
            "%s: block_size=%d buffer_size=%d strict_counter=%s",
            type(self).__name__, cipher.block_size, buffer_size, strict_counter,
        )

    @property
    def size(self) -> Optional[int]:
        return getattr(self.source, "size", None)

    def read_at(self, buffer: Buffer, offset: int) -> int:
        """Fill ``buffer`` with source bytes at ``offset`` XOR the keystream.

        Returns ``len(buffer)``. Source exceptions propagate unchanged; a short
        read raises ``ShortReadError`` and leaves ``buffer`` untransformed.
        """
        if offset < 0:
            raise ValueError(f"Offset must be non-negative, got {offset}")
        view = memoryview(buffer).cast("B")
        if len(view) == 0:
            return 0
        self._check_range(offset, len(view))

        state = self._state_at(offset)

        n = self.source.read_at(view, offset)
        if n < len(view):
            raise ShortReadError(offset, len(view), n)

        state.xor_keystream(view, view)
        return n

    def read(self, size: int, offset: int) -> bytes:
        if size < 0:
            raise ValueError(f"Size must be non-negative, got {size}")
        buf = bytearray(size)
        self.read_at(buf, offset)
        return bytes(buf)

    def _state_at(self, offset: int) -> KeystreamState:
        return KeystreamState.at_offset(
            self.cipher, self.initial_counter, offset, buffer_size=self.buffer_size,
        )

    def _check_range(self, offset: int, length: int) -> None:
        if not self.strict_counter:
            return
        last_block = (offset + length - 1) // self.cipher.block_size
        if not counter_range_ok(self.initial_counter, last_block):
            raise CounterOverflowError(last_block, self.cipher.block_size)


class SharedCTRReaderAt(CTRReaderAt):
    """Seekable CTR reader that keeps its keystream state between calls.

    The re-seek, refill, source read and XOR of one call all happen under a
    single lock, so concurrent callers run one at a time.
    """

    def __init__(self, cipher: BlockCipher, initial_counter: bytes, source: ByteSource, *,
                 buffer_size: int = STREAM_BUFFER_SIZE, strict_counter: bool = False):
        super().__init__(
            cipher, initial_counter, source,
            buffer_size=buffer_size, strict_counter=strict_counter,
        )
        self._lock = threading.Lock()
        self._state: Optional[KeystreamState] = None

    def read_at(self, buffer: Buffer, offset: int) -> int:
        with self._lock:
            return super().read_at(buffer, offset)

    def _state_at(self, offset: int) -> KeystreamState:
        if self._state is not None and self._state.seek(offset):
            return self._state
        logger.debug("Re-deriving keystream state at offset %d", offset)
        self._state = super()._state_at(offset)
        return self._state


def new_ctr_reader_at(cipher: BlockCipher, initial_counter: bytes, source: ByteSource,
                      settings: Optional[Settings] = None) -> CTRReaderAt:
    """Build the reader selected by ``settings.engine_mode``."""
    settings = settings or load_settings()
    cls = SharedCTRReaderAt if settings.engine_mode == "shared" else CTRReaderAt
    return cls(
        cipher,
        initial_counter,
        source,
        buffer_size=settings.stream_buffer_size,
        strict_counter=settings.strict_counter,
    )


class CTRReader(io.RawIOBase):
    """Binary file object over a ``CTRReaderAt`` of known size."""

    def __init__(self, reader: CTRReaderAt, size: Optional[int] = None):
        super().__init__()
        if size is None:
            size = reader.size
        if size is None:
            raise ValueError("CTRReader needs a size when the source does not report one")
        self._reader = reader
        self._size = size
        self._pos = 0

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def tell(self) -> int:
        self._check_open()
        return self._pos

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        self._check_open()
        if whence == io.SEEK_SET:
            pos = offset
        elif whence == io.SEEK_CUR:
            pos = self._pos + offset
        elif whence == io.SEEK_END:
            pos = self._size + offset
        else:
            raise ValueError(f"Invalid whence: {whence}")
        if pos < 0:
            raise ValueError(f"Negative seek position {pos}")
        self._pos = pos
        return pos

    def readinto(self, b) -> int:
        self._check_open()
        view = memoryview(b).cast("B")
        n = max(0, min(len(view), self._size - self._pos))
        if n == 0:
            return 0
        self._reader.read_at(view[:n], self._pos)
        self._pos += n
        return n

    def _check_open(self) -> None:
        if self.closed:
            raise ValueError("I/O operation on closed file")
