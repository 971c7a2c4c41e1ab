"""Seekable counter-mode (CTR) readers over random-access byte sources."""

from .cipher import AESBlockCipher, BlockCipher, KeyedBlockCipher
from .config import Settings, load_settings
from .errors import CounterLengthError, CounterOverflowError, ShortReadError
from .keystream import STREAM_BUFFER_SIZE, CTRStream, KeystreamState
from .reader import CTRReader, CTRReaderAt, SharedCTRReaderAt, new_ctr_reader_at
from .sources import ByteSource, BytesSource, FileSource

__version__ = "0.1.0"

__all__ = [
    "AESBlockCipher",
    "BlockCipher",
    "KeyedBlockCipher",
    "Settings",
    "load_settings",
    "CounterLengthError",
    "CounterOverflowError",
    "ShortReadError",
    "STREAM_BUFFER_SIZE",
    "CTRStream",
    "KeystreamState",
    "CTRReader",
    "CTRReaderAt",
    "SharedCTRReaderAt",
    "new_ctr_reader_at",
    "ByteSource",
    "BytesSource",
    "FileSource",
]
