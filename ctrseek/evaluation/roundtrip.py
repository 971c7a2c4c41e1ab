"""Seek roundtrip verification: read_at(E(P), o, n) == P[o:o+n].

Encrypts a plaintext sequentially, then decrypts boundary probes and
randomized (offset, length) windows through a seekable reader and compares
every window with the plaintext.
"""
from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field, asdict
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..cipher.block import BlockCipher
from ..keystream import STREAM_BUFFER_SIZE, CTRStream
from ..reader import CTRReaderAt, SharedCTRReaderAt
from ..sources import BytesSource

logger = logging.getLogger(__name__)

ENGINE_MODES = {
    "stateless": CTRReaderAt,
    "shared": SharedCTRReaderAt,
}

_HEX_PREFIX = 32


@dataclass
class RoundtripFailure:
    """Details of a single mismatching or failing read."""
    read_index: int
    offset: int
    length: int
    expected_hex: str        # First bytes of the plaintext window
    decrypted_hex: str       # First bytes returned by read_at
    error: Optional[str]     # Exception message if read_at raised


@dataclass
class RoundtripResult:
    """Aggregate result of seek verification for one engine mode."""
    mode: str
    block_size: int
    buffer_size: int
    plaintext_size: int
    total_reads: int
    passed: int
    failed: int
    failures: List[RoundtripFailure] = field(default_factory=list)
    elapsed_seconds: float = 0.0
    seed: int = 1337

    @property
    def success_rate(self) -> float:
        return self.passed / self.total_reads if self.total_reads > 0 else 0.0

    @property
    def is_perfect(self) -> bool:
        return self.failed == 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def summary(self) -> str:
        status = "PASS" if self.is_perfect else "FAIL"
        return (
            f"[{status}] {self.mode} (block={self.block_size}, buffer={self.buffer_size}): "
            f"{self.passed}/{self.total_reads} reads passed "
            f"({self.elapsed_seconds:.2f}s)"
        )


def boundary_probes(size: int, block_size: int, *, blocks: int = 4, length: int = 1) -> List[Tuple[int, int]]:
    """Windows at, just before and just after the first few block boundaries."""
    probes = []
    for b in range(blocks + 1):
        edge = b * block_size
        for off in (edge - 1, edge, edge + 1):
            if 0 <= off and off + length <= size:
                probes.append((off, length))
    if size >= length:
        probes.append((size - length, length))
    return probes


def random_windows(rng: random.Random, size: int, count: int, max_length: int) -> List[Tuple[int, int]]:
    windows = []
    for _ in range(count):
        offset = rng.randrange(0, size)
        length = rng.randint(0, min(max_length, size - offset))
        windows.append((offset, length))
    return windows


def run_seek_roundtrip(
    cipher: BlockCipher,
    initial_counter: bytes,
    plaintext: bytes,
    *,
    mode: str = "stateless",
    num_reads: int = 1000,
    max_length: int = 4096,
    seed: int = 1337,
    buffer_size: int = STREAM_BUFFER_SIZE,
    max_failures_recorded: int = 10,
) -> RoundtripResult:
    """Verify random-access decryption against a sequential encryption.

    Args:
        cipher: Block cipher with the key bound.
        initial_counter: Counter block for offset 0.
        plaintext: Data to encrypt and read back; must not be empty.
        mode: "stateless" or "shared" engine.
        num_reads: Number of random (offset, length) windows.
        max_length: Longest random window.
        seed: Random seed for deterministic reproducibility.
        buffer_size: Keystream buffer size for the engine under test.
        max_failures_recorded: Maximum number of failure details to keep.

    Returns:
        RoundtripResult with pass/fail counts and failure details.
    """
    if mode not in ENGINE_MODES:
        raise ValueError(f"Unknown engine mode: {mode}")
    if not plaintext:
        raise ValueError("plaintext must not be empty")

    ciphertext = CTRStream(cipher, initial_counter).update(plaintext)
    reader = ENGINE_MODES[mode](
        cipher, initial_counter, BytesSource(ciphertext), buffer_size=buffer_size,
    )

    rng = random.Random(seed)
    size = len(plaintext)
    windows = boundary_probes(size, cipher.block_size, length=min(size, cipher.block_size + 2))
    windows += random_windows(rng, size, num_reads, max_length)

    passed = 0
    failed = 0
    failures: List[RoundtripFailure] = []

    start = time.perf_counter()

    for i, (offset, length) in enumerate(windows):
        expected = plaintext[offset:offset + length]
        try:
            got = reader.read(length, offset)
            if got == expected:
                passed += 1
                continue
            error = None
        except Exception as exc:
            got = b""
            error = f"{type(exc).__name__}: {exc}"

        failed += 1
        if len(failures) < max_failures_recorded:
            failures.append(RoundtripFailure(
                read_index=i,
                offset=offset,
                length=length,
                expected_hex=expected[:_HEX_PREFIX].hex(),
                decrypted_hex=got[:_HEX_PREFIX].hex() if error is None else "<error>",
                error=error,
            ))

    elapsed = time.perf_counter() - start

    if failed:
        logger.warning("Seek roundtrip (%s): %d/%d reads failed", mode, failed, len(windows))
    else:
        logger.info("Seek roundtrip (%s): all %d reads passed", mode, len(windows))

    return RoundtripResult(
        mode=mode,
        block_size=cipher.block_size,
        buffer_size=buffer_size,
        plaintext_size=size,
        total_reads=len(windows),
        passed=passed,
        failed=failed,
        failures=failures,
        elapsed_seconds=round(elapsed, 4),
        seed=seed,
    )


def run_all_modes(
    cipher: BlockCipher,
    initial_counter: bytes,
    plaintext: bytes,
    *,
    num_reads: int = 1000,
    max_length: int = 4096,
    seed: int = 1337,
    buffer_size: int = STREAM_BUFFER_SIZE,
    progress_callback: Optional[Callable[[str, int, int], None]] = None,
) -> List[RoundtripResult]:
    """Run seek verification for every engine mode, in mode-name order."""
    modes = sorted(ENGINE_MODES)
    results: List[RoundtripResult] = []

    for idx, mode in enumerate(modes):
        if progress_callback:
            progress_callback(mode, idx, len(modes))

        results.append(run_seek_roundtrip(
            cipher,
            initial_counter,
            plaintext,
            mode=mode,
            num_reads=num_reads,
            max_length=max_length,
            seed=seed,
            buffer_size=buffer_size,
        ))

    return results
