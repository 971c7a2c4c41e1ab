"""Decrypt (or encrypt) one byte range of an AES-CTR file without touching the rest.

Usage:
    python scripts/ctr_read.py data.bin --key-hex 00..1f --nonce-hex 00..0f --offset 4096 --length 512
    python scripts/ctr_read.py data.bin --key-hex ... --nonce-hex ... --offset 0 --length 64 -o out.bin

CTR gives confidentiality only: the output is not authenticated.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Ensure project root is on path
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from ctrseek.cipher.block import AESBlockCipher
from ctrseek.config import load_settings
from ctrseek.errors import CounterLengthError, CounterOverflowError, ShortReadError
from ctrseek.reader import new_ctr_reader_at
from ctrseek.sources import FileSource

logger = logging.getLogger("ctr_read")


def _hex_bytes(value: str) -> bytes:
    try:
        return bytes.fromhex(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"not a hex string: {value!r}") from e


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Random-access AES-CTR reader",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("input", type=str, help="Ciphertext (or plaintext) file")
    parser.add_argument("--key-hex", type=_hex_bytes, required=True, help="AES key (16/24/32 bytes, hex)")
    parser.add_argument("--nonce-hex", type=_hex_bytes, required=True, help="Initial counter block (16 bytes, hex)")
    parser.add_argument("--offset", type=int, default=0, help="Byte offset to start at (default: 0)")
    parser.add_argument(
        "--length", type=int, default=None,
        help="Number of bytes to read (default: to end of file)",
    )
    parser.add_argument("--output", "-o", type=str, default=None, help="Write to file instead of stdout")
    parser.add_argument(
        "--mode", choices=["stateless", "shared"], default=None,
        help="Engine mode (default: CTRSEEK_ENGINE_MODE or stateless)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    args = parser.parse_args(argv)

    settings = load_settings()
    if args.mode:
        settings = settings.model_copy(update={"engine_mode": args.mode})

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.offset < 0:
        parser.error("--offset must be non-negative")

    try:
        with FileSource(args.input) as source:
            length = args.length if args.length is not None else max(0, source.size - args.offset)
            if length < 0:
                parser.error("--length must be non-negative")

            reader = new_ctr_reader_at(AESBlockCipher(args.key_hex), args.nonce_hex, source, settings)
            logger.info("Reading %d bytes at offset %d from %s", length, args.offset, args.input)
            data = reader.read(length, args.offset)
    except (CounterLengthError, CounterOverflowError, ShortReadError, ValueError, OSError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if args.output:
        Path(args.output).write_bytes(data)
        print(f"Wrote {len(data)} bytes to {args.output}", file=sys.stderr)
    else:
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
