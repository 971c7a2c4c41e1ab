"""Check random-access decryption against sequential AES-CTR encryption.

Usage:
    python scripts/verify_seek.py                                   # 10 MiB, 1000 reads per mode
    python scripts/verify_seek.py --size 65536 --reads 200 -v       # quick run
    python scripts/verify_seek.py --buffer-size 16 --output-dir runs

The plaintext is ``i mod 256`` at index ``i``; the default nonce is 00 01 .. 0f.
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
from ctrseek.evaluation import EvaluationReport, run_all_modes
from ctrseek.utils.repro import make_run_dir, set_global_seed, write_json

DEFAULT_KEY = b"thisIsJustARandomStringOfChars=)"
DEFAULT_NONCE = bytes(range(16))


def _cli_progress(mode: str, current: int, total: int) -> None:
    """Print progress to stderr."""
    pct = (current / total * 100) if total > 0 else 0
    print(f"  [{current + 1}/{total}] ({pct:.0f}%) {mode}", file=sys.stderr)


def main(argv=None) -> int:
    settings = load_settings()

    parser = argparse.ArgumentParser(
        description="Seekable CTR verification",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--size", type=int, default=10 * 1024 * 1024,
        help="Plaintext size in bytes (default: 10 MiB)",
    )
    parser.add_argument("--reads", type=int, default=1000, help="Random reads per engine mode (default: 1000)")
    parser.add_argument("--max-length", type=int, default=4096, help="Longest random read (default: 4096)")
    parser.add_argument(
        "--seed", type=int, default=settings.global_seed,
        help=f"Random seed (default: {settings.global_seed})",
    )
    parser.add_argument("--key-hex", type=str, default=DEFAULT_KEY.hex(), help="AES key, hex")
    parser.add_argument("--nonce-hex", type=str, default=DEFAULT_NONCE.hex(), help="Initial counter, hex")
    parser.add_argument(
        "--buffer-size", type=int, default=settings.stream_buffer_size,
        help=f"Keystream buffer size (default: {settings.stream_buffer_size})",
    )
    parser.add_argument(
        "--output-dir", type=str, default=settings.runs_dir,
        help=f"Output directory (default: {settings.runs_dir})",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    args = parser.parse_args(argv)

    # Configure logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.size < 1:
        parser.error("--size must be positive")

    set_global_seed(args.seed)
    plaintext = (bytes(range(256)) * (args.size // 256 + 1))[:args.size]

    try:
        cipher = AESBlockCipher(bytes.fromhex(args.key_hex))
        nonce = bytes.fromhex(args.nonce_hex)
        print(f"Verifying {args.size} bytes, {args.reads} reads per mode")
        results = run_all_modes(
            cipher,
            nonce,
            plaintext,
            num_reads=args.reads,
            max_length=args.max_length,
            seed=args.seed,
            buffer_size=args.buffer_size,
            progress_callback=_cli_progress,
        )
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    report = EvaluationReport(
        roundtrip_results=results,
        settings={
            "size": args.size,
            "reads": args.reads,
            "max_length": args.max_length,
            "seed": args.seed,
            "buffer_size": args.buffer_size,
            "nonce_hex": nonce.hex(),
        },
    )
    print(report.to_summary())

    paths = make_run_dir(args.output_dir, "verify_seek")
    write_json(paths.report_json, report.to_dict())
    write_json(paths.settings_json, settings.model_dump())
    print(f"\nReport saved to: {paths.report_json}")

    return 0 if not report.failing_modes() else 1


if __name__ == "__main__":
    sys.exit(main())
