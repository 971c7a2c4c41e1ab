"""Verification of random-access decryption against sequential CTR encryption."""

from .roundtrip import (
    ENGINE_MODES,
    RoundtripFailure,
    RoundtripResult,
    boundary_probes,
    random_windows,
    run_all_modes,
    run_seek_roundtrip,
)
from .report import EvaluationReport

__all__ = [
    "ENGINE_MODES",
    "RoundtripFailure",
    "RoundtripResult",
    "boundary_probes",
    "random_windows",
    "run_all_modes",
    "run_seek_roundtrip",
    "EvaluationReport",
]
